"""
Dialogue entities - node identities, subtitles, responses.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from convstate.core.component import Record


class DialogueEntry(Record):
    """
    Identity of a node in the dialogue graph.

    Two entries are the same node when both ids match. The title is
    informational and takes no part in equality or hashing.

    Attributes:
        conversation_id: Conversation the node belongs to
        id: Node id, unique within its conversation
        title: Optional label for logs and tooling
    """
    conversation_id: int
    id: int
    title: str = ""

    @property
    def key(self) -> tuple[int, int]:
        return (self.conversation_id, self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DialogueEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        label = f" '{self.title}'" if self.title else ""
        return f"{self.conversation_id}:{self.id}{label}"


class Subtitle(Record):
    """
    The line currently being spoken.

    Only the back-reference to the originating node matters to
    conversation logic; speaker and text pass through untouched.
    """
    dialogue_entry: DialogueEntry
    speaker: str = ""
    text: str = ""


class FormattedText(Record):
    """
    Display text of a response with its menu markers.

    Attributes:
        text: Text shown in a response menu
        force_menu: Always show a menu when this response is offered
        force_auto: Fire this response without showing a menu
    """
    text: str = ""
    force_menu: bool = False
    force_auto: bool = False


class Response(Record):
    """
    One candidate edge out of the current node.

    Conditions are evaluated upstream; ``enabled`` carries the result.
    """
    formatted_text: FormattedText = Field(default_factory=FormattedText)
    destination_entry: Optional[DialogueEntry] = None
    enabled: bool = True

    @property
    def force_menu(self) -> bool:
        return self.formatted_text.force_menu

    @property
    def force_auto(self) -> bool:
        return self.formatted_text.force_auto
