"""
Dialogue graph - nodes and links of a single conversation.

A minimal in-memory graph for ConversationController. Build it in
code or from plain data:

    conversation = Conversation.model_validate({
        "id": 1,
        "start_node_id": 0,
        "nodes": [
            {"id": 0, "speaker": "Guard", "text": "Halt!", "links": [{"destination_id": 1}]},
            {"id": 1, "speaker": "Hero", "text": "Easy.", "is_player": True},
        ],
    })
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from convstate.core.component import Record
from convstate.dialog.entities import DialogueEntry, FormattedText, Subtitle

logger = logging.getLogger(__name__)


class DialogueLink(Record):
    """An outgoing edge to another node of the same conversation."""
    destination_id: int


class DialogueNode(Record):
    """
    A single line (or group) in the conversation graph.

    Attributes:
        id: Node id, unique within the conversation
        title: Optional label used in logs
        speaker: Display name of whoever says the line
        text: The line itself
        is_player: Line belongs to the player (PC) side
        is_group: Non-speaking grouping node
        force_menu: Offering this line always opens a menu
        force_auto: Offering this line fires it without a menu
        condition: Opaque condition for the host's evaluator
        links: Outgoing edges in priority order
    """
    id: int
    title: str = ""
    speaker: str = ""
    text: str = ""
    is_player: bool = False
    is_group: bool = False
    force_menu: bool = False
    force_auto: bool = False
    condition: Optional[str] = None
    links: tuple[DialogueLink, ...] = ()

    @property
    def formatted_text(self) -> FormattedText:
        return FormattedText(
            text=self.text,
            force_menu=self.force_menu,
            force_auto=self.force_auto,
        )

    @property
    def has_links(self) -> bool:
        return len(self.links) > 0


class Conversation(Record):
    """A complete conversation graph."""
    id: int
    title: str = ""
    start_node_id: int = 0
    nodes: dict[int, DialogueNode] = Field(default_factory=dict)

    @field_validator('nodes', mode='before')
    @classmethod
    def _index_nodes(cls, value: Any) -> Any:
        # Accept a plain list of nodes, keyed by their ids
        if isinstance(value, (list, tuple)):
            indexed = {}
            for node in value:
                node_id = node.id if isinstance(node, DialogueNode) else node.get('id')
                if node_id in indexed:
                    raise ValueError(f"Duplicate node id {node_id}")
                indexed[node_id] = node
            return indexed
        return value

    @model_validator(mode='after')
    def _check_nodes(self) -> Conversation:
        for key, node in self.nodes.items():
            if key != node.id:
                raise ValueError(f"Node stored under id {key} has id {node.id}")
        if self.nodes and self.start_node_id not in self.nodes:
            raise ValueError(f"Start node {self.start_node_id} not found")
        for node in self.nodes.values():
            for link in node.links:
                if link.destination_id not in self.nodes:
                    logger.warning(
                        f"Conversation {self.id}: node {node.id} links to "
                        f"missing node {link.destination_id}"
                    )
        return self

    @property
    def start_node(self) -> Optional[DialogueNode]:
        return self.nodes.get(self.start_node_id)

    def get_node(self, node_id: int) -> Optional[DialogueNode]:
        """Get a node by id."""
        return self.nodes.get(node_id)

    def entry_for(self, node: DialogueNode) -> DialogueEntry:
        """Identity of ``node`` within this conversation."""
        return DialogueEntry(conversation_id=self.id, id=node.id, title=node.title)

    def node_for(self, entry: DialogueEntry) -> Optional[DialogueNode]:
        """Resolve an entry back to a node of this conversation."""
        if entry.conversation_id != self.id:
            return None
        return self.nodes.get(entry.id)

    def subtitle_for(self, node: DialogueNode) -> Subtitle:
        """Subtitle for the line spoken at ``node``."""
        return Subtitle(
            dialogue_entry=self.entry_for(node),
            speaker=node.speaker,
            text=node.text,
        )
