import os
import random
import sys

import pytest

# Ensure convstate can be imported without installing
sys.path.append(os.getcwd())


class ScriptedRandom:
    """Random source that returns a fixed sequence of indices (wrapping)."""

    def __init__(self, *indices: int):
        self.indices = list(indices) or [0]
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        value = self.indices[len(self.calls) % len(self.indices)]
        self.calls.append(stop)
        return value % stop


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from convstate.core.events import EventBus
    return EventBus()


@pytest.fixture
def rng():
    """Seeded generator so selections are repeatable."""
    return random.Random(1234)


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRandom sources."""
    return ScriptedRandom


@pytest.fixture
def memory(rng):
    """Fresh ResponseMemory for each test."""
    from convstate.dialog.memory import ResponseMemory
    return ResponseMemory(rng=rng)


@pytest.fixture
def entry():
    """Factory for DialogueEntry objects in conversation 1."""
    from convstate.dialog.entities import DialogueEntry

    def make(node_id: int, conversation_id: int = 1, title: str = "") -> "DialogueEntry":
        return DialogueEntry(conversation_id=conversation_id, id=node_id, title=title)
    return make


@pytest.fixture
def response(entry):
    """Factory for Response objects leading to node ``node_id``."""
    from convstate.dialog.entities import FormattedText, Response

    def make(
        node_id: int | None,
        enabled: bool = True,
        force_menu: bool = False,
        force_auto: bool = False,
        text: str = "",
    ) -> "Response":
        return Response(
            formatted_text=FormattedText(text=text, force_menu=force_menu, force_auto=force_auto),
            destination_entry=entry(node_id) if node_id is not None else None,
            enabled=enabled,
        )
    return make


@pytest.fixture
def make_state(entry):
    """Factory for ConversationState objects spoken at node ``source``."""
    from convstate.dialog.entities import Subtitle
    from convstate.dialog.state import ConversationState

    def make(npc=None, pc=None, source: int = 0, is_group: bool = False) -> "ConversationState":
        return ConversationState(
            subtitle=Subtitle(dialogue_entry=entry(source), speaker="NPC", text="..."),
            npc_responses=npc,
            pc_responses=pc,
            is_group=is_group,
        )
    return make
