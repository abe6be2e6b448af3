"""
convstate

Conversation state for branching dialogue trees: what is being said,
what can be said next and by whom, and which response to take when
the choice is automatic.

Quick Start:
    from convstate import ConversationState, ResponseMemory

    memory = ResponseMemory()
    state = ConversationState(subtitle=subtitle, npc_responses=responses)
    if state.has_npc_response:
        next_entry = state.get_random_npc_entry(no_duplicate=True, memory=memory)
"""

__version__ = "0.1.0"

from convstate.core import (
    Record,
    EventBus,
    Event,
    SceneEvent,
    ConversationEvent,
)

from convstate.dialog import (
    DialogueEntry,
    Subtitle,
    FormattedText,
    Response,
    ConversationState,
    ResponseMemory,
    ConversationConfig,
    Conversation,
    DialogueNode,
    DialogueLink,
    ConversationController,
    ConversationAction,
)

__all__ = [
    # Core
    "Record",
    "EventBus",
    "Event",
    "SceneEvent",
    "ConversationEvent",
    # Dialog
    "DialogueEntry",
    "Subtitle",
    "FormattedText",
    "Response",
    "ConversationState",
    "ResponseMemory",
    "ConversationConfig",
    "Conversation",
    "DialogueNode",
    "DialogueLink",
    "ConversationController",
    "ConversationAction",
]
