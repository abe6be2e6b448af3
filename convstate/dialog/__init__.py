"""
Dialog module - current position in a branching conversation.

Provides:
- Dialogue entities (entries, subtitles, responses)
- ConversationState classification queries
- Random NPC response selection with anti-repeat memory
- A dialogue graph and a controller that walks it
"""

from convstate.dialog.entities import DialogueEntry, Subtitle, FormattedText, Response
from convstate.dialog.state import ConversationState
from convstate.dialog.memory import ResponseMemory
from convstate.dialog.config import ConversationConfig
from convstate.dialog.graph import Conversation, DialogueNode, DialogueLink
from convstate.dialog.controller import ConversationController, ConversationAction

__all__ = [
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
