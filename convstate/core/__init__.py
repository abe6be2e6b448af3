"""
Core module.

Exports:
- Record: frozen Pydantic base for dialogue data
- EventBus, Event: Event system
- SceneEvent, ConversationEvent: Built-in event types
"""

from convstate.core.component import Record
from convstate.core.events import EventBus, Event, SceneEvent, ConversationEvent

__all__ = [
    "Record",
    "EventBus",
    "Event",
    "SceneEvent",
    "ConversationEvent",
]
