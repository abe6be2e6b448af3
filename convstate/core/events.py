"""
Typed event bus for decoupled communication.

Uses Enums for event types so conversation hosts never match on
magic strings.

Usage:
    # Subscribe
    event_bus.subscribe(ConversationEvent.NODE_ENTERED, on_node_entered)

    # Publish
    event_bus.publish(ConversationEvent.NODE_ENTERED, state=state)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class SceneEvent(Enum):
    """Host scene lifecycle events."""
    SCENE_LOADED = auto()
    SCENE_SWITCHED = auto()
    SCENE_UNLOADED = auto()


class ConversationEvent(Enum):
    """Conversation flow events."""
    STARTED = auto()          # Controller entered the start node
    NODE_ENTERED = auto()     # A new ConversationState is active
    MENU_REQUESTED = auto()   # Player must pick from the PC responses
    RESPONSE_CHOSEN = auto()  # A response was resolved (auto or player)
    ENDED = auto()            # No further responses, or ended by host


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Handlers run in subscription order. By default they are held by weak
    reference and dropped once their owner is garbage collected. Events
    published from inside a handler are queued until the current
    dispatch finishes.
    """

    def __init__(self):
        # Map of event type -> handler references in subscription order
        self._handlers: dict[Enum, list[Any]] = {}
        # Events published while a dispatch is running
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(self, event_type: Enum, handler: EventHandler, weak: bool = True) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        self._handlers.setdefault(event_type, []).append(handler_ref)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type."""
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [
            h for h in self._handlers[event_type]
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object
        """
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

        return event

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers."""
        if event.type in self._handlers:
            self._is_publishing = True
            dead = []

            try:
                for handler_ref in list(self._handlers[event.type]):
                    handler = self._get_handler(handler_ref)

                    if handler is None:
                        # Weak reference was garbage collected
                        dead.append(handler_ref)
                        continue

                    try:
                        handler(event)
                    except Exception:
                        logger.exception(f"Error in event handler for {event.type}")
            finally:
                current = self._handlers.get(event.type)
                if dead and current is not None:
                    current[:] = [h for h in current if not any(h is d for d in dead)]
                self._is_publishing = False

        while self._event_queue:
            self._dispatch(self._event_queue.pop(0))

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
