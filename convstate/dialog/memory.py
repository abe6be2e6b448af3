"""
Anti-repeat memory for random NPC response selection.
"""

from __future__ import annotations

import logging
import random
import threading
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional

from convstate.dialog.entities import DialogueEntry

if TYPE_CHECKING:
    from convstate.core.events import Event, EventBus

logger = logging.getLogger(__name__)


class ResponseMemory:
    """
    Remembers the last randomly chosen destination per source node.

    Owned by whoever drives conversations (usually a controller) and
    passed into ConversationState.get_random_npc_entry(). Independent
    memories never see each other's entries, so parallel sessions and
    tests stay isolated.

    Entries reference nodes of the currently loaded dialogue graphs.
    Call clear() when those graphs are replaced, or wire it to a host
    event with clear_on().

    Usage:
        memory = ResponseMemory(rng=random.Random(42))
        entry = state.get_random_npc_entry(no_duplicate=True, memory=memory)
        ...
        memory.clear()
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        # source entry -> destination chosen last time
        self._last_chosen: dict[DialogueEntry, Optional[DialogueEntry]] = {}
        # Held across read-choose-write in get_random_npc_entry()
        self.lock = threading.RLock()

    def last_chosen(self, source: DialogueEntry) -> Optional[DialogueEntry]:
        """
        Destination chosen last time from ``source``.

        None both when nothing was chosen yet and when the last choice
        had no destination; use ``source in memory`` to tell them apart.
        """
        with self.lock:
            return self._last_chosen.get(source)

    def remember(self, source: DialogueEntry, destination: Optional[DialogueEntry]) -> None:
        """Record ``destination`` as the latest random choice from ``source``."""
        with self.lock:
            self._last_chosen[source] = destination
        logger.debug(f"Remembered {source} -> {destination}")

    def forget(self, source: DialogueEntry) -> bool:
        """Drop the entry for one source node. Returns True if one existed."""
        with self.lock:
            if source not in self._last_chosen:
                return False
            del self._last_chosen[source]
            return True

    def clear(self) -> None:
        """Forget every remembered choice."""
        with self.lock:
            count = len(self._last_chosen)
            self._last_chosen.clear()
        logger.debug(f"Cleared {count} remembered response(s)")

    def clear_on(self, event_bus: EventBus, event_type: Enum) -> None:
        """
        Clear this memory whenever ``event_type`` is published on ``event_bus``.

        The subscription is a strong reference; it lives as long as the bus.
        """
        event_bus.subscribe(event_type, self._on_reset_event, weak=False)

    def _on_reset_event(self, event: Event) -> None:
        logger.info(f"Resetting response memory on {event.type.name}")
        self.clear()

    def __contains__(self, source: object) -> bool:
        with self.lock:
            return source in self._last_chosen

    def __len__(self) -> int:
        with self.lock:
            return len(self._last_chosen)

    def __iter__(self) -> Iterator[DialogueEntry]:
        with self.lock:
            return iter(list(self._last_chosen))
