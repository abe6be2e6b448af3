"""
Conversation state - the current position in a dialogue tree.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence

from pydantic import field_validator

from convstate.core.component import Record
from convstate.dialog.entities import DialogueEntry, Response, Subtitle

if TYPE_CHECKING:
    from convstate.dialog.memory import ResponseMemory

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that can pick a uniform integer in [0, n)."""

    def randrange(self, stop: int) -> int: ...


def _any_valid(responses: Sequence[Optional[Response]]) -> bool:
    return any(r is not None and r.enabled for r in responses)


def _destination(response: Optional[Response]) -> Optional[DialogueEntry]:
    return response.destination_entry if response is not None else None


class ConversationState(Record):
    """
    Snapshot of where a conversation currently is.

    Built by the controller each time the active node changes and
    read-only afterwards. Typically only one side (NPC or PC) has
    responses, but both may be populated; every query only looks at
    its own side.

    Attributes:
        subtitle: The active line
        npc_responses: Edges offered by the NPC side (may be empty)
        pc_responses: Edges offered by the player side (may be empty)
        is_group: Active node is a non-speaking group node
    """
    subtitle: Subtitle
    npc_responses: tuple[Optional[Response], ...] = ()
    pc_responses: tuple[Optional[Response], ...] = ()
    is_group: bool = False

    @field_validator('npc_responses', 'pc_responses', mode='before')
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return () if value is None else value

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @property
    def has_npc_response(self) -> bool:
        return len(self.npc_responses) > 0

    @property
    def has_pc_responses(self) -> bool:
        return len(self.pc_responses) > 0

    @property
    def has_any_responses(self) -> bool:
        return self.has_npc_response or self.has_pc_responses

    @property
    def first_npc_response(self) -> Optional[Response]:
        return self.npc_responses[0] if self.has_npc_response else None

    def has_valid_npc_response(self) -> bool:
        """True if any NPC response is enabled."""
        return _any_valid(self.npc_responses)

    def has_valid_pc_responses(self) -> bool:
        """True if any PC response is enabled."""
        return _any_valid(self.pc_responses)

    @property
    def has_force_auto_response(self) -> bool:
        """True if an enabled PC response is marked to fire automatically."""
        return any(
            r is not None and r.enabled and r.force_auto
            for r in self.pc_responses
        )

    @property
    def has_pc_auto_response(self) -> bool:
        """
        True if the PC side should advance without showing a menu.

        A force_menu marker on any PC response, enabled or not, always
        means a menu. Otherwise the state auto-advances when an enabled
        response is marked force_auto, or when there is exactly one
        response.
        """
        if not self.has_pc_responses:
            return False
        has_auto = False
        for response in self.pc_responses:
            if response is None:
                continue
            if response.force_menu:
                return False
            if response.force_auto and response.enabled:
                has_auto = True
        return has_auto or len(self.pc_responses) == 1

    @property
    def pc_auto_response(self) -> Optional[Response]:
        """
        The PC response to fire automatically.

        First enabled force_auto response in order, otherwise the first
        response even if it is disabled. Callers should check
        has_pc_auto_response before using it.
        """
        if not self.has_pc_responses:
            return None
        for response in self.pc_responses:
            if response is not None and response.enabled and response.force_auto:
                return response
        return self.pc_responses[0]

    # ------------------------------------------------------------------
    # Random NPC selection
    # ------------------------------------------------------------------

    def get_random_npc_entry(
        self,
        no_duplicate: bool = False,
        memory: Optional[ResponseMemory] = None,
        rng: Optional[RandomSource] = None,
    ) -> Optional[DialogueEntry]:
        """
        Pick the destination of a random NPC response.

        Args:
            no_duplicate: Avoid the destination picked last time from
                this node. Requires ``memory``.
            memory: Anti-repeat memory to read and update
            rng: Uniform integer source; defaults to the memory's
                generator, or the ``random`` module without a memory

        Returns:
            The chosen destination, or None if there are no NPC responses.
            When every response leads to the previously chosen
            destination, that destination is returned again and the
            memory is left as it was.
        """
        if not self.has_npc_response:
            return None

        if rng is None:
            rng = memory.rng if memory is not None else random

        if not no_duplicate:
            return self._pick(list(self.npc_responses), rng)

        if memory is None:
            raise ValueError("no_duplicate selection requires a ResponseMemory")

        source = self.subtitle.dialogue_entry
        with memory.lock:
            if source not in memory:
                candidates = list(self.npc_responses)
            else:
                last_entry = memory.last_chosen(source)
                candidates = [
                    r for r in self.npc_responses
                    if _destination(r) != last_entry
                ]
                if not candidates:
                    logger.debug(
                        f"Every response from {source} leads to {last_entry}; repeating it"
                    )
                    return last_entry

            chosen = self._pick(candidates, rng)
            memory.remember(source, chosen)
            return chosen

    @staticmethod
    def _pick(
        responses: list[Optional[Response]],
        rng: RandomSource,
    ) -> Optional[DialogueEntry]:
        return _destination(responses[rng.randrange(len(responses))])
