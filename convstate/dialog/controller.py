"""
Conversation controller - walks a dialogue graph one state at a time.

Builds a ConversationState for every node it enters, decides whether
the state needs a menu, an automatic response or the end of the
conversation, and publishes the flow on an EventBus for presentation
layers to follow.
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Callable, Optional

from convstate.core.events import ConversationEvent, EventBus, SceneEvent
from convstate.dialog.config import ConversationConfig
from convstate.dialog.entities import DialogueEntry, Response
from convstate.dialog.graph import Conversation, DialogueNode
from convstate.dialog.memory import ResponseMemory
from convstate.dialog.state import ConversationState

logger = logging.getLogger(__name__)

# Host callback: is this node's condition currently true?
ConditionEvaluator = Callable[[DialogueNode], bool]


class ConversationAction(Enum):
    """What the current state asks the host to do next."""
    END = auto()          # No valid responses left
    SHOW_MENU = auto()    # Player picks from the PC responses
    PC_AUTO = auto()      # Fire the PC auto response
    NPC_ADVANCE = auto()  # Continue with an NPC response


class ConversationController:
    """
    Drives one conversation through its ConversationStates.

    Responsibilities:
    - Evaluate link conditions (through the host's evaluator)
    - Split links into NPC and PC responses
    - Classify each state as menu, auto-advance or end
    - Resolve NPC responses, randomly when configured
    - Publish ConversationEvents

    Usage:
        controller = ConversationController(conversation, event_bus=bus)
        state = controller.start()
        while state is not None:
            if controller.next_action() is ConversationAction.SHOW_MENU:
                state = controller.choose(pick(state.pc_responses))
            else:
                state = controller.advance()
    """

    def __init__(
        self,
        conversation: Conversation,
        config: Optional[ConversationConfig] = None,
        memory: Optional[ResponseMemory] = None,
        event_bus: Optional[EventBus] = None,
        condition_evaluator: Optional[ConditionEvaluator] = None,
        rng: Optional[random.Random] = None,
    ):
        self.conversation = conversation
        self.config = config or ConversationConfig()
        self.rng = rng or self.config.make_rng()
        self.memory = memory if memory is not None else ResponseMemory(rng=self.rng)
        self.events = event_bus or EventBus()
        self._condition_evaluator = condition_evaluator

        # Current state
        self._state: Optional[ConversationState] = None

        if self.config.clear_memory_on_scene_switch:
            self.memory.clear_on(self.events, SceneEvent.SCENE_SWITCHED)

    @property
    def state(self) -> Optional[ConversationState]:
        """The active state, or None when no conversation is running."""
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not None

    def start(self) -> Optional[ConversationState]:
        """Enter the start node. Returns None if the graph has no start node."""
        node = self.conversation.start_node
        if node is None:
            logger.warning(f"Conversation {self.conversation.id} has no start node")
            return None

        logger.info(f"Starting conversation {self.conversation.id} '{self.conversation.title}'")
        self.events.publish(ConversationEvent.STARTED, conversation=self.conversation)
        return self._enter(node)

    def build_state(self, node: DialogueNode) -> ConversationState:
        """Build the state for ``node`` from its outgoing links."""
        npc_responses: list[Response] = []
        pc_responses: list[Response] = []

        for link in node.links:
            destination = self.conversation.get_node(link.destination_id)
            if destination is None:
                logger.warning(
                    f"Skipping link {node.id} -> {link.destination_id}: node not found"
                )
                continue

            response = Response(
                formatted_text=destination.formatted_text,
                destination_entry=self.conversation.entry_for(destination),
                enabled=self._is_enabled(destination),
            )
            if destination.is_player:
                pc_responses.append(response)
            else:
                npc_responses.append(response)

        return ConversationState(
            subtitle=self.conversation.subtitle_for(node),
            npc_responses=npc_responses,
            pc_responses=pc_responses,
            is_group=node.is_group,
        )

    def next_action(self) -> ConversationAction:
        """Classify the current state."""
        state = self._require_state()

        if state.has_pc_responses and state.has_valid_pc_responses():
            if state.has_pc_auto_response:
                return ConversationAction.PC_AUTO
            return ConversationAction.SHOW_MENU
        if state.has_npc_response and state.has_valid_npc_response():
            return ConversationAction.NPC_ADVANCE
        return ConversationAction.END

    def advance(self) -> Optional[ConversationState]:
        """
        Resolve the current state automatically.

        Returns:
            The next state, or None if the conversation ended.

        Raises:
            RuntimeError: No conversation is running, or the state
                needs a player choice (use choose()).
        """
        state = self._require_state()
        action = self.next_action()

        if action is ConversationAction.END:
            self.end()
            return None

        if action is ConversationAction.SHOW_MENU:
            raise RuntimeError("Current state needs a player choice; call choose()")

        if action is ConversationAction.PC_AUTO:
            response = state.pc_auto_response
            return self._follow(response, response.destination_entry)

        destination = self._select_npc_destination(state)
        response = next(
            (r for r in state.npc_responses
             if r is not None and r.enabled and r.destination_entry == destination),
            None,
        )
        return self._follow(response, destination)

    def choose(self, response: Response) -> Optional[ConversationState]:
        """
        Follow a response picked by the player.

        Raises:
            RuntimeError: No conversation is running
            ValueError: The response is not an enabled response of the
                current state
        """
        state = self._require_state()
        if response not in state.pc_responses and response not in state.npc_responses:
            raise ValueError("Response is not offered by the current state")
        if not response.enabled:
            raise ValueError("Response is disabled")
        return self._follow(response, response.destination_entry)

    def end(self) -> None:
        """End the current conversation."""
        if self._state is None:
            return

        last_state = self._state
        self._state = None
        logger.info(f"Conversation {self.conversation.id} ended")
        self.events.publish(ConversationEvent.ENDED, state=last_state)

    def _select_npc_destination(self, state: ConversationState) -> Optional[DialogueEntry]:
        """Pick the next NPC line, first valid or random among valid ones."""
        valid = tuple(r for r in state.npc_responses if r is not None and r.enabled)

        if not self.config.randomize_npc_responses:
            return valid[0].destination_entry

        candidates = state.evolve(npc_responses=valid)
        destination = candidates.get_random_npc_entry(
            no_duplicate=self.config.no_duplicate,
            memory=self.memory,
            rng=self.rng,
        )
        logger.debug(f"Randomly chose {destination} from {state.subtitle.dialogue_entry}")
        return destination

    def _follow(
        self,
        response: Optional[Response],
        destination: Optional[DialogueEntry],
    ) -> Optional[ConversationState]:
        """Publish the chosen response and enter its destination."""
        self.events.publish(
            ConversationEvent.RESPONSE_CHOSEN,
            response=response,
            destination=destination,
        )

        node = self.conversation.node_for(destination) if destination is not None else None
        if node is None:
            logger.warning(f"Dialogue node not found: {destination}")
            self.end()
            return None

        return self._enter(node)

    def _enter(self, node: DialogueNode) -> ConversationState:
        """Make ``node`` the active node."""
        self._state = self.build_state(node)
        logger.debug(f"Entered node {self._state.subtitle.dialogue_entry}")
        self.events.publish(ConversationEvent.NODE_ENTERED, state=self._state)

        if self.next_action() is ConversationAction.SHOW_MENU:
            responses = [r for r in self._state.pc_responses if r is not None and r.enabled]
            self.events.publish(
                ConversationEvent.MENU_REQUESTED,
                state=self._state,
                responses=responses,
            )
        return self._state

    def _is_enabled(self, node: DialogueNode) -> bool:
        """Evaluate a node's condition with the host's evaluator."""
        if node.condition is None or self._condition_evaluator is None:
            return True

        try:
            return bool(self._condition_evaluator(node))
        except Exception:
            logger.exception(f"Condition error on node {node.id}: {node.condition!r}")
            return False

    def _require_state(self) -> ConversationState:
        if self._state is None:
            raise RuntimeError("No conversation is running; call start()")
        return self._state
