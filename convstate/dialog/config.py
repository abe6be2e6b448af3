"""
Conversation controller configuration.
"""

from __future__ import annotations

import random
from typing import Optional


class ConversationConfig:
    """Configuration for a ConversationController."""

    def __init__(
        self,
        randomize_npc_responses: bool = False,
        no_duplicate: bool = True,
        seed: Optional[int] = None,
        clear_memory_on_scene_switch: bool = False,
    ):
        # Pick NPC responses at random instead of taking the first valid one
        self.randomize_npc_responses = randomize_npc_responses
        # Avoid repeating the previous random pick from the same node
        self.no_duplicate = no_duplicate
        # Seed for the controller's own generator (None = unseeded)
        self.seed = seed
        # Clear response memory on SceneEvent.SCENE_SWITCHED
        self.clear_memory_on_scene_switch = clear_memory_on_scene_switch

    def make_rng(self) -> random.Random:
        """Build a generator for this configuration."""
        return random.Random(self.seed)

    def __repr__(self) -> str:
        return (
            f"ConversationConfig(randomize_npc_responses={self.randomize_npc_responses}, "
            f"no_duplicate={self.no_duplicate}, seed={self.seed}, "
            f"clear_memory_on_scene_switch={self.clear_memory_on_scene_switch})"
        )
