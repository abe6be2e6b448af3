"""
Record base class for immutable dialogue data.

Records are frozen data containers. Whatever logic they carry is
read-only: queries over their own fields. This keeps:
- Conversation snapshots safe to share between systems
- Serialization trivial
- Testing easy

Usage:
    class Subtitle(Record):
        speaker: str = ""
        text: str = ""
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """
    Base class for all dialogue records.

    Records use Pydantic for:
    - Automatic validation
    - JSON serialization
    - Value equality and hashing (frozen)
    - Default values

    IMPORTANT: Records never change after construction.
    Build a new one instead.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for callables supplied by the host)
        arbitrary_types_allowed=True,
        # Immutable after construction, hashable by value
        frozen=True,
        extra='forbid',
    )

    def evolve(self, **changes) -> Record:
        """Return a validated copy with the given fields replaced."""
        return self.model_validate({**self.__dict__, **changes})
