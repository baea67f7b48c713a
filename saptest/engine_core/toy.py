"""
Toys - Team-attached items.

A toy belongs to a roster, not to a pet. Its effects fire on battle and
shop events and act through the roster's front pet, which stands in as
the effect owner for targeting. A toy with a ``duration`` loses one turn
at every shop close; at the next shop open it breaks, fires its
TOY_BREAK effects and leaves the roster.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from ..errors import InvalidPetAction
from .effect import Effect

if TYPE_CHECKING:
    from ..content.definitions import ToyDefinition

MAX_TOY_LEVEL = 3


@dataclass
class Toy:
    name: str
    tier: int = 1
    level: int = 1
    duration: int | None = None  # Shop turns left; None never breaks
    effects: list[Effect] = field(default_factory=list)
    id: str | None = None
    definition: ToyDefinition | None = None

    @classmethod
    def from_definition(cls, definition: ToyDefinition, level: int = 1) -> Toy:
        if not 1 <= level <= MAX_TOY_LEVEL:
            raise InvalidPetAction(f"{definition.name} cannot be created at level {level}")
        return cls(
            name=definition.name,
            tier=definition.tier,
            level=level,
            duration=definition.duration,
            effects=definition.effects_for(level),
            definition=definition,
        )

    def __str__(self) -> str:
        turns = "" if self.duration is None else f" ({self.duration} turn(s))"
        return f"{self.name} lvl {self.level}{turns}"

    @property
    def is_broken(self) -> bool:
        return self.duration is not None and self.duration <= 0

    def tick(self) -> bool:
        """Count down one shop turn. Returns True if the toy is now broken."""
        if self.duration is None:
            return False
        self.duration = max(0, self.duration - 1)
        return self.is_broken

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier,
            "level": self.level,
            "duration": self.duration,
        }
