"""
Statistics - Saturating attack/health pair.

Every operation clamps both values to [0, ceiling]. Nothing here raises:
out-of-range input is clamped silently, and the clamped value is what the
event log and tests observe.
"""

from __future__ import annotations
from dataclasses import dataclass

MIN_STAT = 0
MAX_STAT = 50


def _clamp(value: int, ceiling: int) -> int:
    return max(MIN_STAT, min(int(value), ceiling))


@dataclass
class Statistics:
    """
    Attack (offense) and health (defense) of a pet or a stat change.

    Mutating operations return self so they can be chained:

        stats = Statistics(2, 1).add(Statistics(1, 1)).subtract(Statistics(0, 5))
    """
    attack: int = 0
    health: int = 0
    ceiling: int = MAX_STAT

    def __post_init__(self):
        self.attack = _clamp(self.attack, self.ceiling)
        self.health = _clamp(self.health, self.ceiling)

    def __eq__(self, other):
        if isinstance(other, Statistics):
            return (self.attack, self.health) == (other.attack, other.health)
        if isinstance(other, tuple):
            return (self.attack, self.health) == other
        return NotImplemented

    def __iter__(self):
        yield self.attack
        yield self.health

    def __str__(self) -> str:
        return f"({self.attack}, {self.health})"

    def add(self, delta: Statistics) -> Statistics:
        self.attack = _clamp(self.attack + delta.attack, self.ceiling)
        self.health = _clamp(self.health + delta.health, self.ceiling)
        return self

    def subtract(self, delta: Statistics) -> Statistics:
        self.attack = _clamp(self.attack - delta.attack, self.ceiling)
        self.health = _clamp(self.health - delta.health, self.ceiling)
        return self

    def set(self, value: Statistics) -> Statistics:
        self.attack = _clamp(value.attack, self.ceiling)
        self.health = _clamp(value.health, self.ceiling)
        return self

    def swap(self, other: Statistics) -> Statistics:
        """Exchange values with another Statistics; each side clamps to its own ceiling."""
        mine = (self.attack, self.health)
        self.attack = _clamp(other.attack, self.ceiling)
        self.health = _clamp(other.health, self.ceiling)
        other.attack = _clamp(mine[0], other.ceiling)
        other.health = _clamp(mine[1], other.ceiling)
        return self

    def invert(self) -> Statistics:
        """Exchange own attack and health. (2, 0) -> (0, 2)."""
        self.attack, self.health = self.health, self.attack
        return self

    def reduce_percent(self, percent: Statistics) -> Statistics:
        """Reduce each value by a percentage (0-100), rounding the loss down."""
        atk_pct = max(0, min(percent.attack, 100))
        hp_pct = max(0, min(percent.health, 100))
        self.attack = _clamp(self.attack - self.attack * atk_pct // 100, self.ceiling)
        self.health = _clamp(self.health - self.health * hp_pct // 100, self.ceiling)
        return self

    def copy(self) -> Statistics:
        return Statistics(self.attack, self.health, self.ceiling)

    def to_dict(self) -> dict[str, int]:
        return {"attack": self.attack, "health": self.health}
