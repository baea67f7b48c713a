"""
Action System - The closed set of operations an effect can perform.

An Action is a tagged union: ``kind`` picks the variant and only the fields
that variant uses are set. The engine dispatches on ``kind`` through a
handler table, so adding a variant means adding an ActionKind member, a
factory and a handler.

Variants:
1. Stat changes (add, remove, debuff, set, swap)
2. Removal (kill) and movement (push)
3. Creation (summon, gain item)
4. Progression (experience)
5. Shop economy (alter gold, shop stats, free roll)
6. Passive held-item modifiers (negate, invincible, critical)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .stats import Statistics


class ActionKind(Enum):
    """Types of actions."""
    # Stat changes
    ADD = "add"
    REMOVE = "remove"  # Indirect damage
    DEBUFF = "debuff"  # Percentage reduction
    SET = "set"
    SWAP = "swap"

    # Removal / movement
    KILL = "kill"
    PUSH = "push"

    # Creation
    SUMMON = "summon"
    GAIN = "gain"

    # Progression
    EXPERIENCE = "experience"

    # Shop
    ALTER_GOLD = "alter_gold"
    ADD_SHOP_STATS = "add_shop_stats"
    FREE_ROLL = "free_roll"

    # Passive item modifiers, read during damage calculation
    NEGATE = "negate"
    INVINCIBLE = "invincible"
    CRITICAL = "critical"

    # Composition
    MULTIPLE = "multiple"
    NONE = "none"


# Kinds whose execution can lower health to 0 and so produce a faint.
DAMAGING_KINDS = frozenset({ActionKind.REMOVE, ActionKind.DEBUFF, ActionKind.SET, ActionKind.SWAP, ActionKind.KILL})

# Kinds that only modify combat math and are never executed directly.
PASSIVE_KINDS = frozenset({ActionKind.NEGATE, ActionKind.INVINCIBLE, ActionKind.CRITICAL})


@dataclass(frozen=True)
class Action:
    """
    A single action variant.

    Fields by kind:
    - stats: ADD, REMOVE (attack = damage), DEBUFF (percent), SET, NEGATE,
      ADD_SHOP_STATS, SUMMON (override stats)
    - amount: PUSH (slots, negative = toward front), EXPERIENCE, ALTER_GOLD,
      FREE_ROLL, CRITICAL (percent chance)
    - name: SUMMON (pet name, None = copy of the owner), GAIN (food name)
    - level: SUMMON
    - actions: MULTIPLE
    """
    kind: ActionKind
    stats: Statistics | None = None
    amount: int = 0
    name: str | None = None
    level: int = 1
    actions: tuple[Action, ...] = ()

    @property
    def can_faint(self) -> bool:
        """Whether executing this action may leave a pet at 0 health."""
        if self.kind == ActionKind.MULTIPLE:
            return any(action.can_faint for action in self.actions)
        return self.kind in DAMAGING_KINDS

    def describe(self) -> str:
        if self.kind == ActionKind.MULTIPLE:
            return " then ".join(action.describe() for action in self.actions)
        parts = [self.kind.value]
        if self.stats is not None:
            parts.append(str(self.stats))
        if self.name:
            parts.append(self.name)
        if self.amount:
            parts.append(str(self.amount))
        return " ".join(parts)

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def add(cls, attack: int = 0, health: int = 0) -> Action:
        """Buff attack/health."""
        return cls(kind=ActionKind.ADD, stats=Statistics(attack, health))

    @classmethod
    def damage(cls, amount: int) -> Action:
        """Deal indirect damage."""
        return cls(kind=ActionKind.REMOVE, stats=Statistics(amount, 0))

    @classmethod
    def debuff(cls, attack_pct: int = 0, health_pct: int = 0) -> Action:
        """Reduce attack/health by a percentage."""
        return cls(kind=ActionKind.DEBUFF, stats=Statistics(attack_pct, health_pct, ceiling=100))

    @classmethod
    def set_stats(cls, attack: int, health: int) -> Action:
        return cls(kind=ActionKind.SET, stats=Statistics(attack, health))

    @classmethod
    def swap(cls) -> Action:
        """Swap stats between the owner and each target."""
        return cls(kind=ActionKind.SWAP)

    @classmethod
    def kill(cls) -> Action:
        return cls(kind=ActionKind.KILL)

    @classmethod
    def push(cls, by: int) -> Action:
        return cls(kind=ActionKind.PUSH, amount=by)

    @classmethod
    def summon(
        cls,
        name: str | None,
        level: int = 1,
        attack: int | None = None,
        health: int | None = None,
    ) -> Action:
        """
        Summon a pet at each target's slot.

        ``name=None`` summons a copy of the effect owner. Stats default to
        the definition's base stats when not given.
        """
        stats = None
        if attack is not None or health is not None:
            stats = Statistics(attack or 0, health or 0)
        return cls(kind=ActionKind.SUMMON, name=name, level=level, stats=stats)

    @classmethod
    def gain(cls, food_name: str) -> Action:
        return cls(kind=ActionKind.GAIN, name=food_name)

    @classmethod
    def experience(cls, amount: int = 1) -> Action:
        return cls(kind=ActionKind.EXPERIENCE, amount=amount)

    @classmethod
    def alter_gold(cls, amount: int) -> Action:
        return cls(kind=ActionKind.ALTER_GOLD, amount=amount)

    @classmethod
    def add_shop_stats(cls, attack: int = 0, health: int = 0) -> Action:
        return cls(kind=ActionKind.ADD_SHOP_STATS, stats=Statistics(attack, health))

    @classmethod
    def free_roll(cls, amount: int = 1) -> Action:
        return cls(kind=ActionKind.FREE_ROLL, amount=amount)

    @classmethod
    def negate(cls, amount: int) -> Action:
        """Held-item modifier: reduce each incoming hit by ``amount``."""
        return cls(kind=ActionKind.NEGATE, stats=Statistics(0, amount))

    @classmethod
    def invincible(cls) -> Action:
        return cls(kind=ActionKind.INVINCIBLE)

    @classmethod
    def critical(cls, chance: int) -> Action:
        """Held-item modifier: ``chance`` percent to deal double damage."""
        return cls(kind=ActionKind.CRITICAL, amount=chance)

    @classmethod
    def multiple(cls, *actions: Action) -> Action:
        return cls(kind=ActionKind.MULTIPLE, actions=tuple(actions))

    @classmethod
    def none(cls) -> Action:
        return cls(kind=ActionKind.NONE)
