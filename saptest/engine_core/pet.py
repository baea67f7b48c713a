"""
Pets and Foods - Live entity instances.

A Pet is created from a PetDefinition (or ad hoc with Pet.custom) when it
joins a roster or a shop slot. Definitions stay immutable; everything that
changes during play (stats, level, experience, effects, held item) lives
on the instance.

This module also holds the combat math for direct attacks and indirect
hits, including held-item modifiers:
- ADD on a held item raises outgoing attack damage (Meat Bone, Steak)
- NEGATE lowers incoming damage (Garlic, Melon)
- INVINCIBLE blocks all incoming damage (Coconut)
- CRITICAL may double outgoing damage (Cheese)
- KILL turns any nonzero hit into a faint (Peanut)
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from random import Random
from typing import Any, TYPE_CHECKING

from ..errors import InvalidPetAction
from .action import ActionKind
from .effect import Effect
from .stats import Statistics, MAX_STAT

if TYPE_CHECKING:
    from ..config import EngineConfig
    from ..content.definitions import FoodDefinition, PetDefinition

# Food flag: damage against the holder may drop to 0 instead of the minimum.
FULL_NEGATE = "full_negate"

MIN_LEVEL = 1


@dataclass
class Food:
    """A food instance, held by a pet or applied on purchase."""
    name: str
    effect: Effect | None = None
    holdable: bool = False
    single_use: bool = False
    cost: int = 3
    tier: int = 1
    flags: frozenset[str] = frozenset()
    definition: FoodDefinition | None = None

    @classmethod
    def from_definition(cls, definition: FoodDefinition) -> Food:
        return cls(
            name=definition.name,
            effect=definition.effect.copy() if definition.effect else None,
            holdable=definition.holdable,
            single_use=definition.single_use,
            cost=definition.cost,
            tier=definition.tier,
            flags=definition.flags,
            definition=definition,
        )

    @property
    def action_kind(self) -> ActionKind | None:
        """Kind of the food's action while it still has uses."""
        if self.effect is None or self.effect.is_spent:
            return None
        return self.effect.action.kind

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uses": self.effect.uses if self.effect else None,
        }


@dataclass
class Pet:
    """
    A pet instance.

    ``position`` is maintained by the owning Roster and is None while the
    pet sits in a shop slot or after it leaves a roster.
    """
    name: str
    stats: Statistics
    tier: int = 1
    level: int = 1
    experience: int = 0
    effects: list[Effect] = field(default_factory=list)
    item: Food | None = None
    id: str | None = None
    position: int | None = None
    cost: int = 3
    pack: str = "Turtle"
    definition: PetDefinition | None = None

    @classmethod
    def from_definition(
        cls,
        definition: PetDefinition,
        level: int = 1,
        attack: int | None = None,
        health: int | None = None,
        pet_id: str | None = None,
        config: EngineConfig | None = None,
    ) -> Pet:
        """Instantiate a pet at ``level`` with base (or overridden) stats."""
        max_level = config.max_level if config else 3
        if not MIN_LEVEL <= level <= max_level:
            raise InvalidPetAction(f"{definition.name} cannot be created at level {level}")
        ceiling = config.max_stat if config else MAX_STAT
        # Base stats grow by one per level above 1 (one per merge experience).
        bonus = _experience_before(level, config)
        stats = Statistics(
            definition.attack + bonus if attack is None else attack,
            definition.health + bonus if health is None else health,
            ceiling=ceiling,
        )
        return cls(
            name=definition.name,
            stats=stats,
            tier=definition.tier,
            level=level,
            experience=bonus,
            effects=definition.effects_for(level),
            id=pet_id,
            cost=definition.cost,
            pack=definition.pack,
            definition=definition,
        )

    @classmethod
    def custom(
        cls,
        name: str,
        attack: int,
        health: int,
        effects: list[Effect] | None = None,
        pet_id: str | None = None,
        config: EngineConfig | None = None,
    ) -> Pet:
        """A pet with no definition behind it."""
        ceiling = config.max_stat if config else MAX_STAT
        return cls(
            name=name,
            stats=Statistics(attack, health, ceiling=ceiling),
            tier=0,
            effects=[e.copy() for e in (effects or [])],
            id=pet_id,
        )

    def __str__(self) -> str:
        item = f" [{self.item.name}]" if self.item else ""
        return f"{self.name}{self.stats} lvl {self.level}{item}"

    @property
    def is_alive(self) -> bool:
        return self.stats.health > 0

    def all_effects(self) -> list[Effect]:
        """Own effects followed by the held item's effect."""
        effects = list(self.effects)
        if self.item is not None and self.item.effect is not None:
            effects.append(self.item.effect)
        return effects

    def give_item(self, food: Food) -> None:
        self.item = food

    def prune_effects(self, include_temporary: bool = False) -> None:
        """Drop spent (and optionally temporary) effects, and a spent single-use item."""
        self.effects = [
            e for e in self.effects
            if not e.is_spent and not (include_temporary and e.temporary)
        ]
        if self.item is not None and self.item.effect is not None:
            spent = self.item.effect.is_spent and self.item.single_use
            if spent or (include_temporary and self.item.effect.temporary):
                self.item = None

    # =========================================================================
    # Levels
    # =========================================================================

    def add_experience(
        self,
        amount: int,
        stat_bonus: tuple[int, int] = (1, 1),
        config: EngineConfig | None = None,
    ) -> int:
        """
        Add experience, gaining ``stat_bonus`` per point.

        Returns the number of levels gained. Raises InvalidPetAction at max
        level.
        """
        max_level = config.max_level if config else 3
        if self.level >= max_level:
            raise InvalidPetAction(f"{self.name} already at max level {self.level}")

        start_level = self.level
        for _ in range(amount):
            self.experience += 1
            self.stats.add(Statistics(*stat_bonus))
            needed = _experience_to_leave(self.level, config)
            if needed is not None and self.experience >= needed:
                self.level += 1
                self._refresh_effects()
            if self.level >= max_level:
                break
        return self.level - start_level

    def set_level(self, level: int, config: EngineConfig | None = None) -> None:
        max_level = config.max_level if config else 3
        if not MIN_LEVEL <= level <= max_level:
            raise InvalidPetAction(f"{self.name} cannot be set to level {level}")
        self.level = level
        self._refresh_effects()

    def _refresh_effects(self) -> None:
        if self.definition is not None:
            self.effects = self.definition.effects_for(self.level)

    # =========================================================================
    # Combat
    # =========================================================================

    def item_modifier(self, rng: Random | None = None) -> Statistics:
        """
        Stat modifier from the held item.

        ``attack`` is added to outgoing damage, ``health`` is subtracted
        from incoming damage.
        """
        kind = self.item.action_kind if self.item else None
        if kind is None:
            return Statistics()
        action = self.item.effect.action
        if kind in (ActionKind.ADD, ActionKind.NEGATE):
            return action.stats.copy()
        if kind == ActionKind.CRITICAL:
            roll = rng.randrange(100) if rng is not None else 100
            extra = self.stats.attack if roll < action.amount else 0
            return Statistics(extra, 0, ceiling=self.stats.ceiling * 2)
        return Statistics()

    def has_item_flag(self, flag: str) -> bool:
        return self.item is not None and flag in self.item.flags

    def consume_item(self) -> None:
        if self.item is not None and self.item.effect is not None:
            self.item.effect.consume()

    def copy(self) -> Pet:
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier,
            "level": self.level,
            "experience": self.experience,
            "position": self.position,
            "attack": self.stats.attack,
            "health": self.stats.health,
            "item": self.item.to_dict() if self.item else None,
        }


def _experience_to_leave(level: int, config: EngineConfig | None) -> int | None:
    if config is not None:
        return config.experience_for_level(level)
    # lvl 1 -> 2 needs 2, lvl 2 -> 3 needs 5
    return {1: 2, 2: 5}.get(level)


def _experience_before(level: int, config: EngineConfig | None) -> int:
    if level <= 1:
        return 0
    return _experience_to_leave(level - 1, config) or 0


def _floor(defender: Pet, config: EngineConfig) -> int:
    if defender.has_item_flag(FULL_NEGATE) and defender.item.action_kind is not None:
        return 0
    return config.min_damage


def _ceiling(defender: Pet, config: EngineConfig) -> int:
    return 0 if defender.item and defender.item.action_kind == ActionKind.INVINCIBLE else config.max_damage


def _has_deaths_touch(pet: Pet) -> bool:
    return pet.item is not None and pet.item.action_kind == ActionKind.KILL


@dataclass
class Exchange:
    """Outcome of a simultaneous attack, computed from a stat snapshot."""
    damage_to_defender: int
    damage_to_attacker: int
    attacker_health: int
    defender_health: int


def compute_exchange(
    attacker: Pet,
    defender: Pet,
    config: EngineConfig,
    attacker_rng: Random | None = None,
    defender_rng: Random | None = None,
) -> Exchange:
    """
    Damage both front pets deal to each other.

    Nothing is mutated: both results come from the same pre-attack
    snapshot, so a mutual kill is a double faint.
    """
    atk_mod = attacker.item_modifier(attacker_rng)
    def_mod = defender.item_modifier(defender_rng)

    to_defender = attacker.stats.attack + atk_mod.attack - def_mod.health
    to_defender = max(_floor(defender, config), min(to_defender, _ceiling(defender, config)))
    to_attacker = defender.stats.attack + def_mod.attack - atk_mod.health
    to_attacker = max(_floor(attacker, config), min(to_attacker, _ceiling(attacker, config)))

    defender_health = defender.stats.health - to_defender
    if to_defender and _has_deaths_touch(attacker):
        defender_health = 0
    attacker_health = attacker.stats.health - to_attacker
    if to_attacker and _has_deaths_touch(defender):
        attacker_health = 0

    return Exchange(
        damage_to_defender=to_defender,
        damage_to_attacker=to_attacker,
        attacker_health=max(0, attacker_health),
        defender_health=max(0, defender_health),
    )


def indirect_damage(target: Pet, amount: int, config: EngineConfig) -> int:
    """Damage an indirect hit of ``amount`` deals to ``target`` after item modifiers."""
    negate = target.item_modifier().health
    return max(_floor(target, config), min(amount - negate, _ceiling(target, config)))
