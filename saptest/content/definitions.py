"""
Entity Definitions - Immutable pet, food and toy templates and their provider.

The engine never owns content. It asks an EntityProvider for a definition
by name (and level) and instantiates live Pets and Foods from it. The
provider also supplies the per-tier pools the shop draws from.

Definition structure:
- name, tier, pack, cost
- base stats (pets)
- effects per level (pets, toys) or a single effect (foods)
- duration in shop turns (toys)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol

from ..errors import UnknownEntity
from ..engine_core.effect import Effect


def _no_effects(level: int) -> list[Effect]:
    return []


@dataclass(frozen=True)
class PetDefinition:
    """
    Pet template.

    ``effects`` builds a fresh effect list for a level, so instances never
    share mutable use counters.
    """
    name: str
    tier: int
    attack: int
    health: int
    effects: Callable[[int], list[Effect]] = _no_effects
    pack: str = "Turtle"
    cost: int = 3
    token: bool = False  # Summon-only, never sold in a shop
    description: str = ""

    def effects_for(self, level: int) -> list[Effect]:
        return self.effects(level)

    @property
    def base_stats(self) -> tuple[int, int]:
        return (self.attack, self.health)

    @property
    def trigger_set(self) -> set[str]:
        return {e.trigger.value for e in self.effects_for(1)}


@dataclass(frozen=True)
class FoodDefinition:
    """Food template."""
    name: str
    tier: int
    effect: Effect | None = None
    holdable: bool = False
    single_use: bool = True
    cost: int = 3
    pack: str = "Turtle"
    flags: frozenset[str] = frozenset()
    token: bool = False
    description: str = ""


@dataclass(frozen=True)
class ToyDefinition:
    """Toy template. ``duration`` of None means the toy never breaks."""
    name: str
    tier: int
    effects: Callable[[int], list[Effect]] = _no_effects
    duration: int | None = None
    pack: str = "Turtle"
    description: str = ""

    def effects_for(self, level: int) -> list[Effect]:
        return self.effects(level)


class EntityProvider(Protocol):
    """Lookup interface the engine consumes."""

    def lookup_pet(self, name: str, level: int = 1) -> PetDefinition: ...

    def lookup_food(self, name: str) -> FoodDefinition: ...

    def lookup_toy(self, name: str) -> ToyDefinition: ...

    def pets_for_tier(self, tier: int, pack: str | None = None) -> list[PetDefinition]: ...

    def foods_for_tier(self, tier: int, pack: str | None = None) -> list[FoodDefinition]: ...


@dataclass
class DictProvider:
    """In-memory provider keyed by entity name."""
    pets: dict[str, PetDefinition] = field(default_factory=dict)
    foods: dict[str, FoodDefinition] = field(default_factory=dict)
    toys: dict[str, ToyDefinition] = field(default_factory=dict)
    max_level: int = 3

    @classmethod
    def from_definitions(
        cls,
        pets: Iterable[PetDefinition],
        foods: Iterable[FoodDefinition] = (),
        toys: Iterable[ToyDefinition] = (),
    ) -> DictProvider:
        return cls(
            pets={p.name: p for p in pets},
            foods={f.name: f for f in foods},
            toys={t.name: t for t in toys},
        )

    def lookup_pet(self, name: str, level: int = 1) -> PetDefinition:
        definition = self.pets.get(name)
        if definition is None or not 1 <= level <= self.max_level:
            raise UnknownEntity(name, level)
        return definition

    def lookup_food(self, name: str) -> FoodDefinition:
        definition = self.foods.get(name)
        if definition is None:
            raise UnknownEntity(name)
        return definition

    def lookup_toy(self, name: str) -> ToyDefinition:
        definition = self.toys.get(name)
        if definition is None:
            raise UnknownEntity(name)
        return definition

    def toys_for_tier(self, tier: int) -> list[ToyDefinition]:
        return sorted((t for t in self.toys.values() if 1 <= t.tier <= tier), key=lambda t: t.name)

    def pets_for_tier(self, tier: int, pack: str | None = None) -> list[PetDefinition]:
        return sorted(
            (
                p for p in self.pets.values()
                if not p.token and 1 <= p.tier <= tier and (pack is None or p.pack == pack)
            ),
            key=lambda p: p.name,
        )

    def foods_for_tier(self, tier: int, pack: str | None = None) -> list[FoodDefinition]:
        return sorted(
            (
                f for f in self.foods.values()
                if not f.token and 1 <= f.tier <= tier and (pack is None or f.pack == pack)
            ),
            key=lambda f: f.name,
        )

    def pets_at_tier(self, tier: int, pack: str | None = None) -> list[PetDefinition]:
        """Shop pets of exactly ``tier``."""
        return [p for p in self.pets_for_tier(tier, pack) if p.tier == tier]
