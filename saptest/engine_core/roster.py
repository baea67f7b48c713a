"""
Roster - One side's ordered pet slots.

A roster owns its pets: a fixed number of slots (position 0 is the front
and acts first), an append-only history of fainted pets, the pets sold
this session, its toys, its own RNG stream, and optionally a Shop.

Invariant: after compact() the living pets occupy a gapless prefix of
the slots in their previous relative order. Battles and shop operations
compact at their boundaries.
"""

from __future__ import annotations
from copy import deepcopy
from random import Random
from typing import Any, Iterator, Sequence, TYPE_CHECKING
import json
import logging

from ..config import EngineConfig
from ..errors import InvalidPosition, InvalidRosterData, InvalidShopState, RosterTooLarge, UnknownEntity
from .pet import Food, Pet
from .toy import Toy

if TYPE_CHECKING:
    from ..content.definitions import EntityProvider
    from .shop import Shop

logger = logging.getLogger(__name__)


class Roster:
    """
    A team of up to ``capacity`` pets.

    Usage:
        team = Roster([ant, None, cricket], seed=42)
        team.compact()
        front = team.first()

    Shop operations chain:
        team.open_shop().buy(0, 0).roll().close_shop()
    """

    def __init__(
        self,
        pets: Sequence[Pet | None] = (),
        capacity: int | None = None,
        seed: int | None = None,
        name: str = "team",
        shop: Shop | None = None,
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        self.capacity = capacity if capacity is not None else self.config.roster_capacity
        if len(pets) > self.capacity:
            raise RosterTooLarge(
                f"{len(pets)} pets given for a roster of capacity {self.capacity}"
            )
        self.name = name
        self.seed = seed
        self.rng = Random(seed)
        self.shop = shop
        self.fainted = []
        self.sold = []
        self.toys: list[Toy] = []
        self._pet_count = 0
        self._toy_count = 0
        self.slots = [None] * self.capacity
        for i, pet in enumerate(pets):
            self.slots[i] = pet
        for pet in self:
            self._assign_id(pet)
        self._reindex()

    def __iter__(self) -> Iterator[Pet]:
        """Iterate occupied slots front to back."""
        return (pet for pet in self.slots if pet is not None)

    def __len__(self) -> int:
        return sum(1 for pet in self.slots if pet is not None)

    def __str__(self) -> str:
        return f"{self.name}: " + ", ".join(str(p) if p else "_" for p in self.slots)

    # =========================================================================
    # Queries
    # =========================================================================

    def living(self) -> list[Pet]:
        """Living pets, front to back."""
        return [pet for pet in self.slots if pet is not None and pet.is_alive]

    def is_defeated(self) -> bool:
        return not self.living()

    def first(self) -> Pet | None:
        living = self.living()
        return living[0] if living else None

    def last(self) -> Pet | None:
        living = self.living()
        return living[-1] if living else None

    def nth(self, index: int) -> Pet | None:
        """Pet in slot ``index`` (None if empty). Raises InvalidPosition out of range."""
        self._check_index(index)
        return self.slots[index]

    def find(self, pet_id: str) -> Pet | None:
        """Look a pet up by id in slots, fainted history and sold pets."""
        for pet in self.slots:
            if pet is not None and pet.id == pet_id:
                return pet
        for pet in self.fainted + self.sold:
            if pet.id == pet_id:
                return pet
        return None

    def in_slots(self, pet: Pet) -> bool:
        return any(p is pet for p in self.slots)

    # =========================================================================
    # Mutation
    # =========================================================================

    def insert(self, pet: Pet, index: int) -> bool:
        """
        Put ``pet`` at ``index``, shifting occupants toward the nearest gap.

        Already-fainted pets are evicted to the history first if every slot
        is taken. Returns False (and changes nothing) when the roster has no
        room for another living pet.
        """
        if len(self.living()) >= self.capacity:
            return False
        if None not in self.slots:
            self.clear_fainted()

        index = max(0, min(index, self.capacity - 1))
        self._assign_id(pet)

        if self.slots[index] is None:
            self.slots[index] = pet
        elif None in self.slots[index:]:
            gap = self.slots.index(None, index)
            self.slots[index + 1:gap + 1] = self.slots[index:gap]
            self.slots[index] = pet
        else:
            gap = max(i for i, p in enumerate(self.slots[:index]) if p is None)
            self.slots[gap:index] = self.slots[gap + 1:index + 1]
            self.slots[index] = pet
        self._reindex()
        return True

    def place(self, pet: Pet, index: int) -> None:
        """Put ``pet`` into the empty slot ``index``."""
        self._check_index(index)
        if self.slots[index] is not None:
            raise InvalidPosition(f"Slot {index} already holds {self.slots[index].name}")
        self._assign_id(pet)
        self.slots[index] = pet
        self._reindex()

    def remove(self, index: int) -> Pet | None:
        """Take the pet out of slot ``index``, leaving a gap."""
        self._check_index(index)
        pet = self.slots[index]
        self.slots[index] = None
        if pet is not None:
            pet.position = None
        return pet

    def move(self, src: int, dst: int) -> None:
        """Move the pet in ``src`` to ``dst``, shifting pets in between."""
        self._check_index(src)
        self._check_index(dst)
        pet = self.slots.pop(src)
        self.slots.insert(dst, pet)
        self._reindex()

    def compact(self) -> None:
        """Close gaps so occupied slots form a prefix, keeping relative order."""
        occupied = [pet for pet in self.slots if pet is not None]
        self.slots = occupied + [None] * (self.capacity - len(occupied))
        self._reindex()

    def clear_fainted(self) -> list[Pet]:
        """Move pets at 0 health to the fainted history, then compact."""
        removed = []
        for i, pet in enumerate(self.slots):
            if pet is not None and not pet.is_alive:
                logger.debug("%s: %s fainted", self.name, pet)
                self.fainted.append(pet)
                self.slots[i] = None
                removed.append(pet)
        self.compact()
        return removed

    def prune_effects(self, include_temporary: bool = False) -> None:
        for pet in self:
            pet.prune_effects(include_temporary)

    def set_level(self, index: int, level: int) -> Pet:
        pet = self.nth(index)
        if pet is None:
            raise InvalidPosition(f"No pet in slot {index}")
        pet.set_level(level, self.config)
        return pet

    def reseed(self, seed: int | None) -> Roster:
        self.seed = seed
        self.rng = Random(seed)
        return self

    def copy(self) -> Roster:
        """Independent deep copy (RNG state included); the shop is not copied."""
        shop, self.shop = self.shop, None
        try:
            clone = deepcopy(self)
        finally:
            self.shop = shop
        return clone

    def to_dicts(self) -> list[dict | None]:
        return [pet.to_dict() if pet else None for pet in self.slots]

    # =========================================================================
    # Toys
    # =========================================================================

    def add_toy(self, toy: Toy) -> Toy:
        self._toy_count += 1
        if toy.id is None:
            toy.id = f"{toy.name}_{self._toy_count}"
        self.toys.append(toy)
        return toy

    def remove_toy(self, toy_id: str) -> Toy | None:
        for i, toy in enumerate(self.toys):
            if toy.id == toy_id:
                return self.toys.pop(i)
        return None

    # =========================================================================
    # Save / load
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """
        Saved form of the roster: slots, toys and construction settings.

        Fainted and sold history, the RNG position and the shop are not
        saved; a loaded roster restarts its RNG stream from ``seed``.
        """
        return {
            "name": self.name,
            "seed": self.seed,
            "capacity": self.capacity,
            "pets": self.to_dicts(),
            "toys": [toy.to_dict() for toy in self.toys],
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        provider: EntityProvider | None = None,
        config: EngineConfig | None = None,
    ) -> Roster:
        """
        Rebuild a roster saved with to_dict().

        Pets and toys are looked up by name so they get their effects
        back; a pet name the provider does not know becomes an effect-less
        custom pet. Raises InvalidRosterData for malformed data.
        """
        if provider is None:
            from ..content import default_provider
            provider = default_provider()
        try:
            pets = [
                _pet_from_dict(entry, provider, config) if entry else None
                for entry in data.get("pets", [])
            ]
            roster = cls(
                pets,
                capacity=data.get("capacity"),
                seed=data.get("seed"),
                name=data.get("name", "team"),
                config=config,
            )
            for entry in data.get("toys", []):
                toy = Toy.from_definition(provider.lookup_toy(entry["name"]), entry.get("level", 1))
                toy.duration = entry.get("duration", toy.duration)
                toy.id = entry.get("id")
                roster.add_toy(toy)
        except (AttributeError, KeyError, TypeError) as e:
            raise InvalidRosterData(f"Malformed roster data: {e!r}") from e
        return roster

    @classmethod
    def from_json(
        cls,
        text: str,
        provider: EntityProvider | None = None,
        config: EngineConfig | None = None,
    ) -> Roster:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidRosterData(f"Roster JSON does not parse: {e.msg}") from e
        if not isinstance(data, dict):
            raise InvalidRosterData("Roster JSON must be an object")
        return cls.from_dict(data, provider=provider, config=config)

    # =========================================================================
    # Shop operations
    # =========================================================================

    def _require_shop(self) -> Shop:
        if self.shop is None:
            raise InvalidShopState(f"Roster '{self.name}' has no shop attached")
        return self.shop

    def open_shop(self) -> Roster:
        self._require_shop().open(self)
        return self

    def close_shop(self) -> Roster:
        self._require_shop().close(self)
        return self

    def roll(self) -> Roster:
        self._require_shop().roll(self)
        return self

    def freeze(self, slot: int) -> Roster:
        self._require_shop().freeze(slot)
        return self

    def unfreeze(self, slot: int) -> Roster:
        self._require_shop().unfreeze(slot)
        return self

    def buy(self, slot: int, destination: int, shift: bool = False) -> Roster:
        self._require_shop().buy(self, slot, destination, shift=shift)
        return self

    def sell(self, slot: int) -> Roster:
        self._require_shop().sell(self, slot)
        return self

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.capacity:
            raise InvalidPosition(f"Slot {index} outside roster range 0-{self.capacity - 1}")

    def _assign_id(self, pet: Pet) -> None:
        """Give ``pet`` the next free ``<name>_<n>`` id unless it has one."""
        self._pet_count += 1
        if pet.id is not None:
            return
        taken = {p.id for p in self.slots if p is not None} | {p.id for p in self.fainted + self.sold}
        while f"{pet.name}_{self._pet_count}" in taken:
            self._pet_count += 1
        pet.id = f"{pet.name}_{self._pet_count}"

    def _reindex(self) -> None:
        for i, pet in enumerate(self.slots):
            if pet is not None:
                pet.position = i


def _pet_from_dict(data: dict[str, Any], provider: EntityProvider, config: EngineConfig | None) -> Pet:
    name, level = data["name"], data.get("level", 1)
    try:
        definition = provider.lookup_pet(name, level)
    except UnknownEntity:
        definition = None
    if definition is not None:
        pet = Pet.from_definition(
            definition,
            level=level,
            attack=data["attack"],
            health=data["health"],
            pet_id=data.get("id"),
            config=config,
        )
        pet.experience = data.get("experience", pet.experience)
    else:
        pet = Pet.custom(name, data["attack"], data["health"], pet_id=data.get("id"), config=config)
    item = data.get("item")
    if item:
        food = Food.from_definition(provider.lookup_food(item["name"]))
        if food.effect is not None and item.get("uses") is not None:
            food.effect.uses = item["uses"]
        pet.give_item(food)
    return pet
