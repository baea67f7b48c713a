"""
Shop - Between-battle economy attached to a roster.

The shop has pet slots followed by food slots. Slot counts grow with the
shop tier. Every operation validates fully before it changes anything, so
a rejected operation leaves both the shop and the roster as they were.
Triggered effects (Swan on open, Pig on sell, ...) run through an
EventEngine bound to the roster and this shop, and all events are kept in
``Shop.log`` for the whole session.

Economy rules:
- Coins reset to ``start_gold`` whenever the shop opens
- A roll costs ``roll_cost`` unless a free roll is banked
- Buying a pet onto the same kind of pet merges the two
- Selling refunds ``floor(cost * refund_fraction) * level``
- Toys lose a turn of duration at every close and break at the next open
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Any, TYPE_CHECKING
import logging

from ..config import EngineConfig, ShopConfig
from ..errors import (
    EmptySlot,
    InsufficientFunds,
    InvalidPosition,
    InvalidShopState,
    InvalidTier,
    RosterTooLarge,
)
from .effect import EventKind, Side
from .engine import EventEngine
from .event import EventLog
from .pet import Food, Pet
from .stats import Statistics

if TYPE_CHECKING:
    from ..content.definitions import EntityProvider
    from .roster import Roster

logger = logging.getLogger(__name__)


class ShopState(Enum):
    OPEN = "open"
    CLOSED = "closed"


class ItemKind(Enum):
    PET = "pet"
    FOOD = "food"


@dataclass
class ShopItem:
    """An entity for sale in one shop slot."""
    entity_name: str
    cost: int
    kind: ItemKind
    tier: int = 1
    frozen: bool = False
    pet: Pet | None = None
    food: Food | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.entity_name,
            "kind": self.kind.value,
            "cost": self.cost,
            "tier": self.tier,
            "frozen": self.frozen,
        }
        if self.pet is not None:
            data["attack"] = self.pet.stats.attack
            data["health"] = self.pet.stats.health
        return data


def pet_slots_for_tier(tier: int) -> int:
    if tier < 3:
        return 3
    if tier < 5:
        return 4
    return 5


def food_slots_for_tier(tier: int) -> int:
    return 1 if tier < 2 else 2


class Shop:
    """
    A shop with its own RNG stream.

    Usage:
        shop = Shop(tier=1, seed=7)
        team = Roster(shop=shop)
        team.open_shop().buy(0, 0).close_shop()
    """

    def __init__(
        self,
        tier: int = 1,
        seed: int | None = None,
        provider: EntityProvider | None = None,
        config: ShopConfig | None = None,
        engine_config: EngineConfig | None = None,
    ):
        self.config = config or ShopConfig()
        self._check_tier(tier)
        if provider is None:
            from ..content import default_provider
            provider = default_provider()
        self.provider = provider
        self.engine_config = engine_config or EngineConfig()
        self.tier = tier
        self.seed = seed
        self.rng = Random(seed)
        self.state = ShopState.CLOSED
        self.coins = self.config.start_gold
        self.items: list[ShopItem | None] = []
        self.roll_count = 0
        self.free_rolls = 0
        # Permanent buff applied to current and future shop pets.
        self.add_stats = Statistics(0, 0, ceiling=self.engine_config.max_stat)
        self.log = EventLog()

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        slots = ", ".join(
            f"{'*' if i.frozen else ''}{i.entity_name}" if i else "_" for i in self.items
        )
        return f"Shop(tier {self.tier}, {self.coins} coins): {slots}"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self.state == ShopState.OPEN

    @property
    def pet_slots(self) -> int:
        return pet_slots_for_tier(self.tier)

    @property
    def food_slots(self) -> int:
        return food_slots_for_tier(self.tier)

    @property
    def pets(self) -> list[ShopItem]:
        return [i for i in self.items if i is not None and i.kind == ItemKind.PET]

    @property
    def foods(self) -> list[ShopItem]:
        return [i for i in self.items if i is not None and i.kind == ItemKind.FOOD]

    @property
    def frozen(self) -> list[int]:
        """Indices of frozen slots."""
        return [n for n, i in enumerate(self.items) if i is not None and i.frozen]

    @staticmethod
    def tier_for_turn(turn: int) -> int:
        """Shop tier unlocked on a given turn (1-based), capped at 6."""
        return max(1, min(turn // 2 + turn % 2, 6))

    def set_tier(self, tier: int) -> None:
        self._check_tier(tier)
        self.tier = tier

    # =========================================================================
    # Operations
    # =========================================================================

    def open(self, roster: Roster) -> None:
        """Reset coins, restock unfrozen slots, fire SHOP_OPEN and break worn-out toys."""
        if self.is_open:
            raise InvalidShopState("Shop is already open")
        self.state = ShopState.OPEN
        self.coins = self.config.start_gold
        self.free_rolls = 0
        self._restock()

        engine = self._engine(roster)
        engine.emit(engine.make_event(EventKind.SHOP_OPEN, side=Side.TEAM))
        broken = [toy for toy in roster.toys if toy.is_broken]
        for toy in broken:
            engine.emit(engine.make_event(EventKind.TOY_BREAK, side=Side.TEAM, toy=toy.name, toy_id=toy.id))
        self._settle(engine, roster)
        for toy in broken:
            roster.remove_toy(toy.id)
            logger.info("%s broke", toy.name)
        logger.info("Shop opened at tier %d: %s", self.tier, self)

    def close(self, roster: Roster) -> None:
        """Fire SHOP_CLOSE, drop temporary effects, wear toys down and close."""
        self._require_open()
        engine = self._engine(roster)
        engine.emit(engine.make_event(EventKind.SHOP_CLOSE, side=Side.TEAM))
        self._settle(engine, roster)
        roster.prune_effects(include_temporary=True)
        for toy in roster.toys:
            toy.tick()
        self.state = ShopState.CLOSED
        logger.info("Shop closed with %d coins left", self.coins)

    def roll(self, roster: Roster) -> None:
        """Replace every unfrozen slot."""
        self._require_open()
        if self.free_rolls > 0:
            self.free_rolls -= 1
        elif self.coins < self.config.roll_cost:
            raise InsufficientFunds(f"Roll costs {self.config.roll_cost}, have {self.coins}")
        else:
            self.coins -= self.config.roll_cost

        for n, item in enumerate(self.items):
            if item is None or not item.frozen:
                self.items[n] = self._new_item(self._slot_kind(n))
        self.roll_count += 1

        engine = self._engine(roster)
        engine.emit(engine.make_event(EventKind.ROLL, side=Side.TEAM, roll=self.roll_count))
        self._settle(engine, roster)
        logger.debug("Rolled: %s", self)

    def freeze(self, slot: int) -> None:
        self._require_open()
        self._item(slot).frozen = True

    def unfreeze(self, slot: int) -> None:
        self._require_open()
        self._item(slot).frozen = False

    def buy(self, roster: Roster, slot: int, destination: int, shift: bool = False) -> None:
        """
        Buy the item in ``slot`` onto roster slot ``destination``.

        Pets merge into a same-named pet below max level, fill an empty
        slot, or (with ``shift``) push the occupant back. Holdable food is
        given to the destination pet; other food runs its effect with the
        destination pet as owner.
        """
        self._require_open()
        item = self._item(slot)
        if not 0 <= destination < roster.capacity:
            raise InvalidPosition(f"Roster slot {destination} outside 0-{roster.capacity - 1}")
        occupant = roster.slots[destination]

        if item.kind == ItemKind.PET:
            merging = (
                occupant is not None
                and occupant.name == item.entity_name
                and occupant.level < self.engine_config.max_level
            )
            if not merging:
                if len(roster.living()) >= roster.capacity:
                    raise RosterTooLarge(f"Roster '{roster.name}' is full")
                if occupant is not None and not shift:
                    raise InvalidPosition(f"Roster slot {destination} holds {occupant.name}")
        elif occupant is None or not occupant.is_alive:
            raise EmptySlot(f"No pet in roster slot {destination} to feed")

        if self.coins < item.cost:
            raise InsufficientFunds(f"{item.entity_name} costs {item.cost}, have {self.coins}")

        self.coins -= item.cost
        self.items[slot] = None
        engine = self._engine(roster)

        if item.kind == ItemKind.PET and merging:
            self._merge(engine, occupant, item.pet)
        elif item.kind == ItemKind.PET:
            pet = item.pet
            if occupant is None:
                roster.place(pet, destination)
            else:
                roster.insert(pet, destination)
            engine.emit(engine.make_event(EventKind.BUY_PET, side=Side.TEAM, afflicted=pet))
            engine.emit(engine.make_event(EventKind.SUMMONED, side=Side.TEAM, afflicted=pet))
        else:
            self._feed(engine, occupant, item.food)

        self._settle(engine, roster)
        logger.info("Bought %s for %d into slot %d", item.entity_name, item.cost, destination)

    def sell(self, roster: Roster, slot: int) -> None:
        """Sell the pet in roster slot ``slot``."""
        self._require_open()
        pet = roster.nth(slot)
        if pet is None:
            raise EmptySlot(f"No pet in roster slot {slot} to sell")

        refund = self.config.refund_for(pet.cost, pet.level)
        engine = self._engine(roster)
        event = engine.make_event(EventKind.SELL, side=Side.TEAM, afflicted=pet, refund=refund)
        roster.remove(slot)
        roster.sold.append(pet)
        self.coins += refund

        engine.emit(event)
        self._settle(engine, roster)
        logger.info("Sold %s for %d", pet.name, refund)

    def add_pet_stats(self, stats: Statistics) -> None:
        """Buff current and future shop pets."""
        self.add_stats.add(stats)
        for item in self.pets:
            item.pet.stats.add(stats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "tier": self.tier,
            "coins": self.coins,
            "free_rolls": self.free_rolls,
            "roll_count": self.roll_count,
            "items": [i.to_dict() if i else None for i in self.items],
        }

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_tier(self, tier: int) -> None:
        if not 1 <= tier <= self.config.max_tier:
            raise InvalidTier(tier, self.config.max_tier)

    def _require_open(self) -> None:
        if not self.is_open:
            raise InvalidShopState("Shop is closed")

    def _item(self, slot: int) -> ShopItem:
        if not 0 <= slot < len(self.items):
            raise InvalidPosition(f"Shop slot {slot} outside 0-{len(self.items) - 1}")
        item = self.items[slot]
        if item is None:
            raise EmptySlot(f"Shop slot {slot} is empty")
        return item

    def _slot_kind(self, slot: int) -> ItemKind:
        return ItemKind.PET if slot < self.pet_slots else ItemKind.FOOD

    def _engine(self, roster: Roster) -> EventEngine:
        return EventEngine(
            rosters={Side.TEAM: roster},
            config=roster.config,
            log=self.log,
            shop=self,
            provider=self.provider,
        )

    def _settle(self, engine: EventEngine, roster: Roster) -> None:
        engine.drain()
        roster.clear_fainted()
        roster.prune_effects()

    def _restock(self) -> None:
        frozen_pets = [i for i in self.pets if i.frozen]
        frozen_foods = [i for i in self.foods if i.frozen]
        pets = frozen_pets + [
            self._new_item(ItemKind.PET) for _ in range(self.pet_slots - len(frozen_pets))
        ]
        foods = frozen_foods + [
            self._new_item(ItemKind.FOOD) for _ in range(self.food_slots - len(frozen_foods))
        ]
        self.items = pets + foods

    def _new_item(self, kind: ItemKind, tier: int | None = None) -> ShopItem | None:
        tier = tier or self.tier
        if kind == ItemKind.PET:
            pool = self.provider.pets_for_tier(tier, self.config.pack)
            if not pool:
                return None
            definition = self.rng.choice(pool)
            pet = Pet.from_definition(definition, config=self.engine_config)
            pet.stats.add(self.add_stats)
            return ShopItem(definition.name, definition.cost, kind, definition.tier, pet=pet)

        pool = self.provider.foods_for_tier(tier, self.config.pack)
        if not pool:
            return None
        definition = self.rng.choice(pool)
        food = Food.from_definition(definition)
        return ShopItem(definition.name, definition.cost, kind, definition.tier, food=food)

    def _merge(self, engine: EventEngine, target: Pet, bought: Pet) -> None:
        if self.config.merge_keep_max:
            target.stats.set(Statistics(
                max(target.stats.attack, bought.stats.attack),
                max(target.stats.health, bought.stats.health),
                ceiling=target.stats.ceiling,
            ))
        levels = target.add_experience(
            bought.experience + 1,
            stat_bonus=self.config.merge_stat_bonus,
            config=self.engine_config,
        )
        engine.emit(engine.make_event(EventKind.BUY_PET, side=Side.TEAM, afflicted=target, merged=True))
        for _ in range(levels):
            engine.emit(engine.make_event(EventKind.LEVELUP, side=Side.TEAM, afflicted=target))
        if levels:
            self._add_levelup_pet()

    def _add_levelup_pet(self) -> None:
        """Stock a pet from the next tier into the first free pet slot."""
        free = [n for n in range(min(self.pet_slots, len(self.items))) if self.items[n] is None]
        if not free:
            return
        tier = min(self.tier + 1, self.config.max_tier)
        pool = [p for p in self.provider.pets_for_tier(tier, self.config.pack) if p.tier == tier]
        if not pool:
            return
        definition = self.rng.choice(pool)
        pet = Pet.from_definition(definition, config=self.engine_config)
        pet.stats.add(self.add_stats)
        self.items[free[0]] = ShopItem(definition.name, definition.cost, ItemKind.PET, definition.tier, pet=pet)

    def _feed(self, engine: EventEngine, target: Pet, food: Food) -> None:
        if food.holdable:
            target.give_item(food)
            engine.emit(engine.make_event(EventKind.BUY_FOOD, side=Side.TEAM, afflicted=target, food=food.name))
            return

        event = engine.make_event(EventKind.BUY_FOOD, side=Side.TEAM, afflicted=target, food=food.name)
        entry = engine.process(event)
        fed = engine.run_effect(food.effect, target, Side.TEAM, event, entry) if food.effect else []
        for side, pet in fed:
            engine.emit(engine.make_event(EventKind.ATE_FOOD, side=side, afflicted=pet, food=food.name))
