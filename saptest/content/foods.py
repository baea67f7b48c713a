"""
Foods - Built-in Turtle pack food definitions.

Holdable foods become the held item of the pet they are bought onto.
The rest apply their effect immediately, with the receiving pet as owner.
"""

from ..engine_core.action import Action
from ..engine_core.effect import (
    Effect,
    EventKind,
    OwnerKind,
    Position,
    Target,
    TargetSelector,
    held_item,
)
from ..engine_core.pet import FULL_NEGATE
from .definitions import FoodDefinition


def _eaten(action: Action, target: TargetSelector | None = None) -> Effect:
    """Effect applied once when the food is bought."""
    return Effect(
        trigger=EventKind.BUY_FOOD,
        action=action,
        target=target or TargetSelector(Target.FRIEND, Position.ON_SELF),
        uses=1,
        owner_kind=OwnerKind.FOOD,
    )


APPLE = FoodDefinition(
    name="Apple",
    tier=1,
    effect=_eaten(Action.add(1, 1)),
    description="Give one pet +1/+1.",
)

HONEY = FoodDefinition(
    name="Honey",
    tier=1,
    effect=Effect(
        trigger=EventKind.FAINT,
        action=Action.summon("Bee", attack=1, health=1),
        target=TargetSelector(Target.FRIEND, Position.ON_SELF),
        uses=1,
        owner_kind=OwnerKind.FOOD,
    ),
    holdable=True,
    description="Faint: summon a 1/1 Bee.",
)

MEAT_BONE = FoodDefinition(
    name="Meat Bone",
    tier=2,
    effect=held_item(Action.add(3, 0)),
    holdable=True,
    single_use=False,
    description="Attack for 3 more damage.",
)

SLEEPING_PILL = FoodDefinition(
    name="Sleeping Pill",
    tier=2,
    cost=1,
    effect=_eaten(Action.kill()),
    description="Make a friendly pet faint.",
)

GARLIC = FoodDefinition(
    name="Garlic",
    tier=3,
    effect=held_item(Action.negate(2)),
    holdable=True,
    single_use=False,
    description="Take 2 less damage, minimum 1.",
)

SALAD_BOWL = FoodDefinition(
    name="Salad Bowl",
    tier=3,
    effect=_eaten(
        Action.add(1, 1),
        TargetSelector(Target.FRIEND, Position.ANY, n=2, exclude_self=False),
    ),
    description="Give two random pets +1/+1.",
)

CANNED_FOOD = FoodDefinition(
    name="Canned Food",
    tier=4,
    effect=_eaten(Action.add_shop_stats(1, 1), TargetSelector(Target.SHOP, Position.ALL)),
    description="Give all current and future shop pets +1/+1.",
)

PEAR = FoodDefinition(
    name="Pear",
    tier=4,
    effect=_eaten(Action.add(2, 2)),
    description="Give one pet +2/+2.",
)

CHEESE = FoodDefinition(
    name="Cheese",
    tier=5,
    effect=held_item(Action.critical(100), uses=1),
    holdable=True,
    description="Double the damage of the next attack.",
)

MELON = FoodDefinition(
    name="Melon",
    tier=5,
    effect=held_item(Action.negate(20), uses=1),
    holdable=True,
    flags=frozenset({FULL_NEGATE}),
    description="Take 20 less damage once.",
)

MUSHROOM = FoodDefinition(
    name="Mushroom",
    tier=6,
    effect=Effect(
        trigger=EventKind.FAINT,
        action=Action.summon(None, attack=1, health=1),
        target=TargetSelector(Target.FRIEND, Position.ON_SELF),
        uses=1,
        owner_kind=OwnerKind.FOOD,
    ),
    holdable=True,
    description="Faint: come back as a 1/1.",
)

PEANUT = FoodDefinition(
    name="Peanut",
    tier=6,
    effect=held_item(Action.kill()),
    holdable=True,
    single_use=False,
    description="Knock out any pet this pet damages.",
)

STEAK = FoodDefinition(
    name="Steak",
    tier=6,
    effect=held_item(Action.add(20, 0), uses=1),
    holdable=True,
    description="Attack for 20 more damage once.",
)

# Not sold in the shop; Gorilla grants it.
COCONUT = FoodDefinition(
    name="Coconut",
    tier=6,
    effect=held_item(Action.invincible(), uses=1),
    holdable=True,
    flags=frozenset({FULL_NEGATE}),
    token=True,
    description="Ignore damage once.",
)


ALL_FOODS = [
    APPLE, HONEY,
    MEAT_BONE, SLEEPING_PILL,
    GARLIC, SALAD_BOWL,
    CANNED_FOOD, PEAR,
    CHEESE, MELON,
    MUSHROOM, PEANUT, STEAK,
    COCONUT,
]


def get_all_food_definitions() -> list[FoodDefinition]:
    """Get all built-in food definitions."""
    return list(ALL_FOODS)
