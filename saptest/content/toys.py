"""
Toys - Built-in Turtle pack toy definitions.

Break toys fire once, at the shop open after their duration runs out.
The rest fire at the start of every battle. Effect strength scales with
toy level ``n``.
"""

from ..engine_core.action import Action
from ..engine_core.effect import (
    Condition,
    EventKind,
    Position,
    Target,
    TargetSelector,
    toy_effect,
)
from .definitions import ToyDefinition


def _front_friends_gain(food: str):
    """Start of battle: the ``n`` front friends gain ``food``."""
    return lambda n: [
        toy_effect(
            EventKind.START_OF_BATTLE,
            Action.gain(food),
            TargetSelector(Target.FRIEND, Position.FIRST, n=n),
        )
    ]


# ============================================================================
# Tier 1
# ============================================================================

BALLOON = ToyDefinition(
    name="Balloon",
    tier=1,
    duration=1,
    effects=lambda n: [
        toy_effect(EventKind.TOY_BREAK, Action.add(n, n), TargetSelector(Target.FRIEND, Position.FIRST)),
    ],
    description="Break: give the front friend +1/+1.",
)

TENNIS_BALL = ToyDefinition(
    name="Tennis Ball",
    tier=1,
    effects=lambda n: [
        toy_effect(
            EventKind.START_OF_BATTLE,
            Action.damage(n),
            TargetSelector(Target.ENEMY, Position.ANY, n=2),
        )
    ],
    description="Start of battle: deal 1 damage to two random enemies.",
)

# ============================================================================
# Tier 2
# ============================================================================

RADIO = ToyDefinition(
    name="Radio",
    tier=2,
    duration=1,
    effects=lambda n: [
        toy_effect(EventKind.TOY_BREAK, Action.add(0, n), TargetSelector(Target.FRIEND, Position.ALL)),
    ],
    description="Break: give all friends +1 health.",
)

GARLIC_PRESS = ToyDefinition(
    name="Garlic Press",
    tier=2,
    effects=_front_friends_gain("Garlic"),
    description="Start of battle: the front friend gains Garlic (one more per level).",
)

# ============================================================================
# Tier 4
# ============================================================================

MELON_HELMET = ToyDefinition(
    name="Melon Helmet",
    tier=4,
    duration=1,
    effects=lambda n: [
        toy_effect(
            EventKind.TOY_BREAK,
            Action.gain("Melon"),
            TargetSelector(Target.FRIEND, Position.FIRST, n=n),
        )
    ],
    description="Break: the front friend gains Melon (one more per level).",
)

FOAM_SWORD = ToyDefinition(
    name="Foam Sword",
    tier=4,
    effects=lambda n: [
        toy_effect(
            EventKind.START_OF_BATTLE,
            Action.damage(6 * n),
            TargetSelector(Target.ENEMY, Position.BY_CONDITION, condition=Condition.WEAKEST),
        )
    ],
    description="Start of battle: deal 6 damage to the weakest enemy.",
)

TOY_GUN = ToyDefinition(
    name="Toy Gun",
    tier=4,
    effects=lambda n: [
        toy_effect(
            EventKind.START_OF_BATTLE,
            Action.damage(6 * n),
            TargetSelector(Target.ENEMY, Position.LAST),
        )
    ],
    description="Start of battle: deal 6 damage to the last enemy.",
)

# ============================================================================
# Tier 5
# ============================================================================

FLASHLIGHT = ToyDefinition(
    name="Flashlight",
    tier=5,
    duration=1,
    effects=lambda n: [
        toy_effect(EventKind.TOY_BREAK, Action.add(3 * n, 3 * n), TargetSelector(Target.FRIEND, Position.FIRST)),
    ],
    description="Break: give the front friend +3/+3.",
)

STINKY_SOCK = ToyDefinition(
    name="Stinky Sock",
    tier=5,
    effects=lambda n: [
        toy_effect(
            EventKind.START_OF_BATTLE,
            Action.debuff(40 * n, 40 * n),
            TargetSelector(Target.ENEMY, Position.BY_CONDITION, condition=Condition.HEALTHIEST),
        )
    ],
    description="Start of battle: reduce the healthiest enemy's stats by 40%.",
)

# ============================================================================
# Tier 6
# ============================================================================

TELEVISION = ToyDefinition(
    name="Television",
    tier=6,
    duration=1,
    effects=lambda n: [
        toy_effect(EventKind.TOY_BREAK, Action.add(2 * n, 2 * n), TargetSelector(Target.FRIEND, Position.ALL)),
    ],
    description="Break: give all friends +2/+2.",
)

PEANUT_JAR = ToyDefinition(
    name="Peanut Jar",
    tier=6,
    effects=_front_friends_gain("Peanut"),
    description="Start of battle: the front friend gains Peanut (one more per level).",
)

AIR_PALM_TREE = ToyDefinition(
    name="Air Palm Tree",
    tier=6,
    effects=_front_friends_gain("Coconut"),
    description="Start of battle: the front friend gains Coconut (one more per level).",
)


ALL_TOYS = [
    BALLOON, TENNIS_BALL,
    RADIO, GARLIC_PRESS,
    MELON_HELMET, FOAM_SWORD, TOY_GUN,
    FLASHLIGHT, STINKY_SOCK,
    TELEVISION, PEANUT_JAR, AIR_PALM_TREE,
]


def get_all_toy_definitions() -> list[ToyDefinition]:
    """Get all built-in toy definitions."""
    return list(ALL_TOYS)
