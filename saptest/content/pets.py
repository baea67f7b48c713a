"""
Pets - Built-in Turtle pack pet definitions.

A subset of the Turtle pack, tiers 1-6, plus the summon-only tokens they
create. Effect strength scales with level ``n``.

Definition structure:
- Tier and base stats
- Effect builder: level -> list[Effect]
"""

from ..engine_core.action import Action
from ..engine_core.effect import (
    Condition,
    Effect,
    EventKind,
    Position,
    Target,
    TargetSelector,
    TriggerScope,
    on_self,
    random_enemies,
    random_friends,
)
from .definitions import PetDefinition


def _summon_here(name: str, attack: int, health: int, level: int = 1) -> Effect:
    """Faint: summon ``name`` in the owner's slot."""
    return on_self(EventKind.FAINT, Action.summon(name, level=level, attack=attack, health=health))


# ============================================================================
# Tier 1
# ============================================================================

ANT = PetDefinition(
    name="Ant",
    tier=1,
    attack=2,
    health=1,
    effects=lambda n: [random_friends(EventKind.FAINT, Action.add(2 * n, 1 * n))],
    description="Faint: give a random friend +2/+1.",
)

BEAVER = PetDefinition(
    name="Beaver",
    tier=1,
    attack=3,
    health=2,
    effects=lambda n: [random_friends(EventKind.SELL, Action.add(0, n), n=2)],
    description="Sell: give two random friends +1 health.",
)

CRICKET = PetDefinition(
    name="Cricket",
    tier=1,
    attack=1,
    health=2,
    effects=lambda n: [_summon_here("Zombie Cricket", n, n, level=n)],
    description="Faint: summon a 1/1 Zombie Cricket.",
)

DUCK = PetDefinition(
    name="Duck",
    tier=1,
    attack=2,
    health=3,
    effects=lambda n: [
        Effect(
            trigger=EventKind.SELL,
            action=Action.add_shop_stats(0, n),
            target=TargetSelector(Target.SHOP, Position.ALL),
        )
    ],
    description="Sell: give shop pets +1 health.",
)

FISH = PetDefinition(
    name="Fish",
    tier=1,
    attack=2,
    health=2,
    effects=lambda n: [
        Effect(
            trigger=EventKind.LEVELUP,
            action=Action.add(n - 1, n - 1),
            target=TargetSelector(Target.FRIEND, Position.ALL),
        )
    ] if n > 1 else [],
    description="Level-up: give all friends +1/+1.",
)

HORSE = PetDefinition(
    name="Horse",
    tier=1,
    attack=2,
    health=1,
    effects=lambda n: [
        Effect(
            trigger=EventKind.SUMMONED,
            action=Action.add(n, 0),
            target=TargetSelector(Target.FRIEND, Position.TRIGGER_AFFECTED),
            scope=TriggerScope.FRIEND,
        )
    ],
    description="Friend summoned: give it +1 attack.",
)

MOSQUITO = PetDefinition(
    name="Mosquito",
    tier=1,
    attack=2,
    health=2,
    effects=lambda n: [random_enemies(EventKind.START_OF_BATTLE, Action.damage(1), n=n)],
    description="Start of battle: deal 1 damage to a random enemy.",
)

OTTER = PetDefinition(
    name="Otter",
    tier=1,
    attack=1,
    health=2,
    effects=lambda n: [random_friends(EventKind.BUY_PET, Action.add(1, 1), n=n)],
    description="Buy: give a random friend +1/+1.",
)

PIG = PetDefinition(
    name="Pig",
    tier=1,
    attack=4,
    health=1,
    effects=lambda n: [
        Effect(
            trigger=EventKind.SELL,
            action=Action.alter_gold(n),
            target=TargetSelector(Target.SHOP, Position.NONE),
        )
    ],
    description="Sell: gain an extra 1 gold.",
)

# ============================================================================
# Tier 2
# ============================================================================

FLAMINGO = PetDefinition(
    name="Flamingo",
    tier=2,
    attack=4,
    health=2,
    effects=lambda n: [
        Effect(
            trigger=EventKind.FAINT,
            action=Action.add(n, n),
            target=TargetSelector(Target.FRIEND, Position.BEHIND, n=2),
        )
    ],
    description="Faint: give the two friends behind +1/+1.",
)

HEDGEHOG = PetDefinition(
    name="Hedgehog",
    tier=2,
    attack=3,
    health=2,
    effects=lambda n: [
        Effect(
            trigger=EventKind.FAINT,
            action=Action.damage(2 * n),
            target=TargetSelector(Target.EITHER, Position.ALL),
        )
    ],
    description="Faint: deal 2 damage to all.",
)

KANGAROO = PetDefinition(
    name="Kangaroo",
    tier=2,
    attack=1,
    health=2,
    effects=lambda n: [
        Effect(
            trigger=EventKind.AFTER_ATTACK,
            action=Action.add(2 * n, 2 * n),
            target=TargetSelector(Target.FRIEND, Position.ON_SELF),
            scope=TriggerScope.FRIEND_AHEAD,
        )
    ],
    description="Friend ahead attacks: gain +2/+2.",
)

PEACOCK = PetDefinition(
    name="Peacock",
    tier=2,
    attack=2,
    health=5,
    effects=lambda n: [on_self(EventKind.HURT, Action.add(4 * n, 0), uses=1)],
    description="Hurt: gain +4 attack. Works once.",
)

RAT = PetDefinition(
    name="Rat",
    tier=2,
    attack=4,
    health=5,
    effects=lambda n: [
        Effect(
            trigger=EventKind.FAINT,
            action=Action.multiple(*[Action.summon("Dirty Rat", attack=1, health=1)] * n),
            target=TargetSelector(Target.ENEMY, Position.FIRST),
        )
    ],
    description="Faint: summon a 1/1 Dirty Rat for the opponent.",
)

SWAN = PetDefinition(
    name="Swan",
    tier=2,
    attack=1,
    health=3,
    effects=lambda n: [
        Effect(
            trigger=EventKind.SHOP_OPEN,
            action=Action.alter_gold(n),
            target=TargetSelector(Target.SHOP, Position.NONE),
        )
    ],
    description="Start of turn: gain 1 gold.",
)

# ============================================================================
# Tier 3
# ============================================================================

BLOWFISH = PetDefinition(
    name="Blowfish",
    tier=3,
    attack=3,
    health=5,
    effects=lambda n: [random_enemies(EventKind.HURT, Action.damage(2 * n))],
    description="Hurt: deal 2 damage to a random enemy.",
)

CAMEL = PetDefinition(
    name="Camel",
    tier=3,
    attack=2,
    health=5,
    effects=lambda n: [
        Effect(
            trigger=EventKind.HURT,
            action=Action.add(n, 2 * n),
            target=TargetSelector(Target.FRIEND, Position.BEHIND),
        )
    ],
    description="Hurt: give friend behind +1/+2.",
)

DOLPHIN = PetDefinition(
    name="Dolphin",
    tier=3,
    attack=4,
    health=3,
    effects=lambda n: [
        Effect(
            trigger=EventKind.START_OF_BATTLE,
            action=Action.damage(3 * n),
            target=TargetSelector(Target.ENEMY, Position.BY_CONDITION, condition=Condition.ILLEST),
        )
    ],
    description="Start of battle: deal 3 damage to the lowest health enemy.",
)

ELEPHANT = PetDefinition(
    name="Elephant",
    tier=3,
    attack=3,
    health=5,
    effects=lambda n: [
        Effect(
            trigger=EventKind.BEFORE_ATTACK,
            action=Action.damage(1),
            target=TargetSelector(Target.FRIEND, Position.BEHIND, n=n),
        )
    ],
    description="Before attack: deal 1 damage to the friend behind.",
)

SHEEP = PetDefinition(
    name="Sheep",
    tier=3,
    attack=2,
    health=2,
    effects=lambda n: [
        _summon_here("Ram", 2 * n, 2 * n, level=n),
        _summon_here("Ram", 2 * n, 2 * n, level=n),
    ],
    description="Faint: summon two 2/2 Rams.",
)

# ============================================================================
# Tier 4
# ============================================================================

DEER = PetDefinition(
    name="Deer",
    tier=4,
    attack=1,
    health=1,
    effects=lambda n: [_summon_here("Bus", 5 * n, 5 * n, level=n)],
    description="Faint: summon a 5/5 Bus.",
)

HIPPO = PetDefinition(
    name="Hippo",
    tier=4,
    attack=4,
    health=7,
    effects=lambda n: [on_self(EventKind.KNOCKOUT, Action.add(2 * n, 2 * n))],
    description="Knock out: gain +2/+2.",
)

SKUNK = PetDefinition(
    name="Skunk",
    tier=4,
    attack=3,
    health=6,
    effects=lambda n: [
        Effect(
            trigger=EventKind.START_OF_BATTLE,
            action=Action.debuff(0, min(33 * n, 100)),
            target=TargetSelector(Target.ENEMY, Position.BY_CONDITION, condition=Condition.HEALTHIEST),
        )
    ],
    description="Start of battle: reduce the highest health enemy's health by 33%.",
)

# ============================================================================
# Tier 5
# ============================================================================

RHINO = PetDefinition(
    name="Rhino",
    tier=5,
    attack=5,
    health=8,
    effects=lambda n: [
        Effect(
            trigger=EventKind.KNOCKOUT,
            action=Action.damage(4 * n),
            target=TargetSelector(Target.ENEMY, Position.FIRST),
        )
    ],
    description="Knock out: deal 4 damage to the first enemy.",
)

TURKEY = PetDefinition(
    name="Turkey",
    tier=5,
    attack=3,
    health=4,
    effects=lambda n: [
        Effect(
            trigger=EventKind.SUMMONED,
            action=Action.add(3 * n, 3 * n),
            target=TargetSelector(Target.FRIEND, Position.TRIGGER_AFFECTED),
            scope=TriggerScope.FRIEND,
        )
    ],
    description="Friend summoned: give it +3/+3.",
)

# ============================================================================
# Tier 6
# ============================================================================

BOAR = PetDefinition(
    name="Boar",
    tier=6,
    attack=8,
    health=6,
    effects=lambda n: [on_self(EventKind.BEFORE_ATTACK, Action.add(4 * n, 2 * n))],
    description="Before attack: gain +4/+2.",
)

GORILLA = PetDefinition(
    name="Gorilla",
    tier=6,
    attack=6,
    health=9,
    effects=lambda n: [on_self(EventKind.HURT, Action.gain("Coconut"), uses=n)],
    description="Hurt: gain a Coconut. Works once.",
)

# ============================================================================
# Tokens
# ============================================================================

ZOMBIE_CRICKET = PetDefinition(name="Zombie Cricket", tier=1, attack=1, health=1, token=True)
DIRTY_RAT = PetDefinition(name="Dirty Rat", tier=1, attack=1, health=1, token=True)
RAM = PetDefinition(name="Ram", tier=1, attack=2, health=2, token=True)
BUS = PetDefinition(name="Bus", tier=1, attack=5, health=5, token=True)
BEE = PetDefinition(name="Bee", tier=1, attack=1, health=1, token=True)


ALL_PETS = [
    ANT, BEAVER, CRICKET, DUCK, FISH, HORSE, MOSQUITO, OTTER, PIG,
    FLAMINGO, HEDGEHOG, KANGAROO, PEACOCK, RAT, SWAN,
    BLOWFISH, CAMEL, DOLPHIN, ELEPHANT, SHEEP,
    DEER, HIPPO, SKUNK,
    RHINO, TURKEY,
    BOAR, GORILLA,
    ZOMBIE_CRICKET, DIRTY_RAT, RAM, BUS, BEE,
]


def get_all_pet_definitions() -> list[PetDefinition]:
    """Get all built-in pet definitions."""
    return list(ALL_PETS)


def get_pet_by_name(name: str) -> PetDefinition | None:
    """Get a built-in pet definition by name."""
    for pet in ALL_PETS:
        if pet.name == name:
            return pet
    return None
