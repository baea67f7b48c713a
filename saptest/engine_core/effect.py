"""
Effects - Trigger subscriptions attached to pets and held items.

An Effect says: when an event of ``trigger`` kind happens to someone in
``scope`` (relative to the owner), run ``action`` against the pets that
``target`` selects. Effects are plain data; the EventEngine matches and
executes them.

Targets are always resolved at execution time by looking pets up in the
rosters. An effect never holds a reference to another pet.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from .action import Action, PASSIVE_KINDS

if TYPE_CHECKING:
    from .event import Event


class Side(Enum):
    """The two rosters in a battle. Shop turns only use TEAM."""
    TEAM = "team"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.TEAM else Side.TEAM


class EventKind(Enum):
    """Categories of game events effects can subscribe to."""
    # Battle
    START_OF_BATTLE = "start_of_battle"
    TURN_START = "turn_start"
    BEFORE_ATTACK = "before_attack"
    DAMAGE = "damage"
    HURT = "hurt"
    FAINT = "faint"
    KNOCKOUT = "knockout"
    AFTER_ATTACK = "after_attack"
    END_OF_TURN = "end_of_turn"
    END_OF_BATTLE = "end_of_battle"

    # Roster changes
    SUMMONED = "summoned"
    PUSHED = "pushed"
    LEVELUP = "levelup"
    GAIN_ITEM = "gain_item"

    # Shop
    SHOP_OPEN = "shop_open"
    SHOP_CLOSE = "shop_close"
    ROLL = "roll"
    BUY_PET = "buy_pet"
    BUY_FOOD = "buy_food"
    ATE_FOOD = "ate_food"
    SELL = "sell"

    # Toys
    TOY_BREAK = "toy_break"


class TriggerScope(Enum):
    """Whose events an effect reacts to, relative to its owner."""
    SELF = "self"
    FRIEND = "friend"  # Another pet on the owner's side
    FRIEND_AHEAD = "friend_ahead"  # The pet directly ahead of the owner
    ENEMY = "enemy"
    ANY = "any"


class OwnerKind(Enum):
    PET = "pet"
    FOOD = "food"
    TOY = "toy"  # Team-attached; acts through the front pet


class Target(Enum):
    """Which side(s) a selector looks at, relative to the owner."""
    FRIEND = "friend"
    ENEMY = "enemy"
    EITHER = "either"
    SHOP = "shop"
    NONE = "none"


class Position(Enum):
    """How a selector picks pets on the chosen side(s)."""
    NONE = "none"
    ON_SELF = "on_self"
    AHEAD = "ahead"  # n pets directly ahead of the owner
    BEHIND = "behind"  # n pets directly behind the owner
    ADJACENT = "adjacent"
    ALL = "all"
    ANY = "any"  # n random pets
    FIRST = "first"  # n front-most pets
    LAST = "last"  # n rear-most pets, rearmost first
    EXACT = "exact"  # Slot ``index``
    OPPOSITE = "opposite"  # Enemy in the owner's slot
    TRIGGER_AFFECTED = "trigger_affected"
    TRIGGER_AFFLICTING = "trigger_afflicting"
    BY_CONDITION = "by_condition"


class Condition(Enum):
    """Ranking used by Position.BY_CONDITION. Ties go to the frontmost pet."""
    HEALTHIEST = "healthiest"
    ILLEST = "illest"
    STRONGEST = "strongest"
    WEAKEST = "weakest"
    HIGHEST_TIER = "highest_tier"
    LOWEST_TIER = "lowest_tier"


@dataclass(frozen=True)
class TargetSelector:
    """
    Selects targets for an effect's action.

    Examples:
    - TargetSelector(Target.FRIEND, Position.ON_SELF)
    - TargetSelector(Target.ENEMY, Position.ANY, n=2)
    - TargetSelector(Target.ENEMY, Position.BY_CONDITION, condition=Condition.ILLEST)
    """
    target: Target = Target.FRIEND
    position: Position = Position.ON_SELF
    n: int = 1
    index: int | None = None
    condition: Condition | None = None
    exclude_self: bool = True  # For FRIEND ALL/ANY/BY_CONDITION


@dataclass
class Effect:
    """
    A trigger -> target -> action subscription.

    ``uses`` of None means unlimited. An effect at 0 uses is inert and gets
    pruned at the owner's next cleanup. Temporary effects are dropped when
    the battle or shop turn that created them ends.
    """
    trigger: EventKind
    action: Action
    target: TargetSelector = field(default_factory=TargetSelector)
    scope: TriggerScope = TriggerScope.SELF
    uses: int | None = None
    temporary: bool = False
    owner_kind: OwnerKind = OwnerKind.PET
    passive: bool = False  # Read by combat math, never dispatched
    name: str = ""

    @property
    def is_spent(self) -> bool:
        return self.uses is not None and self.uses <= 0

    @property
    def is_passive(self) -> bool:
        return self.passive or self.action.kind in PASSIVE_KINDS

    def consume(self, n: int = 1) -> None:
        """Use up ``n`` uses. Never goes below 0."""
        if self.uses is not None:
            self.uses = max(0, self.uses - n)

    def copy(self) -> Effect:
        return replace(self)

    def matches(
        self,
        event: Event,
        owner_id: str,
        owner_side: Side,
        owner_position: int | None,
    ) -> bool:
        """Whether this effect, owned as described, reacts to ``event``."""
        if self.trigger != event.kind or self.is_spent:
            return False

        # Side-less and pet-less events reach every subscriber.
        if event.afflicted_id is None:
            if event.side is None:
                return True
            return self.scope == TriggerScope.ANY or event.side == owner_side

        same_side = event.side == owner_side
        is_self = same_side and event.afflicted_id == owner_id

        if self.scope == TriggerScope.SELF:
            return is_self
        if self.scope == TriggerScope.FRIEND:
            return same_side and not is_self
        if self.scope == TriggerScope.FRIEND_AHEAD:
            return (
                same_side
                and not is_self
                and owner_position is not None
                and event.afflicted_position == owner_position - 1
            )
        if self.scope == TriggerScope.ENEMY:
            return event.side is not None and not same_side
        return True

    def describe(self) -> str:
        return f"{self.trigger.value} ({self.scope.value}) -> {self.action.describe()}"


# ============================================================================
# Factory functions for common effect patterns
# ============================================================================

def on_self(trigger: EventKind, action: Action, uses: int | None = None) -> Effect:
    """Effect that reacts to the owner's own events and targets the owner."""
    return Effect(
        trigger=trigger,
        action=action,
        target=TargetSelector(Target.FRIEND, Position.ON_SELF),
        uses=uses,
    )


def random_friends(trigger: EventKind, action: Action, n: int = 1, scope: TriggerScope = TriggerScope.SELF) -> Effect:
    return Effect(
        trigger=trigger,
        action=action,
        target=TargetSelector(Target.FRIEND, Position.ANY, n=n),
        scope=scope,
    )


def random_enemies(trigger: EventKind, action: Action, n: int = 1, scope: TriggerScope = TriggerScope.SELF) -> Effect:
    return Effect(
        trigger=trigger,
        action=action,
        target=TargetSelector(Target.ENEMY, Position.ANY, n=n),
        scope=scope,
    )


def held_item(action: Action, trigger: EventKind = EventKind.DAMAGE, uses: int | None = None) -> Effect:
    """Passive modifier effect carried by a held food."""
    return Effect(
        trigger=trigger,
        action=action,
        target=TargetSelector(Target.FRIEND, Position.ON_SELF),
        uses=uses,
        owner_kind=OwnerKind.FOOD,
        passive=True,
    )


def toy_effect(
    trigger: EventKind,
    action: Action,
    target: TargetSelector,
    scope: TriggerScope = TriggerScope.FRIEND,
) -> Effect:
    """Effect carried by a roster's toy. Toy targets never skip the front pet."""
    return Effect(
        trigger=trigger,
        action=action,
        target=replace(target, exclude_self=False),
        scope=scope,
        owner_kind=OwnerKind.TOY,
    )
