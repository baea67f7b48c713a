"""
Event Engine - Breadth-first trigger queue and action execution.

The engine is the single writer during a battle or shop operation:
1. Events go onto the back of one FIFO queue
2. drain() pops events until the queue is empty
3. For each event, matching effects are collected across both rosters,
   ordered by side (the event's own side first) then front-to-back, with
   each side's toy effects after its pets
4. Each effect resolves its targets and runs its action; any events the
   action produces go to the back of the queue (breadth-first)
5. A pet that drops to 0 health gets exactly one FAINT event per battle

A drain that processes more than ``cascade_limit`` events raises
CascadeLimitExceeded with the log so far. Target-level failures inside a
cascade (a target that is gone, a pet already at max level) are logged
and skipped for that target only.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING
import logging

from ..config import EngineConfig
from ..errors import CascadeLimitExceeded, SAPTestError
from .action import Action, ActionKind
from .effect import Condition, Effect, EventKind, Position, Side, Target, TargetSelector
from .event import ActionRecord, Event, EventLog, LogEntry
from .pet import Food, Pet, compute_exchange, indirect_damage
from .roster import Roster
from .stats import Statistics

if TYPE_CHECKING:
    from ..content.definitions import EntityProvider
    from .shop import Shop

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """State of the event engine."""
    IDLE = "idle"  # Queue empty
    RESOLVING = "resolving"  # Draining the queue
    HALTED = "halted"  # Cascade limit hit; engine unusable


SHOP_ACTIONS = frozenset({ActionKind.ALTER_GOLD, ActionKind.ADD_SHOP_STATS, ActionKind.FREE_ROLL})

_CONDITION_KEYS: dict[Condition, Callable[[Pet], int]] = {
    Condition.HEALTHIEST: lambda p: -p.stats.health,
    Condition.ILLEST: lambda p: p.stats.health,
    Condition.STRONGEST: lambda p: -p.stats.attack,
    Condition.WEAKEST: lambda p: p.stats.attack,
    Condition.HIGHEST_TIER: lambda p: -p.tier,
    Condition.LOWEST_TIER: lambda p: p.tier,
}


@dataclass
class TriggeredEffect:
    """An effect matched to an event, with its owner."""
    effect: Effect
    owner: Pet
    side: Side


@dataclass
class ActionContext:
    """Everything a handler needs to apply one action to one target."""
    action: Action
    owner: Pet
    owner_side: Side
    event: Event
    entry: LogEntry
    target: Pet | None = None
    target_side: Side | None = None


@dataclass
class EventEngine:
    """
    Dispatches events to effects for one battle or shop operation.

    Usage:
        engine = EventEngine(rosters={Side.TEAM: team, Side.OPPONENT: enemy})
        engine.emit(engine.make_event(EventKind.START_OF_BATTLE))
        engine.drain()
    """
    rosters: dict[Side, Roster]
    config: EngineConfig = field(default_factory=EngineConfig)
    log: EventLog = field(default_factory=EventLog)
    shop: Shop | None = None
    provider: EntityProvider | None = None
    state: EngineState = EngineState.IDLE
    turn_index: int = 0
    phase_index: int = 0
    queue: deque[Event] = field(default_factory=deque)
    fainted_ids: set[tuple[Side, str]] = field(default_factory=set)

    def __post_init__(self):
        self._handlers: dict[ActionKind, Callable[[ActionContext], None]] = {
            ActionKind.ADD: self._apply_add,
            ActionKind.REMOVE: self._apply_remove,
            ActionKind.DEBUFF: self._apply_debuff,
            ActionKind.SET: self._apply_set,
            ActionKind.SWAP: self._apply_swap,
            ActionKind.KILL: self._apply_kill,
            ActionKind.PUSH: self._apply_push,
            ActionKind.SUMMON: self._apply_summon,
            ActionKind.GAIN: self._apply_gain,
            ActionKind.EXPERIENCE: self._apply_experience,
            ActionKind.ALTER_GOLD: self._apply_alter_gold,
            ActionKind.ADD_SHOP_STATS: self._apply_add_shop_stats,
            ActionKind.FREE_ROLL: self._apply_free_roll,
        }

    # =========================================================================
    # Queue
    # =========================================================================

    def make_event(
        self,
        kind: EventKind,
        side: Side | None = None,
        afflicted: Pet | None = None,
        source: Pet | None = None,
        source_side: Side | None = None,
        **payload: Any,
    ) -> Event:
        """Build an event stamped with the current turn and phase."""
        return Event(
            kind=kind,
            phase_index=self.phase_index,
            turn_index=self.turn_index,
            side=side,
            source_id=source.id if source else None,
            source_side=source_side if source else None,
            source_position=source.position if source else None,
            afflicted_id=afflicted.id if afflicted else None,
            afflicted_position=afflicted.position if afflicted else None,
            payload=payload,
        )

    def emit(self, event: Event) -> None:
        """Append an event to the back of the queue."""
        self.queue.append(event)

    def drain(self) -> int:
        """
        Process queued events until the queue is empty.

        Returns the number of events processed.
        """
        if self.state == EngineState.HALTED:
            raise CascadeLimitExceeded(self.config.cascade_limit, self.log)

        processed = 0
        self.state = EngineState.RESOLVING
        while self.queue:
            event = self.queue.popleft()
            processed += 1
            if processed > self.config.cascade_limit:
                self.state = EngineState.HALTED
                self.queue.clear()
                logger.error("Cascade limit %d exceeded at %s", self.config.cascade_limit, event.kind.value)
                raise CascadeLimitExceeded(self.config.cascade_limit, self.log)
            self.process(event)

        self.state = EngineState.IDLE
        return processed

    def process(self, event: Event) -> LogEntry:
        """Log one event and run every effect it triggers."""
        entry = self.log.record(event)
        triggered = self.collect(event)
        logger.debug(
            "turn %d phase %d: %s on %s -> %d effect(s)",
            event.turn_index, event.phase_index, event.kind.value,
            event.afflicted_id or event.side, len(triggered),
        )
        for item in triggered:
            if item.effect.is_spent:
                continue
            self.run_effect(item.effect, item.owner, item.side, event, entry)
        return entry

    def collect(self, event: Event) -> list[TriggeredEffect]:
        """Effects matching ``event``: event's side first, then front to back."""
        if event.side is None:
            order = [Side.TEAM, Side.OPPONENT]
        else:
            order = [event.side, event.side.other]

        triggered = []
        for side in order:
            roster = self.rosters.get(side)
            if roster is None:
                continue
            candidates = list(roster)
            if event.afflicted_id is not None and event.side == side:
                afflicted = roster.find(event.afflicted_id)
                if afflicted is not None and not roster.in_slots(afflicted):
                    candidates.append(afflicted)
            candidates.sort(key=lambda p: p.position if p.position is not None else roster.capacity)

            for pet in candidates:
                is_afflicted = event.side == side and pet.id == event.afflicted_id
                # Fainted and departed pets only answer their own events.
                if not is_afflicted and (not pet.is_alive or not roster.in_slots(pet)):
                    continue
                for effect in pet.all_effects():
                    if effect.is_passive:
                        continue
                    if effect.matches(event, pet.id, side, pet.position):
                        triggered.append(TriggeredEffect(effect, pet, side))
            triggered.extend(self._collect_toys(event, roster, side))
        return triggered

    def _collect_toys(self, event: Event, roster: Roster, side: Side) -> list[TriggeredEffect]:
        """Toy effects on one side. Toys act through the front pet and need one."""
        owner = roster.first()
        if owner is None:
            return []
        triggered = []
        for toy in roster.toys:
            breaking = event.kind == EventKind.TOY_BREAK and event.payload.get("toy_id") == toy.id
            if toy.is_broken and not breaking:
                continue
            for effect in toy.effects:
                if effect.trigger == EventKind.TOY_BREAK and not breaking:
                    continue
                if effect.matches(event, owner.id, side, owner.position):
                    triggered.append(TriggeredEffect(effect, owner, side))
        return triggered

    # =========================================================================
    # Effect execution
    # =========================================================================

    def run_effect(
        self,
        effect: Effect,
        owner: Pet,
        side: Side,
        event: Event,
        entry: LogEntry | None = None,
    ) -> list[tuple[Side, Pet]]:
        """
        Resolve targets and execute ``effect`` once, consuming one use.

        Returns the resolved targets.
        """
        if entry is None:
            entry = self.log.record(event)
        include_fainted = _summons(effect.action)
        targets = self.resolve_targets(effect.target, owner, side, event, include_fainted)
        self._execute(effect.action, owner, side, targets, event, entry)
        effect.consume()
        return targets

    def _execute(
        self,
        action: Action,
        owner: Pet,
        side: Side,
        targets: list[tuple[Side, Pet]],
        event: Event,
        entry: LogEntry,
    ) -> None:
        if action.kind == ActionKind.MULTIPLE:
            for inner in action.actions:
                self._execute(inner, owner, side, targets, event, entry)
            return
        handler = self._handlers.get(action.kind)
        if handler is None:
            return

        if action.kind in SHOP_ACTIONS:
            handler(ActionContext(action, owner, side, event, entry))
            return

        for target_side, target in targets:
            roster = self.rosters[target_side]
            present = roster.find(target.id) is target
            if not present or (not target.is_alive and action.kind != ActionKind.SUMMON):
                logger.debug("Skipping %s on departed target %s", action.kind.value, target.id)
                continue
            try:
                handler(ActionContext(action, owner, side, event, entry, target, target_side))
            except SAPTestError as e:
                logger.warning("Skipping %s on %s: %s", action.kind.value, target.id, e.message)
                continue
            if action.can_faint:
                self.check_faint(target_side, target, source=owner, source_side=side)

    def check_faint(
        self,
        side: Side,
        pet: Pet,
        source: Pet | None = None,
        source_side: Side | None = None,
    ) -> bool:
        """Queue a FAINT for ``pet`` if it is at 0 health and has not fainted yet."""
        key = (side, pet.id)
        if pet.is_alive or key in self.fainted_ids:
            return False
        self.fainted_ids.add(key)
        self.emit(self.make_event(
            EventKind.FAINT, side=side, afflicted=pet, source=source, source_side=source_side,
        ))
        return True

    # =========================================================================
    # Target resolution
    # =========================================================================

    def resolve_targets(
        self,
        selector: TargetSelector,
        owner: Pet,
        side: Side,
        event: Event,
        include_fainted: bool = False,
    ) -> list[tuple[Side, Pet]]:
        """Pets ``selector`` picks for an effect owned by ``owner`` on ``side``."""
        position = selector.position
        if selector.target in (Target.SHOP, Target.NONE) or position == Position.NONE:
            return []

        if position == Position.ON_SELF:
            return [(side, owner)] if owner.is_alive or include_fainted else []

        if position in (Position.TRIGGER_AFFECTED, Position.TRIGGER_AFFLICTING):
            pet_id, pet_side = event.afflicted_id, event.side
            if position == Position.TRIGGER_AFFLICTING:
                pet_id = event.source_id
                pet_side = event.source_side or self._side_of_id(event.source_id, event.side)
            if pet_id is None or pet_side not in self.rosters:
                return []
            if selector.target == Target.FRIEND and pet_side != side:
                return []
            if selector.target == Target.ENEMY and pet_side != side.other:
                return []
            pet = self.rosters[pet_side].find(pet_id)
            if pet is None or not (pet.is_alive or include_fainted):
                return []
            return [(pet_side, pet)]

        if position in (Position.AHEAD, Position.BEHIND, Position.ADJACENT):
            return [(side, p) for p in self._relative(owner, side, position, selector.n)]

        if position == Position.OPPOSITE:
            enemy = self.rosters.get(side.other)
            if enemy is None or owner.position is None:
                return []
            pet = enemy.slots[owner.position] if owner.position < enemy.capacity else None
            return [(side.other, pet)] if pet is not None and pet.is_alive else []

        sides = {
            Target.FRIEND: [side],
            Target.ENEMY: [side.other],
            Target.EITHER: [side, side.other],
        }[selector.target]

        if position in (Position.FIRST, Position.LAST, Position.EXACT):
            picked = []
            for s in sides:
                roster = self.rosters.get(s)
                if roster is None:
                    continue
                if position == Position.EXACT:
                    pet = roster.slots[selector.index] if 0 <= (selector.index or 0) < roster.capacity else None
                    if pet is not None and pet.is_alive:
                        picked.append((s, pet))
                    continue
                living = roster.living()
                if position == Position.LAST:
                    living.reverse()
                picked.extend((s, pet) for pet in living[:selector.n])
            return picked

        pool = []
        for s in sides:
            roster = self.rosters.get(s)
            if roster is None:
                continue
            for pet in roster.living():
                if s == side and selector.exclude_self and pet is owner:
                    continue
                pool.append((s, pet))

        if position == Position.ALL:
            return pool
        if position == Position.ANY:
            if not pool:
                return []
            rng = self.rosters[side].rng if side in self.rosters else None
            k = min(selector.n, len(pool))
            return rng.sample(pool, k) if rng is not None else pool[:k]
        if position == Position.BY_CONDITION:
            key = _CONDITION_KEYS[selector.condition or Condition.HEALTHIEST]
            return sorted(pool, key=lambda item: key(item[1]))[:selector.n]
        return []

    def _relative(self, owner: Pet, side: Side, position: Position, n: int) -> list[Pet]:
        roster = self.rosters.get(side)
        if roster is None or owner.position is None:
            return []
        living = [p for p in roster.living() if p is not owner]
        ahead = [p for p in living if p.position < owner.position][::-1]
        behind = [p for p in living if p.position > owner.position]
        if position == Position.AHEAD:
            return ahead[:n]
        if position == Position.BEHIND:
            return behind[:n]
        return ahead[:1] + behind[:1]

    def _side_of_id(self, pet_id: str | None, hint: Side | None) -> Side | None:
        if pet_id is None:
            return None
        order = [hint, hint.other] if hint else [Side.TEAM, Side.OPPONENT]
        for side in order:
            roster = self.rosters.get(side)
            if roster is not None and roster.find(pet_id) is not None:
                return side
        return None

    # =========================================================================
    # Combat
    # =========================================================================

    def attack(self, team_pet: Pet | None = None, opp_pet: Pet | None = None) -> bool:
        """
        Two pets (the front pets by default) hit each other simultaneously.

        Damage comes from a snapshot taken before either hit lands. Queues
        DAMAGE for both hits, then HURT / FAINT / KNOCKOUT. Returns False
        if either side has no living pet.
        """
        team_roster = self.rosters[Side.TEAM]
        opp_roster = self.rosters[Side.OPPONENT]
        team_pet = team_pet or team_roster.first()
        opp_pet = opp_pet or opp_roster.first()
        if team_pet is None or opp_pet is None:
            return False

        exchange = compute_exchange(team_pet, opp_pet, self.config, team_roster.rng, opp_roster.rng)
        for pet in (team_pet, opp_pet):
            if pet.item is not None and pet.item.effect is not None and pet.item.effect.is_passive:
                pet.consume_item()

        self.emit(self.make_event(
            EventKind.DAMAGE, side=Side.OPPONENT, afflicted=opp_pet, source=team_pet, source_side=Side.TEAM,
            damage=exchange.damage_to_defender,
        ))
        self.emit(self.make_event(
            EventKind.DAMAGE, side=Side.TEAM, afflicted=team_pet, source=opp_pet, source_side=Side.OPPONENT,
            damage=exchange.damage_to_attacker,
        ))

        before = {Side.TEAM: team_pet.stats.health, Side.OPPONENT: opp_pet.stats.health}
        team_pet.stats.health = exchange.attacker_health
        opp_pet.stats.health = exchange.defender_health
        logger.debug(
            "%s hits %s for %d, takes %d",
            team_pet.id, opp_pet.id, exchange.damage_to_defender, exchange.damage_to_attacker,
        )

        pairs = ((Side.TEAM, team_pet, opp_pet), (Side.OPPONENT, opp_pet, team_pet))
        for side, pet, other in pairs:
            if pet.is_alive and pet.stats.health < before[side]:
                self.emit(self.make_event(
                    EventKind.HURT, side=side, afflicted=pet, source=other, source_side=side.other,
                    damage=before[side] - pet.stats.health,
                ))
        for side, pet, other in pairs:
            self.check_faint(side, pet, source=other, source_side=side.other)
        for side, pet, other in pairs:
            if pet.is_alive and not other.is_alive:
                self.emit(self.make_event(
                    EventKind.KNOCKOUT, side=side, afflicted=pet, source=other, source_side=side.other,
                ))
        return True

    # =========================================================================
    # Action handlers
    # =========================================================================

    def _record(self, ctx: ActionContext, before: Statistics | None, note: str = "") -> None:
        ctx.entry.results.append(ActionRecord(
            action=ctx.action.kind.value,
            owner_id=ctx.owner.id,
            target_id=ctx.target.id if ctx.target else None,
            before=before.to_dict() if before else None,
            after=ctx.target.stats.to_dict() if ctx.target else None,
            note=note,
        ))

    def _apply_add(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        ctx.target.stats.add(ctx.action.stats)
        self._record(ctx, before)

    def _apply_remove(self, ctx: ActionContext) -> None:
        target = ctx.target
        before = target.stats.copy()
        damage = indirect_damage(target, ctx.action.stats.attack, self.config)
        if target.item is not None and target.item.action_kind in (ActionKind.NEGATE, ActionKind.INVINCIBLE):
            target.consume_item()
        target.stats.subtract(Statistics(0, damage))
        self._record(ctx, before, note=f"damage {damage}")
        if target.is_alive and target.stats.health < before.health:
            self.emit(self.make_event(
                EventKind.HURT, side=ctx.target_side, afflicted=target,
                source=ctx.owner, source_side=ctx.owner_side,
                damage=before.health - target.stats.health,
            ))

    def _apply_debuff(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        ctx.target.stats.reduce_percent(ctx.action.stats)
        self._record(ctx, before)

    def _apply_set(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        ctx.target.stats.set(ctx.action.stats)
        self._record(ctx, before)

    def _apply_swap(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        if ctx.target is not ctx.owner:
            ctx.owner.stats.swap(ctx.target.stats)
        else:
            ctx.owner.stats.invert()
        self._record(ctx, before)
        self.check_faint(ctx.owner_side, ctx.owner, source=ctx.owner, source_side=ctx.owner_side)

    def _apply_kill(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        ctx.target.stats.subtract(Statistics(0, before.health))
        self._record(ctx, before)

    def _apply_push(self, ctx: ActionContext) -> None:
        roster = self.rosters[ctx.target_side]
        roster.compact()
        src = ctx.target.position
        dst = max(0, min(src + ctx.action.amount, len(roster) - 1))
        if dst == src:
            return
        roster.move(src, dst)
        self._record(ctx, None, note=f"moved {src} -> {dst}")
        self.emit(self.make_event(
            EventKind.PUSHED, side=ctx.target_side, afflicted=ctx.target,
            source=ctx.owner, source_side=ctx.owner_side,
        ))

    def _apply_summon(self, ctx: ActionContext) -> None:
        action = ctx.action
        anchor = ctx.target
        roster = self.rosters[ctx.target_side]
        attack = action.stats.attack if action.stats else None
        health = action.stats.health if action.stats else None

        if action.name is None:
            if ctx.owner.definition is not None:
                pet = Pet.from_definition(
                    ctx.owner.definition, level=ctx.owner.level,
                    attack=attack, health=health, config=self.config,
                )
            else:
                pet = Pet.custom(
                    ctx.owner.name, attack or 1, health or 1,
                    effects=ctx.owner.effects, config=self.config,
                )
        else:
            definition = self._provider().lookup_pet(action.name, action.level)
            pet = Pet.from_definition(
                definition, level=min(action.level, self.config.max_level),
                attack=attack, health=health, config=self.config,
            )

        index = anchor.position if anchor.position is not None else len(roster)
        if not roster.insert(pet, index):
            logger.info("No room to summon %s for %s", pet.name, roster.name)
            return
        ctx.entry.results.append(ActionRecord(
            action=action.kind.value,
            owner_id=ctx.owner.id,
            target_id=pet.id,
            after=pet.stats.to_dict(),
            note=f"summoned at {pet.position}",
        ))
        self.emit(self.make_event(
            EventKind.SUMMONED, side=ctx.target_side, afflicted=pet,
            source=ctx.owner, source_side=ctx.owner_side,
        ))

    def _apply_gain(self, ctx: ActionContext) -> None:
        food = Food.from_definition(self._provider().lookup_food(ctx.action.name))
        ctx.target.give_item(food)
        self._record(ctx, None, note=f"gained {food.name}")
        self.emit(self.make_event(
            EventKind.GAIN_ITEM, side=ctx.target_side, afflicted=ctx.target,
            source=ctx.owner, source_side=ctx.owner_side,
        ))

    def _apply_experience(self, ctx: ActionContext) -> None:
        before = ctx.target.stats.copy()
        levels = ctx.target.add_experience(ctx.action.amount, config=self.config)
        self._record(ctx, before, note=f"level {ctx.target.level}")
        for _ in range(levels):
            self.emit(self.make_event(EventKind.LEVELUP, side=ctx.target_side, afflicted=ctx.target))

    def _apply_alter_gold(self, ctx: ActionContext) -> None:
        if self.shop is None:
            return
        self.shop.coins = max(0, self.shop.coins + ctx.action.amount)
        self._record(ctx, None, note=f"coins {self.shop.coins}")

    def _apply_add_shop_stats(self, ctx: ActionContext) -> None:
        if self.shop is None:
            return
        self.shop.add_pet_stats(ctx.action.stats)
        self._record(ctx, None, note=f"shop pets +{ctx.action.stats}")

    def _apply_free_roll(self, ctx: ActionContext) -> None:
        if self.shop is None:
            return
        self.shop.free_rolls += ctx.action.amount
        self._record(ctx, None, note=f"free rolls {self.shop.free_rolls}")

    def _provider(self) -> EntityProvider:
        if self.provider is None:
            from ..content import default_provider
            self.provider = default_provider()
        return self.provider


def _summons(action: Action) -> bool:
    if action.kind == ActionKind.MULTIPLE:
        return any(_summons(a) for a in action.actions)
    return action.kind == ActionKind.SUMMON
