"""
Tests for the event engine.

Tests:
- Dispatch order (side first, then position)
- Breadth-first queue processing
- Idempotent faint
- Cascade limit
- Target selection
- Summons, held items and shop-less actions
"""

import pytest

from ..config import EngineConfig
from ..engine_core.action import Action
from ..engine_core.effect import (
    Condition,
    Effect,
    EventKind,
    Position,
    Side,
    Target,
    TargetSelector,
    TriggerScope,
)
from ..engine_core.engine import EngineState, EventEngine
from ..engine_core.pet import Pet
from ..engine_core.roster import Roster
from ..engine_core.stats import Statistics
from ..errors import CascadeLimitExceeded


def watcher(name="Watcher"):
    """Pet that reacts to any pet being hurt."""
    return Pet.custom(name, 1, 5, effects=[
        Effect(trigger=EventKind.HURT, action=Action.add(1, 0), scope=TriggerScope.ANY),
    ])


def make_engine(team, opponent=None, config=None):
    rosters = {Side.TEAM: team, Side.OPPONENT: opponent if opponent is not None else Roster()}
    return EventEngine(rosters=rosters, config=config or EngineConfig())


class TestDispatchOrder:
    """Effects run side first, then front to back."""

    def test_team_event_team_first(self):
        team = Roster([watcher(), watcher()])
        opponent = Roster([watcher()])
        engine = make_engine(team, opponent)

        event = engine.make_event(EventKind.HURT, side=Side.TEAM, afflicted=team.first())
        order = [(t.side, t.owner.position) for t in engine.collect(event)]

        assert order == [(Side.TEAM, 0), (Side.TEAM, 1), (Side.OPPONENT, 0)]

    def test_event_side_goes_first(self):
        team = Roster([watcher(), watcher()])
        opponent = Roster([watcher()])
        engine = make_engine(team, opponent)

        event = engine.make_event(EventKind.HURT, side=Side.OPPONENT, afflicted=opponent.first())
        order = [(t.side, t.owner.position) for t in engine.collect(event)]

        assert order == [(Side.OPPONENT, 0), (Side.TEAM, 0), (Side.TEAM, 1)]

    def test_sideless_event_reaches_team_first(self, make_roster):
        team = make_roster("Mosquito", "Mosquito")
        opponent = make_roster("Mosquito")
        engine = make_engine(team, opponent)

        event = engine.make_event(EventKind.START_OF_BATTLE)
        order = [(t.side, t.owner.position) for t in engine.collect(event)]

        assert order == [(Side.TEAM, 0), (Side.TEAM, 1), (Side.OPPONENT, 0)]

    def test_breadth_first(self):
        """Events produced by effects wait behind already queued events."""
        striker = Pet.custom("Striker", 1, 5, effects=[
            Effect(
                trigger=EventKind.TURN_START,
                action=Action.damage(1),
                target=TargetSelector(Target.ENEMY, Position.FIRST),
            ),
        ])
        engine = make_engine(Roster([striker]), Roster([Pet.custom("Dummy", 1, 5)]))

        engine.emit(engine.make_event(EventKind.TURN_START))
        engine.emit(engine.make_event(EventKind.END_OF_TURN))
        processed = engine.drain()

        kinds = [e.kind for e in engine.log.events()]
        assert kinds == [EventKind.TURN_START, EventKind.END_OF_TURN, EventKind.HURT]
        assert processed == 3
        assert engine.state == EngineState.IDLE


class TestFaint:
    """Faint is emitted exactly once per pet."""

    def test_check_faint_is_idempotent(self, make_roster):
        team = make_roster("Ant")
        engine = make_engine(team)
        ant = team.first()
        ant.stats.subtract(Statistics(0, 1))

        assert engine.check_faint(Side.TEAM, ant)
        assert not engine.check_faint(Side.TEAM, ant)
        assert len(engine.queue) == 1

    def test_living_pet_does_not_faint(self, make_roster):
        team = make_roster("Ant")
        engine = make_engine(team)
        assert not engine.check_faint(Side.TEAM, team.first())

    def test_same_id_on_both_sides(self, make_roster):
        """Pet ids only need to be unique per side."""
        team, opponent = make_roster("Ant"), make_roster("Ant")
        engine = make_engine(team, opponent)
        for roster in (team, opponent):
            roster.first().stats.subtract(Statistics(0, 1))

        assert engine.check_faint(Side.TEAM, team.first())
        assert engine.check_faint(Side.OPPONENT, opponent.first())

    def test_hedgehog_chain(self, make_roster):
        team = make_roster("Hedgehog", "Ant")
        opponent = make_roster("Ant")
        engine = make_engine(team, opponent)
        hedgehog = team.first()
        hedgehog.stats.subtract(Statistics(0, 10))

        engine.check_faint(Side.TEAM, hedgehog)
        engine.drain()

        faints = engine.log.events(EventKind.FAINT)
        assert len(faints) == 3
        assert len({(e.side, e.afflicted_id) for e in faints}) == 3


class TestCascadeLimit:
    """Runaway effect chains are cut off."""

    def pusher(self):
        return Pet.custom("Pusher", 1, 5, effects=[
            Effect(
                trigger=EventKind.PUSHED,
                action=Action.push(1),
                target=TargetSelector(Target.FRIEND, Position.FIRST),
                scope=TriggerScope.ANY,
            ),
        ])

    def test_limit_raises_with_partial_log(self):
        team = Roster([self.pusher(), self.pusher()])
        engine = make_engine(team, config=EngineConfig(cascade_limit=50))

        engine.emit(engine.make_event(EventKind.PUSHED, side=Side.TEAM, afflicted=team.first()))
        with pytest.raises(CascadeLimitExceeded) as exc:
            engine.drain()

        assert exc.value.limit == 50
        assert exc.value.log is engine.log
        assert len(exc.value.log) == 50
        assert engine.state == EngineState.HALTED

    def test_halted_engine_refuses_to_drain(self):
        team = Roster([self.pusher(), self.pusher()])
        engine = make_engine(team, config=EngineConfig(cascade_limit=10))
        engine.emit(engine.make_event(EventKind.PUSHED, side=Side.TEAM, afflicted=team.first()))
        with pytest.raises(CascadeLimitExceeded):
            engine.drain()
        with pytest.raises(CascadeLimitExceeded):
            engine.drain()


class TestTargetSelection:
    """Selectors resolve against live roster state."""

    @pytest.fixture
    def line(self):
        pets = [Pet.custom(name, 1, hp) for name, hp in zip("ABCDE", (3, 5, 9, 5, 1))]
        team = Roster(pets, seed=11)
        opponent = Roster([Pet.custom(n, 1, 1) for n in "VWXYZ"], seed=12)
        return make_engine(team, opponent), team, opponent

    def names(self, targets):
        return [pet.name for _, pet in targets]

    def resolve(self, engine, owner, selector):
        return engine.resolve_targets(selector, owner, Side.TEAM, engine.make_event(EventKind.TURN_START))

    def test_relative_positions(self, line):
        engine, team, _ = line
        owner = team.nth(2)
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.BEHIND, n=2))) == ["D", "E"]
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.AHEAD, n=2))) == ["B", "A"]
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.ADJACENT))) == ["B", "D"]

    def test_absolute_positions(self, line):
        engine, team, _ = line
        owner = team.nth(2)
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.FIRST))) == ["A"]
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.LAST))) == ["E"]
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.FRIEND, Position.EXACT, index=3))) == ["D"]
        assert self.names(self.resolve(engine, owner, TargetSelector(Target.ENEMY, Position.OPPOSITE))) == ["X"]

    def test_all_excludes_owner(self, line):
        engine, team, _ = line
        targets = self.resolve(engine, team.nth(2), TargetSelector(Target.FRIEND, Position.ALL))
        assert self.names(targets) == ["A", "B", "D", "E"]

    def test_either_lists_friends_then_enemies(self, line):
        engine, team, _ = line
        targets = self.resolve(engine, team.nth(0), TargetSelector(Target.EITHER, Position.ALL))
        assert self.names(targets) == ["B", "C", "D", "E", "V", "W", "X", "Y", "Z"]
        assert targets[4][0] == Side.OPPONENT

    def test_condition_ties_go_to_front(self, line):
        engine, team, _ = line
        owner = team.nth(2)
        healthiest = TargetSelector(Target.FRIEND, Position.BY_CONDITION, condition=Condition.HEALTHIEST)
        illest = TargetSelector(Target.FRIEND, Position.BY_CONDITION, condition=Condition.ILLEST)
        assert self.names(self.resolve(engine, owner, healthiest)) == ["B"]
        assert self.names(self.resolve(engine, owner, illest)) == ["E"]

    def test_random_is_seeded_and_excludes_owner(self):
        def picks():
            team = Roster([Pet.custom(n, 1, 1) for n in "ABCDE"], seed=5)
            engine = make_engine(team)
            selector = TargetSelector(Target.FRIEND, Position.ANY, n=2)
            return [p.name for _, p in self.resolve(engine, team.nth(0), selector)]

        first = picks()
        assert first == picks()
        assert len(first) == 2
        assert "A" not in first

    def test_dead_pets_are_skipped(self, line):
        engine, team, _ = line
        team.nth(1).stats.subtract(Statistics(0, 50))
        targets = self.resolve(engine, team.nth(2), TargetSelector(Target.FRIEND, Position.AHEAD))
        assert self.names(targets) == ["A"]

    def test_shop_target_resolves_to_nothing(self, line):
        engine, team, _ = line
        assert self.resolve(engine, team.nth(0), TargetSelector(Target.SHOP, Position.ALL)) == []

    def test_retaliation_hits_attacker_with_same_id(self):
        thorn = Pet.custom("Thorn", 1, 10, effects=[
            Effect(
                trigger=EventKind.HURT,
                action=Action.damage(3),
                target=TargetSelector(Target.ENEMY, Position.TRIGGER_AFFLICTING),
            ),
        ])
        attacker = Pet.custom("Thorn", 1, 20)
        engine = make_engine(Roster([thorn]), Roster([attacker]))
        assert thorn.id == attacker.id

        engine.attack()
        engine.drain()

        hits = [r for entry in engine.log for r in entry.results if r.action == "remove"]
        assert len(hits) == 1
        assert hits[0].before["health"] == 19
        assert attacker.stats == (1, 16)
        assert thorn.stats == (1, 9)

    def test_afflicting_source_side_must_match_target(self):
        team = Roster([Pet.custom("A", 1, 5)])
        opponent = Roster([Pet.custom("A", 1, 5)])
        engine = make_engine(team, opponent)
        event = engine.make_event(
            EventKind.HURT, side=Side.TEAM, afflicted=team.first(),
            source=opponent.first(), source_side=Side.OPPONENT,
        )
        owner = team.first()

        enemy = engine.resolve_targets(TargetSelector(Target.ENEMY, Position.TRIGGER_AFFLICTING), owner, Side.TEAM, event)
        friend = engine.resolve_targets(TargetSelector(Target.FRIEND, Position.TRIGGER_AFFLICTING), owner, Side.TEAM, event)

        assert enemy == [(Side.OPPONENT, opponent.first())]
        assert friend == []
        assert event.to_dict()["source_side"] == "opponent"


class TestActions:
    """Action handlers applied through the queue."""

    def test_cricket_summons_in_place(self, make_roster):
        team = make_roster("Cricket", "Horse")
        engine = make_engine(team)
        cricket = team.first()
        cricket.stats.subtract(Statistics(0, 2))

        engine.check_faint(Side.TEAM, cricket)
        engine.drain()
        team.clear_fainted()

        assert [p.name for p in team] == ["Zombie Cricket", "Horse"]
        # Horse gives summoned friends +1 attack
        assert team.first().stats == (2, 1)
        assert cricket in team.fainted

    def test_indirect_damage_uses_defensive_items(self, make_pet):
        striker = Pet.custom("Striker", 1, 5, effects=[
            Effect(
                trigger=EventKind.TURN_START,
                action=Action.damage(3),
                target=TargetSelector(Target.ENEMY, Position.ALL),
            ),
        ])
        garlic_fish = make_pet("Fish", item="Garlic")
        melon_fish = make_pet("Fish", item="Melon")
        engine = make_engine(Roster([striker]), Roster([garlic_fish, melon_fish]))

        engine.emit(engine.make_event(EventKind.TURN_START))
        engine.drain()

        assert garlic_fish.stats == (2, 1)
        assert melon_fish.stats == (2, 2)
        assert melon_fish.item.effect.is_spent

    def test_area_damage_faints_every_enemy(self):
        striker = Pet.custom("Striker", 1, 5, effects=[
            Effect(
                trigger=EventKind.START_OF_BATTLE,
                action=Action.damage(5),
                target=TargetSelector(Target.ENEMY, Position.ALL),
            ),
        ])
        opponent = Roster([Pet.custom("Ant", 1, 1, pet_id="Ant_2"), Pet.custom("Ant", 1, 1)])
        engine = make_engine(Roster([striker]), opponent)

        engine.emit(engine.make_event(EventKind.START_OF_BATTLE))
        engine.drain()

        faints = engine.log.events(EventKind.FAINT)
        assert len(faints) == 2
        assert {e.afflicted_id for e in faints} == {"Ant_2", "Ant_3"}

    def test_only_damaging_actions_check_faint(self):
        assert Action.damage(1).can_faint
        assert Action.debuff(50, 50).can_faint
        assert Action.swap().can_faint
        assert not Action.add(1, 1).can_faint
        assert not Action.gain("Garlic").can_faint
        assert Action.multiple(Action.add(1, 1), Action.kill()).can_faint
        assert not Action.multiple(Action.push(1), Action.experience()).can_faint

    def test_held_items_are_not_dispatched(self, make_roster, make_pet):
        team = Roster([make_pet("Fish", item="Peanut")])
        engine = make_engine(team)
        event = engine.make_event(EventKind.DAMAGE, side=Side.TEAM, afflicted=team.first())
        assert engine.collect(event) == []

    def test_shop_actions_without_shop_are_noops(self, make_roster):
        team = make_roster("Swan")
        engine = make_engine(team)
        engine.emit(engine.make_event(EventKind.SHOP_OPEN, side=Side.TEAM))
        engine.drain()
        assert engine.log.entries[0].results == []

    def test_experience_levels_up(self, make_roster):
        team = make_roster("Ant", "Fish")
        trainer = Pet.custom("Trainer", 1, 5, effects=[
            Effect(
                trigger=EventKind.TURN_START,
                action=Action.experience(2),
                target=TargetSelector(Target.FRIEND, Position.LAST),
            ),
        ])
        team.insert(trainer, 0)
        engine = make_engine(team)

        engine.emit(engine.make_event(EventKind.TURN_START))
        engine.drain()

        fish = team.last()
        assert fish.level == 2
        assert fish.stats == (4, 4)
        assert len(engine.log.events(EventKind.LEVELUP)) == 1


class TestAttack:
    """Simultaneous exchange between front pets."""

    def test_attack_queues_damage_then_outcomes(self, make_roster):
        team, opponent = make_roster("Ant"), make_roster("Hippo")
        engine = make_engine(team, opponent)

        assert engine.attack()

        kinds = [e.kind for e in engine.queue]
        assert kinds == [
            EventKind.DAMAGE,
            EventKind.DAMAGE,
            EventKind.HURT,
            EventKind.FAINT,
            EventKind.KNOCKOUT,
        ]
        assert team.first().stats.health == 0
        assert opponent.first().stats.health == 5

    def test_attack_needs_both_fronts(self, make_roster):
        engine = make_engine(make_roster("Ant"), Roster())
        assert not engine.attack()
