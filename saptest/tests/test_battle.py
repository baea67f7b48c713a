"""
Tests for battle orchestration.

Tests:
- Outcomes and turn counts
- Simultaneous damage and mutual kills
- Summons during battle
- Held items in combat
- Determinism and input isolation
- Error conditions
"""

import pytest

from ..config import EngineConfig
from ..engine_core.action import Action
from ..engine_core.battle import PHASE_ORDER, Battle, BattleOutcome, BattlePhase, fight
from ..engine_core.effect import Effect, EventKind, Position, Side, Target, TargetSelector, TriggerScope
from ..engine_core.pet import Pet
from ..engine_core.roster import Roster
from ..engine_core.shop import Shop
from ..errors import CascadeLimitExceeded, InvalidShopState


def team_damage(result):
    return [e.payload["damage"] for e in result.log.events(EventKind.DAMAGE) if e.side == Side.TEAM]


def check_log(log):
    """Each pet faints at most once and no logged stat goes below zero."""
    faints = [(e.side, e.afflicted_id) for e in log.events(EventKind.FAINT)]
    assert len(faints) == len(set(faints))
    for entry in log:
        for record in entry.results:
            for stats in (record.before, record.after):
                if stats is not None:
                    assert min(stats.values()) >= 0, record


class TestOutcomes:
    """Terminal states."""

    def test_ant_mirror_is_a_draw(self):
        result = fight(Roster([Pet.custom("Ant", 2, 1)]), Roster([Pet.custom("Ant", 2, 1)]))

        assert [e.payload["damage"] for e in result.log.events(EventKind.DAMAGE)] == [2, 2]
        assert len(result.log.events(EventKind.FAINT)) == 2
        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 1
        assert result.team.fainted[0].stats == (2, 0)

    def test_pack_ant_mirror_is_a_draw(self, make_roster):
        result = fight(make_roster("Ant"), make_roster("Ant"))

        damage = [e.payload["damage"] for e in result.log.events(EventKind.DAMAGE)]
        assert damage == [2, 2]
        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 1
        assert result.winner is None

    def test_hippo_wins_and_grows(self, make_roster):
        result = fight(make_roster("Hippo"), make_roster("Ant"))

        assert result.outcome == BattleOutcome.WIN
        assert result.winner == Side.TEAM
        assert result.n_turns == 1
        assert result.team.first().stats == (6, 7)

    def test_empty_team_loses_before_turn_one(self, make_roster):
        result = Battle(Roster(), make_roster("Ant")).run()
        assert result.outcome == BattleOutcome.LOSS
        assert result.winner == Side.OPPONENT
        assert result.n_turns == 0

    def test_both_empty_is_a_draw(self):
        result = fight(Roster(), Roster())
        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 0

    def test_turn_limit_forces_draw(self):
        config = EngineConfig(max_turns=5)
        team = Roster([Pet.custom("Wall", 0, 50)])
        opponent = Roster([Pet.custom("Wall", 0, 50)])

        result = fight(team, opponent, config=config)

        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 5
        # Minimum damage is 1 per hit
        assert result.team.first().stats.health == 45

    def test_log_ends_with_end_of_battle(self, make_roster):
        result = fight(make_roster("Ant"), make_roster("Ant"))
        last = result.log.events()[-1]
        assert last.kind == EventKind.END_OF_BATTLE
        assert last.payload["outcome"] == "draw"


class TestBattleFlow:
    """Phases, summons and start-of-battle effects."""

    def test_mosquito_snipes_before_attacking(self, make_roster):
        result = fight(make_roster("Mosquito"), make_roster("Ant"))

        assert result.outcome == BattleOutcome.WIN
        assert result.n_turns == 1
        assert result.log.events(EventKind.DAMAGE) == []

    def test_cricket_mirror(self, make_roster):
        """Both crickets faint together, then both zombies do."""
        result = fight(make_roster("Cricket"), make_roster("Cricket"))

        summons = result.log.events(EventKind.SUMMONED)
        assert [e.side for e in summons] == [Side.TEAM, Side.OPPONENT]
        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 3

    def test_rat_summons_for_opponent(self, make_roster):
        killer = Pet.custom("Killer", 10, 50)
        result = fight(make_roster("Rat"), Roster([killer]))

        summons = result.log.events(EventKind.SUMMONED)
        assert len(summons) == 1
        assert summons[0].side == Side.OPPONENT
        assert result.opponent.first().name == "Dirty Rat"
        assert result.outcome == BattleOutcome.LOSS

    def test_attack_events_carry_turn_and_phase(self, make_roster):
        result = fight(make_roster("Ant"), make_roster("Ant"))
        attack_phase = PHASE_ORDER.index(BattlePhase.ATTACK)
        for event in result.log.events(EventKind.DAMAGE):
            assert event.turn_index == 1
            assert event.phase_index == attack_phase

    def test_temporary_effects_pruned(self):
        pet = Pet.custom("Temp", 5, 5, effects=[
            Effect(trigger=EventKind.TURN_START, action=Action.add(1, 0), temporary=True),
        ])
        result = fight(Roster([pet]), Roster())
        assert result.team.first().effects == []


class TestHeldItems:
    """Food modifiers during the attack exchange."""

    def test_meat_bone_adds_damage(self, make_pet):
        team = Roster([make_pet("Fish", item="Meat Bone")])
        result = fight(team, Roster([Pet.custom("Dummy", 1, 5)]))

        assert result.outcome == BattleOutcome.WIN
        assert result.team.first().stats == (2, 1)
        assert result.team.first().item.name == "Meat Bone"

    def test_peanut_kills_on_any_damage(self, make_pet):
        team = Roster([make_pet("Ant", item="Peanut")])
        result = fight(team, Roster([Pet.custom("Dummy", 1, 50)]))

        assert result.outcome == BattleOutcome.DRAW
        assert result.n_turns == 1

    def test_melon_blocks_one_hit(self, make_pet):
        team = Roster([make_pet("Fish", item="Melon")])
        result = fight(team, Roster([Pet.custom("Brute", 20, 5)]))

        assert team_damage(result) == [0, 20]
        assert result.outcome == BattleOutcome.LOSS
        assert result.n_turns == 2

    def test_gorilla_gains_coconut(self, make_roster):
        result = fight(make_roster("Gorilla"), Roster([Pet.custom("Brute", 5, 30)]))

        assert len(result.log.events(EventKind.GAIN_ITEM)) == 1
        assert team_damage(result) == [5, 0, 5]
        assert result.outcome == BattleOutcome.LOSS


class TestDeterminism:
    """Equal inputs give equal battles; inputs are never mutated."""

    def test_same_seed_same_log(self, make_roster):
        def run():
            team = make_roster("Ant", "Mosquito", "Cricket", seed=4)
            opponent = make_roster("Mosquito", "Ant", "Fish", seed=9, name="opponent")
            return fight(team, opponent)

        first, second = run(), run()
        assert first.log.to_json() == second.log.to_json()
        assert first.outcome == second.outcome

    def test_inputs_untouched(self, make_roster):
        team = make_roster("Ant")
        opponent = make_roster("Hippo")

        result = fight(team, opponent)

        assert result.team is not team
        assert team.first().stats == (2, 1)
        assert opponent.first().stats == (4, 7)
        assert team.fainted == []


class TestLogInvariants:
    """Whole-battle logs stay consistent."""

    LINEUPS = [
        ("Ant", "Cricket", "Fish", "Horse", "Mosquito"),
        ("Hedgehog", "Flamingo", "Kangaroo", "Rat", "Swan"),
        ("Blowfish", "Camel", "Dolphin", "Elephant", "Sheep"),
        ("Deer", "Hippo", "Skunk", "Rhino", "Turkey"),
        ("Boar", "Gorilla", "Peacock", "Otter", "Beaver"),
    ]

    def test_five_pet_battle(self, make_roster):
        team = make_roster("Ant", "Cricket", "Hedgehog", "Blowfish", "Sheep", seed=2)
        opponent = make_roster("Mosquito", "Flamingo", "Camel", "Deer", "Rat", seed=7, name="opponent")

        result = fight(team, opponent)

        assert result.log.events(EventKind.FAINT)
        check_log(result.log)

    @pytest.mark.parametrize("seed", range(6))
    def test_mixed_lineups(self, make_roster, seed):
        for i, lineup in enumerate(self.LINEUPS):
            other = self.LINEUPS[(i + seed + 1) % len(self.LINEUPS)]
            team = make_roster(*lineup, seed=seed)
            opponent = make_roster(*reversed(other), seed=seed + 100, name="opponent")

            result = fight(team, opponent)

            check_log(result.log)
            assert result.n_turns <= result.team.config.max_turns


class TestBattleErrors:
    """Errors raised by Battle."""

    def test_open_shop_blocks_battle(self, make_roster, provider):
        team = make_roster("Ant")
        team.shop = Shop(seed=1, provider=provider)
        team.open_shop()

        with pytest.raises(InvalidShopState):
            Battle(team, make_roster("Ant"))

    def test_cascade_limit_propagates(self):
        def pusher():
            return Pet.custom("Pusher", 1, 5, effects=[
                Effect(
                    trigger=EventKind.START_OF_BATTLE,
                    action=Action.push(1),
                    target=TargetSelector(Target.FRIEND, Position.FIRST),
                ),
                Effect(
                    trigger=EventKind.PUSHED,
                    action=Action.push(1),
                    target=TargetSelector(Target.FRIEND, Position.FIRST),
                    scope=TriggerScope.ANY,
                ),
            ])

        config = EngineConfig(cascade_limit=40)
        with pytest.raises(CascadeLimitExceeded) as exc:
            fight(Roster([pusher(), pusher()]), Roster([Pet.custom("Dummy", 1, 1)]), config=config)

        assert exc.value.log.events()[0].kind == EventKind.START_OF_BATTLE
        assert len(exc.value.log) == 40
