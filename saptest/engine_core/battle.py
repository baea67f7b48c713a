"""
Battle - Phase machine driving a fight between two rosters.

Each turn runs:
1. TURN_START (START_OF_BATTLE first, on turn 1)
2. BEFORE_ATTACK for both front pets
3. ATTACK, the simultaneous exchange between the front pets
4. CLEANUP, fainted pets leave their slots and spent effects are pruned
5. AFTER_ATTACK for the attackers still standing
6. END_OF_TURN, then the terminal check

Every phase drains the engine queue to exhaustion and is followed by a
cleanup, so the next phase always sees compact rosters. Battles work on
copies; the rosters passed in are never touched.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING
import logging

from ..config import EngineConfig
from ..errors import InvalidShopState
from .effect import EventKind, Side
from .engine import EventEngine
from .event import EventLog
from .roster import Roster

if TYPE_CHECKING:
    from ..content.definitions import EntityProvider

logger = logging.getLogger(__name__)


class BattlePhase(Enum):
    """Phases within a battle turn."""
    SETUP = "setup"
    TURN_START = "turn_start"
    BEFORE_ATTACK = "before_attack"
    ATTACK = "attack"
    CLEANUP = "cleanup"
    AFTER_ATTACK = "after_attack"
    END_OF_TURN = "end_of_turn"
    FINISHED = "finished"


PHASE_ORDER = list(BattlePhase)


class BattleOutcome(Enum):
    """Result from the team's point of view."""
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


@dataclass
class BattleResult:
    outcome: BattleOutcome
    n_turns: int
    team: Roster
    opponent: Roster
    log: EventLog

    @property
    def winner(self) -> Side | None:
        return {
            BattleOutcome.WIN: Side.TEAM,
            BattleOutcome.LOSS: Side.OPPONENT,
        }.get(self.outcome)

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "n_turns": self.n_turns,
            "team": self.team.to_dicts(),
            "opponent": self.opponent.to_dicts(),
        }


class Battle:
    """
    One fight between two rosters.

    Usage:
        result = Battle(team, opponent).run()
        if result.outcome == BattleOutcome.WIN:
            ...
    """

    def __init__(
        self,
        team: Roster,
        opponent: Roster,
        config: EngineConfig | None = None,
        provider: EntityProvider | None = None,
    ):
        for roster in (team, opponent):
            if roster.shop is not None and roster.shop.is_open:
                raise InvalidShopState(f"Cannot battle while the shop of '{roster.name}' is open")

        self.config = config or team.config
        self.team = team.copy()
        self.opponent = opponent.copy()
        self.log = EventLog()
        self.engine = EventEngine(
            rosters={Side.TEAM: self.team, Side.OPPONENT: self.opponent},
            config=self.config,
            log=self.log,
            provider=provider,
        )
        self.phase = BattlePhase.SETUP
        self.turn = 0
        self.outcome: BattleOutcome | None = None

    def run(self) -> BattleResult:
        """Fight until a terminal state and return the result."""
        self.team.compact()
        self.opponent.compact()

        self.outcome = self._terminal()
        while self.outcome is None:
            self.outcome = self.step()

        self._set_phase(BattlePhase.FINISHED)
        self.engine.emit(self.engine.make_event(EventKind.END_OF_BATTLE, outcome=self.outcome.value))
        self.engine.drain()
        for roster in (self.team, self.opponent):
            roster.clear_fainted()
            roster.prune_effects(include_temporary=True)

        logger.info(
            "Battle %s vs %s: %s after %d turn(s)",
            self.team.name, self.opponent.name, self.outcome.value, self.turn,
        )
        return BattleResult(
            outcome=self.outcome,
            n_turns=self.turn,
            team=self.team,
            opponent=self.opponent,
            log=self.log,
        )

    def step(self) -> BattleOutcome | None:
        """Run one full turn. Returns the outcome if the battle ended."""
        self.turn += 1
        self.engine.turn_index = self.turn
        engine = self.engine

        self._set_phase(BattlePhase.TURN_START)
        if self.turn == 1:
            engine.emit(engine.make_event(EventKind.START_OF_BATTLE))
            self._resolve()
        engine.emit(engine.make_event(EventKind.TURN_START))
        self._resolve()

        self._set_phase(BattlePhase.BEFORE_ATTACK)
        for side, roster in self._sides():
            front = roster.first()
            if front is not None:
                engine.emit(engine.make_event(EventKind.BEFORE_ATTACK, side=side, afflicted=front))
        self._resolve()

        attackers = [(side, roster.first()) for side, roster in self._sides()]
        if all(pet is not None for _, pet in attackers):
            self._set_phase(BattlePhase.ATTACK)
            engine.attack(attackers[0][1], attackers[1][1])
            engine.drain()

            self._set_phase(BattlePhase.CLEANUP)
            self._cleanup()

            self._set_phase(BattlePhase.AFTER_ATTACK)
            for side, pet in attackers:
                roster = engine.rosters[side]
                if pet.is_alive and roster.in_slots(pet):
                    engine.emit(engine.make_event(EventKind.AFTER_ATTACK, side=side, afflicted=pet))
            self._resolve()

        self._set_phase(BattlePhase.END_OF_TURN)
        engine.emit(engine.make_event(EventKind.END_OF_TURN))
        self._resolve()

        outcome = self._terminal()
        if outcome is None and self.turn >= self.config.max_turns:
            logger.info("Battle hit the %d turn limit", self.config.max_turns)
            return BattleOutcome.DRAW
        return outcome

    def _sides(self) -> list[tuple[Side, Roster]]:
        return [(Side.TEAM, self.team), (Side.OPPONENT, self.opponent)]

    def _set_phase(self, phase: BattlePhase) -> None:
        self.phase = phase
        self.engine.phase_index = PHASE_ORDER.index(phase)

    def _resolve(self) -> None:
        self.engine.drain()
        self._cleanup()

    def _cleanup(self) -> None:
        for roster in (self.team, self.opponent):
            roster.clear_fainted()
            roster.prune_effects()

    def _terminal(self) -> BattleOutcome | None:
        team_out = self.team.is_defeated()
        opponent_out = self.opponent.is_defeated()
        if team_out and opponent_out:
            return BattleOutcome.DRAW
        if team_out:
            return BattleOutcome.LOSS
        if opponent_out:
            return BattleOutcome.WIN
        return None


def fight(
    team: Roster,
    opponent: Roster,
    config: EngineConfig | None = None,
    provider: EntityProvider | None = None,
) -> BattleResult:
    """Run a battle between two rosters."""
    return Battle(team, opponent, config=config, provider=provider).run()
