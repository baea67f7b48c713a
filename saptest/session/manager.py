"""
Session Manager - Creates and manages play sessions.

LIFECYCLE:
1. Client creates a session -> roster and shop are built (in-memory only)
2. Each turn:
   - start_turn() raises the shop tier for the turn and opens the shop
   - Client buys, sells, rolls and freezes through the roster
   - end_turn() closes the shop
   - battle(opponent) fights a copy of the roster
3. Session ends -> removed from memory

Sessions are never persisted. A roster can be rebuilt from pet names and
a seed, so nothing is lost that the client cannot recreate.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence
import logging
import time
import uuid

from ..config import Settings
from ..content.definitions import EntityProvider
from ..engine_core.battle import BattleOutcome, BattleResult, fight
from ..engine_core.pet import Pet
from ..engine_core.roster import Roster
from ..engine_core.shop import Shop
from ..errors import InvalidShopState

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a play session."""
    CREATED = "created"  # No turn started yet
    SHOPPING = "shopping"  # Shop open
    READY = "ready"  # Shop closed, can battle
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    One player's run: a roster with its shop and a battle record.

    The shop tier follows the turn number (see Shop.tier_for_turn).
    """
    session_id: str
    roster: Roster
    created_at: float
    config: Settings = field(default_factory=Settings)
    provider: EntityProvider | None = None
    state: SessionState = SessionState.CREATED
    turn: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    last_result: BattleResult | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def shop(self) -> Shop:
        return self.roster.shop

    def is_active(self) -> bool:
        return self.state in {SessionState.CREATED, SessionState.SHOPPING, SessionState.READY}

    def start_turn(self) -> Shop:
        """Advance the turn counter and open the shop at the turn's tier."""
        if self.shop.is_open:
            raise InvalidShopState("Turn already started; close the shop first")
        self.turn += 1
        self.shop.set_tier(min(Shop.tier_for_turn(self.turn), self.shop.config.max_tier))
        self.roster.open_shop()
        self.state = SessionState.SHOPPING
        return self.shop

    def end_turn(self) -> None:
        self.roster.close_shop()
        self.state = SessionState.READY

    def battle(self, opponent: Roster) -> BattleResult:
        """Fight ``opponent`` and record the outcome. The roster is not changed."""
        result = fight(self.roster, opponent, config=self.config.engine, provider=self.provider)
        if result.outcome == BattleOutcome.WIN:
            self.wins += 1
        elif result.outcome == BattleOutcome.LOSS:
            self.losses += 1
        else:
            self.draws += 1
        self.last_result = result
        self.state = SessionState.READY
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "turn": self.turn,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "roster": self.roster.to_dicts(),
            "shop": self.shop.to_dict(),
        }


class SessionManager:
    """
    Manages play sessions.

    No persistence - sessions are in-memory only.
    """

    def __init__(self, settings: Settings | None = None, provider: EntityProvider | None = None):
        self.settings = settings or Settings()
        if provider is None:
            from ..content import default_provider
            provider = default_provider()
        self.provider = provider
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create_session(
        self,
        pets: Sequence[str | Pet | None] = (),
        seed: int | None = None,
        shop_seed: int | None = None,
        name: str = "team",
    ) -> Session:
        """
        Create a new session.

        Args:
            pets: Pet names (level 1) or Pet instances for the starting roster
            seed: Roster RNG seed
            shop_seed: Shop RNG seed

        Returns:
            New Session with a closed shop
        """
        engine_config = self.settings.engine
        shop = Shop(
            seed=shop_seed,
            provider=self.provider,
            config=self.settings.shop,
            engine_config=engine_config,
        )
        roster = Roster(
            [self._build_pet(p) for p in pets],
            seed=seed,
            name=name,
            shop=shop,
            config=engine_config,
        )
        session = Session(
            session_id=str(uuid.uuid4()),
            roster=roster,
            created_at=time.time(),
            config=self.settings,
            provider=self.provider,
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s with %d pet(s)", session.session_id, len(roster))
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> Session | None:
        """Remove a session from memory."""
        session = self._sessions.pop(session_id, None)
        if session:
            if reason == "completed":
                session.state = SessionState.FINISHED
            else:
                session.state = SessionState.ABANDONED
            logger.info("Ended session %s (%s)", session_id, reason)
        return session

    def list_sessions(self) -> list[str]:
        """IDs of active sessions."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_expired(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than ``max_age_seconds``.

        Returns the number of sessions removed.
        """
        now = time.time()
        expired = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds
        ]
        for session_id in expired:
            self.end_session(session_id, reason="expired")
        return len(expired)

    def _build_pet(self, pet: str | Pet | None) -> Pet | None:
        if pet is None or isinstance(pet, Pet):
            return pet
        definition = self.provider.lookup_pet(pet)
        return Pet.from_definition(definition, config=self.settings.engine)
