"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Maps engine errors to ErrorResponse
4. Formats results for clients

This layer is framework-agnostic (usable with FastAPI, Flask, or directly).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import logging

from .. import __version__
from ..config import Settings
from ..content import DictProvider, default_provider
from ..engine_core.battle import BattleResult, fight
from ..engine_core.pet import Food, Pet
from ..engine_core.roster import Roster
from ..engine_core.toy import Toy
from ..errors import SAPTestError
from ..session import Session, SessionManager
from .schemas import (
    # Requests
    BattleRequest,
    CreateSessionRequest,
    PetSpec,
    SessionBattleRequest,
    ShopActionRequest,
    ToySpec,
    # Responses
    BattleResponse,
    ErrorResponse,
    FoodListResponse,
    HealthResponse,
    PetListResponse,
    SessionResponse,
    # Shared
    EventInfo,
    FoodDefinitionInfo,
    ItemInfo,
    PetDefinitionInfo,
    PetInfo,
    ShopInfo,
    ShopItemInfo,
    # Enums
    ErrorCode,
    Outcome,
    SessionStatus,
    ShopOperation,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # One-off battle
        response = service.run_battle(BattleRequest(team=[...], opponent=[...]))

        # Session play
        session = service.create_session(CreateSessionRequest(pets=["Ant"]))
        service.shop_action(session.session_id, ShopActionRequest(operation="open"))
    """
    settings: Settings = field(default_factory=Settings)
    provider: DictProvider = field(default_factory=default_provider)
    session_manager: SessionManager | None = None

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(settings=self.settings, provider=self.provider)

    # =========================================================================
    # Battles
    # =========================================================================

    def run_battle(self, request: BattleRequest) -> BattleResponse | ErrorResponse:
        """Fight two rosters built from pet specs."""
        try:
            team = self.build_roster(request.team, seed=request.seed, name="team", toys=request.team_toys)
            opponent = self.build_roster(
                request.opponent, seed=request.opponent_seed, name="opponent", toys=request.opponent_toys,
            )
            result = fight(team, opponent, config=self.settings.engine, provider=self.provider)
        except SAPTestError as e:
            return self._error(e)
        return self._battle_to_response(result, request.include_log)

    def session_battle(self, session_id: str, request: SessionBattleRequest) -> BattleResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        try:
            opponent = self.build_roster(request.opponent, seed=request.opponent_seed, name="opponent")
            result = session.battle(opponent)
        except SAPTestError as e:
            return self._error(e)
        return self._battle_to_response(result, request.include_log)

    def build_roster(
        self,
        specs: Sequence[PetSpec | None],
        seed: int | None = None,
        name: str = "team",
        toys: Sequence[ToySpec] = (),
    ) -> Roster:
        """Instantiate pets and toys from specs. Raises UnknownEntity for unknown names."""
        pets = []
        for spec in specs:
            if spec is None:
                pets.append(None)
                continue
            definition = self.provider.lookup_pet(spec.name, spec.level)
            pet = Pet.from_definition(
                definition,
                level=spec.level,
                attack=spec.attack,
                health=spec.health,
                config=self.settings.engine,
            )
            if spec.item:
                pet.give_item(Food.from_definition(self.provider.lookup_food(spec.item)))
            pets.append(pet)
        roster = Roster(pets, seed=seed, name=name, config=self.settings.engine)
        for spec in toys:
            roster.add_toy(Toy.from_definition(self.provider.lookup_toy(spec.name), spec.level))
        return roster

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        try:
            session = self.session_manager.create_session(
                pets=request.pets,
                seed=request.seed,
                shop_seed=request.shop_seed,
                name=request.name,
            )
        except SAPTestError as e:
            return self._error(e)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session. Returns False if it did not exist."""
        return self.session_manager.end_session(session_id, reason) is not None

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def shop_action(self, session_id: str, request: ShopActionRequest) -> SessionResponse | ErrorResponse:
        """Apply one shop operation to a session's roster."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        op = request.operation
        needs_slot = {ShopOperation.FREEZE, ShopOperation.UNFREEZE, ShopOperation.BUY, ShopOperation.SELL}
        if op in needs_slot and request.slot is None:
            return ErrorResponse(
                error=f"Operation '{op.value}' needs a slot",
                error_code=ErrorCode.VALIDATION_ERROR,
            )
        if op == ShopOperation.BUY and request.destination is None:
            return ErrorResponse(
                error="Operation 'buy' needs a destination",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        roster = session.roster
        try:
            if op == ShopOperation.OPEN:
                session.start_turn()
            elif op == ShopOperation.CLOSE:
                session.end_turn()
            elif op == ShopOperation.ROLL:
                roster.roll()
            elif op == ShopOperation.FREEZE:
                roster.freeze(request.slot)
            elif op == ShopOperation.UNFREEZE:
                roster.unfreeze(request.slot)
            elif op == ShopOperation.BUY:
                roster.buy(request.slot, request.destination, shift=request.shift)
            elif op == ShopOperation.SELL:
                roster.sell(request.slot)
        except SAPTestError as e:
            return self._error(e)
        return self._session_to_response(session)

    # =========================================================================
    # Content
    # =========================================================================

    def list_pets(self, tier: int | None = None) -> PetListResponse:
        definitions = sorted(self.provider.pets.values(), key=lambda p: (p.tier, p.name))
        pets = [
            PetDefinitionInfo(
                name=p.name,
                tier=p.tier,
                attack=p.attack,
                health=p.health,
                cost=p.cost,
                pack=p.pack,
                description=p.description,
                triggers=sorted(p.trigger_set),
            )
            for p in definitions
            if not p.token and (tier is None or p.tier == tier)
        ]
        return PetListResponse(pets=pets, count=len(pets))

    def list_foods(self) -> FoodListResponse:
        definitions = sorted(self.provider.foods.values(), key=lambda f: (f.tier, f.name))
        foods = [FoodDefinitionInfo.model_validate(f) for f in definitions if not f.token]
        return FoodListResponse(foods=foods, count=len(foods))

    def health(self) -> HealthResponse:
        return HealthResponse(status="healthy", service="saptest", version=__version__)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _error(self, error: SAPTestError) -> ErrorResponse:
        logger.info("Request rejected: %s", error.message)
        try:
            code = ErrorCode(error.code)
        except ValueError:
            code = ErrorCode.INTERNAL_ERROR
        return ErrorResponse(error=error.message, error_code=code)

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error="Session not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": session_id},
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        shop = session.shop.to_dict()
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            turn=session.turn,
            wins=session.wins,
            losses=session.losses,
            draws=session.draws,
            roster=_pets_to_info(session.roster),
            shop=ShopInfo(
                state=shop["state"],
                tier=shop["tier"],
                coins=shop["coins"],
                free_rolls=shop["free_rolls"],
                roll_count=shop["roll_count"],
                items=[ShopItemInfo(**item) if item else None for item in shop["items"]],
            ),
        )

    def _battle_to_response(self, result: BattleResult, include_log: bool) -> BattleResponse:
        events = []
        if include_log:
            events = [
                EventInfo(
                    kind=e.kind.value,
                    turn_index=e.turn_index,
                    phase_index=e.phase_index,
                    side=e.side.value if e.side else None,
                    source_id=e.source_id,
                    source_side=e.source_side.value if e.source_side else None,
                    afflicted_id=e.afflicted_id,
                    payload=e.payload,
                )
                for e in result.log.replay()
            ]
        return BattleResponse(
            outcome=Outcome(result.outcome.value),
            n_turns=result.n_turns,
            team=_pets_to_info(result.team),
            opponent=_pets_to_info(result.opponent),
            events=events,
            event_count=len(result.log),
        )


def _pets_to_info(roster: Roster) -> list[PetInfo | None]:
    infos = []
    for data in roster.to_dicts():
        if data is None:
            infos.append(None)
            continue
        item = data.pop("item")
        infos.append(PetInfo(**data, item=ItemInfo(**item) if item else None))
    return infos
