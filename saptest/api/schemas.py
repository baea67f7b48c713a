"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models are the whole contract between clients and the engine. Every
response has an explicit model so the OpenAPI schema is complete.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- UNKNOWN_ENTITY: Pet or food name not in the content pack
- INVALID_POSITION / EMPTY_SLOT: Bad roster or shop slot
- INVALID_SHOP_STATE: Shop operation while closed, or battle while open
- INSUFFICIENT_FUNDS: Not enough coins
- CASCADE_LIMIT_EXCEEDED: Effects triggered each other without end
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    SHOPPING = "shopping"
    READY = "ready"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class Outcome(str, Enum):
    """Battle outcome from the team's point of view."""
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class ShopOperation(str, Enum):
    """Shop operations a session accepts."""
    OPEN = "open"
    CLOSE = "close"
    ROLL = "roll"
    FREEZE = "freeze"
    UNFREEZE = "unfreeze"
    BUY = "buy"
    SELL = "sell"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN_ENTITY = "UNKNOWN_ENTITY"
    INVALID_POSITION = "INVALID_POSITION"
    EMPTY_SLOT = "EMPTY_SLOT"
    INVALID_SHOP_STATE = "INVALID_SHOP_STATE"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    ROSTER_TOO_LARGE = "ROSTER_TOO_LARGE"
    INVALID_TIER = "INVALID_TIER"
    INVALID_PET_ACTION = "INVALID_PET_ACTION"
    CASCADE_LIMIT_EXCEEDED = "CASCADE_LIMIT_EXCEEDED"
    INVALID_ROSTER_DATA = "INVALID_ROSTER_DATA"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PetSpec(BaseModel):
    """A pet to put in a roster."""
    name: str = Field(description="Pet name, e.g. 'Ant'")
    level: int = Field(1, ge=1, le=3)
    attack: Optional[int] = Field(None, ge=0, description="Override base attack")
    health: Optional[int] = Field(None, ge=1, description="Override base health")
    item: Optional[str] = Field(None, description="Held food name")


class ToySpec(BaseModel):
    """A toy to attach to a roster."""
    name: str = Field(description="Toy name, e.g. 'Tennis Ball'")
    level: int = Field(1, ge=1, le=3)


class ItemInfo(BaseModel):
    """A held food."""
    name: str
    uses: Optional[int] = None

    model_config = {"from_attributes": True}


class PetInfo(BaseModel):
    """A pet in a roster."""
    id: Optional[str] = None
    name: str
    tier: int
    level: int
    experience: int = 0
    position: Optional[int] = None
    attack: int
    health: int
    item: Optional[ItemInfo] = None

    model_config = {"from_attributes": True}


class ShopItemInfo(BaseModel):
    """An entity for sale."""
    name: str
    kind: str = Field(description="pet or food")
    cost: int
    tier: int
    frozen: bool = False
    attack: Optional[int] = None
    health: Optional[int] = None


class ShopInfo(BaseModel):
    """Shop state."""
    state: str = Field(description="open or closed")
    tier: int
    coins: int
    free_rolls: int = 0
    roll_count: int = 0
    items: list[Optional[ShopItemInfo]] = Field(default_factory=list)


class EventInfo(BaseModel):
    """One logged event."""
    kind: str
    turn_index: int
    phase_index: int
    side: Optional[str] = None
    source_id: Optional[str] = None
    source_side: Optional[str] = None
    afflicted_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


class PetDefinitionInfo(BaseModel):
    """A pet in the content pack."""
    name: str
    tier: int
    attack: int
    health: int
    cost: int
    pack: str
    description: str = ""
    triggers: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class FoodDefinitionInfo(BaseModel):
    """A food in the content pack."""
    name: str
    tier: int
    cost: int
    holdable: bool
    description: str = ""

    model_config = {"from_attributes": True}


# =============================================================================
# Request Models
# =============================================================================

class BattleRequest(BaseModel):
    """Fight two rosters."""
    team: list[Optional[PetSpec]] = Field(max_length=5, description="Front pet first; null = empty slot")
    opponent: list[Optional[PetSpec]] = Field(max_length=5)
    team_toys: list[ToySpec] = Field(default_factory=list, description="Toys attached to the team")
    opponent_toys: list[ToySpec] = Field(default_factory=list)
    seed: Optional[int] = Field(None, description="Team RNG seed")
    opponent_seed: Optional[int] = Field(None, description="Opponent RNG seed")
    include_log: bool = Field(False, description="Return the full event log")


class CreateSessionRequest(BaseModel):
    """Start a session."""
    pets: list[str] = Field(default_factory=list, max_length=5, description="Starting pet names")
    seed: Optional[int] = Field(None, description="Roster RNG seed")
    shop_seed: Optional[int] = Field(None, description="Shop RNG seed")
    name: str = "team"


class ShopActionRequest(BaseModel):
    """One shop operation."""
    operation: ShopOperation
    slot: Optional[int] = Field(None, ge=0, description="Shop slot (buy/freeze/unfreeze) or roster slot (sell)")
    destination: Optional[int] = Field(None, ge=0, description="Roster slot for buy")
    shift: bool = Field(False, description="Push the occupant back instead of failing")


class SessionBattleRequest(BaseModel):
    """Fight the session roster against an opponent."""
    opponent: list[Optional[PetSpec]] = Field(max_length=5)
    opponent_seed: Optional[int] = None
    include_log: bool = False


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(description="Human readable message")
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")


class BattleResponse(BaseModel):
    """Battle result."""
    outcome: Outcome
    n_turns: int
    team: list[Optional[PetInfo]]
    opponent: list[Optional[PetInfo]]
    events: list[EventInfo] = Field(default_factory=list)
    event_count: int = 0


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: SessionStatus
    turn: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    roster: list[Optional[PetInfo]] = Field(default_factory=list)
    shop: Optional[ShopInfo] = None


class SessionListResponse(BaseModel):
    """List of active session IDs."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class PetListResponse(BaseModel):
    pets: list[PetDefinitionInfo]
    count: int


class FoodListResponse(BaseModel):
    foods: list[FoodDefinitionInfo]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
