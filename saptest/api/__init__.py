"""
API Module - HTTP interface to the engine.

Clients can:
1. Run one-off battles between two rosters
2. Create sessions and drive the shop turn by turn
3. Battle a session roster against an opponent
4. Browse the pet and food content

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    BattleRequest,
    CreateSessionRequest,
    SessionBattleRequest,
    ShopActionRequest,
    # Responses
    BattleResponse,
    SessionResponse,
    SessionListResponse,
    ErrorResponse,
    # Shared
    PetSpec,
    PetInfo,
    ShopInfo,
    EventInfo,
    # Enums
    ErrorCode,
    Outcome,
    ShopOperation,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "BattleRequest",
    "CreateSessionRequest",
    "SessionBattleRequest",
    "ShopActionRequest",
    # Responses
    "BattleResponse",
    "SessionResponse",
    "SessionListResponse",
    "ErrorResponse",
    # Shared
    "PetSpec",
    "PetInfo",
    "ShopInfo",
    "EventInfo",
    # Enums
    "ErrorCode",
    "Outcome",
    "ShopOperation",
    # Service
    "APIService",
    "create_app",
]
