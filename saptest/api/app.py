"""
FastAPI Application - REST API over the battle engine.

Endpoints:
    POST   /api/v1/battles                 Run a one-off battle
    POST   /api/v1/sessions                Create a session
    GET    /api/v1/sessions                List active sessions
    GET    /api/v1/sessions/{id}           Get session status
    DELETE /api/v1/sessions/{id}           End session
    POST   /api/v1/sessions/{id}/shop      Shop operation
    POST   /api/v1/sessions/{id}/battle    Battle with the session roster
    GET    /api/v1/pets                    List pets
    GET    /api/v1/foods                   List foods
    GET    /api/v1/health                  Health check

All bodies and responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import os

# Environment configuration
SAPTEST_ENV = os.getenv("SAPTEST_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

_NOT_FOUND_CODES = {"SESSION_NOT_FOUND", "UNKNOWN_ENTITY"}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..config import load_settings
    from .service import APIService
    from .schemas import (
        # Request models
        BattleRequest,
        CreateSessionRequest,
        SessionBattleRequest,
        ShopActionRequest,
        # Response models
        BattleResponse,
        EndSessionResponse,
        ErrorResponse,
        FoodListResponse,
        HealthResponse,
        PetListResponse,
        SessionListResponse,
        SessionResponse,
    )

    app = FastAPI(
        title="SAPTest Engine API",
        description="""
Auto-battler simulation engine: deterministic battles and a shop economy.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `UNKNOWN_ENTITY` | Pet or food name not found |
| `INVALID_POSITION` | Slot out of range or occupied |
| `EMPTY_SLOT` | Slot holds nothing |
| `INVALID_SHOP_STATE` | Shop closed (or open during a battle) |
| `INSUFFICIENT_FUNDS` | Not enough coins |
| `CASCADE_LIMIT_EXCEEDED` | Effects triggered each other without end |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(settings=load_settings())

    # =========================================================================
    # Error helpers
    # =========================================================================

    def error_response(error: ErrorResponse) -> JSONResponse:
        """Standardized JSON error with a status derived from the code."""
        status_code = 404 if error.error_code.value in _NOT_FOUND_CODES else 400
        return JSONResponse(status_code=status_code, content=error.model_dump(mode="json"))

    def respond(result):
        if isinstance(result, ErrorResponse):
            return error_response(result)
        return result

    # =========================================================================
    # Battle Endpoint
    # =========================================================================

    @app.post(
        "/api/v1/battles",
        response_model=BattleResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid roster"},
            404: {"model": ErrorResponse, "description": "Unknown pet or food"},
        },
        tags=["Battles"],
        summary="Run a battle between two rosters",
    )
    async def run_battle(request: BattleRequest) -> Union[BattleResponse, JSONResponse]:
        """
        Run a battle to completion.

        Equal rosters and seeds always give the same result. Set
        `include_log` to receive every event in dispatch order.
        """
        return respond(api_service.run_battle(request))

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse, "description": "Unknown pet"}},
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(request: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.create_session(request))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a session and release its roster and shop."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/shop",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Operation rejected"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Sessions"],
        summary="Apply a shop operation",
    )
    async def shop_action(session_id: str, request: ShopActionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Open, close, roll, freeze, unfreeze, buy or sell.

        `open` starts the next turn (the shop tier follows the turn number).
        A rejected operation leaves the session unchanged.
        """
        return respond(api_service.shop_action(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/battle",
        response_model=BattleResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Shop still open"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Sessions"],
        summary="Battle with the session roster",
    )
    async def session_battle(session_id: str, request: SessionBattleRequest) -> Union[BattleResponse, JSONResponse]:
        return respond(api_service.session_battle(session_id, request))

    # =========================================================================
    # Content Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/pets",
        response_model=PetListResponse,
        tags=["Content"],
        summary="List pets",
    )
    async def list_pets(
        tier: Annotated[Optional[int], Query(ge=1, le=6, description="Only this tier")] = None,
    ) -> PetListResponse:
        return api_service.list_pets(tier)

    @app.get(
        "/api/v1/foods",
        response_model=FoodListResponse,
        tags=["Content"],
        summary="List foods",
    )
    async def list_foods() -> FoodListResponse:
        return api_service.list_foods()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return api_service.health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "SAPTest Engine API",
            "version": __version__,
            "env": SAPTEST_ENV,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn saptest.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
