"""
Tests for API Pydantic schemas.

Validates that:
- Request models enforce their bounds
- Error codes cover every engine error
- OpenAPI schema lists every endpoint with a response model
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_battle_request_defaults(self):
        """BattleRequest fills optional fields."""
        from saptest.api.schemas import BattleRequest, PetSpec

        request = BattleRequest(team=[PetSpec(name="Ant"), None], opponent=[])

        data = request.model_dump()
        assert data["team"][0] == {"name": "Ant", "level": 1, "attack": None, "health": None, "item": None}
        assert data["team"][1] is None
        assert data["include_log"] is False
        assert data["seed"] is None

    def test_battle_request_too_many_pets(self):
        """Rosters hold at most five pets."""
        from saptest.api.schemas import BattleRequest

        with pytest.raises(ValidationError):
            BattleRequest(team=[{"name": "Ant"}] * 6, opponent=[])

    def test_pet_spec_bounds(self):
        """PetSpec rejects out-of-range levels and stats."""
        from saptest.api.schemas import PetSpec

        with pytest.raises(ValidationError):
            PetSpec(name="Ant", level=4)
        with pytest.raises(ValidationError):
            PetSpec(name="Ant", health=0)
        with pytest.raises(ValidationError):
            PetSpec(level=1)

    def test_shop_action_request(self):
        """ShopActionRequest parses operations from strings."""
        from saptest.api.schemas import ShopActionRequest, ShopOperation

        request = ShopActionRequest(operation="buy", slot=1, destination=0)
        assert request.operation == ShopOperation.BUY
        assert request.shift is False

        with pytest.raises(ValidationError):
            ShopActionRequest(operation="steal")
        with pytest.raises(ValidationError):
            ShopActionRequest(operation="sell", slot=-1)

    def test_battle_response_schema(self):
        """BattleResponse serializes enums as strings."""
        from saptest.api.schemas import BattleResponse, EventInfo, ItemInfo, Outcome, PetInfo

        response = BattleResponse(
            outcome=Outcome.WIN,
            n_turns=3,
            team=[
                PetInfo(
                    id="Fish_1",
                    name="Fish",
                    tier=1,
                    level=1,
                    position=0,
                    attack=2,
                    health=1,
                    item=ItemInfo(name="Meat Bone"),
                ),
                None,
            ],
            opponent=[],
            events=[EventInfo(kind="damage", turn_index=1, phase_index=3, side="team", payload={"damage": 3})],
            event_count=1,
        )

        data = response.model_dump(mode="json")
        assert data["outcome"] == "win"
        assert data["team"][0]["item"]["name"] == "Meat Bone"
        assert data["team"][1] is None
        assert data["events"][0]["payload"]["damage"] == 3

    def test_session_response_schema(self):
        """SessionResponse has roster and shop."""
        from saptest.api.schemas import SessionResponse, SessionStatus, ShopInfo, ShopItemInfo

        response = SessionResponse(
            session_id="session-123",
            status=SessionStatus.SHOPPING,
            turn=2,
            shop=ShopInfo(
                state="open",
                tier=1,
                coins=7,
                items=[ShopItemInfo(name="Ant", kind="pet", cost=3, tier=1, attack=2, health=1), None],
            ),
        )

        data = response.model_dump()
        assert data["status"] == "shopping"
        assert data["shop"]["items"][0]["name"] == "Ant"
        assert data["shop"]["items"][1] is None
        assert data["roster"] == []

    def test_error_response_schema(self):
        """ErrorResponse has structured error codes."""
        from saptest.api.schemas import ErrorResponse, ErrorCode

        error = ErrorResponse(
            error="Session not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": "bad-id"},
        )

        data = error.model_dump()
        assert data["error"] == "Session not found"
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["details"]["session_id"] == "bad-id"


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_every_engine_error_has_a_code(self):
        """Each SAPTestError subclass maps to an ErrorCode."""
        from saptest import errors
        from saptest.api.schemas import ErrorCode

        for error_cls in errors.SAPTestError.__subclasses__():
            assert ErrorCode(error_cls.code).value == error_cls.code

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from saptest.api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from saptest.api.app import app
        from fastapi.openapi.utils import get_openapi

        return get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

    def test_openapi_schema_generates(self, schema):
        """OpenAPI schema generates without errors."""
        assert "paths" in schema
        assert "components" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        """Response models appear in OpenAPI schema."""
        schemas = schema["components"]["schemas"]

        required_schemas = [
            "BattleResponse",
            "SessionResponse",
            "SessionListResponse",
            "PetListResponse",
            "FoodListResponse",
            "HealthResponse",
            "ErrorResponse",
        ]

        for name in required_schemas:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_have_response_models(self, schema):
        """All main endpoints specify response models."""
        paths = schema["paths"]

        assert "200" in paths["/api/v1/battles"]["post"]["responses"]
        assert "200" in paths["/api/v1/sessions"]["post"]["responses"]
        assert "200" in paths["/api/v1/sessions/{session_id}"]["get"]["responses"]
        assert "delete" in paths["/api/v1/sessions/{session_id}"]
        assert "200" in paths["/api/v1/sessions/{session_id}/shop"]["post"]["responses"]
        assert "200" in paths["/api/v1/sessions/{session_id}/battle"]["post"]["responses"]
        assert "/api/v1/pets" in paths
        assert "/api/v1/foods" in paths
        assert "/api/v1/health" in paths
