"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Error codes are properly structured
- OpenAPI schema exposes the game flow
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_game_state_response_schema(self):
        """GameStateResponse serializes phases by their wire value."""
        from tasting_room.api.schemas import GameStateResponse, Phase, BottleInfo, PlayerInfo

        response = GameStateResponse(
            session_id="abc",
            phase=Phase.TIE_BREAKER,
            current_round=2,
            num_rounds=2,
            is_discussion_phase=False,
            players=[PlayerInfo(name="Ana", score=3)],
            bottles=[BottleInfo(bottle_id=1)],
        )

        data = response.model_dump(mode="json")
        assert data["phase"] == "tie-breaker"
        assert data["current_bottle_id"] is None
        assert data["bottles"][0]["varietal"] is None
        assert data["players"][0]["guesses"] == []

    def test_setup_request_defaults(self):
        from tasting_room.api.schemas import SetupRequest

        request = SetupRequest.model_validate({
            "players": ["Ana"],
            "bottles": [{"varietal": "Gamay"}],
        })

        assert request.bottles[0].varietal == "Gamay"
        assert request.bottles[0].country == ""

    def test_guess_entry_requires_ratings(self):
        from tasting_room.api.schemas import GuessEntry

        with pytest.raises(ValidationError):
            GuessEntry.model_validate({"player": "Ana"})

    def test_score_request_optional(self):
        from tasting_room.api.schemas import ScoreRequest

        request = ScoreRequest()

        assert request.scores is None
        assert request.tie_detected is None

    def test_error_response_schema(self):
        from tasting_room.api.schemas import ErrorResponse, ErrorCode

        response = ErrorResponse(error="Session x not found", error_code=ErrorCode.SESSION_NOT_FOUND)

        data = response.model_dump(mode="json")
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["api_version"] == "v1"

    def test_error_codes_match_engine(self):
        """Every engine error code the API can see has an ErrorCode."""
        from tasting_room.api.schemas import ErrorCode
        from tasting_room.engine_core.errors import (
            ValidationError as EngineValidationError, InvalidPhaseError, SessionNotFound,
        )

        for exc in (EngineValidationError, InvalidPhaseError, SessionNotFound):
            assert ErrorCode(exc.error_code)

        for code in ErrorCode:
            assert code.value == code.value.upper()

    def test_phase_enum_matches_engine(self):
        from tasting_room.api.schemas import Phase
        from tasting_room.engine_core.state import GamePhase

        assert [p.value for p in Phase] == [p.value for p in GamePhase]


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_schema_generates(self):
        from tasting_room.api.app import app

        schema = app.openapi()

        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self):
        from tasting_room.api.app import app

        schemas = app.openapi()["components"]["schemas"]

        for name in ["SessionResponse", "GameStateResponse", "CommandResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"

    def test_game_flow_endpoints(self):
        from tasting_room.api.app import app

        paths = app.openapi()["paths"]

        for command in ["setup", "guesses", "submit-round", "next-round", "reveal", "score"]:
            path = f"/api/v1/sessions/{{session_id}}/{command}"
            assert path in paths
            assert "200" in paths[path]["post"]["responses"]
