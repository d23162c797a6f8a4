"""
FastAPI Application - REST API for the party app.

Endpoints:
    POST   /api/v1/sessions                     Create session
    GET    /api/v1/sessions                     List sessions
    POST   /api/v1/sessions/restore             Create session from a snapshot
    GET    /api/v1/sessions/{id}                Get session status
    DELETE /api/v1/sessions/{id}                End session
    GET    /api/v1/sessions/{id}/state          Get game state
    POST   /api/v1/sessions/{id}/setup          Set up players and bottles
    POST   /api/v1/sessions/{id}/guesses        Record guesses for this round
    POST   /api/v1/sessions/{id}/submit-round   Open discussion
    POST   /api/v1/sessions/{id}/next-round     Move to the next bottle
    POST   /api/v1/sessions/{id}/reveal         Reveal bottles
    POST   /api/v1/sessions/{id}/score          Lock final scores
    POST   /api/v1/sessions/{id}/undo           Restore previous state
    GET    /api/v1/sessions/{id}/snapshot       Serialized state

Round flow:
    1. POST /guesses with every player's notes on the current bottle
    2. POST /submit-round (discussion opens)
    3. POST /next-round, or POST /reveal after the last bottle

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated
import os

from ..engine_core.reducer import SetupPolicy

# Environment configuration
TASTING_ENV = os.getenv("TASTING_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
TASTING_SETUP_POLICY = os.getenv("TASTING_SETUP_POLICY", SetupPolicy.REJECT.value)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body, Query, Request
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from ..engine_core.errors import TastingRoomError
    from ..engine_core.rounds import missing_guesses
    from ..session import SessionManager
    from .schemas import (
        # Request models
        SetupRequest,
        GuessesRequest,
        ScoreRequest,
        RestoreRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        CommandResponse,
        SnapshotResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
        Phase,
        # Nested models
        PlayerInfo,
        GuessInfo,
        BottleInfo,
    )

    app = FastAPI(
        title="Tasting Room API",
        description="""
Blind wine tasting party game engine.

## Phases

`setup` → `tasting` → `reveal` → (`tie-breaker`) → `final`

Commands not allowed in the current phase return `INVALID_PHASE` and
leave the session untouched.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Payload breaks a session invariant |
| `INVALID_PHASE` | Command not allowed in the current phase |
| `SESSION_NOT_FOUND` | Session does not exist |
        """,
        version="1.0.0",
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

    # Service instance
    api_service = service or APIService(
        session_manager=SessionManager(setup_policy=SetupPolicy(TASTING_SETUP_POLICY)),
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.VALIDATION_ERROR: 422,
        ErrorCode.INVALID_PHASE: 409,
        ErrorCode.SESSION_NOT_FOUND: 404,
    }

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_codes.get(error_code, 500),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(TastingRoomError)
    async def engine_error_handler(request: Request, exc: TastingRoomError):
        try:
            code = ErrorCode(exc.error_code)
        except ValueError:
            code = ErrorCode.INTERNAL_ERROR
        return make_error_response(code, str(exc))

    def command_response(session_id: str, result) -> CommandResponse | JSONResponse:
        """Convert an ActionResult, mapping rejections to errors."""
        if not result.success:
            return make_error_response(ErrorCode(result.error_code), result.error)
        return CommandResponse(
            success=True,
            changes=result.state_changes,
            state=_convert_game_state(session_id, result.new_state),
        )

    error_responses = {
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Command not allowed in this phase"},
        422: {"model": ErrorResponse, "description": "Invalid payload"},
    }

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new tasting session",
    )
    async def create_session() -> SessionResponse:
        """Create an empty session in the setup phase."""
        session = api_service.create_session()
        return _convert_session(session)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.post(
        "/api/v1/sessions/restore",
        response_model=SessionResponse,
        responses={422: error_responses[422]},
        tags=["Sessions"],
        summary="Resume a session from a snapshot",
    )
    async def restore_session(request: RestoreRequest) -> SessionResponse:
        """Create a new session in the same phase the snapshot was taken."""
        session = api_service.restore(request.snapshot)
        return _convert_session(session)

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: error_responses[404]},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return _convert_session(api_service.get_session(session_id))

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
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: error_responses[404]},
        tags=["Sessions"],
        summary="Get game state",
    )
    async def get_state(session_id: str) -> GameStateResponse:
        session = api_service.get_session(session_id)
        return _convert_game_state(session_id, session.state)

    # =========================================================================
    # Game Flow Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/setup",
        response_model=CommandResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Set up players and bottles",
    )
    async def setup_game(session_id: str, request: SetupRequest):
        result = api_service.setup_game(
            session_id,
            request.players,
            [b.model_dump() for b in request.bottles],
        )
        return command_response(session_id, result)

    @app.post(
        "/api/v1/sessions/{session_id}/guesses",
        response_model=GameStateResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Record guesses for the current bottle",
    )
    async def record_guesses(session_id: str, request: GuessesRequest) -> GameStateResponse:
        state = api_service.record_guesses(
            session_id,
            [
                (g.player, g.ratings, g.guess_varietal, g.food_pairing)
                for g in request.guesses
            ],
        )
        return _convert_game_state(session_id, state)

    @app.post(
        "/api/v1/sessions/{session_id}/submit-round",
        response_model=CommandResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Submit the round and open discussion",
    )
    async def submit_round(session_id: str):
        return command_response(session_id, api_service.submit_round(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/next-round",
        response_model=CommandResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Move to the next bottle",
    )
    async def next_round(session_id: str):
        return command_response(session_id, api_service.next_round(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/reveal",
        response_model=CommandResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Reveal the bottles",
    )
    async def final_reveal(session_id: str):
        return command_response(session_id, api_service.final_reveal(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/score",
        response_model=CommandResponse,
        responses=error_responses,
        tags=["Game Flow"],
        summary="Lock final scores",
    )
    async def final_score(
        session_id: str,
        request: Annotated[ScoreRequest, Body()] = ScoreRequest(),
    ):
        """
        Write back scores and finish the game.

        A tie (given, or derived from the scores) routes through tie-breaker.
        """
        result = api_service.final_score(
            session_id,
            scores=request.scores,
            tie_detected=request.tie_detected,
        )
        return command_response(session_id, result)

    @app.post(
        "/api/v1/sessions/{session_id}/undo",
        response_model=GameStateResponse,
        responses={404: error_responses[404]},
        tags=["Game Flow"],
        summary="Restore the previous state",
    )
    async def undo(session_id: str) -> GameStateResponse:
        api_service.undo(session_id)
        session = api_service.get_session(session_id)
        return _convert_game_state(session_id, session.state)

    @app.get(
        "/api/v1/sessions/{session_id}/snapshot",
        response_model=SnapshotResponse,
        responses={404: error_responses[404]},
        tags=["Sessions"],
        summary="Get a serialized snapshot of the state",
    )
    async def get_snapshot(session_id: str) -> SnapshotResponse:
        return SnapshotResponse(
            session_id=session_id,
            snapshot=api_service.snapshot(session_id),
        )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="tasting-room",
            version="1.0.0",
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Tasting Room API",
            "version": "1.0.0",
            "env": TASTING_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _convert_session(session) -> SessionResponse:
        state = session.state
        return SessionResponse(
            session_id=session.session_id,
            phase=Phase(state.phase.value),
            current_round=state.current_round,
            num_rounds=state.num_rounds,
            player_count=len(state.players),
            is_active=session.is_active(),
            created_at=session.created_at,
        )

    def _convert_game_state(session_id: str, state) -> GameStateResponse:
        """Convert GameState to the Pydantic model, hiding labels before the reveal."""
        from ..engine_core.state import GamePhase

        revealed = state.phase in {GamePhase.REVEAL, GamePhase.TIE_BREAKER, GamePhase.FINAL}
        current = state.current_bottle
        return GameStateResponse(
            session_id=session_id,
            phase=Phase(state.phase.value),
            current_round=state.current_round,
            num_rounds=state.num_rounds,
            is_discussion_phase=state.is_discussion_phase,
            current_bottle_id=current.bottle_id if current else None,
            missing_guesses=missing_guesses(state) if state.phase == GamePhase.TASTING else [],
            players=[
                PlayerInfo(
                    name=p.name,
                    score=p.score,
                    guesses=[
                        GuessInfo(
                            bottle_id=g.bottle_id,
                            ratings=list(g.ratings),
                            guess_varietal=g.guess_varietal,
                            food_pairing=g.food_pairing,
                        )
                        for g in p.guesses
                    ],
                )
                for p in state.players
            ],
            bottles=[
                BottleInfo(
                    bottle_id=b.bottle_id,
                    varietal=b.varietal,
                    producer=b.producer,
                    year=b.year,
                    country=b.country,
                ) if revealed else BottleInfo(bottle_id=b.bottle_id)
                for b in state.bottles
            ],
        )

    return app


# For running directly: uvicorn tasting_room.api.app:app
app = create_app()
