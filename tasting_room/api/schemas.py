"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the party app and the engine.

Error Codes:
- VALIDATION_ERROR: Payload breaks a session invariant (empty roster, duplicate names...)
- INVALID_PHASE: Command not allowed in the session's current phase
- SESSION_NOT_FOUND: Session does not exist or has ended
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class Phase(str, Enum):
    """Session phase values."""
    SETUP = "setup"
    TASTING = "tasting"
    REVEAL = "reveal"
    TIE_BREAKER = "tie-breaker"
    FINAL = "final"


class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PHASE = "INVALID_PHASE"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class BottleInfo(BaseModel):
    """
    A bottle as shown to players.

    Label fields are null until the bottles are revealed.
    """
    bottle_id: int
    varietal: Optional[str] = None
    producer: Optional[str] = None
    year: Optional[str] = None
    country: Optional[str] = None


class GuessInfo(BaseModel):
    """One recorded guess."""
    bottle_id: int
    ratings: list[float] = Field(description="Nose, Body, Finish, Complexity, Balance")
    guess_varietal: str = ""
    food_pairing: str = ""


class PlayerInfo(BaseModel):
    """Player information for display."""
    name: str
    score: float = 0
    guesses: list[GuessInfo] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class BottleSpec(BaseModel):
    """Label of one bottle, entered by the host during setup."""
    varietal: str = ""
    producer: str = ""
    year: str = ""
    country: str = ""


class SetupRequest(BaseModel):
    """Players and bottles for SETUP_GAME. Bottles are numbered in pour order."""
    players: list[str] = Field(default_factory=list, description="Player names")
    bottles: list[BottleSpec] = Field(default_factory=list)


class GuessEntry(BaseModel):
    """One player's notes on the bottle in the glass."""
    player: str = Field(..., description="Player name")
    ratings: list[float] = Field(..., description="Five ratings on the 1-5 scale")
    guess_varietal: str = ""
    food_pairing: str = ""


class GuessesRequest(BaseModel):
    """Guesses for the current round."""
    guesses: list[GuessEntry] = Field(default_factory=list)


class ScoreRequest(BaseModel):
    """Output of the scoring step, written back on FINAL_SCORE."""
    scores: Optional[dict[str, float]] = Field(None, description="Player name -> total score")
    tie_detected: Optional[bool] = Field(
        None,
        description="Tie signal; derived from scores when omitted",
    )


class RestoreRequest(BaseModel):
    """A snapshot previously returned by GET /snapshot."""
    snapshot: dict[str, Any]


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Session summary."""
    session_id: str
    phase: Phase
    current_round: int = 0
    num_rounds: int = 0
    player_count: int = 0
    is_active: bool = True
    created_at: float


class GameStateResponse(BaseModel):
    """Full state of a session."""
    session_id: str
    phase: Phase
    current_round: int
    num_rounds: int
    is_discussion_phase: bool
    current_bottle_id: Optional[int] = None
    missing_guesses: list[str] = Field(
        default_factory=list,
        description="Players without a guess for the current bottle",
    )
    players: list[PlayerInfo] = Field(default_factory=list)
    bottles: list[BottleInfo] = Field(default_factory=list)


class CommandResponse(BaseModel):
    """Result of a state-changing command."""
    success: bool = True
    changes: list[str] = Field(default_factory=list)
    state: GameStateResponse


class SnapshotResponse(BaseModel):
    session_id: str
    snapshot: dict[str, Any]


class SessionListResponse(BaseModel):
    sessions: list[str] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "tasting-room"
    version: str = "1.0.0"
