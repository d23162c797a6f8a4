"""
Engine Core - Deterministic tasting session state management.

The engine is the runtime that:
1. Holds the canonical GameState
2. Applies commands via the reducer
3. Rejects commands that are illegal for the current phase
4. Serializes state for reloads
"""

from .state import (
    GameState, GamePhase, Player, PlayerGuess, Bottle,
    RATING_CATEGORIES, RATING_MIN, RATING_MAX,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, SetupPolicy, apply_action, reduce
from .errors import (
    TastingRoomError, ContractViolation, ValidationError,
    InvalidPhaseError, SessionNotFound,
)
from .setup import build_roster, validate_roster
from .rounds import (
    ScoringStrategy, make_guess, record_guesses, missing_guesses,
    score_players, detect_tie, leaders, average_ratings,
)
from .snapshot import dump_state, load_state, dumps_state, loads_state

__all__ = [
    "GameState",
    "GamePhase",
    "Player",
    "PlayerGuess",
    "Bottle",
    "RATING_CATEGORIES",
    "RATING_MIN",
    "RATING_MAX",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "SetupPolicy",
    "apply_action",
    "reduce",
    "TastingRoomError",
    "ContractViolation",
    "ValidationError",
    "InvalidPhaseError",
    "SessionNotFound",
    "build_roster",
    "validate_roster",
    "ScoringStrategy",
    "make_guess",
    "record_guesses",
    "missing_guesses",
    "score_players",
    "detect_tie",
    "leaders",
    "average_ratings",
    "dump_state",
    "load_state",
    "dumps_state",
    "loads_state",
]
