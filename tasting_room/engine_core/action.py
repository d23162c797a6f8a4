"""
Action System - Commands, payloads, and results.

The five commands drive a session through its phases:
    SETUP_GAME -> (SUBMIT_ROUND -> NEXT_ROUND)* -> FINAL_REVEAL -> FINAL_SCORE

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Bottle, Player


class ActionType(Enum):
    """Types of actions the reducer accepts."""
    SETUP_GAME = "SETUP_GAME"
    SUBMIT_ROUND = "SUBMIT_ROUND"
    NEXT_ROUND = "NEXT_ROUND"
    FINAL_REVEAL = "FINAL_REVEAL"
    FINAL_SCORE = "FINAL_SCORE"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action.

    Only SETUP_GAME and FINAL_SCORE carry data; the round commands are bare.
    Validation happens in the reducer.
    """
    # SETUP_GAME
    players: tuple[Player, ...] = ()
    bottles: tuple[Bottle, ...] = ()

    # FINAL_SCORE: output of the external scoring step
    scores: dict[str, float] | None = None
    tie_detected: bool = False


@dataclass(frozen=True)
class Action:
    """
    A command to be applied to the game state.

    Build through the factories; `action_type` may also be any other value
    when a caller is out of contract, which the reducer treats as fatal.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def setup_game(cls, players, bottles) -> Action:
        """Factory for setup. Players and bottles are installed verbatim."""
        return cls(
            action_type=ActionType.SETUP_GAME,
            payload=ActionPayload(players=tuple(players), bottles=tuple(bottles)),
        )

    @classmethod
    def submit_round(cls) -> Action:
        return cls(action_type=ActionType.SUBMIT_ROUND)

    @classmethod
    def next_round(cls) -> Action:
        return cls(action_type=ActionType.NEXT_ROUND)

    @classmethod
    def final_reveal(cls) -> Action:
        return cls(action_type=ActionType.FINAL_REVEAL)

    @classmethod
    def final_score(
        cls,
        scores: dict[str, float] | None = None,
        tie_detected: bool = False,
    ) -> Action:
        """Factory for final scoring, optionally carrying computed scores."""
        return cls(
            action_type=ActionType.FINAL_SCORE,
            payload=ActionPayload(
                scores=dict(scores) if scores is not None else None,
                tie_detected=tie_detected,
            ),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error message and code (if rejected)
    - Human-readable changes (for UI updates and logs)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
