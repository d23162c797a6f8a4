"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine commands
2. Manages sessions
3. Bridges the round collaborators (guess recording, score write-back)

This layer is framework-agnostic. Engine errors propagate as
TastingRoomError subclasses; rejected commands come back as a failed
ActionResult.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..engine_core.action import Action, ActionResult
from ..engine_core.errors import ValidationError
from ..engine_core.rounds import detect_tie, make_guess
from ..engine_core.setup import build_roster
from ..engine_core.snapshot import dump_state, load_state
from ..engine_core.state import GameState
from ..session import Session, SessionManager


@dataclass
class APIService:
    """
    Main API service for the party app.

    Usage:
        service = APIService()

        session = service.create_session()
        service.setup_game(session.session_id, ["Ana", "Ben"], [{"varietal": "Syrah"}])
        service.record_guesses(session.session_id, [("Ana", [4, 3, 4, 3, 5], "Syrah", "Lamb")])
        service.submit_round(session.session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def create_session(self) -> Session:
        return self.session_manager.create_session()

    def get_session(self, session_id: str) -> Session:
        """Raises SessionNotFound if missing."""
        return self.session_manager.require_session(session_id)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def undo(self, session_id: str) -> bool:
        return self.get_session(session_id).undo()

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def setup_game(
        self,
        session_id: str,
        player_names: Iterable[str],
        bottle_specs: Iterable[Mapping[str, Any]],
    ) -> ActionResult:
        """Build the roster from raw input and dispatch SETUP_GAME."""
        session = self.get_session(session_id)
        players, bottles = build_roster(player_names, bottle_specs)
        return session.dispatch(Action.setup_game(players, bottles))

    def record_guesses(
        self,
        session_id: str,
        entries: Iterable[tuple[str, list[float], str, str]],
    ) -> GameState:
        """
        Record (player, ratings, guess_varietal, food_pairing) entries
        against the bottle currently being tasted.
        """
        session = self.get_session(session_id)
        bottle = session.state.current_bottle
        if bottle is None:
            raise ValidationError("No bottle is being tasted")

        guesses = {}
        for name, ratings, guess_varietal, food_pairing in entries:
            if name in guesses:
                raise ValidationError(f"Duplicate guess for {name}")
            guesses[name] = make_guess(bottle.bottle_id, ratings, guess_varietal, food_pairing)
        return session.record_guesses(guesses)

    def submit_round(self, session_id: str) -> ActionResult:
        return self.get_session(session_id).dispatch(Action.submit_round())

    def next_round(self, session_id: str) -> ActionResult:
        return self.get_session(session_id).dispatch(Action.next_round())

    def final_reveal(self, session_id: str) -> ActionResult:
        return self.get_session(session_id).dispatch(Action.final_reveal())

    def final_score(
        self,
        session_id: str,
        scores: Mapping[str, float] | None = None,
        tie_detected: bool | None = None,
    ) -> ActionResult:
        """
        Dispatch FINAL_SCORE.

        When tie_detected is not given it is derived from the scores.
        """
        if tie_detected is None:
            tie_detected = detect_tie(scores) if scores else False
        action = Action.final_score(scores=scores, tie_detected=tie_detected)
        return self.get_session(session_id).dispatch(action)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self, session_id: str) -> dict[str, Any]:
        return dump_state(self.get_session(session_id).state)

    def restore(self, snapshot: dict[str, Any]) -> Session:
        """Create a new session resuming from a snapshot."""
        state = load_state(snapshot)
        return self.session_manager.create_session(initial_state=state)
