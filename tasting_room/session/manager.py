"""
Session Manager - Creates and manages tasting sessions.

LIFECYCLE:
1. Host creates a session (phase setup, empty roster)
2. Host submits players and bottles -> SETUP_GAME
3. Each round:
   - Rating screen records every player's guess for the current bottle
   - SUBMIT_ROUND opens discussion
   - NEXT_ROUND moves to the next bottle (or FINAL_REVEAL after the last)
4. FINAL_SCORE writes scores back; a tie routes through tie-breaker
5. Session ends -> removed from memory

Sessions are in-memory. A snapshot (see engine_core.snapshot) is the only
way to carry one across a restart.

A Session is handed to whatever needs the state; nothing looks it up globally.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping
import logging
import time
import uuid

from ..engine_core.state import GameState, GamePhase, PlayerGuess
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer, SetupPolicy
from ..engine_core.errors import SessionNotFound
from ..engine_core.rounds import record_guesses

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One tasting party.

    Owns the only GameState for the party. Commands are applied in the
    order dispatch() is called; every accepted command pushes the
    previous state onto `history` for undo.
    """
    session_id: str
    created_at: float
    reducer: Reducer = field(default_factory=Reducer)
    game_state: GameState = field(default_factory=GameState.initial)
    history: list[GameState] = field(default_factory=list)
    updated_at: float = 0.0

    @property
    def state(self) -> GameState:
        """Read-only view of the current state."""
        return self.game_state

    @property
    def phase(self) -> GamePhase:
        return self.game_state.phase

    def is_active(self) -> bool:
        """Check if the session is still being played."""
        return not self.game_state.phase.is_terminal

    def dispatch(self, action: Action) -> ActionResult:
        """
        Apply a command to this session.

        On failure the state is left as it was.
        """
        result = self.reducer.apply(self.game_state, action)
        if result.success and result.new_state is not self.game_state:
            self._commit(result.new_state)
        return result

    def record_guesses(self, guesses: Mapping[str, PlayerGuess]) -> GameState:
        """Record guesses for this round. Raises ValidationError on bad input."""
        new_state = record_guesses(self.game_state, guesses)
        if new_state is not self.game_state:
            self._commit(new_state)
        return new_state

    def undo(self) -> bool:
        """Restore the previous state. Returns False if there is none."""
        if not self.history:
            return False
        self.game_state = self.history.pop()
        self.updated_at = time.time()
        logger.info("Session %s undone to phase '%s'", self.session_id, self.phase.value)
        return True

    def _commit(self, new_state: GameState):
        self.history.append(self.game_state)
        self.game_state = new_state
        self.updated_at = time.time()


class SessionManager:
    """
    Manages tasting sessions.

    Responsibilities:
    - Create sessions (fresh or from a snapshot)
    - Track active sessions
    - Clean up stale sessions
    """

    def __init__(self, setup_policy: SetupPolicy = SetupPolicy.REJECT):
        self.setup_policy = setup_policy
        self._sessions: dict[str, Session] = {}

    def create_session(self, initial_state: GameState | None = None) -> Session:
        """
        Create a new session.

        Args:
            initial_state: Restored state to resume from (defaults to setup)

        Returns:
            New Session
        """
        now = time.time()
        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=now,
            reducer=Reducer(setup_policy=self.setup_policy),
            game_state=initial_state or GameState.initial(),
            updated_at=now,
        )
        self._sessions[session.session_id] = session
        logger.info(
            "Session %s created in phase '%s'", session.session_id, session.phase.value
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """Get a session by ID, raising SessionNotFound if missing."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """End a session and drop it from memory."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[str]:
        """List IDs of all sessions."""
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions not yet in the final phase."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 6 * 3600) -> list[str]:
        """
        End sessions untouched for longer than max_age_seconds.

        Returns the IDs removed.
        """
        current_time = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if current_time - session.updated_at > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
