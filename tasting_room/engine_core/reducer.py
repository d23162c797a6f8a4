"""
Reducer - Applies actions to game state.

The reducer is the single point of state change.
All state changes must go through apply_action() or reduce().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; a rejected action leaves state untouched
- Returns ActionResult with success/failure
- Unknown action types raise ContractViolation and are never recovered
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging

from .state import GameState, GamePhase
from .action import Action, ActionType, ActionResult
from .errors import ContractViolation, InvalidPhaseError, ValidationError
from .setup import validate_roster

logger = logging.getLogger(__name__)


class SetupPolicy(Enum):
    """What SETUP_GAME does once a session has already left setup."""
    REJECT = "reject"  # InvalidPhaseError
    IGNORE = "ignore"  # return state unchanged
    RESTART = "restart"  # overwrite the running session


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """
    setup_policy: SetupPolicy = SetupPolicy.REJECT

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        Raises ContractViolation for action types outside the contract.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            raise ContractViolation(action.action_type)

        try:
            result = handler(state, action)
        except (ValidationError, InvalidPhaseError) as e:
            logger.info("Rejected %s: %s", action.action_type.value, e)
            return ActionResult.failure(str(e), error_code=e.error_code)

        logger.debug(
            "%s: phase=%s round=%d discussion=%s",
            action.action_type.value,
            result.new_state.phase.value,
            result.new_state.current_round,
            result.new_state.is_discussion_phase,
        )
        return result

    def _get_handler(self, action_type):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SETUP_GAME: self._handle_setup_game,
            ActionType.SUBMIT_ROUND: self._handle_submit_round,
            ActionType.NEXT_ROUND: self._handle_next_round,
            ActionType.FINAL_REVEAL: self._handle_final_reveal,
            ActionType.FINAL_SCORE: self._handle_final_score,
        }
        try:
            return handlers.get(action_type)
        except TypeError:
            # unhashable tag
            return None

    def _require_phase(self, state: GameState, action: Action, *phases: GamePhase):
        if state.phase not in phases:
            raise InvalidPhaseError(action.action_type, state.phase)

    def _handle_setup_game(self, state: GameState, action: Action) -> ActionResult:
        """Handle setup: install roster, start tasting at round 0."""
        if state.phase != GamePhase.SETUP:
            if self.setup_policy == SetupPolicy.IGNORE:
                return ActionResult.success_with_state(
                    state,
                    changes=["Setup ignored: session already started"],
                )
            if self.setup_policy == SetupPolicy.REJECT:
                raise InvalidPhaseError(action.action_type, state.phase)
            logger.warning("Restarting session from phase '%s'", state.phase.value)

        players = action.payload.players
        bottles = action.payload.bottles
        validate_roster(players, bottles)

        new_state = GameState(
            players=tuple(players),
            bottles=tuple(bottles),
            current_round=0,
            is_discussion_phase=False,
            phase=GamePhase.TASTING,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Game set up with {len(players)} players and {len(bottles)} bottles"],
        )

    def _handle_submit_round(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle round submission: open discussion for the current bottle.

        Guesses are merged by the caller beforehand (see rounds.record_guesses).
        """
        self._require_phase(state, action, GamePhase.TASTING)

        new_state = state._copy_with(is_discussion_phase=True)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Round {state.current_round + 1} submitted, discussion open"],
        )

    def _handle_next_round(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle advancing to the next bottle.

        No automatic reveal on the last bottle: the caller decides
        between NEXT_ROUND and FINAL_REVEAL.
        """
        self._require_phase(state, action, GamePhase.TASTING)

        if state.current_round + 1 > state.num_rounds:
            raise ValidationError(
                f"No round after {state.current_round} with {state.num_rounds} bottles; "
                "issue FINAL_REVEAL instead"
            )
        if not state.is_discussion_phase:
            logger.debug("NEXT_ROUND issued before round %d was submitted", state.current_round)

        new_state = state._copy_with(
            current_round=state.current_round + 1,
            is_discussion_phase=False,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Advanced to round {new_state.current_round + 1}"],
        )

    def _handle_final_reveal(self, state: GameState, action: Action) -> ActionResult:
        """Handle reveal. Repeating it while already revealed changes nothing."""
        if state.phase == GamePhase.REVEAL:
            return ActionResult.success_with_state(state)

        self._require_phase(state, action, GamePhase.TASTING, GamePhase.TIE_BREAKER)

        new_state = state._copy_with(
            phase=GamePhase.REVEAL,
            is_discussion_phase=False,
        )
        return ActionResult.success_with_state(new_state, changes=["Bottles revealed"])

    def _handle_final_score(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle final scoring.

        Writes back any scores in the payload. From reveal, a reported
        tie routes to tie-breaker instead of final.
        """
        self._require_phase(state, action, GamePhase.REVEAL, GamePhase.TIE_BREAKER)

        new_state = state
        changes = []

        scores = action.payload.scores
        if scores is not None:
            unknown = [name for name in scores if state.get_player(name) is None]
            if unknown:
                raise ValidationError(f"Scores for unknown players: {', '.join(unknown)}")
            new_state = new_state._copy_with(players=tuple(
                p.with_score(scores[p.name]) if p.name in scores else p
                for p in state.players
            ))
            changes.append(f"Scores recorded for {len(scores)} players")

        if action.payload.tie_detected:
            new_state = new_state._copy_with(phase=GamePhase.TIE_BREAKER)
            changes.append("Tie detected, entering tie-breaker")
        else:
            new_state = new_state._copy_with(phase=GamePhase.FINAL)
            changes.append("Final scores locked")

        return ActionResult.success_with_state(new_state, changes=changes)


def apply_action(
    state: GameState,
    action: Action,
    setup_policy: SetupPolicy = SetupPolicy.REJECT,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(setup_policy=setup_policy)
    return reducer.apply(state, action)


def reduce(
    state: GameState,
    action: Action,
    setup_policy: SetupPolicy = SetupPolicy.REJECT,
) -> GameState:
    """
    Apply an action and return the next state.

    Raises ValidationError or InvalidPhaseError instead of returning a
    failed ActionResult.
    """
    reducer = Reducer(setup_policy=setup_policy)
    handler = reducer._get_handler(action.action_type)
    if not handler:
        raise ContractViolation(action.action_type)
    return handler(state, action).new_state
