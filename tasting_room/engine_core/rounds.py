"""
Round collaborators - guess recording and score write-back.

These run beside the reducer, never inside it:
- The rating screen records each player's guess for the current bottle,
  then dispatches SUBMIT_ROUND.
- After the reveal, a scoring strategy turns guesses into numbers and
  the result travels in the FINAL_SCORE payload.

No scoring rules live here; a ScoringStrategy is supplied by the caller.
"""

from __future__ import annotations
from typing import Iterable, Mapping, Protocol, Sequence

from .errors import ValidationError
from .state import (
    Bottle, GamePhase, GameState, PlayerGuess,
    RATING_CATEGORIES, RATING_MIN, RATING_MAX,
)


class ScoringStrategy(Protocol):
    """Scores one guess against the revealed bottle."""

    def __call__(self, guess: PlayerGuess, true_bottle: Bottle) -> float:
        ...


def make_guess(
    bottle_id: int,
    ratings: Sequence[float],
    guess_varietal: str = "",
    food_pairing: str = "",
) -> PlayerGuess:
    """
    Build a PlayerGuess, checking the ratings.

    Ratings must be one value per RATING_CATEGORIES entry, each within
    RATING_MIN..RATING_MAX.
    """
    ratings = tuple(ratings)
    if len(ratings) != len(RATING_CATEGORIES):
        raise ValidationError(
            f"Expected {len(RATING_CATEGORIES)} ratings "
            f"({', '.join(RATING_CATEGORIES)}), got {len(ratings)}"
        )
    for category, value in zip(RATING_CATEGORIES, ratings):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Rating for {category} must be a number")
        if not RATING_MIN <= value <= RATING_MAX:
            raise ValidationError(
                f"Rating for {category} must be between {RATING_MIN} and {RATING_MAX}, got {value}"
            )
    return PlayerGuess(
        bottle_id=bottle_id,
        ratings=ratings,
        guess_varietal=guess_varietal,
        food_pairing=food_pairing,
    )


def record_guesses(state: GameState, guesses: Mapping[str, PlayerGuess]) -> GameState:
    """
    Append one guess per named player for the bottle in the glass.

    Only accepted while tasting, before the round is submitted, and only
    for `state.current_bottle`.
    All-or-nothing: every guess is checked before any is applied.
    Returns a new state; `state` is untouched.
    """
    if state.phase != GamePhase.TASTING:
        raise ValidationError(f"Guesses can only be recorded while tasting, not '{state.phase.value}'")
    if state.is_discussion_phase:
        raise ValidationError("Round already submitted; guesses are closed until the next round")
    current = state.current_bottle
    if current is None:
        raise ValidationError("No bottle is being tasted")

    known = state.bottle_ids()
    for name, guess in guesses.items():
        player = state.get_player(name)
        if player is None:
            raise ValidationError(f"Unknown player: {name}")
        if guess.bottle_id not in known:
            raise ValidationError(f"Guess by {name} references unknown bottle {guess.bottle_id}")
        if guess.bottle_id != current.bottle_id:
            raise ValidationError(
                f"Guess by {name} is for bottle {guess.bottle_id}, "
                f"but bottle {current.bottle_id} is being tasted"
            )
        if player.guess_for(guess.bottle_id) is not None:
            raise ValidationError(f"{name} already recorded a guess for bottle {guess.bottle_id}")

    new_state = state
    for name, guess in guesses.items():
        new_state = new_state.with_player(new_state.get_player(name).with_guess(guess))
    return new_state


def missing_guesses(state: GameState) -> list[str]:
    """Names of players with no guess yet for the current bottle."""
    bottle = state.current_bottle
    if bottle is None:
        return []
    return [p.name for p in state.players if p.guess_for(bottle.bottle_id) is None]


def score_players(state: GameState, strategy: ScoringStrategy) -> dict[str, float]:
    """
    Total each player's score over all their guesses.

    Guesses are matched to bottles by id, so reveal order does not matter.
    """
    scores = {}
    for player in state.players:
        total = 0
        for guess in player.guesses:
            bottle = state.get_bottle(guess.bottle_id)
            if bottle is None:
                raise ValidationError(f"Guess by {player.name} references unknown bottle {guess.bottle_id}")
            total += strategy(guess, bottle)
        scores[player.name] = total
    return scores


def detect_tie(scores: Mapping[str, float]) -> bool:
    """True if more than one player shares the top score."""
    if not scores:
        return False
    top = max(scores.values())
    return sum(1 for s in scores.values() if s == top) > 1


def leaders(scores: Mapping[str, float]) -> list[str]:
    """Players holding the top score, in input order."""
    if not scores:
        return []
    top = max(scores.values())
    return [name for name, s in scores.items() if s == top]


def average_ratings(guesses: Iterable[PlayerGuess]) -> dict[str, float]:
    """Average rating per category across guesses (e.g. all guesses on one bottle)."""
    guesses = list(guesses)
    if not guesses:
        return {}
    return {
        category: sum(g.ratings[i] for g in guesses) / len(guesses)
        for i, category in enumerate(RATING_CATEGORIES)
    }
