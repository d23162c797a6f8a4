"""
Snapshots - structural serialization of GameState.

A snapshot is the whole state as plain JSON-compatible data, so a page
reload (or a server restart) can resume a session in the same phase.
Loading validates the state invariants; a corrupt snapshot raises
ValidationError rather than producing a state the reducer cannot trust.
"""

from __future__ import annotations
import json
from typing import Any

from .errors import ValidationError
from .rounds import make_guess
from .setup import validate_roster
from .state import Bottle, GamePhase, GameState, Player


def dump_state(state: GameState) -> dict[str, Any]:
    """Convert state to a JSON-compatible dict."""
    return {
        "phase": state.phase.value,
        "current_round": state.current_round,
        "is_discussion_phase": state.is_discussion_phase,
        "bottles": [
            {
                "bottle_id": b.bottle_id,
                "varietal": b.varietal,
                "producer": b.producer,
                "year": b.year,
                "country": b.country,
            }
            for b in state.bottles
        ],
        "players": [
            {
                "name": p.name,
                "score": p.score,
                "guesses": [
                    {
                        "bottle_id": g.bottle_id,
                        "ratings": list(g.ratings),
                        "guess_varietal": g.guess_varietal,
                        "food_pairing": g.food_pairing,
                    }
                    for g in p.guesses
                ],
            }
            for p in state.players
        ],
    }


def load_state(data: dict[str, Any]) -> GameState:
    """
    Rebuild state from dump_state() output.

    Field types are checked strictly and every guess goes through
    make_guess(), so a snapshot cannot hold anything record_guesses()
    would have refused.

    Raises ValidationError for missing fields or broken invariants.
    """
    try:
        phase = GamePhase(data["phase"])
        bottles = tuple(
            Bottle(
                bottle_id=_integer(b["bottle_id"], "bottle_id"),
                varietal=_string(b["varietal"], "varietal"),
                producer=_string(b["producer"], "producer"),
                year=_string(b["year"], "year"),
                country=_string(b["country"], "country"),
            )
            for b in data["bottles"]
        )
        players = tuple(
            Player(
                name=_string(p["name"], "player name"),
                score=_number(p.get("score", 0), "score"),
                guesses=tuple(
                    make_guess(
                        _integer(g["bottle_id"], "bottle_id"),
                        g["ratings"],
                        _string(g.get("guess_varietal", ""), "guess_varietal"),
                        _string(g.get("food_pairing", ""), "food_pairing"),
                    )
                    for g in p.get("guesses", [])
                ),
            )
            for p in data["players"]
        )
        state = GameState(
            players=players,
            bottles=bottles,
            current_round=_integer(data["current_round"], "current_round"),
            is_discussion_phase=_flag(data["is_discussion_phase"], "is_discussion_phase"),
            phase=phase,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Malformed snapshot: {e!r}") from e

    check_invariants(state)
    return state


def dumps_state(state: GameState, indent: int | None = None) -> str:
    """Serialize state to JSON text."""
    return json.dumps(dump_state(state), indent=indent)


def loads_state(text: str) -> GameState:
    """Deserialize state from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Snapshot must be a JSON object")
    return load_state(data)


def check_invariants(state: GameState):
    """Raise ValidationError if state could not have come from the reducer."""
    if not 0 <= state.current_round <= len(state.bottles):
        raise ValidationError(
            f"current_round {state.current_round} outside 0..{len(state.bottles)}"
        )
    if state.is_discussion_phase and state.phase != GamePhase.TASTING:
        raise ValidationError("Discussion flag set outside the tasting phase")

    if state.phase == GamePhase.SETUP:
        if state.players or state.bottles or state.current_round:
            raise ValidationError("Setup phase snapshot must not carry a roster")
        return

    validate_roster(state.players, state.bottles)

    # Guesses only exist for bottles already poured, at most one per bottle.
    pour_index = {b.bottle_id: i for i, b in enumerate(state.bottles)}
    for player in state.players:
        seen = set()
        for guess in player.guesses:
            if guess.bottle_id in seen:
                raise ValidationError(
                    f"{player.name} has more than one guess for bottle {guess.bottle_id}"
                )
            seen.add(guess.bottle_id)
            if pour_index[guess.bottle_id] > state.current_round:
                raise ValidationError(
                    f"Guess by {player.name} for bottle {guess.bottle_id} "
                    f"is ahead of round {state.current_round}"
                )


def _string(value, what: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"Malformed snapshot: {what} must be a string, got {value!r}")
    return value


def _integer(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Malformed snapshot: {what} must be an integer, got {value!r}")
    return value


def _number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Malformed snapshot: {what} must be a number, got {value!r}")
    return value


def _flag(value, what: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"Malformed snapshot: {what} must be true or false, got {value!r}")
    return value
