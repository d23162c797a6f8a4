"""
Pytest fixtures for Tasting Room tests.
"""

import pytest

from ..engine_core.state import GameState, GamePhase, Player, Bottle
from ..engine_core.action import Action
from ..engine_core.reducer import reduce
from ..engine_core.rounds import make_guess, record_guesses


@pytest.fixture
def bottles() -> tuple[Bottle, ...]:
    """Three bottles in pour order."""
    return (
        Bottle(bottle_id=1, varietal="Pinot Noir", producer="Domaine Serene", year="2019", country="USA"),
        Bottle(bottle_id=2, varietal="Syrah", producer="Guigal", year="2017", country="France"),
        Bottle(bottle_id=3, varietal="Nebbiolo", producer="Vietti", year="2016", country="Italy"),
    )


@pytest.fixture
def players() -> tuple[Player, ...]:
    return (Player(name="Ana"), Player(name="Ben"))


@pytest.fixture
def setup_state() -> GameState:
    """A fresh session waiting for setup."""
    return GameState.initial()


@pytest.fixture
def tasting_state(players, bottles) -> GameState:
    """Session just set up: tasting round 0."""
    return reduce(GameState.initial(), Action.setup_game(players, bottles))


@pytest.fixture
def discussion_state(tasting_state) -> GameState:
    """Round 0 guessed and submitted."""
    state = record_guesses(tasting_state, {
        "Ana": make_guess(1, [4, 3, 4, 3, 4], "Pinot Noir", "Salmon"),
        "Ben": make_guess(1, [3, 3, 2, 3, 3], "Gamay", "Charcuterie"),
    })
    return reduce(state, Action.submit_round())


@pytest.fixture
def reveal_state(discussion_state) -> GameState:
    return reduce(discussion_state, Action.final_reveal())


@pytest.fixture
def tie_breaker_state(reveal_state) -> GameState:
    return reduce(
        reveal_state,
        Action.final_score(scores={"Ana": 3, "Ben": 3}, tie_detected=True),
    )


@pytest.fixture
def final_state(reveal_state) -> GameState:
    state = reduce(reveal_state, Action.final_score(scores={"Ana": 5, "Ben": 2}))
    assert state.phase == GamePhase.FINAL
    return state
