"""
Game State - The canonical tasting session state.

Design principles:
- Immutable: every value is a frozen dataclass, all changes return new state
- Serializable: plain fields only, see snapshot.py
- Single source of truth: only the reducer produces new GameState values
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


# Order matters: PlayerGuess.ratings follows it.
RATING_CATEGORIES = ("nose", "body", "finish", "complexity", "balance")
RATING_MIN = 1
RATING_MAX = 5


class GamePhase(Enum):
    """Session phases, in the order a session moves through them."""
    SETUP = "setup"
    TASTING = "tasting"
    REVEAL = "reveal"
    TIE_BREAKER = "tie-breaker"
    FINAL = "final"

    @property
    def is_terminal(self) -> bool:
        return self is GamePhase.FINAL


@dataclass(frozen=True)
class Bottle:
    """
    A tasting sample whose identity stays hidden until the reveal.

    Created once during setup; `bottle_id` is stable for the session.
    """
    bottle_id: int
    varietal: str
    producer: str
    year: str
    country: str


@dataclass(frozen=True)
class PlayerGuess:
    """One player's notes on one bottle."""
    bottle_id: int
    ratings: tuple[float, ...]  # see RATING_CATEGORIES
    guess_varietal: str = ""
    food_pairing: str = ""

    def rating(self, category: str) -> float:
        """Get a rating by category name."""
        return self.ratings[RATING_CATEGORIES.index(category)]


@dataclass(frozen=True)
class Player:
    """
    A player in the session.

    `guesses` grows by one entry per completed round.
    `score` stays 0 until final scoring writes it back.
    """
    name: str
    guesses: tuple[PlayerGuess, ...] = ()
    score: float = 0

    def guess_for(self, bottle_id: int) -> PlayerGuess | None:
        """Get this player's guess for a bottle, if any."""
        for guess in self.guesses:
            if guess.bottle_id == bottle_id:
                return guess
        return None

    def with_guess(self, guess: PlayerGuess) -> Player:
        """Return new player with a guess appended."""
        return Player(name=self.name, guesses=self.guesses + (guess,), score=self.score)

    def with_score(self, score: float) -> Player:
        """Return new player with score replaced."""
        return Player(name=self.name, guesses=self.guesses, score=score)


@dataclass(frozen=True)
class GameState:
    """
    Complete session state at a point in time.

    This is the canonical state the reducer operates on.
    """
    players: tuple[Player, ...] = field(default_factory=tuple)
    bottles: tuple[Bottle, ...] = field(default_factory=tuple)
    current_round: int = 0
    is_discussion_phase: bool = False
    phase: GamePhase = GamePhase.SETUP

    @classmethod
    def initial(cls) -> GameState:
        """State of a freshly created session."""
        return cls()

    @property
    def num_rounds(self) -> int:
        return len(self.bottles)

    @property
    def current_bottle(self) -> Bottle | None:
        """The bottle being tasted this round, None once rounds run out."""
        if 0 <= self.current_round < len(self.bottles):
            return self.bottles[self.current_round]
        return None

    @property
    def is_last_round(self) -> bool:
        return self.current_round + 1 >= len(self.bottles)

    def get_player(self, name: str) -> Player | None:
        """Get player by name."""
        for p in self.players:
            if p.name == name:
                return p
        return None

    def get_bottle(self, bottle_id: int) -> Bottle | None:
        """Get bottle by id."""
        for b in self.bottles:
            if b.bottle_id == bottle_id:
                return b
        return None

    def bottle_ids(self) -> set[int]:
        return {b.bottle_id for b in self.bottles}

    def with_player(self, player: Player) -> GameState:
        """Return new state with updated player (matched by name)."""
        new_players = tuple(
            player if p.name == player.name else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            players=kwargs.get("players", self.players),
            bottles=kwargs.get("bottles", self.bottles),
            current_round=kwargs.get("current_round", self.current_round),
            is_discussion_phase=kwargs.get("is_discussion_phase", self.is_discussion_phase),
            phase=kwargs.get("phase", self.phase),
        )
