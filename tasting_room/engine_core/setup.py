"""
Session setup - builds and validates the roster handed to SETUP_GAME.

The setup screen collects player names and bottle labels. This module
turns them into Player/Bottle values and checks the invariants the
reducer relies on once the session leaves setup.
"""

from __future__ import annotations
from typing import Any, Iterable, Mapping

from .errors import ValidationError
from .state import Bottle, Player


BOTTLE_FIELDS = ("varietal", "producer", "year", "country")


def validate_roster(players: Iterable[Player], bottles: Iterable[Bottle]):
    """
    Check a setup payload.

    Raises ValidationError if either list is empty, a player name or
    bottle id repeats, or a pre-existing guess points at an unknown bottle.
    """
    players = list(players)
    bottles = list(bottles)

    if not players:
        raise ValidationError("At least one player is required")
    if not bottles:
        raise ValidationError("At least one bottle is required")

    names = [p.name for p in players]
    if any(not isinstance(name, str) for name in names):
        raise ValidationError("Player names must be strings")
    if any(not name.strip() for name in names):
        raise ValidationError("Player names must not be blank")
    duplicates = _duplicates(names)
    if duplicates:
        raise ValidationError(f"Duplicate player names: {', '.join(duplicates)}")

    ids = [b.bottle_id for b in bottles]
    duplicates = _duplicates(ids)
    if duplicates:
        raise ValidationError(
            f"Duplicate bottle ids: {', '.join(str(i) for i in duplicates)}"
        )

    known = set(ids)
    for player in players:
        for guess in player.guesses:
            if guess.bottle_id not in known:
                raise ValidationError(
                    f"Guess by {player.name} references unknown bottle {guess.bottle_id}"
                )


def build_roster(
    player_names: Iterable[str],
    bottle_specs: Iterable[Mapping[str, Any]],
) -> tuple[tuple[Player, ...], tuple[Bottle, ...]]:
    """
    Build players and bottles from raw setup input.

    Args:
        player_names: Display names, in seating order
        bottle_specs: Dicts with varietal/producer/year/country, in pour order

    Returns:
        (players, bottles) ready for Action.setup_game()

    Bottles get ids 1..n in pour order. Names are stripped of
    surrounding whitespace; missing label fields become "".
    """
    players = tuple(Player(name=str(name).strip()) for name in player_names)

    bottles = []
    for index, spec in enumerate(bottle_specs, start=1):
        bottles.append(Bottle(
            bottle_id=index,
            varietal=str(spec.get("varietal", "") or "").strip(),
            producer=str(spec.get("producer", "") or "").strip(),
            year=str(spec.get("year", "") or "").strip(),
            country=str(spec.get("country", "") or "").strip(),
        ))
    bottles = tuple(bottles)

    validate_roster(players, bottles)
    return players, bottles


def _duplicates(values: list) -> list:
    seen = set()
    dupes = []
    for value in values:
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return dupes
