"""
Session Module - Manages in-memory tasting sessions.

A session represents one tasting party:
- Created when the host opens a room
- Holds the current game state and its undo history
- Applies commands in dispatch order
- Destroyed when the party ends
"""

from .manager import SessionManager, Session

__all__ = [
    "SessionManager",
    "Session",
]
