"""
API Module - Party app interface.

Exposes the engine via REST API. The party app:
1. Creates a session
2. Submits players and bottles
3. Records guesses and walks through the rounds
4. Reveals bottles and submits scores
5. Saves snapshots to survive reloads

All state is session-scoped. No user accounts required.
"""

from .service import APIService
from .app import create_app

__all__ = [
    "APIService",
    "create_app",
]
