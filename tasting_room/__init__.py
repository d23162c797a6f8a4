"""
Tasting Room - Blind wine tasting party game engine.

Players rate unlabeled bottles, guess what is in the glass, and are scored
once the bottles are revealed. The engine provides:
- Canonical session state
- A pure reducer enforcing the phase sequence
- Guess recording and score write-back helpers
- Snapshot serialization for reloads
"""

__version__ = "0.1.0"
