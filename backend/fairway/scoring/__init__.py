"""Pure scorecard logic: no database or HTTP access in this package."""

from . import leaderboard, matrix, reconcile, stroke_play

__all__ = [
    "leaderboard",
    "matrix",
    "reconcile",
    "stroke_play",
]
