"""Application services: store I/O around the pure scoring modules."""

from .scorecards import (
    SaveResult,
    build_score_matrix,
    load_hole_template,
    load_scorecard,
    save_score_matrix,
)
from .leaderboard import build_event_leaderboard
from .event_site import get_published_event, load_event_site

__all__ = [
    "SaveResult",
    "build_score_matrix",
    "load_hole_template",
    "load_scorecard",
    "save_score_matrix",
    "build_event_leaderboard",
    "get_published_event",
    "load_event_site",
]
