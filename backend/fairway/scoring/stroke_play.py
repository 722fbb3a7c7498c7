"""Stroke play arithmetic shared by the scorecard editor and the leaderboard."""
from typing import Optional, Sequence

from ..config import MAX_STROKES, MIN_STROKES

EAGLE = "eagle"
BIRDIE = "birdie"
PAR = "par"
BOGEY = "bogey"
DOUBLE_BOGEY = "double_bogey"
WORSE = "worse"

HOLE_BANDS = (EAGLE, BIRDIE, PAR, BOGEY, DOUBLE_BOGEY, WORSE)


def clamp_strokes(value: int) -> int:
    return max(MIN_STROKES, min(MAX_STROKES, int(value)))


def total_par(pars: Sequence[Optional[int]]) -> Optional[int]:
    """Sum of hole pars, or ``None`` when any hole has no par."""
    if not pars or any(p is None for p in pars):
        return None
    return sum(pars)


def differential(strokes_total: int, par_total: Optional[int]) -> Optional[int]:
    if par_total is None:
        return None
    return strokes_total - par_total


def format_differential(diff: Optional[int], strokes_total: int = 0) -> str:
    """Render a differential as ``E``, ``+3`` or ``-4``.

    Rounds without par data show the raw stroke total instead.
    """
    if diff is None:
        return str(strokes_total)
    if diff == 0:
        return "E"
    if diff > 0:
        return f"+{diff}"
    return str(diff)


def classify_hole(strokes: int, par: Optional[int]) -> Optional[str]:
    """Return the display band for one hole, ``None`` when unplayed or parless."""
    if strokes <= 0 or par is None:
        return None
    diff = strokes - par
    if diff <= -2:
        return EAGLE
    if diff == -1:
        return BIRDIE
    if diff == 0:
        return PAR
    if diff == 1:
        return BOGEY
    if diff == 2:
        return DOUBLE_BOGEY
    return WORSE
