import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from fairway.scoring import stroke_play


@pytest.mark.parametrize("value, expected", [(-3, 0), (0, 0), (7, 7), (15, 15), (22, 15)])
def test_clamp_strokes(value, expected):
    assert stroke_play.clamp_strokes(value) == expected


def test_total_par_requires_every_hole():
    assert stroke_play.total_par([4, 5, 3]) == 12
    assert stroke_play.total_par([4, None, 3]) is None
    assert stroke_play.total_par([]) is None


@pytest.mark.parametrize(
    "total, expected",
    [(75, "+3"), (72, "E"), (68, "-4")],
)
def test_par_72_differentials(total, expected):
    diff = stroke_play.differential(total, 72)
    assert stroke_play.format_differential(diff, total) == expected


def test_no_par_shows_raw_total():
    assert stroke_play.differential(81, None) is None
    assert stroke_play.format_differential(None, 81) == "81"


@pytest.mark.parametrize(
    "strokes, par, band",
    [
        (1, 4, stroke_play.EAGLE),
        (2, 4, stroke_play.EAGLE),
        (3, 4, stroke_play.BIRDIE),
        (4, 4, stroke_play.PAR),
        (5, 4, stroke_play.BOGEY),
        (6, 4, stroke_play.DOUBLE_BOGEY),
        (7, 4, stroke_play.WORSE),
    ],
)
def test_classify_hole(strokes, par, band):
    assert stroke_play.classify_hole(strokes, par) == band


def test_unplayed_or_parless_holes_have_no_band():
    assert stroke_play.classify_hole(0, 4) is None
    assert stroke_play.classify_hole(5, None) is None
