import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from fairway.scoring.matrix import (
    AdjustStrokes,
    HoleTemplate,
    PlayerScores,
    ScoreMatrix,
    SetStrokes,
    UnknownScoreTarget,
)

PARS = [4, 5, 3, 4]


def _template(pars=PARS):
    return HoleTemplate.from_rows(
        "Test Links",
        [{"hole_number": n, "par": par} for n, par in enumerate(pars, start=1)],
    )


def _matrix(template=None):
    template = template or _template()
    players = [
        PlayerScores.from_entries("p1", "Ana", template, []),
        PlayerScores.from_entries(
            "p2",
            "Ben",
            template,
            [{"hole_number": 2, "strokes": 6, "version": 3}],
        ),
    ]
    return ScoreMatrix(round_id="r1", template=template, players=players)


def test_from_entries_left_joins_onto_template():
    matrix = _matrix()
    ben = matrix.player("p2")
    assert ben.strokes == [0, 6, 0, 0]
    assert ben.versions == [None, 3, None, None]
    assert ben.total_strokes == 6
    assert ben.total_par == 16
    assert ben.differential == -10


def test_placeholder_template_has_no_par():
    template = HoleTemplate.placeholder("Nowhere GC", 9)
    assert [h.number for h in template.holes] == list(range(1, 10))
    assert all(h.par is None and h.yardage is None and h.handicap is None for h in template.holes)
    assert template.has_par is False
    assert template.total_par is None


def test_partial_par_data_counts_as_no_par():
    template = _template([4, None, 3, 4])
    assert template.has_par is False
    row = PlayerScores.from_entries("p1", "Ana", template, [{"hole_number": 1, "strokes": 5}])
    assert row.differential is None
    assert row.display == "5"


def test_total_tracks_every_mutation():
    matrix = _matrix()
    mutations = [
        AdjustStrokes("p1", 1, 1),
        AdjustStrokes("p1", 1, 1),
        SetStrokes("p1", 3, 4),
        AdjustStrokes("p1", 3, -1),
        SetStrokes("p2", 2, 5),
        AdjustStrokes("p2", 4, 1),
    ]
    for mutation in mutations:
        row = matrix.apply(mutation)
        assert row.total_strokes == sum(row.strokes)
    assert matrix.player("p1").strokes == [2, 0, 3, 0]
    assert matrix.player("p2").strokes == [0, 5, 0, 1]


def test_adjust_clamps_at_zero_and_fifteen():
    matrix = _matrix()
    matrix.adjust("p1", 1, -1)
    assert matrix.strokes("p1", 1) == 0
    matrix.set_strokes("p1", 1, 15)
    matrix.adjust("p1", 1, 1)
    assert matrix.strokes("p1", 1) == 15
    matrix.set_strokes("p1", 2, 40)
    assert matrix.strokes("p1", 2) == 15
    matrix.set_strokes("p1", 2, -2)
    assert matrix.strokes("p1", 2) == 0


def test_differential_recomputed_after_mutation():
    matrix = _matrix()
    for hole, strokes in enumerate([4, 5, 3, 4], start=1):
        matrix.set_strokes("p1", hole, strokes)
    assert matrix.player("p1").display == "E"
    matrix.adjust("p1", 2, 1)
    assert matrix.player("p1").differential == 1
    assert matrix.player("p1").display == "+1"


def test_mutations_do_not_touch_other_players():
    matrix = _matrix()
    matrix.set_strokes("p1", 2, 9)
    assert matrix.player("p2").strokes == [0, 6, 0, 0]


def test_unknown_player_or_hole_raises():
    matrix = _matrix()
    with pytest.raises(UnknownScoreTarget):
        matrix.adjust("nobody", 1, 1)
    with pytest.raises(UnknownScoreTarget):
        matrix.set_strokes("p1", 19, 4)


def test_apply_rejects_untyped_mutations():
    matrix = _matrix()
    with pytest.raises(TypeError):
        matrix.apply({"player_id": "p1", "hole": 1, "delta": 1})


def test_set_hole_leaves_players_left_out_untouched():
    matrix = _matrix()
    matrix.set_strokes("p2", 2, 6)
    matrix.set_hole(2, {"p1": 5})
    assert matrix.hole_scores(2) == {"p1": 5, "p2": 6}
    assert matrix.player("p2").total_strokes == 6

    matrix.set_hole(2, {"p2": 0})
    assert matrix.hole_scores(2) == {"p1": 5, "p2": 0}


def test_set_hole_rejects_unknown_players():
    matrix = _matrix()
    with pytest.raises(UnknownScoreTarget):
        matrix.set_hole(1, {"p9": 4})
    assert matrix.hole_scores(1) == {"p1": 0, "p2": 0}
