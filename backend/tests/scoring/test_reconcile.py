import os, sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from fairway.scoring.matrix import HoleTemplate, PlayerScores, ScoreMatrix
from fairway.scoring.reconcile import diff_score_matrix, index_entries

TEMPLATE = HoleTemplate.placeholder("Test Links", 3)


def _entry(entry_id, player, hole, strokes, version=1):
    return {
        "id": entry_id,
        "event_player_id": player,
        "hole_number": hole,
        "strokes": strokes,
        "version": version,
    }


def _loaded(rows):
    """Matrix as an editor would have loaded it from ``rows``."""
    by_player = {}
    for row in rows:
        by_player.setdefault(row["event_player_id"], []).append(row)
    players = [
        PlayerScores.from_entries(pid, pid, TEMPLATE, by_player.get(pid, []))
        for pid in ("p1", "p2")
    ]
    return ScoreMatrix("r1", TEMPLATE, players)


def test_unchanged_matrix_produces_no_writes():
    rows = [_entry("e1", "p1", 1, 4), _entry("e2", "p2", 3, 7)]
    changes = diff_score_matrix(_loaded(rows), index_entries(rows))
    assert changes.is_empty
    assert changes.conflicts == []


def test_new_nonzero_score_is_an_insert():
    matrix = _loaded([])
    matrix.set_strokes("p1", 2, 5)
    changes = diff_score_matrix(matrix, {})
    assert changes.updates == []
    assert len(changes.inserts) == 1
    insert = changes.inserts[0]
    assert (insert.player_id, insert.hole, insert.strokes, insert.version) == ("p1", 2, 5, 1)
    assert insert.entry_id is None


def test_changed_score_is_an_update_with_bumped_version():
    rows = [_entry("e1", "p1", 1, 4, version=2)]
    matrix = _loaded(rows)
    matrix.set_strokes("p1", 1, 6)
    changes = diff_score_matrix(matrix, index_entries(rows))
    assert changes.inserts == []
    assert len(changes.updates) == 1
    update = changes.updates[0]
    assert (update.entry_id, update.strokes, update.version) == ("e1", 6, 3)


def test_clearing_a_saved_hole_updates_to_zero():
    rows = [_entry("e1", "p1", 1, 4)]
    matrix = _loaded(rows)
    matrix.set_strokes("p1", 1, 0)
    changes = diff_score_matrix(matrix, index_entries(rows))
    assert [(u.entry_id, u.strokes) for u in changes.updates] == [("e1", 0)]


def test_stale_version_is_a_conflict_only_when_checked():
    loaded = [_entry("e1", "p1", 1, 4, version=1)]
    matrix = _loaded(loaded)
    matrix.set_strokes("p1", 1, 5)
    current = [_entry("e1", "p1", 1, 4, version=2)]

    unchecked = diff_score_matrix(matrix, index_entries(current))
    assert len(unchecked.updates) == 1
    assert unchecked.conflicts == []

    checked = diff_score_matrix(matrix, index_entries(current), check_versions=True)
    assert checked.updates == []
    assert checked.conflicts == [
        {
            "player_id": "p1",
            "hole": 1,
            "observed_version": 1,
            "current_version": 2,
            "current_strokes": 4,
        }
    ]


def test_entry_created_since_load_is_a_conflict():
    matrix = _loaded([])
    matrix.set_strokes("p2", 3, 6)
    current = [_entry("e9", "p2", 3, 5)]
    changes = diff_score_matrix(matrix, index_entries(current), check_versions=True)
    assert changes.inserts == []
    assert changes.conflicts[0]["observed_version"] is None
