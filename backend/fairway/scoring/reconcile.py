"""Work out which scorecard writes a save needs.

Pure function of the in-memory matrix and the entries currently persisted for
the round; the save engine in ``services.scorecards`` performs the writes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from .matrix import ScoreMatrix

CellKey = tuple[str, int]


@dataclass(frozen=True)
class PersistedEntry:
    id: str
    player_id: str
    hole: int
    strokes: int
    version: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PersistedEntry":
        return cls(
            id=row["id"],
            player_id=row["event_player_id"],
            hole=int(row["hole_number"]),
            strokes=int(row["strokes"] or 0),
            version=int(row.get("version") or 1),
        )


@dataclass(frozen=True)
class CellChange:
    player_id: str
    hole: int
    strokes: int
    version: int
    entry_id: Optional[str] = None


@dataclass
class ScorecardChanges:
    updates: list[CellChange] = field(default_factory=list)
    inserts: list[CellChange] = field(default_factory=list)
    conflicts: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.updates or self.inserts)


def index_entries(rows: Iterable[Mapping[str, Any]]) -> dict[CellKey, PersistedEntry]:
    entries = (PersistedEntry.from_row(row) for row in rows)
    return {(entry.player_id, entry.hole): entry for entry in entries}


def diff_score_matrix(
    matrix: ScoreMatrix,
    persisted: Mapping[CellKey, PersistedEntry],
    *,
    check_versions: bool = False,
) -> ScorecardChanges:
    """Partition the matrix into UPDATEs and INSERTs against ``persisted``.

    - persisted entry, different strokes: UPDATE by entry id, version + 1
    - no entry, strokes > 0: INSERT at version 1
    - same strokes, or no entry and 0 strokes: nothing

    With ``check_versions`` a changed cell whose persisted version is not the
    version the editor loaded (``None`` meaning "no entry when loaded") is
    reported in ``conflicts`` instead of being written.
    """

    changes = ScorecardChanges()
    for row in matrix.players:
        for hole, strokes, observed in zip(matrix.template.holes, row.strokes, row.versions):
            existing = persisted.get((row.player_id, hole.number))
            if existing is None:
                if strokes > 0:
                    changes.inserts.append(
                        CellChange(row.player_id, hole.number, strokes, version=1)
                    )
                continue
            if existing.strokes == strokes:
                continue
            if check_versions and existing.version != observed:
                changes.conflicts.append(
                    {
                        "player_id": row.player_id,
                        "hole": hole.number,
                        "observed_version": observed,
                        "current_version": existing.version,
                        "current_strokes": existing.strokes,
                    }
                )
                continue
            changes.updates.append(
                CellChange(
                    row.player_id,
                    hole.number,
                    strokes,
                    version=existing.version + 1,
                    entry_id=existing.id,
                )
            )
    return changes
