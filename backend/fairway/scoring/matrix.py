"""In-memory round scorecard: hole template, player rows and score mutations.

A :class:`ScoreMatrix` is what the clubhouse editor works on between loading a
round and saving it. Mutations never touch the store; totals are recomputed on
the affected row as part of every mutation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from . import stroke_play


class UnknownScoreTarget(LookupError):
    """Raised when a mutation names a player or hole that is not on the card."""


@dataclass(frozen=True)
class Hole:
    number: int
    par: Optional[int] = None
    yardage: Optional[int] = None
    handicap: Optional[int] = None


@dataclass(frozen=True)
class HoleTemplate:
    course_name: str
    holes: tuple[Hole, ...]

    @classmethod
    def placeholder(cls, course_name: str, hole_count: int) -> "HoleTemplate":
        """Parless holes 1..``hole_count`` for courses without hole data."""
        if hole_count <= 0:
            raise ValueError("hole_count must be positive")
        return cls(course_name, tuple(Hole(number=n) for n in range(1, hole_count + 1)))

    @classmethod
    def from_rows(cls, course_name: str, rows: Iterable[Mapping[str, Any]]) -> "HoleTemplate":
        holes = sorted(
            (
                Hole(
                    number=int(row["hole_number"]),
                    par=row.get("par"),
                    yardage=row.get("yardage"),
                    handicap=row.get("handicap"),
                )
                for row in rows
            ),
            key=lambda hole: hole.number,
        )
        return cls(course_name, tuple(holes))

    @property
    def has_par(self) -> bool:
        return bool(self.holes) and all(hole.par is not None for hole in self.holes)

    @property
    def pars(self) -> list[Optional[int]]:
        return [hole.par for hole in self.holes]

    @property
    def total_par(self) -> Optional[int]:
        return stroke_play.total_par(self.pars)

    def index_of(self, hole_number: int) -> int:
        for index, hole in enumerate(self.holes):
            if hole.number == hole_number:
                return index
        raise UnknownScoreTarget(f"hole {hole_number} is not on this course")


@dataclass
class PlayerScores:
    """One player's row: per-hole strokes plus the derived round totals."""

    player_id: str
    name: str
    strokes: list[int]
    versions: list[Optional[int]]
    total_par: Optional[int]
    total_strokes: int = field(default=0, init=False)
    differential: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if len(self.versions) != len(self.strokes):
            raise ValueError("versions must align with strokes")
        self.recompute()

    @classmethod
    def from_entries(
        cls,
        player_id: str,
        name: str,
        template: HoleTemplate,
        entries: Iterable[Mapping[str, Any]],
    ) -> "PlayerScores":
        """Left-join persisted entries onto the template; missing holes are 0."""
        by_hole = {int(entry["hole_number"]): entry for entry in entries}
        strokes: list[int] = []
        versions: list[Optional[int]] = []
        for hole in template.holes:
            entry = by_hole.get(hole.number)
            strokes.append(int(entry["strokes"] or 0) if entry else 0)
            versions.append(entry.get("version") if entry else None)
        return cls(player_id, name, strokes, versions, template.total_par)

    def recompute(self) -> None:
        self.total_strokes = sum(self.strokes)
        self.differential = stroke_play.differential(self.total_strokes, self.total_par)

    @property
    def display(self) -> str:
        return stroke_play.format_differential(self.differential, self.total_strokes)

    @property
    def holes_played(self) -> int:
        return sum(1 for value in self.strokes if value > 0)


@dataclass(frozen=True)
class AdjustStrokes:
    player_id: str
    hole: int
    delta: int


@dataclass(frozen=True)
class SetStrokes:
    player_id: str
    hole: int
    strokes: int


ScoreMutation = Union[AdjustStrokes, SetStrokes]


@dataclass
class ScoreMatrix:
    round_id: str
    template: HoleTemplate
    players: list[PlayerScores]

    def player(self, player_id: str) -> PlayerScores:
        for row in self.players:
            if row.player_id == player_id:
                return row
        raise UnknownScoreTarget(f"player {player_id} is not on this scorecard")

    def strokes(self, player_id: str, hole: int) -> int:
        return self.player(player_id).strokes[self.template.index_of(hole)]

    def adjust(self, player_id: str, hole: int, delta: int) -> PlayerScores:
        row = self.player(player_id)
        index = self.template.index_of(hole)
        row.strokes[index] = stroke_play.clamp_strokes(row.strokes[index] + delta)
        row.recompute()
        return row

    def set_strokes(self, player_id: str, hole: int, strokes: int) -> PlayerScores:
        row = self.player(player_id)
        index = self.template.index_of(hole)
        row.strokes[index] = stroke_play.clamp_strokes(strokes)
        row.recompute()
        return row

    def apply(self, mutation: ScoreMutation) -> PlayerScores:
        if isinstance(mutation, AdjustStrokes):
            return self.adjust(mutation.player_id, mutation.hole, mutation.delta)
        if isinstance(mutation, SetStrokes):
            return self.set_strokes(mutation.player_id, mutation.hole, mutation.strokes)
        raise TypeError(f"unsupported score mutation: {mutation!r}")

    def apply_all(self, mutations: Sequence[ScoreMutation]) -> None:
        for mutation in mutations:
            self.apply(mutation)

    def set_hole(self, hole: int, scores: Mapping[str, int]) -> None:
        """Bulk-edit one hole; only the players in ``scores`` change."""
        index = self.template.index_of(hole)
        known = {row.player_id for row in self.players}
        unknown = sorted(set(scores) - known)
        if unknown:
            raise UnknownScoreTarget(f"players not on this scorecard: {', '.join(unknown)}")
        for row in self.players:
            if row.player_id not in scores:
                continue
            row.strokes[index] = stroke_play.clamp_strokes(scores[row.player_id])
            row.recompute()

    def hole_scores(self, hole: int) -> dict[str, int]:
        index = self.template.index_of(hole)
        return {row.player_id: row.strokes[index] for row in self.players}
