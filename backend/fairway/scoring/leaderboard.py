"""Per-round stroke play leaderboard built from persisted scorecard entries."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from . import stroke_play
from .matrix import Hole, HoleTemplate, PlayerScores


@dataclass
class LeaderboardRow:
    position: int
    player_id: str
    name: str
    strokes: list[int]
    bands: list[Optional[str]]
    total_strokes: int
    total_par: Optional[int]
    differential: Optional[int]
    display: str
    holes_played: int


@dataclass
class RoundLeaderboard:
    round_id: str
    round_number: int
    course_name: str
    round_date: Any
    holes: tuple[Hole, ...]
    has_par: bool
    total_par: Optional[int]
    rows: list[LeaderboardRow]


def _standing_key(row: PlayerScores) -> tuple[bool, int]:
    # Players without a single stroke entered go to the bottom.
    return (row.holes_played == 0, row.total_strokes)


def aggregate_round(
    round_row: Mapping[str, Any],
    template: HoleTemplate,
    players: Sequence[Mapping[str, Any]],
    entries: Sequence[Mapping[str, Any]],
) -> RoundLeaderboard:
    """Rank ``players`` on one round by ascending total strokes.

    ``entries`` may hold the whole event; only rows for this round count. The
    sort is stable, so equal totals keep roster order: no tie-break is applied.
    Without par data there is no differential and no hole bands.
    """

    by_player: dict[str, list[Mapping[str, Any]]] = defaultdict(list)
    for entry in entries:
        if entry["event_round_id"] == round_row["id"]:
            by_player[entry["event_player_id"]].append(entry)

    scored = [
        PlayerScores.from_entries(player["id"], player["full_name"], template, by_player[player["id"]])
        for player in players
    ]
    scored.sort(key=_standing_key)

    has_par = template.has_par
    rows = []
    for position, player in enumerate(scored, start=1):
        bands = [
            stroke_play.classify_hole(strokes, hole.par) if has_par else None
            for strokes, hole in zip(player.strokes, template.holes)
        ]
        rows.append(
            LeaderboardRow(
                position=position,
                player_id=player.player_id,
                name=player.name,
                strokes=list(player.strokes),
                bands=bands,
                total_strokes=player.total_strokes,
                total_par=player.total_par,
                differential=player.differential,
                display=player.display,
                holes_played=player.holes_played,
            )
        )

    return RoundLeaderboard(
        round_id=round_row["id"],
        round_number=int(round_row.get("round_number") or 1),
        course_name=round_row["course_name"],
        round_date=round_row.get("round_date"),
        holes=template.holes,
        has_par=has_par,
        total_par=template.total_par,
        rows=rows,
    )
