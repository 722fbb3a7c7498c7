"""Load, build and persist round scorecards through the store client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from ..cache import course_holes_cache
from ..exceptions import (
    PlayerNotFound,
    RoundNotFound,
    ScorecardConflict,
    ScorecardSaveFailed,
)
from ..scoring.matrix import HoleTemplate, PlayerScores, ScoreMatrix
from ..scoring.reconcile import CellChange, diff_score_matrix, index_entries
from ..store import QueryClient, Row, StaleRowsError, StoreError, select_or_empty

logger = logging.getLogger(__name__)

ACTIVE_PLAYER_STATUSES = ("accepted", "invited")


@dataclass(frozen=True)
class SaveResult:
    updated: int
    inserted: int


async def load_hole_template(
    client: QueryClient, course_name: str, hole_count: int
) -> HoleTemplate:
    """Return the course's holes, or ``hole_count`` parless placeholders.

    A course with no ``course_holes`` rows (or a failed read) is "no par
    data", not an error.
    """

    async def fetch() -> list[Row]:
        return await client.select(
            "course_holes", {"course_name": course_name}, order=["hole_number"]
        )

    try:
        rows = await course_holes_cache.get_or_load(course_name, fetch)
    except StoreError as exc:
        logger.warning("Could not load holes for course %r: %s", course_name, exc)
        rows = []

    if not rows:
        return HoleTemplate.placeholder(course_name, hole_count)
    return HoleTemplate.from_rows(course_name, rows)


async def load_active_players(client: QueryClient, event_id: str) -> list[Row]:
    return await select_or_empty(
        client,
        "event_players",
        {"event_id": event_id, "status": list(ACTIVE_PLAYER_STATUSES)},
        order=["full_name"],
    )


async def load_round(client: QueryClient, event_id: str, round_id: str) -> Row:
    round_row = await client.first("event_rounds", {"id": round_id, "event_id": event_id})
    if round_row is None:
        raise RoundNotFound(round_id)
    return round_row


async def build_score_matrix(
    client: QueryClient,
    event_id: str,
    round_row: Mapping[str, Any],
    template: HoleTemplate,
) -> ScoreMatrix:
    """Project persisted entries onto the template, one row per active player."""

    round_id = round_row["id"]
    players = await load_active_players(client, event_id)
    entry_sets = await asyncio.gather(
        *(
            select_or_empty(
                client,
                "scorecards",
                {
                    "event_id": event_id,
                    "event_round_id": round_id,
                    "event_player_id": player["id"],
                },
                columns=["id", "hole_number", "strokes", "version"],
            )
            for player in players
        )
    )
    rows = [
        PlayerScores.from_entries(player["id"], player["full_name"], template, entries)
        for player, entries in zip(players, entry_sets)
    ]
    return ScoreMatrix(round_id=round_id, template=template, players=rows)


async def load_scorecard(
    client: QueryClient, event_id: str, round_id: str
) -> tuple[Row, ScoreMatrix]:
    round_row = await load_round(client, event_id, round_id)
    template = await load_hole_template(
        client, round_row["course_name"], int(round_row["holes"] or 18)
    )
    matrix = await build_score_matrix(client, event_id, round_row, template)
    return round_row, matrix


def _entry_row(
    event_id: str, round_id: str, change: CellChange, now: datetime
) -> dict[str, Any]:
    row = {
        "event_id": event_id,
        "event_round_id": round_id,
        "event_player_id": change.player_id,
        "hole_number": change.hole,
        "strokes": change.strokes,
        "version": change.version,
        "updated_at": now,
    }
    if change.entry_id is not None:
        row["id"] = change.entry_id
    return row


def _lost_race(result: BaseException) -> bool:
    """True when a versioned write failed because someone else wrote first."""
    if isinstance(result, StaleRowsError):
        return True
    return isinstance(result, StoreError) and isinstance(result.original, IntegrityError)


async def _race_conflicts(
    client: QueryClient, event_id: str, matrix: ScoreMatrix
) -> list[dict[str, Any]]:
    try:
        persisted = await client.select(
            "scorecards", {"event_id": event_id, "event_round_id": matrix.round_id}
        )
    except StoreError as exc:
        logger.error("Could not reload scorecard entries for round %s: %s", matrix.round_id, exc)
        return []
    return diff_score_matrix(matrix, index_entries(persisted), check_versions=True).conflicts


async def save_score_matrix(
    client: QueryClient,
    event_id: str,
    matrix: ScoreMatrix,
    *,
    check_versions: bool = False,
) -> SaveResult:
    """Write the difference between ``matrix`` and the store.

    Updates and inserts go out as two batches, concurrently. A failure of
    either batch raises ``ScorecardSaveFailed``; whatever the other batch
    wrote stays written. ``matrix`` is never modified, so the caller can retry
    with it.

    With ``check_versions`` every update is guarded by the version it was
    diffed against and the update batch is all-or-nothing, so an editor that
    loses a race to another save gets ``ScorecardConflict`` instead of
    overwriting it.
    """

    try:
        persisted = await client.select(
            "scorecards", {"event_id": event_id, "event_round_id": matrix.round_id}
        )
    except StoreError as exc:
        logger.error("Could not load scorecard entries for round %s: %s", matrix.round_id, exc)
        raise ScorecardSaveFailed() from exc

    changes = diff_score_matrix(
        matrix, index_entries(persisted), check_versions=check_versions
    )
    if changes.conflicts:
        logger.info(
            "Rejected scorecard save for round %s: %d stale cells",
            matrix.round_id,
            len(changes.conflicts),
        )
        raise ScorecardConflict(changes.conflicts)

    now = datetime.now(timezone.utc)
    batches = []
    if changes.updates and check_versions:
        batches.append(
            client.update_each(
                "scorecards",
                [
                    (
                        {"strokes": c.strokes, "version": c.version, "updated_at": now},
                        {"id": c.entry_id, "version": c.version - 1},
                    )
                    for c in changes.updates
                ],
            )
        )
    elif changes.updates:
        batches.append(
            client.upsert(
                "scorecards",
                [_entry_row(event_id, matrix.round_id, c, now) for c in changes.updates],
                conflict_key="id",
            )
        )
    if changes.inserts:
        batches.append(
            client.insert(
                "scorecards",
                [_entry_row(event_id, matrix.round_id, c, now) for c in changes.inserts],
            )
        )
    if not batches:
        return SaveResult(updated=0, inserted=0)

    results = await asyncio.gather(*batches, return_exceptions=True)
    failed = False
    raced = False
    for result in results:
        if check_versions and _lost_race(result):
            logger.info("Scorecard save for round %s lost a race: %s", matrix.round_id, result)
            raced = True
        elif isinstance(result, StoreError):
            logger.error("Scorecard batch failed for round %s: %s", matrix.round_id, result)
            failed = True
        elif isinstance(result, BaseException):
            raise result
    if raced:
        raise ScorecardConflict(await _race_conflicts(client, event_id, matrix))
    if failed:
        raise ScorecardSaveFailed()

    logger.info(
        "Saved round %s scorecard: %d updated, %d inserted",
        matrix.round_id,
        len(changes.updates),
        len(changes.inserts),
    )
    return SaveResult(updated=len(changes.updates), inserted=len(changes.inserts))


def overlay_submitted_scores(
    matrix: ScoreMatrix,
    player_id: str,
    strokes: Sequence[int],
    versions: Optional[Sequence[Optional[int]]] = None,
) -> None:
    """Replace one player's row with strokes (and loaded versions) sent by an editor."""

    row = matrix.player(player_id)
    if len(strokes) != len(matrix.template.holes):
        raise ValueError(
            f"expected {len(matrix.template.holes)} hole scores for player {player_id}"
        )
    if versions is not None:
        if len(versions) != len(strokes):
            raise ValueError("versions must align with strokes")
        row.versions = list(versions)
    for hole, value in zip(matrix.template.holes, strokes):
        matrix.set_strokes(player_id, hole.number, value)


async def load_round_contests(client: QueryClient, event_id: str, round_id: str) -> list[Row]:
    return await select_or_empty(
        client,
        "skills_contests",
        {"event_id": event_id, "round_id": round_id},
        order=["hole", "contest_type"],
    )


async def check_contest_winners(
    client: QueryClient,
    event_id: str,
    round_id: str,
    winners: Mapping[str, Optional[str]],
) -> None:
    """Raise unless every contest is on the round and every winner is in the event."""

    if not winners:
        return
    contests = await client.select(
        "skills_contests",
        {"event_id": event_id, "round_id": round_id, "id": list(winners)},
    )
    found = {contest["id"] for contest in contests}
    missing = sorted(set(winners) - found)
    if missing:
        raise ValueError(f"unknown skills contests: {', '.join(missing)}")

    player_ids = {pid for pid in winners.values() if pid}
    if player_ids:
        players = await client.select(
            "event_players", {"event_id": event_id, "id": list(player_ids)}, columns=["id"]
        )
        unknown = sorted(player_ids - {p["id"] for p in players})
        if unknown:
            raise PlayerNotFound(unknown[0])


async def record_contest_winners(
    client: QueryClient,
    round_id: str,
    winners: Mapping[str, Optional[str]],
) -> list[Row]:
    """Write already checked winners (``None`` clears a winner)."""

    results = await asyncio.gather(
        *(
            client.update("skills_contests", {"winner_id": winner}, {"id": contest_id})
            for contest_id, winner in winners.items()
        ),
        return_exceptions=True,
    )
    updated: list[Row] = []
    for result in results:
        if isinstance(result, StoreError):
            logger.error("Skills contest update failed for round %s: %s", round_id, result)
            raise ScorecardSaveFailed()
        if isinstance(result, BaseException):
            raise result
        updated.extend(result)
    return updated


async def set_contest_winners(
    client: QueryClient,
    event_id: str,
    round_id: str,
    winners: Mapping[str, Optional[str]],
) -> list[Row]:
    await check_contest_winners(client, event_id, round_id, winners)
    return await record_contest_winners(client, round_id, winners)
