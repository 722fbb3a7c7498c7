import asyncio
import logging
from typing import Any, Mapping

from ..scoring.leaderboard import RoundLeaderboard, aggregate_round
from ..store import QueryClient, select_or_empty
from .scorecards import load_active_players, load_hole_template

logger = logging.getLogger(__name__)


async def build_event_leaderboard(
    client: QueryClient, event: Mapping[str, Any]
) -> list[RoundLeaderboard]:
    """Aggregate every round of ``event`` independently, in round order."""

    event_id = event["id"]
    rounds, players, entries = await asyncio.gather(
        select_or_empty(
            client, "event_rounds", {"event_id": event_id}, order=["round_number", "round_date"]
        ),
        load_active_players(client, event_id),
        select_or_empty(client, "scorecards", {"event_id": event_id}),
    )
    templates = await asyncio.gather(
        *(
            load_hole_template(client, round_row["course_name"], int(round_row["holes"] or 18))
            for round_row in rounds
        )
    )
    logger.debug(
        "Leaderboard for event %s: %d rounds, %d players, %d entries",
        event_id,
        len(rounds),
        len(players),
        len(entries),
    )
    return [
        aggregate_round(round_row, template, players, entries)
        for round_row, template in zip(rounds, templates)
    ]
