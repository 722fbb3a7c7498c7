"""Read side of the public event microsite."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import EventNotFound
from ..store import QueryClient, Row, StoreError, select_or_empty

logger = logging.getLogger(__name__)


@dataclass
class EventSite:
    event: Row
    players: list[Row] = field(default_factory=list)
    rounds: list[Row] = field(default_factory=list)
    courses: list[Row] = field(default_factory=list)
    prizes: list[Row] = field(default_factory=list)
    travel: list[Row] = field(default_factory=list)
    rules: list[Row] = field(default_factory=list)
    customization: Optional[Row] = None


async def get_published_event(client: QueryClient, slug: str) -> Row:
    """Return the published event for ``slug``.

    Unknown and unpublished slugs are indistinguishable to the public.
    """

    try:
        event = await client.first("events", {"slug": slug, "is_published": True})
    except StoreError as exc:
        logger.warning("Event lookup for %r failed: %s", slug, exc)
        event = None
    if event is None:
        raise EventNotFound(slug)
    return event


async def load_event_site(client: QueryClient, slug: str) -> EventSite:
    event = await get_published_event(client, slug)
    event_id = event["id"]
    players, rounds, courses, prizes, travel, rules, customization = await asyncio.gather(
        select_or_empty(
            client,
            "event_players",
            {"event_id": event_id, "status": ["accepted", "invited"]},
            order=["full_name"],
        ),
        select_or_empty(client, "event_rounds", {"event_id": event_id}, order=["round_number"]),
        select_or_empty(client, "event_courses", {"event_id": event_id}, order=["display_order"]),
        select_or_empty(client, "event_prizes", {"event_id": event_id}, order=["category"]),
        select_or_empty(client, "event_travel", {"event_id": event_id}),
        select_or_empty(client, "event_rules", {"event_id": event_id}, order=["display_order"]),
        select_or_empty(client, "event_customization", {"event_id": event_id}),
    )
    return EventSite(
        event=event,
        players=players,
        rounds=rounds,
        courses=courses,
        prizes=prizes,
        travel=travel,
        rules=rules,
        customization=customization[0] if customization else None,
    )
