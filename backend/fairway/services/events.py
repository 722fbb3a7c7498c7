import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..exceptions import EventNotFound
from ..passwords import pwd_context
from ..schemas import EventCreate, EventUpdate
from ..store import QueryClient, Row

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50
DEFAULT_SLUG = "golf-event"


def slug_from_name(name: str) -> str:
    """Lowercase, drop punctuation, hyphenate whitespace, cap at 50 chars."""
    slug = re.sub(r"[^a-z0-9\s]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug).strip("-")
    return slug[:SLUG_MAX_LENGTH].strip("-") or DEFAULT_SLUG


async def unique_slug(client: QueryClient, name: str) -> str:
    base = slug_from_name(name)
    taken = {
        row["slug"]
        for row in await client.select("events", columns=["slug"])
        if row["slug"] == base or row["slug"].startswith(f"{base}-")
    }
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


async def get_owned_event(client: QueryClient, event_id: str, user_id: str) -> Row:
    """Return the event if ``user_id`` owns it; other owners see a 404."""
    event = await client.first("events", {"id": event_id, "user_id": user_id})
    if event is None:
        raise EventNotFound(event_id)
    return event


async def create_event(client: QueryClient, user_id: str, body: EventCreate) -> Row:
    values: dict[str, Any] = body.model_dump(exclude={"clubhouse_password"})
    values["user_id"] = user_id
    values["slug"] = await unique_slug(client, body.name)
    if body.clubhouse_password:
        values["clubhouse_password"] = pwd_context.hash(body.clubhouse_password)
    rows = await client.insert("events", [values])
    logger.info("Created event %s (%s)", rows[0]["id"], rows[0]["slug"])
    return rows[0]


def event_patch(body: EventUpdate) -> dict[str, Any]:
    """Translate a partial update into column values; unset fields are absent."""
    patch = body.model_dump(exclude_unset=True)
    if "clubhouse_password" in patch:
        password = patch["clubhouse_password"]
        patch["clubhouse_password"] = pwd_context.hash(password) if password else None
    return patch


async def update_event(client: QueryClient, event: Row, body: EventUpdate) -> Row:
    patch = event_patch(body)
    if not patch:
        return event
    start = patch.get("start_date", event.get("start_date"))
    end = patch.get("end_date", event.get("end_date"))
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")
    patch["updated_at"] = datetime.now(timezone.utc)
    rows = await client.update("events", patch, {"id": event["id"]})
    return rows[0]
