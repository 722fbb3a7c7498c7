"""Clubhouse access: shared event password and lightweight scorer sessions.

A clubhouse session lets someone without an account enter scores for a single
event. Sessions are opaque tokens; they are deactivated on sign out and never
expire on their own.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional

from ..db_errors import is_missing_column_error
from ..exceptions import (
    ClubhouseDisabled,
    ClubhouseUnavailable,
    EventNotFound,
    EventNotPublished,
    InvalidClubhousePassword,
    InvalidClubhouseSession,
)
from ..passwords import pwd_context
from ..store import QueryClient, Row, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreWriter:
    """Who is writing scores in this request, resolved once per request."""

    kind: Literal["clubhouse", "owner"]
    display_name: str
    event: Row
    session_id: Optional[str] = None

    @property
    def event_id(self) -> str:
        return self.event["id"]


async def get_clubhouse_event(client: QueryClient, slug: str) -> Row:
    """Return the event behind a clubhouse, checking it accepts scorers."""

    try:
        event = await client.first("events", {"slug": slug})
    except StoreError as exc:
        if exc.original is not None and is_missing_column_error(
            exc.original, "clubhouse_password"
        ):
            logger.error("events.clubhouse_password is missing; run the migrations")
            raise ClubhouseUnavailable() from exc
        raise
    if event is None:
        raise EventNotFound(slug)
    if not event.get("is_published"):
        raise EventNotPublished()
    if not event.get("clubhouse_password"):
        raise ClubhouseDisabled()
    return event


async def verify_password(client: QueryClient, slug: str, password: str) -> Row:
    event = await get_clubhouse_event(client, slug)
    if not pwd_context.verify(password, event["clubhouse_password"]):
        logger.info("Rejected clubhouse password for event %s", event["id"])
        raise InvalidClubhousePassword()
    return event


async def create_session(
    client: QueryClient, slug: str, password: str, display_name: str
) -> tuple[Row, Row]:
    """Check the password and open a session; returns ``(event, session)``."""

    event = await verify_password(client, slug, password)
    now = datetime.now(timezone.utc)
    rows = await client.upsert(
        "clubhouse_sessions",
        [
            {
                "event_id": event["id"],
                "session_id": secrets.token_urlsafe(32),
                "display_name": display_name,
                "is_active": True,
                "last_accessed": now,
            }
        ],
        conflict_key="session_id",
    )
    logger.info("Opened clubhouse session for event %s", event["id"])
    return event, rows[0]


async def _active_session(client: QueryClient, event_id: str, session_id: str) -> Row:
    session = await client.first(
        "clubhouse_sessions",
        {"event_id": event_id, "session_id": session_id, "is_active": True},
    )
    if session is None:
        raise InvalidClubhouseSession()
    return session


async def touch_session(client: QueryClient, slug: str, session_id: str) -> Row:
    event = await get_clubhouse_event(client, slug)
    await _active_session(client, event["id"], session_id)
    rows = await client.update(
        "clubhouse_sessions",
        {"last_accessed": datetime.now(timezone.utc)},
        {"session_id": session_id},
    )
    return rows[0]


async def resolve_session(client: QueryClient, slug: str, session_id: str) -> ScoreWriter:
    event = await get_clubhouse_event(client, slug)
    session = await _active_session(client, event["id"], session_id)
    await client.update(
        "clubhouse_sessions",
        {"last_accessed": datetime.now(timezone.utc)},
        {"session_id": session_id},
    )
    return ScoreWriter(
        kind="clubhouse",
        display_name=session["display_name"],
        event=event,
        session_id=session_id,
    )


async def end_session(client: QueryClient, slug: str, session_id: str) -> None:
    event = await get_clubhouse_event(client, slug)
    await client.update(
        "clubhouse_sessions",
        {"is_active": False},
        {"event_id": event["id"], "session_id": session_id},
    )
    logger.info("Closed clubhouse session for event %s", event["id"])
