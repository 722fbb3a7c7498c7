from fastapi import APIRouter, Depends, Header, Request

from ..config import CLUBHOUSE_SESSION_HEADER
from ..exceptions import EventNotFound, InvalidClubhouseSession
from ..schemas import (
    ClubhousePasswordIn,
    ClubhouseSessionCreate,
    ClubhouseSessionOut,
    ClubhouseSessionStatus,
    ClubhouseVerifyOut,
)
from ..services import clubhouse as clubhouse_service
from ..services.clubhouse import ScoreWriter
from ..store import QueryClient, get_store
from .auth import limiter, login_rate_limit, resolve_user

router = APIRouter(prefix="/clubhouse", tags=["clubhouse"])


async def require_score_writer(
    slug: str,
    clubhouse_session: str | None = Header(None, alias=CLUBHOUSE_SESSION_HEADER),
    authorization: str | None = Header(None),
    client: QueryClient = Depends(get_store),
) -> ScoreWriter:
    """Resolve who may write scores for ``slug`` in this request.

    A clubhouse session token wins over a bearer token; the bearer token is
    only accepted from the event's owner.
    """
    if clubhouse_session:
        return await clubhouse_service.resolve_session(client, slug, clubhouse_session)
    user = await resolve_user(authorization, client)
    if user is None:
        raise InvalidClubhouseSession()
    event = await client.first("events", {"slug": slug, "user_id": user["id"]})
    if event is None:
        raise EventNotFound(slug)
    return ScoreWriter(
        kind="owner",
        display_name=user.get("full_name") or user["email"],
        event=event,
    )


def _require_session_header(session_id: str | None) -> str:
    if not session_id:
        raise InvalidClubhouseSession()
    return session_id


@router.post("/{slug}/verify-password", response_model=ClubhouseVerifyOut)
@limiter.limit(login_rate_limit)
async def verify_password(
    request: Request,
    slug: str,
    body: ClubhousePasswordIn,
    client: QueryClient = Depends(get_store),
):
    event = await clubhouse_service.verify_password(client, slug, body.password)
    return ClubhouseVerifyOut(event_id=event["id"], event_name=event["name"])


@router.post("/{slug}/sessions", response_model=ClubhouseSessionOut)
@limiter.limit(login_rate_limit)
async def create_session(
    request: Request,
    slug: str,
    body: ClubhouseSessionCreate,
    client: QueryClient = Depends(get_store),
):
    event, session = await clubhouse_service.create_session(
        client, slug, body.password, body.display_name
    )
    return ClubhouseSessionOut(
        session_id=session["session_id"],
        display_name=session["display_name"],
        event_id=event["id"],
        last_accessed=session.get("last_accessed"),
    )


@router.post("/{slug}/sessions/verify", response_model=ClubhouseSessionStatus)
async def verify_session(
    slug: str,
    clubhouse_session: str | None = Header(None, alias=CLUBHOUSE_SESSION_HEADER),
    client: QueryClient = Depends(get_store),
):
    writer = await clubhouse_service.resolve_session(
        client, slug, _require_session_header(clubhouse_session)
    )
    return ClubhouseSessionStatus(valid=True, display_name=writer.display_name)


@router.post("/{slug}/sessions/touch", response_model=ClubhouseSessionOut)
async def touch_session(
    slug: str,
    clubhouse_session: str | None = Header(None, alias=CLUBHOUSE_SESSION_HEADER),
    client: QueryClient = Depends(get_store),
):
    session = await clubhouse_service.touch_session(
        client, slug, _require_session_header(clubhouse_session)
    )
    return ClubhouseSessionOut(
        session_id=session["session_id"],
        display_name=session["display_name"],
        event_id=session["event_id"],
        last_accessed=session.get("last_accessed"),
    )


@router.delete("/{slug}/sessions", status_code=204)
async def end_session(
    slug: str,
    clubhouse_session: str | None = Header(None, alias=CLUBHOUSE_SESSION_HEADER),
    client: QueryClient = Depends(get_store),
):
    await clubhouse_service.end_session(
        client, slug, _require_session_header(clubhouse_session)
    )
