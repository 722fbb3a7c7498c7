from fastapi import APIRouter, Depends

from ..exceptions import PlayerNotFound, RoundNotFound, http_problem
from ..schemas import (
    EventCreate,
    EventOut,
    EventPlayerCreate,
    EventPlayerOut,
    EventPlayerUpdate,
    EventRoundCreate,
    EventRoundOut,
    EventUpdate,
    SkillsContestCreate,
    SkillsContestOut,
)
from ..services import events as event_service
from ..store import QueryClient, Row, get_store
from .auth import get_current_user

router = APIRouter(prefix="/events", tags=["events"])


def _player_out(row: Row) -> EventPlayerOut:
    return EventPlayerOut(
        id=row["id"],
        full_name=row["full_name"],
        email=row.get("email"),
        handicap=row.get("handicap"),
        bio=row.get("bio"),
        profile_image=row.get("profile_image"),
        status=row["status"],
    )


def _round_out(row: Row) -> EventRoundOut:
    return EventRoundOut(
        id=row["id"],
        course_name=row["course_name"],
        round_date=row.get("round_date"),
        tee_time=row.get("tee_time"),
        scoring_type=row["scoring_type"],
        holes=row["holes"],
        round_number=row["round_number"],
    )


def _contest_out(row: Row) -> SkillsContestOut:
    return SkillsContestOut(
        id=row["id"],
        round_id=row["round_id"],
        hole=row["hole"],
        contest_type=row["contest_type"],
        winner_id=row.get("winner_id"),
    )


@router.post("", response_model=EventOut)
async def create_event(
    body: EventCreate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    event = await event_service.create_event(client, user["id"], body)
    return EventOut.from_row(event)


@router.get("", response_model=list[EventOut])
async def list_my_events(
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    rows = await client.select(
        "events", {"user_id": user["id"]}, order=["-start_date", "name"]
    )
    return [EventOut.from_row(row) for row in rows]


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: str,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    event = await event_service.get_owned_event(client, event_id, user["id"])
    return EventOut.from_row(event)


@router.patch("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: str,
    body: EventUpdate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    event = await event_service.get_owned_event(client, event_id, user["id"])
    try:
        updated = await event_service.update_event(client, event, body)
    except ValueError as exc:
        raise http_problem(
            status_code=422,
            detail=str(exc),
            code="event_invalid_dates",
        )
    return EventOut.from_row(updated)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    await client.delete("events", {"id": event_id})


# ---------------------------------------------------------------------------
# players
# ---------------------------------------------------------------------------

@router.get("/{event_id}/players", response_model=list[EventPlayerOut])
async def list_players(
    event_id: str,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    rows = await client.select(
        "event_players", {"event_id": event_id}, order=["full_name"]
    )
    return [_player_out(row) for row in rows]


@router.post("/{event_id}/players", response_model=EventPlayerOut)
async def add_player(
    event_id: str,
    body: EventPlayerCreate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    rows = await client.insert(
        "event_players", [{**body.model_dump(), "event_id": event_id}]
    )
    return _player_out(rows[0])


@router.patch("/{event_id}/players/{player_id}", response_model=EventPlayerOut)
async def update_player(
    event_id: str,
    player_id: str,
    body: EventPlayerUpdate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    rows = await client.update(
        "event_players",
        body.model_dump(exclude_unset=True),
        {"id": player_id, "event_id": event_id},
    )
    if not rows:
        raise PlayerNotFound(player_id)
    return _player_out(rows[0])


# ---------------------------------------------------------------------------
# rounds & skills contests
# ---------------------------------------------------------------------------

@router.get("/{event_id}/rounds", response_model=list[EventRoundOut])
async def list_rounds(
    event_id: str,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    rows = await client.select(
        "event_rounds", {"event_id": event_id}, order=["round_number"]
    )
    return [_round_out(row) for row in rows]


@router.post("/{event_id}/rounds", response_model=EventRoundOut)
async def add_round(
    event_id: str,
    body: EventRoundCreate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    values = body.model_dump()
    if values["round_number"] is None:
        existing = await client.select(
            "event_rounds", {"event_id": event_id}, columns=["round_number"]
        )
        values["round_number"] = max((r["round_number"] for r in existing), default=0) + 1
    rows = await client.insert("event_rounds", [{**values, "event_id": event_id}])
    return _round_out(rows[0])


@router.get(
    "/{event_id}/rounds/{round_id}/contests",
    response_model=list[SkillsContestOut],
)
async def list_contests(
    event_id: str,
    round_id: str,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    rows = await client.select(
        "skills_contests",
        {"event_id": event_id, "round_id": round_id},
        order=["hole", "contest_type"],
    )
    return [_contest_out(row) for row in rows]


@router.post(
    "/{event_id}/rounds/{round_id}/contests",
    response_model=SkillsContestOut,
)
async def add_contest(
    event_id: str,
    round_id: str,
    body: SkillsContestCreate,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    await event_service.get_owned_event(client, event_id, user["id"])
    round_row = await client.first(
        "event_rounds", {"id": round_id, "event_id": event_id}
    )
    if round_row is None:
        raise RoundNotFound(round_id)
    if body.hole > round_row["holes"]:
        raise http_problem(
            status_code=422,
            detail=f"round has only {round_row['holes']} holes",
            code="contest_invalid_hole",
        )
    rows = await client.insert(
        "skills_contests",
        [{**body.model_dump(), "event_id": event_id, "round_id": round_id}],
    )
    return _contest_out(rows[0])
