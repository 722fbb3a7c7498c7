from fastapi import APIRouter, Depends

from ..schemas import (
    EventCourseOut,
    EventCustomizationOut,
    EventLeaderboardOut,
    EventPrizeOut,
    EventRoundOut,
    EventRuleOut,
    EventSiteOut,
    EventTravelOut,
    HoleOut,
    LeaderboardRowOut,
    PublicEventOut,
    PublicPlayerOut,
    RoundLeaderboardOut,
)
from ..scoring.leaderboard import RoundLeaderboard
from ..services.event_site import get_published_event, load_event_site
from ..services.leaderboard import build_event_leaderboard
from ..store import QueryClient, Row, get_store

router = APIRouter(prefix="/public", tags=["public"])


def public_event_out(event: Row) -> PublicEventOut:
    return PublicEventOut(
        id=event["id"],
        name=event["name"],
        slug=event["slug"],
        location=event.get("location"),
        description=event.get("description"),
        start_date=event.get("start_date"),
        end_date=event.get("end_date"),
        logo_url=event.get("logo_url"),
        clubhouse_enabled=bool(event.get("clubhouse_password")),
    )


def round_leaderboard_out(board: RoundLeaderboard) -> RoundLeaderboardOut:
    return RoundLeaderboardOut(
        round_id=board.round_id,
        round_number=board.round_number,
        course_name=board.course_name,
        round_date=board.round_date,
        has_par=board.has_par,
        total_par=board.total_par,
        holes=[
            HoleOut(number=h.number, par=h.par, yardage=h.yardage, handicap=h.handicap)
            for h in board.holes
        ],
        rows=[
            LeaderboardRowOut(
                position=row.position,
                player_id=row.player_id,
                name=row.name,
                strokes=row.strokes,
                bands=row.bands,
                total_strokes=row.total_strokes,
                total_par=row.total_par,
                differential=row.differential,
                display=row.display,
                holes_played=row.holes_played,
            )
            for row in board.rows
        ],
    )


@router.get("/events/{slug}", response_model=EventSiteOut)
async def get_event_site(slug: str, client: QueryClient = Depends(get_store)):
    site = await load_event_site(client, slug)
    customization = site.customization
    return EventSiteOut(
        event=public_event_out(site.event),
        players=[
            PublicPlayerOut(
                id=p["id"],
                full_name=p["full_name"],
                handicap=p.get("handicap"),
                bio=p.get("bio"),
                profile_image=p.get("profile_image"),
            )
            for p in site.players
        ],
        rounds=[
            EventRoundOut(
                id=r["id"],
                course_name=r["course_name"],
                round_date=r.get("round_date"),
                tee_time=r.get("tee_time"),
                scoring_type=r["scoring_type"],
                holes=r["holes"],
                round_number=r["round_number"],
            )
            for r in site.rounds
        ],
        courses=[
            EventCourseOut(
                id=c["id"],
                name=c["name"],
                par=c.get("par"),
                yardage=c.get("yardage"),
                description=c.get("description"),
                image_url=c.get("image_url"),
            )
            for c in site.courses
        ],
        prizes=[
            EventPrizeOut(
                id=p["id"],
                category=p["category"],
                description=p.get("description"),
                amount=p.get("amount"),
            )
            for p in site.prizes
        ],
        travel=[
            EventTravelOut(
                id=t["id"],
                flight_info=t.get("flight_info"),
                accommodations=t.get("accommodations"),
                daily_schedule=t.get("daily_schedule"),
            )
            for t in site.travel
        ],
        rules=[EventRuleOut(id=r["id"], rule_text=r["rule_text"]) for r in site.rules],
        customization=EventCustomizationOut(
            theme=customization.get("theme") or "default",
            home_headline=customization.get("home_headline"),
            settings=customization.get("settings"),
        )
        if customization
        else None,
    )


@router.get("/events/{slug}/leaderboard", response_model=EventLeaderboardOut)
async def get_event_leaderboard(slug: str, client: QueryClient = Depends(get_store)):
    event = await get_published_event(client, slug)
    rounds = await build_event_leaderboard(client, event)
    return EventLeaderboardOut(
        event=public_event_out(event),
        rounds=[round_leaderboard_out(board) for board in rounds],
    )
