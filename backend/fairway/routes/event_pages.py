from pathlib import Path
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..exceptions import EventNotFound
from ..services.event_site import get_published_event
from ..services.leaderboard import build_event_leaderboard
from ..store import QueryClient, get_store

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

router = APIRouter()


@router.get("/events/{slug}/leaderboard", response_class=HTMLResponse)
async def event_leaderboard_page(
    request: Request,
    slug: str,
    client: QueryClient = Depends(get_store),
):
    try:
        event = await get_published_event(client, slug)
    except EventNotFound:
        return templates.TemplateResponse(
            request,
            "events/not_found.html",
            {"slug": slug},
            status_code=404,
        )

    rounds = await build_event_leaderboard(client, event)
    return templates.TemplateResponse(
        request,
        "events/leaderboard.html",
        {"event": event, "rounds": rounds},
    )
