import os
import sys
import asyncio

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# A sufficiently long JWT secret for tests
TEST_JWT_SECRET = "x" * 32
os.environ.setdefault("JWT_SECRET", TEST_JWT_SECRET)
# Honour any externally provided DATABASE_URL (e.g. CI may set a file-backed DB)
# but fall back to an in-memory SQLite database so local runs remain isolated.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("DISABLE_AUTH_RATE_LIMITS", "true")

# Register every model with the declarative Base before create_all runs.
from fairway import db, models  # noqa: E402,F401
from fairway.cache import course_holes_cache  # noqa: E402
from fairway.passwords import pwd_context  # noqa: E402
from fairway.store import QueryClient  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402


@pytest.fixture(scope="session")
def session_loop():
    """Single event loop for all sync fixtures that need to run async DB code."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    """Ensure a strong JWT secret is present for all tests."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    yield


@pytest.fixture(autouse=True, scope="session")
def ensure_database(session_loop):
    """Ensure the test database starts clean and honours DATABASE_URL."""

    mp = pytest.MonkeyPatch()
    desired_url = os.getenv("DATABASE_URL") or DEFAULT_DB_URL
    mp.setenv("DATABASE_URL", desired_url)

    if desired_url.startswith("sqlite") and ":memory:" not in desired_url:
        path = desired_url.split("///")[-1]
        if os.path.exists(path):
            os.remove(path)

    db.engine = None
    db.AsyncSessionLocal = None
    yield
    session_loop.run_until_complete(db.dispose_engine())
    mp.undo()


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_schema(request, session_loop):
    """Reset the schema and the hole cache before each test unless preserved."""

    session_loop.run_until_complete(course_holes_cache.clear())
    if request.node.get_closest_marker("preserve_schema"):
        yield
        return

    engine = db.engine or db.get_engine()
    session_loop.run_until_complete(_reset_schema(engine))
    yield


@pytest.fixture
def run(session_loop):
    """Run a coroutine to completion on the shared test loop."""

    return session_loop.run_until_complete


@pytest.fixture
def store(session_loop):
    """A store client on its own session, closed after the test."""

    db.get_engine()
    session = db.AsyncSessionLocal()
    yield QueryClient(session)
    session_loop.run_until_complete(session.close())


PAR_72 = [4, 5, 3, 4, 4, 3, 5, 4, 4, 4, 3, 5, 4, 4, 3, 5, 4, 4]
CLUBHOUSE_PASSWORD = "birdie"


async def _seed_golf_event(client) -> dict:
    (owner,) = await client.insert(
        "users",
        [
            {
                "email": "owner@example.com",
                "full_name": "Olive Owner",
                "password_hash": pwd_context.hash("Fairway123"),
            }
        ],
    )
    (event,) = await client.insert(
        "events",
        [
            {
                "user_id": owner["id"],
                "name": "Spring Golf Trip",
                "slug": "spring-golf-trip",
                "location": "Monterey, CA",
                "is_published": True,
                "clubhouse_password": pwd_context.hash(CLUBHOUSE_PASSWORD),
            }
        ],
    )
    await client.insert(
        "course_holes",
        [
            {"course_name": "Pebble Creek", "hole_number": n, "par": par}
            for n, par in enumerate(PAR_72, start=1)
        ],
    )
    par_round, no_par_round = await client.insert(
        "event_rounds",
        [
            {"event_id": event["id"], "course_name": "Pebble Creek", "holes": 18, "round_number": 1},
            {"event_id": event["id"], "course_name": "Mystery Meadows", "holes": 9, "round_number": 2},
        ],
    )
    players = await client.insert(
        "event_players",
        [
            {"event_id": event["id"], "full_name": "Ana Torres", "status": "accepted"},
            {"event_id": event["id"], "full_name": "Ben Walsh", "status": "accepted"},
            {"event_id": event["id"], "full_name": "Cal Murphy", "status": "invited"},
            {"event_id": event["id"], "full_name": "Dee Park", "status": "declined"},
        ],
    )
    by_name = {p["full_name"].split()[0].lower(): p for p in players}
    contests = await client.insert(
        "skills_contests",
        [
            {"event_id": event["id"], "round_id": par_round["id"], "hole": 3, "contest_type": "closest_to_pin"},
            {"event_id": event["id"], "round_id": par_round["id"], "hole": 7, "contest_type": "longest_drive"},
        ],
    )
    return {
        "owner": owner,
        "event": event,
        "round": par_round,
        "no_par_round": no_par_round,
        "players": by_name,
        "contests": contests,
    }


@pytest.fixture
def golf_event(store, run):
    """A published event with a par-72 round, a parless 9-hole round and players.

    ``players`` is keyed by lowercase first name; ``dee`` has declined.
    """

    return run(_seed_golf_event(store))


API = "/api/v0"


@pytest.fixture
def api():
    """TestClient over the assembled application."""

    from fairway.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def owner_headers(api, golf_event):
    response = api.post(
        f"{API}/auth/login",
        json={"email": "owner@example.com", "password": "Fairway123"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def clubhouse_headers(api, golf_event):
    response = api.post(
        f"{API}/clubhouse/spring-golf-trip/sessions",
        json={"password": CLUBHOUSE_PASSWORD, "display_name": "Cart 1"},
    )
    assert response.status_code == 200, response.text
    return {"X-Clubhouse-Session": response.json()["session_id"]}
