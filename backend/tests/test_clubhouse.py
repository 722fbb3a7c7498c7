import pytest
from sqlalchemy.exc import OperationalError

from fairway.db_errors import is_missing_column_error
from fairway.exceptions import ClubhouseUnavailable
from fairway.services import clubhouse as clubhouse_service
from fairway.store import StoreError

API = "/api/v0"
CLUBHOUSE = f"{API}/clubhouse/spring-golf-trip"


def test_verify_password(api, golf_event):
    ok = api.post(f"{CLUBHOUSE}/verify-password", json={"password": "birdie"})
    assert ok.status_code == 200
    assert ok.json()["event_id"] == golf_event["event"]["id"]

    wrong = api.post(f"{CLUBHOUSE}/verify-password", json={"password": "bogey"})
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "clubhouse_invalid_password"

    unknown = api.post(f"{API}/clubhouse/nope/verify-password", json={"password": "birdie"})
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "event_not_found"


def test_unpublished_and_disabled_events(api, golf_event, store, run):
    event_id = golf_event["event"]["id"]
    run(store.update("events", {"is_published": False}, {"id": event_id}))
    response = api.post(f"{CLUBHOUSE}/verify-password", json={"password": "birdie"})
    assert response.status_code == 403
    assert response.json()["code"] == "event_not_published"

    run(store.update("events", {"is_published": True, "clubhouse_password": None}, {"id": event_id}))
    response = api.post(f"{CLUBHOUSE}/verify-password", json={"password": "birdie"})
    assert response.status_code == 403
    assert response.json()["code"] == "clubhouse_disabled"


def test_session_lifecycle(api, golf_event, clubhouse_headers):
    verify = api.post(f"{CLUBHOUSE}/sessions/verify", headers=clubhouse_headers)
    assert verify.status_code == 200
    assert verify.json() == {"valid": True, "display_name": "Cart 1"}

    touch = api.post(f"{CLUBHOUSE}/sessions/touch", headers=clubhouse_headers)
    assert touch.status_code == 200
    assert touch.json()["last_accessed"] is not None

    signed_out = api.delete(f"{CLUBHOUSE}/sessions", headers=clubhouse_headers)
    assert signed_out.status_code == 204

    again = api.post(f"{CLUBHOUSE}/sessions/verify", headers=clubhouse_headers)
    assert again.status_code == 401
    assert again.json()["code"] == "clubhouse_invalid_session"


def test_session_requires_header_and_display_name(api, golf_event):
    missing = api.post(f"{CLUBHOUSE}/sessions/verify")
    assert missing.status_code == 401

    too_long = api.post(
        f"{CLUBHOUSE}/sessions",
        json={"password": "birdie", "display_name": "x" * 51},
    )
    assert too_long.status_code == 422


def test_session_is_scoped_to_its_event(api, golf_event, clubhouse_headers, store, run):
    from fairway.passwords import pwd_context

    run(
        store.insert(
            "events",
            [
                {
                    "user_id": golf_event["owner"]["id"],
                    "name": "Fall Classic",
                    "slug": "fall-classic",
                    "is_published": True,
                    "clubhouse_password": pwd_context.hash("birdie"),
                }
            ],
        )
    )
    response = api.post(
        f"{API}/clubhouse/fall-classic/sessions/verify", headers=clubhouse_headers
    )
    assert response.status_code == 401


def test_missing_password_column_means_unavailable(run):
    error = OperationalError(
        "SELECT events.clubhouse_password FROM events",
        {},
        Exception("no such column: events.clubhouse_password"),
    )
    assert is_missing_column_error(error, "clubhouse_password")

    class BrokenClient:
        async def first(self, table, filters=None, **kwargs):
            raise StoreError(table, "select", str(error), original=error)

    with pytest.raises(ClubhouseUnavailable) as excinfo:
        run(clubhouse_service.get_clubhouse_event(BrokenClient(), "spring-golf-trip"))
    assert excinfo.value.status_code == 403
    assert excinfo.value.code == "clubhouse_unavailable"
