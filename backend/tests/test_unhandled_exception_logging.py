import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from fairway.main import store_exception_handler, unhandled_exception_handler
from fairway.store import StoreError


def test_unhandled_exception_logs_traceback(caplog):
    app = FastAPI()
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    def boom():
        raise ValueError("boom")

    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "internal_server_error"
    record = next((r for r in caplog.records if r.message == "Unhandled exception"), None)
    assert record is not None
    assert record.exc_info[0] is ValueError
    assert "ValueError: boom" in caplog.text


def test_store_failure_is_a_503_problem(caplog):
    app = FastAPI()
    app.add_exception_handler(StoreError, store_exception_handler)

    @app.get("/down")
    async def down():
        raise StoreError("events", "select", "connection refused")

    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR):
        response = client.get("/down")

    assert response.status_code == 503
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "store_unavailable"
    assert "select on events failed" in caplog.text
