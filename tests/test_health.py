# tests/test_health.py
from fastapi.testclient import TestClient

from campus_feed.core.security import create_access_token, decode_subject
from campus_feed.db.session import make_engine


def test_health(client: TestClient) -> None:
    """Verify that the health endpoint reports the service as up."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_root_responds(client: TestClient) -> None:
    """Verify that the root endpoint describes the API."""
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Campus Feed"
    assert r.json()["docs"] == "/docs"


def test_token_round_trip() -> None:
    assert decode_subject(create_access_token("user-42")) == "user-42"
    assert decode_subject("garbage") is None


def test_make_engine_shares_sqlite_connections_across_threads(mocker) -> None:
    create_engine = mocker.patch("campus_feed.db.session.create_engine")

    make_engine("sqlite:///feed.db", echo=True)
    make_engine("postgresql+psycopg://feed@db/feed")

    sqlite_call, postgres_call = create_engine.call_args_list
    assert sqlite_call == mocker.call(
        "sqlite:///feed.db", echo=True, connect_args={"check_same_thread": False}
    )
    assert postgres_call == mocker.call("postgresql+psycopg://feed@db/feed")
