import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from rooms_service.main import app
from rooms_service.database import Base, SessionLocal, engine, get_db
from rooms_service import models

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


def add_room(room_id: str, name: str, **fields):
    values = {
        "short_description": f"{name} short",
        "long_description": f"{name} long",
        "price": 120.0,
        "capacity": 2,
        "type": "double",
    }
    values.update(fields)
    db = SessionLocal()
    try:
        db.add(models.Room(id=room_id, name=name, **values))
        db.commit()
    finally:
        db.close()


class BrokenSession:
    """Session whose every query fails as if the database were down."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT rooms", {}, Exception("connection refused"))

    query = _fail
    get = _fail

    def close(self):
        pass


def broken_db():
    yield BrokenSession()


def test_root_reports_running():
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"service": "rooms", "status": "running"}


def test_list_rooms_on_empty_store_returns_empty_list():
    res = client.get("/api/v1/rooms")
    assert res.status_code == 200
    assert res.json() == []


def test_list_rooms_returns_each_room_once():
    add_room("2", "Garden Suite", type="suite", price=310.5, capacity=4)
    add_room("1", "Ocean View")
    add_room("3", "Attic Single", type="single", capacity=1)

    res = client.get("/api/v1/rooms")
    assert res.status_code == 200
    rooms = res.json()

    assert len(rooms) == 3
    assert len({r["id"] for r in rooms}) == 3
    assert [r["name"] for r in rooms] == ["Attic Single", "Garden Suite", "Ocean View"]


def test_get_room_returns_all_fields():
    add_room(
        "1",
        "Ocean View",
        short_description="Sea-facing double",
        long_description="Balcony overlooking the bay.",
        price=180.0,
        capacity=2,
        type="double",
    )

    res = client.get("/api/v1/rooms/1")
    assert res.status_code == 200
    assert res.json() == {
        "id": "1",
        "name": "Ocean View",
        "short_description": "Sea-facing double",
        "long_description": "Balcony overlooking the bay.",
        "price": 180.0,
        "capacity": 2,
        "type": "double",
    }


def test_get_nonexistent_room_returns_404():
    res = client.get("/api/v1/rooms/missing")
    assert res.status_code == 404
    body = res.json()
    assert body["detail"] == "Room not found"
    assert body["service"] == "rooms"
    assert body["path"] == "/api/v1/rooms/missing"


def test_store_failure_on_list_returns_503():
    app.dependency_overrides[get_db] = broken_db

    res = client.get("/api/v1/rooms")
    assert res.status_code == 503
    assert res.json()["detail"] == "Failed to fetch rooms"


def test_store_failure_on_get_returns_503_not_404():
    app.dependency_overrides[get_db] = broken_db

    res = client.get("/api/v1/rooms/1")
    assert res.status_code == 503
    assert res.json()["detail"] == "Failed to fetch room"
