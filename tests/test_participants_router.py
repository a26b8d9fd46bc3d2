# tests/test_participants_router.py
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from meetmatch.main import app
from meetmatch.db.session import engine, SessionLocal
from meetmatch.models import Base, BusyIntervalRecord, Participant

client = TestClient(app)


def setup_module(module):
    Base.metadata.create_all(bind=engine)


def _clean_db():
    db: Session = SessionLocal()
    try:
        db.query(BusyIntervalRecord).delete()
        db.query(Participant).delete()
        db.commit()
    finally:
        db.close()


def test_create_list_and_delete_participant():
    _clean_db()

    resp = client.post(
        "/participants",
        json={"id": "alice@example.com", "email": "alice@example.com"},
    )
    assert resp.status_code == 201, resp.text
    # Name falls back to the email
    assert resp.json()["name"] == "alice@example.com"

    dup = client.post("/participants", json={"id": "alice@example.com"})
    assert dup.status_code == 409

    listed = client.get("/participants")
    assert listed.status_code == 200
    assert [p["id"] for p in listed.json()["participants"]] == ["alice@example.com"]

    deleted = client.delete("/participants/alice@example.com")
    assert deleted.status_code == 204

    missing = client.delete("/participants/alice@example.com")
    assert missing.status_code == 404


def test_sync_and_read_busy_intervals():
    _clean_db()
    client.post("/participants", json={"id": "bob@example.com", "name": "Bob"})

    payload = {
        "time_min": "2025-01-06T00:00:00",
        "time_max": "2025-01-07T00:00:00",
        "intervals": [
            {"start": "2025-01-06T09:00:00", "end": "2025-01-06T09:30:00", "summary": "Standup"},
            {"start": "2025-01-06T13:00:00", "end": "2025-01-06T14:00:00"},
        ],
    }
    resp = client.put("/participants/bob@example.com/busy-intervals", json=payload)
    assert resp.status_code == 200, resp.text
    assert len(resp.json()["busy_intervals"]) == 2

    got = client.get(
        "/participants/bob@example.com/busy-intervals",
        params={"time_min": "2025-01-06T12:00:00", "time_max": "2025-01-06T18:00:00"},
    )
    assert got.status_code == 200
    rows = got.json()["busy_intervals"]
    assert len(rows) == 1
    assert rows[0]["start_time"].startswith("2025-01-06T13:00:00")


def test_busy_interval_validation_errors():
    _clean_db()
    client.post("/participants", json={"id": "bob@example.com"})

    backwards = {
        "time_min": "2025-01-06T00:00:00",
        "time_max": "2025-01-07T00:00:00",
        "intervals": [{"start": "2025-01-06T10:00:00", "end": "2025-01-06T09:00:00"}],
    }
    resp = client.put("/participants/bob@example.com/busy-intervals", json=backwards)
    assert resp.status_code == 422

    unknown = client.put(
        "/participants/nobody@example.com/busy-intervals",
        json={
            "time_min": "2025-01-06T00:00:00",
            "time_max": "2025-01-07T00:00:00",
            "intervals": [],
        },
    )
    assert unknown.status_code == 404
