from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.database import engine
from app.db.models import User
from app.domain import events
from app.exceptions import create_success_response
from app.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from app.main import app
from app.middleware import RateLimitMiddleware
from app.routers.appointments_router import get_notifier

UTC = timezone.utc
TUESDAY_10AM = "2026-01-06T10:00:00Z"


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, event, recipients):
        self.sent.append((event, [r.id.value for r in recipients]))


def parse(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(clock, notifier):
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        session.add(User(id="tutor-1", name="Tara", email="tutor@example.com", role="tutor"))
        session.add(User(id="student-1", name="Sam", email="student@example.com", role="student"))
        session.commit()
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def create(client, **overrides):
    body = {"tutor_id": "tutor-1", "student_id": "student-1", "appointment_date": TUESDAY_10AM}
    body.update(overrides)
    return client.post("/appointments/", json=body)


def test_create_returns_envelope(client, notifier):
    r = create(client, checklist=["Bring calculator", {"description": "Read ch. 2", "completed": True}], reason="Algebra")
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["error"] is None
    data = body["data"]
    assert data["status"] == "pending"
    assert parse(data["appointment_date"]) == datetime(2026, 1, 6, 10, 0, tzinfo=UTC)
    assert data["checklist"] == [
        {"description": "Bring calculator", "completed": False},
        {"description": "Read ch. 2", "completed": True},
    ]
    assert data["deleted_at"] is None
    event, recipients = notifier.sent[0]
    assert event.event_type == events.APPOINTMENT_CREATED
    assert recipients == ["tutor-1", "student-1"]


def test_create_on_sunday_is_rejected(client):
    r = create(client, appointment_date="2026-01-11T10:00:00Z")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert "Sundays" in body["error"]


def test_create_with_malformed_body_is_rejected(client):
    r = client.post("/appointments/", json={"tutor_id": "tutor-1"})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_double_booking_is_a_conflict(client):
    assert create(client).status_code == 201
    r = create(client, student_id="student-2", appointment_date="2026-01-06T10:30:00Z")
    assert r.status_code == 409
    assert r.json()["code"] == "CONFLICT"


def test_unknown_appointment_is_not_found(client):
    r = client.get("/appointments/appt-missing")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"


def test_status_flow_and_invalid_transition(client):
    appt_id = create(client).json()["data"]["id"]
    r = client.patch(f"/appointments/{appt_id}/status", json={"status": "confirmed"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "confirmed"
    assert client.patch(f"/appointments/{appt_id}/status", json={"status": "cancelled"}).status_code == 200
    r = client.patch(f"/appointments/{appt_id}/status", json={"status": "confirmed"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_OPERATION"
    assert client.get(f"/appointments/{appt_id}").json()["data"]["status"] == "cancelled"


def test_unknown_status_value_is_rejected(client):
    appt_id = create(client).json()["data"]["id"]
    r = client.patch(f"/appointments/{appt_id}/status", json={"status": "archived"})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_reschedule(client, clock):
    appt_id = create(client).json()["data"]["id"]
    r = client.post(f"/appointments/{appt_id}/reschedule", json={"appointment_date": "2026-01-07T14:00:00Z"})
    assert r.status_code == 200
    assert parse(r.json()["data"]["appointment_date"]) == datetime(2026, 1, 7, 14, 0, tzinfo=UTC)
    # one hour before the session the window is closed
    clock.advance(days=2, hours=4)
    r = client.post(f"/appointments/{appt_id}/reschedule", json={"appointment_date": "2026-01-09T14:00:00Z"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_DATE"


def test_reopen_cancelled_appointment(client):
    appt_id = create(client).json()["data"]["id"]
    client.patch(f"/appointments/{appt_id}/status", json={"status": "cancelled"})
    r = client.post(f"/appointments/{appt_id}/reopen", json={"appointment_date": "2026-01-08T09:00:00Z"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "pending"


def test_put_updates_only_sent_fields(client, notifier):
    appt_id = create(client, reason="Keep me", checklist=["Essay"]).json()["data"]["id"]
    r = client.put(f"/appointments/{appt_id}", json={"checklist": [{"description": "Poem"}]})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["reason"] == "Keep me"
    assert data["checklist"] == [{"description": "Poem", "completed": False}]
    assert notifier.sent[-1][0].event_type == events.CHECKLIST_UPDATED

    r = client.put(f"/appointments/{appt_id}", json={"status": "cancelled", "reason": "Tutor unavailable"})
    assert r.json()["data"]["status"] == "cancelled"
    assert r.json()["data"]["reason"] == "Tutor unavailable"

    r = client.put(f"/appointments/{appt_id}", json={"reason": "again"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_OPERATION"


def test_complete_with_and_without_body(client, clock):
    first = create(client).json()["data"]["id"]
    second = create(client, appointment_date="2026-01-06T15:00:00Z").json()["data"]["id"]
    for appt_id in (first, second):
        client.patch(f"/appointments/{appt_id}/status", json={"status": "confirmed"})

    r = client.post(f"/appointments/{first}/complete", json={"completed_task": "Worksheet 4"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_OPERATION"

    clock.advance(days=1, hours=8)
    r = client.post(f"/appointments/{first}/complete", json={"completed_task": "Worksheet 4"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "completed"
    assert r.json()["data"]["checklist"] == [{"description": "Worksheet 4", "completed": True}]
    assert client.post(f"/appointments/{second}/complete").json()["data"]["status"] == "completed"


def test_delete_is_soft_and_not_repeatable(client, notifier):
    appt_id = create(client).json()["data"]["id"]
    r = client.delete(f"/appointments/{appt_id}")
    assert r.status_code == 200
    assert r.json()["data"]["deleted_at"] is not None
    assert notifier.sent[-1][0].event_type == events.APPOINTMENT_DELETED
    assert client.get(f"/appointments/{appt_id}").status_code == 404
    assert client.delete(f"/appointments/{appt_id}").status_code == 404


def test_list_with_filters_and_pagination(client):
    for day in (6, 7, 8):
        create(client, appointment_date=f"2026-01-0{day}T10:00:00Z")
    create(client, tutor_id="tutor-2", student_id="student-2", appointment_date="2026-01-09T10:00:00Z")

    r = client.get("/appointments/", params={"tutor_id": "tutor-1", "limit": 2})
    assert r.status_code == 200
    body = r.json()
    assert [parse(a["appointment_date"]).day for a in body["data"]] == [8, 7]
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "total_pages": 2,
        "has_next": True,
        "has_prev": False,
    }

    r = client.get("/appointments/", params={"date_from": "2026-01-07T00:00:00Z", "date_to": "2026-01-08T23:00:00Z"})
    assert r.json()["pagination"]["total"] == 2

    r = client.get("/appointments/", params={"status": "confirmed"})
    assert r.json()["data"] == []


@pytest.mark.parametrize("params", [{"status": "archived"}, {"limit": 0}, {"limit": 101}, {"page": 0}])
def test_list_rejects_bad_query(client, params):
    r = client.get("/appointments/", params=params)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] is True
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_rate_limit_middleware_returns_429():
    small = FastAPI()
    small.add_middleware(RateLimitMiddleware, limiter=InMemoryRateLimiter(), per_minute=2)

    @small.get("/ping")
    def ping():
        return create_success_response("pong")

    c = TestClient(small)
    assert c.get("/ping").status_code == 200
    assert c.get("/ping").status_code == 200
    r = c.get("/ping")
    assert r.status_code == 429
    assert r.json()["code"] == "RATE_LIMITED"


def test_reusing_an_id_is_a_conflict(client):
    assert create(client, id="appt-dup01").status_code == 201
    r = create(client, id="appt-dup01", appointment_date="2026-01-07T14:00:00Z")
    assert r.status_code == 409
    assert r.json()["code"] == "DUPLICATE_ID"
    # the failed insert leaves the service usable
    assert create(client, appointment_date="2026-01-08T10:00:00Z").status_code == 201


def test_reusing_a_deleted_id_is_a_conflict(client):
    assert create(client, id="appt-dup02").status_code == 201
    assert client.delete("/appointments/appt-dup02").status_code == 200
    r = create(client, id="appt-dup02")
    assert r.status_code == 409
    assert r.json()["code"] == "DUPLICATE_ID"


def test_overlong_id_is_rejected(client):
    r = create(client, id="a" * 65)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_put_accepts_plain_string_checklist_items(client):
    appt_id = create(client).json()["data"]["id"]
    r = client.put(f"/appointments/{appt_id}", json={"checklist": ["Flashcards", {"description": "Quiz", "completed": True}]})
    assert r.status_code == 200
    assert r.json()["data"]["checklist"] == [
        {"description": "Flashcards", "completed": False},
        {"description": "Quiz", "completed": True},
    ]
