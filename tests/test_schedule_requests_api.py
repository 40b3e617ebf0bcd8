from datetime import date

import pytest
from fastapi.testclient import TestClient

from backend.app.core.time import FixedClock, OverridableClock, get_clock
from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    clock = OverridableClock(FixedClock(date(2026, 3, 10)))
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.pop(get_clock, None)
    Base.metadata.drop_all(bind=engine)


def create_student(client: TestClient, name: str = "Hanako") -> int:
    resp = client.post("/students/", json={"name": name, "grade": "中2"})
    assert resp.status_code == 201
    return resp.json()["id"]


def create_request(client: TestClient, student_id: int, **overrides):
    payload = {
        "student_id": student_id,
        "requested_by": "parent",
        "date": "2026-04-08",
        "start_time": "10:00",
        "end_time": "12:00",
        "location": "日暮里",
    }
    payload.update(overrides)
    return client.post("/schedule-requests/", json=payload)


def test_request_confirm_flow():
    client = TestClient(app)
    student_id = create_student(client)

    resp = create_request(client, student_id)
    assert resp.status_code == 201
    request_id = resp.json()["id"]
    assert resp.json()["status"] == "requested"

    resp = client.post(f"/schedule-requests/{request_id}/confirm")
    assert resp.status_code == 200
    data = resp.json()
    assert data["request"]["status"] == "confirmed"
    assert data["lesson"]["status"] == "planned"
    assert data["lesson"]["amount"] == 7000
    assert data["lesson"]["transport_fee"] == 900
    assert data["lesson"]["is_makeup"] is False
    assert data["credit"] is None

    resp = client.get("/lessons/", params={"student_id": student_id, "month": "2026-04"})
    assert resp.status_code == 200
    assert [lesson["id"] for lesson in resp.json()] == [data["lesson"]["id"]]


def test_repropose_and_reject():
    client = TestClient(app)
    student_id = create_student(client)
    request_id = create_request(client, student_id).json()["id"]

    resp = client.post(
        f"/schedule-requests/{request_id}/repropose",
        json={"date": "2026-04-09", "start_time": "15:00", "end_time": "16:00"},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "reproposed"
    assert resp.json()["original_date"] == "2026-04-08"

    resp = client.post(f"/schedule-requests/{request_id}/reject")
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"

    resp = client.post(f"/schedule-requests/{request_id}/confirm")
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "invalid_transition"


def test_list_requests_by_status():
    client = TestClient(app)
    student_id = create_student(client)
    first = create_request(client, student_id).json()["id"]
    create_request(client, student_id, date="2026-04-15")
    client.post(f"/schedule-requests/{first}/reject")

    resp = client.get("/schedule-requests/", params={"student_id": student_id, "status": "requested"})
    assert resp.status_code == 200
    assert [item["date"] for item in resp.json()] == ["2026-04-15"]


def test_validation_errors_are_400():
    client = TestClient(app)
    student_id = create_student(client)
    resp = create_request(client, student_id, start_time="12:00", end_time="11:00")
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "validation_error"

    resp = create_request(client, student_id, start_time="twelve")
    assert resp.status_code == 400


def test_unknown_references_are_404():
    client = TestClient(app)
    resp = create_request(client, 12345)
    assert resp.status_code == 404
    assert client.post("/schedule-requests/999/confirm").status_code == 404


def test_makeup_cycle_through_api():
    client = TestClient(app)
    student_id = create_student(client)
    request_id = create_request(client, student_id, date="2026-03-12").json()["id"]
    lesson_id = client.post(f"/schedule-requests/{request_id}/confirm").json()["lesson"]["id"]

    resp = client.post(f"/lessons/{lesson_id}/cancel", json={"makeup_eligible": True, "reason": "Teacher unwell"})
    assert resp.status_code == 200
    credit = resp.json()["credit"]
    assert credit["total_minutes"] == 120
    assert credit["expires_at"] == "2026-04-12"

    resp = client.get("/makeup-credits/", params={"student_id": student_id})
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["total_remaining_minutes"] == 120
    assert summary["credits"][0]["display_status"] == "expires on 4/12"
    assert summary["credits"][0]["is_urgent"] is False
    assert summary["credits"][0]["remaining_display"] == "2h"

    resp = create_request(
        client,
        student_id,
        date="2026-03-26",
        start_time="10:00",
        end_time="11:00",
        makeup_credit_id=credit["id"],
    )
    assert resp.status_code == 201
    resp = client.post(f"/schedule-requests/{resp.json()['id']}/confirm")
    assert resp.status_code == 200
    assert resp.json()["lesson"]["is_makeup"] is True
    assert resp.json()["lesson"]["amount"] == 0
    assert resp.json()["credit"]["remaining_minutes"] == 60

    resp = create_request(
        client,
        student_id,
        date="2026-03-27",
        start_time="10:00",
        end_time="12:00",
        makeup_credit_id=credit["id"],
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "credit_unavailable"

    resp = client.post(f"/lessons/{lesson_id}/cancel", json={"makeup_eligible": True})
    assert resp.status_code == 409


def test_makeup_reschedule_is_bounded_by_its_credit():
    client = TestClient(app)
    student_id = create_student(client)
    request_id = create_request(client, student_id, date="2026-03-12").json()["id"]
    lesson_id = client.post(f"/schedule-requests/{request_id}/confirm").json()["lesson"]["id"]
    credit_id = client.post(f"/lessons/{lesson_id}/cancel", json={"makeup_eligible": True}).json()["credit"]["id"]

    resp = create_request(
        client,
        student_id,
        date="2026-03-26",
        start_time="10:00",
        end_time="11:00",
        makeup_credit_id=credit_id,
    )
    makeup_id = client.post(f"/schedule-requests/{resp.json()['id']}/confirm").json()["lesson"]["id"]

    resp = client.post(
        f"/lessons/{makeup_id}/reschedule",
        json={"date": "2026-03-27", "start_time": "10:00", "end_time": "13:00"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "credit_unavailable"

    resp = client.post(
        f"/lessons/{makeup_id}/reschedule",
        json={"date": "2026-03-27", "start_time": "10:00", "end_time": "12:00"},
    )
    assert resp.status_code == 200
    assert resp.json()["hours"] == 2.0
    assert resp.json()["amount"] == 0

    summary = client.get("/makeup-credits/", params={"student_id": student_id}).json()
    assert summary["total_remaining_minutes"] == 0
