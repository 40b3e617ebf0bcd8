from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from backend.app.core.time import FixedClock, OverridableClock, get_clock
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.lesson import Lesson
from backend.app.models.student import Student

clock = OverridableClock(FixedClock(date(2026, 3, 10)))


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    clock.clear_override()
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.pop(get_clock, None)
    Base.metadata.drop_all(bind=engine)


def _seed_lessons() -> int:
    db = SessionLocal()
    try:
        student = Student(name="Ken")
        db.add(student)
        db.commit()
        db.refresh(student)
        rows = [
            (date(2026, 4, 1), 7000, 900, "planned", False),
            (date(2026, 4, 8), 7000, 900, "planned", False),
            (date(2026, 4, 15), 0, 900, "planned", True),
            (date(2026, 4, 22), 7000, 900, "cancelled", False),
            (date(2026, 4, 29), 7000, 900, "done", False),
            (date(2026, 5, 6), 7000, 900, "planned", False),
        ]
        for lesson_date, amount, transport, status, is_makeup in rows:
            db.add(
                Lesson(
                    student_id=student.id,
                    date=lesson_date,
                    start_time="10:00",
                    end_time="12:00",
                    hours=2,
                    amount=amount,
                    transport_fee=transport,
                    status=status,
                    is_makeup=is_makeup,
                    created_at=datetime(2026, 3, 1),
                )
            )
        db.commit()
        return student.id
    finally:
        db.close()


def test_billing_defaults_to_next_month():
    client = TestClient(app)
    student_id = _seed_lessons()

    resp = client.get(f"/billing/{student_id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["target_month"] == "2026-04-01"
    assert data["lesson_count"] == 2
    assert data["lesson_fee_total"] == 14000
    assert data["transport_fee_total"] == 1800
    assert data["total_amount"] == 15800
    assert data["is_confirmed"] is False
    assert data["confirmation_date"] == "2026-03-20"
    assert data["payment_due_date"] == "2026-04-25"
    assert [lesson["date"] for lesson in data["lessons"]] == ["2026-04-01", "2026-04-08"]


def test_billing_for_explicit_month():
    client = TestClient(app)
    student_id = _seed_lessons()
    resp = client.get(f"/billing/{student_id}", params={"month": "2026-05"})
    assert resp.status_code == 200
    assert resp.json()["total_amount"] == 7900


def test_debug_override_confirms_billing_and_is_cleared():
    client = TestClient(app)
    student_id = _seed_lessons()

    resp = client.put("/debug/clock", json={"date": "2026-03-20"})
    assert resp.status_code == 200
    assert resp.json() == {"today": "2026-03-20", "override": "2026-03-20"}

    resp = client.get(f"/billing/{student_id}")
    assert resp.json()["is_confirmed"] is True

    resp = client.delete("/debug/clock")
    assert resp.json() == {"today": "2026-03-10", "override": None}
    assert client.get(f"/billing/{student_id}").json()["is_confirmed"] is False


def test_debug_override_rejects_bad_dates():
    client = TestClient(app)
    resp = client.put("/debug/clock", json={"date": "2026/03/20"})
    assert resp.status_code == 400
    assert clock.override is None


def test_billing_errors():
    client = TestClient(app)
    student_id = _seed_lessons()
    assert client.get(f"/billing/{student_id}", params={"month": "04-2026"}).status_code == 400
    assert client.get("/billing/999").status_code == 404


def test_payment_report_and_confirm():
    client = TestClient(app)
    student_id = _seed_lessons()

    resp = client.get(f"/payments/{student_id}/2026-04")
    assert resp.status_code == 200
    assert resp.json()["status"] == "unpaid"

    assert client.post(f"/payments/{student_id}/2026-04/report").status_code == 409

    clock.set_override("2026-03-21")
    resp = client.post(f"/payments/{student_id}/2026-04/report")
    assert resp.status_code == 200
    assert resp.json()["status"] == "reported"
    assert resp.json()["total_amount"] == 15800

    resp = client.post(f"/payments/{student_id}/2026-04/confirm")
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"


def test_other_charges_and_refunds_reach_the_statement():
    client = TestClient(app)
    student_id = _seed_lessons()
    db = SessionLocal()
    try:
        db.add(
            Lesson(
                student_id=student_id,
                date=date(2026, 3, 18),
                start_time="10:00",
                end_time="12:00",
                hours=2,
                amount=7000,
                transport_fee=900,
                status="cancelled",
                is_makeup=False,
                cancellation_reason="[Teacher Reason] Teacher unwell",
                created_at=datetime(2026, 2, 1),
            )
        )
        db.commit()
    finally:
        db.close()

    resp = client.post(
        f"/billing/{student_id}/charges",
        json={"month": "2026-04", "description": "Exam workbook", "amount": 1500},
    )
    assert resp.status_code == 201
    assert resp.json()["year_month"] == "2026-04"

    resp = client.get(f"/billing/{student_id}/charges", params={"month": "2026-04"})
    assert [charge["description"] for charge in resp.json()] == ["Exam workbook"]

    data = client.get(f"/billing/{student_id}").json()
    assert data["total_amount"] == 15800
    assert data["adjustments"]["cancellation_refund"] == 7900
    assert data["adjustments"]["details"][0]["type"] == "refund"
    assert data["other_charges"]["total"] == 1500
    assert data["deferred_lessons"] == []
    assert data["statement_total"] == 15800 - 7900 + 1500

    clock.set_override("2026-03-21")
    resp = client.post(f"/payments/{student_id}/2026-04/report")
    assert resp.json()["total_amount"] == 9400


def test_blank_charge_description_is_rejected():
    client = TestClient(app)
    student_id = _seed_lessons()
    resp = client.post(f"/billing/{student_id}/charges", json={"month": "2026-04", "description": "", "amount": 100})
    assert resp.status_code == 422
    resp = client.post(f"/billing/{student_id}/charges", json={"month": "2026-04", "description": "  ", "amount": 100})
    assert resp.status_code == 400
