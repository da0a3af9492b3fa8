from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from slotbook.core.config import settings
from slotbook.db.session import get_db
from slotbook.main import app

DAY = (datetime.now() + timedelta(days=2)).replace(hour=0, minute=0, second=0, microsecond=0)


def token(user_id: str, role: str = "USER") -> dict:
    encoded = jwt.encode({"sub": user_id, "role": role}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {encoded}"}


def slot(hour: int, minute: int = 0) -> str:
    return DAY.replace(hour=hour, minute=minute).isoformat()


ALICE, BOB, ADMIN = token("alice"), token("bob"), token("admin", "ADMIN")


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def room(make_resource):
    return make_resource(approval="ADMIN_REQUIRED", cancellation="FLEXIBLE").id


def book(client, room, start, end, headers=ALICE):
    return client.post("/api/v1/bookings", json={"resourceId": room, "start": start, "end": end}, headers=headers)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_identity_is_required(client, room):
    assert book(client, room, slot(10), slot(11), headers={}).status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/v1/me", headers=bad).status_code == 401
    assert client.get("/api/v1/me", headers=ADMIN).json() == {"id": "admin", "role": "ADMIN"}


def test_booking_flow(client, room):
    r = book(client, room, slot(10), slot(11))
    assert r.status_code == 201
    booking = r.json()
    assert booking["status"] == "REQUESTED"
    assert booking["userId"] == "alice"
    assert Decimal(booking["price"]) == Decimal("10.00")

    pending = client.get("/api/v1/bookings/pending", headers=ADMIN).json()
    assert [b["id"] for b in pending] == [booking["id"]]
    assert client.get("/api/v1/bookings/pending", headers=ALICE).status_code == 403

    assert client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=BOB).status_code == 403
    r = client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=ADMIN)
    assert r.json()["status"] == "APPROVED"

    r = client.post(f"/api/v1/bookings/{booking['id']}/pay", json={"method": "card"}, headers=ALICE)
    assert r.json()["status"] == "PAID"

    r = client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=ALICE)
    assert r.status_code == 200
    body = r.json()
    assert body["refunded"] is True
    assert body["booking"]["status"] == "REFUNDED"

    audit = client.get("/api/v1/admin/audit", params={"entityId": booking["id"]}, headers=ADMIN).json()
    assert [e["action"] for e in audit] == ["create", "approve", "pay", "cancel"]
    newest = client.get("/api/v1/admin/audit", params={"newestFirst": True}, headers=ADMIN).json()
    assert newest[0]["action"] == "cancel"
    assert client.get("/api/v1/admin/audit", headers=ALICE).status_code == 403

    notes = client.get("/api/v1/me/notifications", headers=ALICE).json()
    assert len(notes) == 4


def test_errors_map_to_status_codes(client, room):
    first = book(client, room, slot(10), slot(12)).json()

    r = book(client, room, slot(11), slot(13), headers=BOB)
    assert r.status_code == 409
    assert r.json()["error"] == "conflict"

    r = book(client, room, slot(12), slot(11), headers=BOB)
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"

    r = client.post(f"/api/v1/bookings/{first['id']}/pay", json={"method": "card"}, headers=ALICE)
    assert r.status_code == 409
    assert r.json()["error"] == "state_conflict"

    r = client.post(f"/api/v1/bookings/{first['id']}/cancel", headers=BOB)
    assert r.status_code == 403

    assert client.post("/api/v1/bookings/nope/cancel", headers=ALICE).status_code == 404
    assert book(client, "nope", slot(14), slot(15)).status_code == 404


def test_availability_hides_other_owners(client, room):
    mine = book(client, room, slot(10), slot(11)).json()
    theirs = book(client, room, slot(12), slot(13), headers=BOB).json()
    params = {"start": slot(8), "end": slot(20)}

    as_alice = client.get(f"/api/v1/resources/{room}/availability", params=params, headers=ALICE).json()
    assert [(s["id"], s["mine"], s["userId"]) for s in as_alice] == [
        (mine["id"], True, "alice"),
        (theirs["id"], False, None),
    ]

    as_admin = client.get(f"/api/v1/resources/{room}/availability", params=params, headers=ADMIN).json()
    assert [s["userId"] for s in as_admin] == ["alice", "bob"]


def test_preview_and_schedule(client, room):
    book(client, room, slot(11), slot(12))

    r = client.get(f"/api/v1/resources/{room}/availability/preview",
                   params={"anchor": slot(10), "current": slot(12), "unitMinutes": 60}, headers=BOB)
    preview = r.json()
    assert preview["valid"] is False
    assert len(preview["blockedUnits"]) == 1

    r = client.get(f"/api/v1/resources/{room}/schedule",
                   params={"fromDate": DAY.date().isoformat(), "days": 1}, headers=BOB)
    days = r.json()
    assert len(days) == 1
    assert sum(c["occupied"] for c in days[0]["cells"]) == 1


def test_preview_unit_defaults_to_grid_setting(client, room, monkeypatch):
    monkeypatch.setattr(settings, "GRID_UNIT_MINUTES", 30)
    r = client.get(f"/api/v1/resources/{room}/availability/preview",
                   params={"anchor": slot(10), "current": slot(10)}, headers=BOB)
    preview = r.json()
    assert preview["start"].startswith(slot(10)[:16])
    assert preview["end"].startswith(slot(10, 30)[:16])


def test_admin_reschedule_and_delete(client, room):
    b = book(client, room, slot(10), slot(11)).json()

    r = client.patch(f"/api/v1/admin/bookings/{b['id']}", json={"start": slot(18), "end": slot(19)}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["start"].startswith(slot(18)[:16])

    assert client.delete(f"/api/v1/admin/bookings/{b['id']}", headers=ALICE).status_code == 403
    r = client.delete(f"/api/v1/admin/bookings/{b['id']}", headers=ADMIN)
    assert r.json() == {"ok": True, "id": b["id"]}
    assert client.get("/api/v1/bookings/mine", headers=ALICE).json() == []


def test_resource_catalog(client, make_resource):
    make_resource(category="EQUIPMENT", name="Camera #1")
    make_resource(category="STUDIO", name="Studio 1")
    names = [r["name"] for r in client.get("/api/v1/resources", params={"category": "studio"}, headers=BOB).json()]
    assert names == ["Studio 1"]
    assert client.get("/api/v1/resources/nope", headers=BOB).status_code == 404
