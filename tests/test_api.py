"""End-to-end tests for the HTTP surface."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from venue_availability.domain.models import HOUR_MS, Opportunity
from venue_availability.main import app, store

_DAY = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _ms(hours: float, days: int = 0) -> int:
    return int((_DAY + timedelta(days=days, hours=hours)).timestamp() * 1000)


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    store.venues._store.clear()
    store.opportunities._store.clear()
    store.slots._store.clear()
    store.conflicts._store.clear()
    yield
    store.venues._store.clear()
    store.opportunities._store.clear()
    store.slots._store.clear()
    store.conflicts._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def venue_id(client):
    resp = client.post(
        "/venues",
        json={"name": "Hall A", "capacity": 120, "setup_time": 30, "cleanup_time": 30},
    )
    assert resp.status_code == 200
    return resp.json()["id"]


def _create_slot(client, venue_id, start, end, status="CONFIRMED", **extra):
    resp = client.post(
        "/availability",
        json={
            "venue_id": venue_id,
            "start_time": start,
            "end_time": end,
            "booking_status": status,
            **extra,
        },
    )
    assert resp.status_code == 200
    return resp.json()


def test_venue_crud(client, venue_id):
    resp = client.patch(f"/venues/{venue_id}", json={"capacity": 150, "is_active": False})
    assert resp.status_code == 200
    assert resp.json()["capacity"] == 150

    assert client.get("/venues", params={"active_only": True}).json() == []
    assert len(client.get("/venues").json()) == 1

    assert client.patch("/venues/missing", json={"capacity": 1}).status_code == 404


def test_slot_lifecycle(client, venue_id):
    slot = _create_slot(client, venue_id, _ms(10), _ms(12), status="TENTATIVE")
    assert slot["is_booked"] is False

    resp = client.patch(f"/availability/{slot['id']}", json={"booking_status": "CONFIRMED"})
    assert resp.status_code == 200
    assert resp.json()["is_booked"] is True

    listed = client.get("/availability", params={"venue_id": venue_id}).json()
    assert [s["id"] for s in listed] == [slot["id"]]

    assert client.patch("/availability/missing", json={"notes": "x"}).status_code == 404


def test_slot_patch_clears_fields_sent_as_null(client, venue_id):
    slot = _create_slot(
        client, venue_id, _ms(10), _ms(12), opportunity_id="opp-1", notes="Hold for Lee"
    )

    kept = client.patch(f"/availability/{slot['id']}", json={"booking_status": "TENTATIVE"})
    assert kept.json()["opportunity_id"] == "opp-1"
    assert kept.json()["notes"] == "Hold for Lee"

    cleared = client.patch(
        f"/availability/{slot['id']}", json={"opportunity_id": None, "notes": None}
    )
    assert cleared.status_code == 200
    assert cleared.json()["opportunity_id"] is None
    assert cleared.json()["notes"] is None
    assert cleared.json()["booking_status"] == "TENTATIVE"


def test_patch_with_null_required_field_is_422(client, venue_id):
    slot = _create_slot(client, venue_id, _ms(10), _ms(12))

    resp = client.patch(f"/availability/{slot['id']}", json={"booking_status": None})
    assert resp.status_code == 422
    assert client.patch(f"/venues/{venue_id}", json={"name": None}).status_code == 422
    assert client.get("/venues").json()[0]["name"] == "Hall A"


def test_slot_rejects_inverted_range(client, venue_id):
    resp = client.post(
        "/availability",
        json={"venue_id": venue_id, "start_time": _ms(12), "end_time": _ms(10)},
    )
    assert resp.status_code == 422


def test_slot_for_unknown_venue_is_404(client):
    resp = client.post(
        "/availability",
        json={"venue_id": "missing", "start_time": _ms(10), "end_time": _ms(12)},
    )
    assert resp.status_code == 404


def test_check_conflicts(client, venue_id):
    slot = _create_slot(client, venue_id, _ms(14), _ms(16))

    clear = client.post(
        "/conflicts/check",
        json={"venue_id": venue_id, "start_time": _ms(10), "end_time": _ms(12)},
    )
    assert clear.status_code == 200
    assert clear.json() == []

    hit = client.post(
        "/conflicts/check",
        json={"venue_id": venue_id, "start_time": _ms(15), "end_time": _ms(17)},
    ).json()
    assert len(hit) == 1
    assert hit[0]["conflict_type"] == "VENUE_DOUBLE_BOOKING"
    assert hit[0]["severity"] == "HIGH"
    assert hit[0]["booking"]["id"] == slot["id"]
    assert hit[0]["overlap_start"] == _ms(15)
    assert hit[0]["overlap_end"] == _ms(16)


def test_suggestions(client, venue_id):
    _create_slot(client, venue_id, _ms(14), _ms(16))

    resp = client.get(
        f"/venues/{venue_id}/suggestions",
        params={"preferred_date": _ms(14), "duration": 2 * HOUR_MS, "search_range": 1},
    )
    assert resp.status_code == 200
    body = resp.json()
    starts = [s["start_time"] for s in body]
    assert _ms(13) not in starts
    assert _ms(16) in starts
    assert body[0]["is_preferred_date"] is True
    assert body[0]["venue"]["id"] == venue_id


def test_suggestions_for_unknown_venue_is_empty(client):
    resp = client.get(
        "/venues/missing/suggestions",
        params={"preferred_date": _ms(12), "duration": HOUR_MS},
    )
    assert resp.status_code == 200
    assert resp.json() == []


def test_conflict_log_flow(client, venue_id):
    resp = client.post(
        "/conflicts",
        json={
            "opportunity_id": "opp-1",
            "conflict_type": "STAFF_UNAVAILABLE",
            "severity": "MEDIUM",
            "conflict_date": _ms(18),
            "venue_id": venue_id,
        },
    )
    assert resp.status_code == 200
    conflict_id = resp.json()["id"]

    unresolved = client.get("/conflicts", params={"unresolved_only": True}).json()
    assert [c["id"] for c in unresolved] == [conflict_id]

    resolved = client.post(
        f"/conflicts/{conflict_id}/resolve", json={"resolution_notes": "Extra staff hired"}
    )
    assert resolved.status_code == 200
    assert resolved.json()["is_resolved"] is True
    assert resolved.json()["resolution_notes"] == "Extra staff hired"

    assert client.get("/conflicts", params={"unresolved_only": True}).json() == []
    assert len(client.get("/conflicts", params={"venue_id": venue_id}).json()) == 1

    assert client.post("/conflicts/missing/resolve").status_code == 404


def test_booking_flow(client, venue_id):
    first = Opportunity(name="Lee wedding", event_date=_ms(17))
    second = Opportunity(name="Kim birthday", event_date=_ms(18))
    store.opportunities.add(first)
    store.opportunities.add(second)

    resp = client.post(
        f"/opportunities/{first.id}/booking",
        json={"venue_id": venue_id, "event_duration": 3 * HOUR_MS, "booking_status": "CONFIRMED"},
    )
    assert resp.status_code == 200
    assert resp.json()["is_booked"] is True

    clash = client.post(
        f"/opportunities/{second.id}/booking",
        json={"venue_id": venue_id, "event_duration": HOUR_MS},
    )
    assert clash.status_code == 409
    assert clash.json()["detail"]["conflicting_slot_ids"] == [resp.json()["id"]]
    assert len(client.get("/conflicts", params={"opportunity_id": second.id}).json()) == 1

    cancelled = client.delete(f"/opportunities/{first.id}/booking")
    assert cancelled.status_code == 200
    assert [s["booking_status"] for s in cancelled.json()] == ["AVAILABLE"]

    assert client.delete(f"/opportunities/{first.id}/booking").status_code == 404
    assert client.post(
        "/opportunities/missing/booking",
        json={"venue_id": venue_id, "event_duration": HOUR_MS},
    ).status_code == 404


def test_rebook_then_cancel_releases_the_single_hold(client, venue_id):
    opp = Opportunity(name="Lee wedding", event_date=_ms(17))
    store.opportunities.add(opp)

    for status in ("TENTATIVE", "CONFIRMED"):
        resp = client.post(
            f"/opportunities/{opp.id}/booking",
            json={"venue_id": venue_id, "event_duration": 2 * HOUR_MS, "booking_status": status},
        )
        assert resp.status_code == 200

    cancelled = client.delete(f"/opportunities/{opp.id}/booking")
    assert len(cancelled.json()) == 1

    live = [
        s
        for s in client.get("/availability", params={"venue_id": venue_id}).json()
        if s["booking_status"] != "AVAILABLE"
    ]
    assert live == []
    assert store.opportunities.get(opp.id).room_assignment is None


def test_date_conflicts(client, venue_id):
    mine = Opportunity(name="Lee wedding", event_date=_ms(17))
    rival = Opportunity(name="Kim birthday", event_date=_ms(17))
    store.opportunities.add(mine)
    store.opportunities.add(rival)
    held = _create_slot(client, venue_id, _ms(18), _ms(22), opportunity_id=rival.id)

    resp = client.post(
        "/opportunities/date-conflicts",
        json={
            "event_date": _ms(17),
            "venue_id": venue_id,
            "exclude_opportunity_id": mine.id,
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [c["conflict_type"] for c in body] == ["VENUE_DOUBLE_BOOKING", "DATE_CONFLICT"]
    assert body[0]["booking"]["id"] == held["id"]
    assert body[0]["severity"] == "HIGH"
    assert body[1]["severity"] == "LOW"
    assert body[1]["opportunity"]["id"] == rival.id

    no_venue = client.post("/opportunities/date-conflicts", json={"event_date": _ms(17)})
    assert {c["opportunity"]["id"] for c in no_venue.json()} == {mine.id, rival.id}
