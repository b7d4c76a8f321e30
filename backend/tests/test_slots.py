from datetime import date, timedelta

import pytest

from session_booking.exceptions import NotFoundError, ValidationError
from session_booking.models import BlockedSlots, SessionRequests
from session_booking.services import availability
from session_booking.services.slots import get_available_slots

from conftest import MONDAY, NOW, PROVIDER, REQUESTER, headers

SIX_SLOTS = [
    ("09:00", "10:00"),
    ("10:15", "11:15"),
    ("11:30", "12:30"),
    ("12:45", "13:45"),
    ("14:00", "15:00"),
    ("15:15", "16:15"),
]


def pairs(day):
    return [(s.start_time, s.end_time) for s in day.slots]


def _lock(db, start, end, expires_at):
    request = SessionRequests(
        provider_id=PROVIDER.id,
        requester_id=REQUESTER.id,
        date=MONDAY.isoformat(),
        start_time=start,
        end_time=end,
        amount=1000.0,
        currency="PKR",
        status="PENDING_PAYMENT",
        expires_at=expires_at,
        session_title="Intro call",
    )
    db.add(request)
    db.flush()
    db.add(BlockedSlots(
        provider_id=PROVIDER.id,
        date=MONDAY.isoformat(),
        start_time=start,
        end_time=end,
        expires_at=expires_at,
        session_request_id=request.id,
    ))
    db.commit()


def test_provider_without_settings(db):
    with pytest.raises(NotFoundError):
        get_available_slots(db, PROVIDER.id, MONDAY, now=NOW)


def test_past_date_rejected(db, provider_setup):
    with pytest.raises(ValidationError):
        get_available_slots(db, PROVIDER.id, NOW.date() - timedelta(days=1), now=NOW)


def test_rule_day(db, provider_setup):
    day = get_available_slots(db, PROVIDER.id, MONDAY, now=NOW)

    assert day.source.kind == "rule"
    assert pairs(day) == SIX_SLOTS
    assert day.message is None


def test_day_without_rule_explains_itself(db, provider_setup):
    day = get_available_slots(db, PROVIDER.id, MONDAY + timedelta(days=1), now=NOW)

    assert day.slots == []
    assert day.source.kind == "none"
    assert day.message == "No availability rule for this day"


def test_off_override_blocks_the_day(db, provider_setup):
    availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)

    day = get_available_slots(db, PROVIDER.id, MONDAY, now=NOW)

    assert day.slots == []
    assert day.source.kind == "override_off"
    assert day.message == "Provider is not available on this date"


def test_active_lock_hides_slot_expired_lock_does_not(db, provider_setup):
    _lock(db, "09:00", "10:00", NOW + timedelta(minutes=5))
    _lock(db, "10:15", "11:15", NOW - timedelta(minutes=1))

    day = get_available_slots(db, PROVIDER.id, MONDAY, now=NOW)

    assert ("09:00", "10:00") not in pairs(day)
    assert ("10:15", "11:15") in pairs(day)
    assert not day.has("09:00", "10:00")


def test_available_slots_endpoint(client, provider_setup):
    resp = client.get(
        "/api/v1/booking/slots/available",
        params={"provider_id": PROVIDER.id, "date": MONDAY.isoformat()},
        headers=headers(REQUESTER),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["provider_id"] == PROVIDER.id
    assert body["timezone"] == "Asia/Karachi"
    assert body["slot_duration_minutes"] == 60
    assert body["break_minutes"] == 15
    assert body["source"] == "rule"
    assert [(s["start_time"], s["end_time"]) for s in body["slots"]] == SIX_SLOTS


def test_available_slots_endpoint_errors(client, provider_setup):
    unknown = client.get(
        "/api/v1/booking/slots/available",
        params={"provider_id": 999, "date": MONDAY.isoformat()},
        headers=headers(REQUESTER),
    )
    past = client.get(
        "/api/v1/booking/slots/available",
        params={"provider_id": PROVIDER.id, "date": date(2000, 1, 3).isoformat()},
        headers=headers(REQUESTER),
    )
    bad_date = client.get(
        "/api/v1/booking/slots/available",
        params={"provider_id": PROVIDER.id, "date": "next monday"},
        headers=headers(REQUESTER),
    )

    assert unknown.status_code == 404
    assert past.status_code == 400
    assert bad_date.status_code == 400
