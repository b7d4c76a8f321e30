from datetime import date, datetime

import pytest
from sqlalchemy import event

from session_booking.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from session_booking.services import availability

from conftest import MONDAY, NOW, OTHER_PROVIDER, PROVIDER, REQUESTER, engine


# ── Settings ─────────────────────────────────────────────────────────────


def test_create_settings_applies_defaults(db):
    obj = availability.create_settings(db, PROVIDER, {})

    assert obj.provider_id == PROVIDER.id
    assert obj.slot_duration_minutes == 60
    assert obj.break_minutes == 15
    assert obj.timezone == "Asia/Karachi"
    assert obj.currency == "PKR"
    assert obj.session_price is None


def test_settings_are_created_once(db, provider_setup):
    with pytest.raises(ConflictError):
        availability.create_settings(db, PROVIDER, {"slot_duration_minutes": 30})


def test_concurrent_settings_create_conflicts(db, provider_setup, monkeypatch):
    # Existence check ran before the other writer committed
    monkeypatch.setattr(availability, "get_provider_settings", lambda *args, **kwargs: None)

    with pytest.raises(ConflictError, match="already exist"):
        availability.create_settings(db, PROVIDER, {"slot_duration_minutes": 30})

    monkeypatch.undo()
    assert availability.get_settings(db, PROVIDER).slot_duration_minutes == 60


def test_get_settings_missing(db):
    with pytest.raises(NotFoundError):
        availability.get_settings(db, PROVIDER)


@pytest.mark.parametrize("data", [
    {"slot_duration_minutes": 10},
    {"slot_duration_minutes": 481},
    {"break_minutes": 61},
    {"timezone": "Mars/Olympus"},
])
def test_settings_values_are_validated(db, data):
    with pytest.raises(ValidationError):
        availability.create_settings(db, PROVIDER, data)


def test_update_settings_in_place(db, provider_setup):
    obj = availability.update_settings(
        db, PROVIDER, {"slot_duration_minutes": 30, "session_price": 2500.0}
    )

    assert obj.id == provider_setup.id
    assert obj.slot_duration_minutes == 30
    assert obj.break_minutes == 15
    assert obj.session_price == 2500.0


def test_requester_cannot_manage_availability(db):
    with pytest.raises(AuthorizationError):
        availability.create_settings(db, REQUESTER, {})


# ── Rules ────────────────────────────────────────────────────────────────


def test_rule_requires_settings(db):
    with pytest.raises(ValidationError):
        availability.create_rule(
            db, PROVIDER, {"day_of_week": "MON", "start_time": "09:00", "end_time": "12:00"}
        )


def test_rule_start_must_precede_end(db, provider_setup):
    with pytest.raises(ValidationError):
        availability.create_rule(
            db, PROVIDER, {"day_of_week": "TUE", "start_time": "12:00", "end_time": "12:00"}
        )


def test_overlapping_active_rules_conflict(db, provider_setup):
    with pytest.raises(ConflictError):
        availability.create_rule(
            db, PROVIDER, {"day_of_week": "MON", "start_time": "16:00", "end_time": "18:00"}
        )


def test_adjacent_rules_do_not_overlap(db, provider_setup):
    rule = availability.create_rule(
        db, PROVIDER, {"day_of_week": "MON", "start_time": "17:00", "end_time": "19:00"}
    )
    assert rule.is_active


def test_inactive_rule_may_overlap(db, provider_setup):
    rule = availability.create_rule(
        db,
        PROVIDER,
        {"day_of_week": "MON", "start_time": "10:00", "end_time": "12:00", "is_active": False},
    )
    assert rule.is_active is False

    with pytest.raises(ConflictError):
        availability.update_rule(db, PROVIDER, rule.id, {"is_active": True})


def test_update_rule_excludes_itself_from_overlap_check(db, provider_setup):
    rule = availability.list_rules(db, PROVIDER)[0]

    updated = availability.update_rule(db, PROVIDER, rule.id, {"end_time": "18:00"})

    assert updated.start_time == "09:00"
    assert updated.end_time == "18:00"


def test_rule_write_locks_settings_row_before_overlap_check(db, provider_setup):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    try:
        availability.create_rule(
            db, PROVIDER, {"day_of_week": "MON", "start_time": "18:00", "end_time": "20:00"}
        )
    finally:
        event.remove(engine, "before_cursor_execute", record)

    lock = next(i for i, s in enumerate(statements) if s.startswith("UPDATE availability_settings"))
    check = next(
        i for i, s in enumerate(statements)
        if s.startswith("SELECT") and "FROM availability_rules" in s
    )
    assert lock < check


def test_update_rule_touches_settings_row(db, provider_setup, monkeypatch):
    touched = datetime(2030, 1, 2, 8, 0)
    monkeypatch.setattr(availability, "utcnow", lambda: touched)
    rule = availability.list_rules(db, PROVIDER)[0]

    availability.update_rule(db, PROVIDER, rule.id, {"end_time": "16:00"})

    db.refresh(provider_setup)
    assert provider_setup.updated_at == touched


def test_rules_listed_by_weekday_then_start(db, provider_setup):
    for day, start, end in [("SUN", "10:00", "12:00"), ("TUE", "13:00", "15:00"), ("TUE", "08:00", "10:00")]:
        availability.create_rule(db, PROVIDER, {"day_of_week": day, "start_time": start, "end_time": end})

    rules = availability.list_rules(db, PROVIDER)

    assert [(r.day_of_week, r.start_time) for r in rules] == [
        ("MON", "09:00"),
        ("TUE", "08:00"),
        ("TUE", "13:00"),
        ("SUN", "10:00"),
    ]


def test_rule_ownership(db, provider_setup):
    availability.create_settings(db, OTHER_PROVIDER, {})
    rule = availability.list_rules(db, PROVIDER)[0]

    with pytest.raises(AuthorizationError):
        availability.get_rule(db, OTHER_PROVIDER, rule.id)
    with pytest.raises(AuthorizationError):
        availability.delete_rule(db, OTHER_PROVIDER, rule.id)
    with pytest.raises(NotFoundError):
        availability.get_rule(db, PROVIDER, 9999)


def test_delete_rule(db, provider_setup):
    rule = availability.list_rules(db, PROVIDER)[0]
    availability.delete_rule(db, PROVIDER, rule.id)
    assert availability.list_rules(db, PROVIDER) == []


# ── Overrides ────────────────────────────────────────────────────────────


def test_off_override_clears_times(db, provider_setup):
    obj = availability.create_override(
        db,
        PROVIDER,
        {"date": MONDAY, "type": "OFF", "start_time": "10:00", "end_time": "11:00", "reason": "Eid"},
        now=NOW,
    )

    assert obj.type == "OFF"
    assert obj.start_time is None
    assert obj.end_time is None
    assert obj.reason == "Eid"


def test_custom_override_needs_ordered_times(db, provider_setup):
    with pytest.raises(ValidationError):
        availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "CUSTOM"}, now=NOW)
    with pytest.raises(ValidationError):
        availability.create_override(
            db,
            PROVIDER,
            {"date": MONDAY, "type": "CUSTOM", "start_time": "15:00", "end_time": "13:00"},
            now=NOW,
        )


def test_override_in_the_past_is_rejected(db, provider_setup):
    with pytest.raises(ValidationError):
        availability.create_override(
            db, PROVIDER, {"date": date(2029, 12, 31), "type": "OFF"}, now=NOW
        )


def test_one_override_per_date(db, provider_setup):
    availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)
    with pytest.raises(ConflictError):
        availability.create_override(
            db,
            PROVIDER,
            {"date": MONDAY, "type": "CUSTOM", "start_time": "10:00", "end_time": "12:00"},
            now=NOW,
        )


def test_update_override_to_taken_date_conflicts(db, provider_setup):
    availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)
    other = availability.create_override(
        db, PROVIDER, {"date": date(2030, 1, 8), "type": "OFF"}, now=NOW
    )

    with pytest.raises(ConflictError):
        availability.update_override(db, PROVIDER, other.id, {"date": MONDAY}, now=NOW)


def test_update_override_switches_to_custom(db, provider_setup):
    obj = availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)

    updated = availability.update_override(
        db,
        PROVIDER,
        obj.id,
        {"type": "CUSTOM", "start_time": "13:00", "end_time": "15:00"},
        now=NOW,
    )

    assert updated.type == "CUSTOM"
    assert (updated.start_time, updated.end_time) == ("13:00", "15:00")
    assert updated.date == MONDAY.isoformat()


def test_list_overrides_filters_by_range(db, provider_setup):
    for day in (7, 14, 21):
        availability.create_override(db, PROVIDER, {"date": date(2030, 1, day), "type": "OFF"}, now=NOW)

    found = availability.list_overrides(
        db, PROVIDER, start_date=date(2030, 1, 10), end_date=date(2030, 1, 21)
    )

    assert [o.date for o in found] == ["2030-01-14", "2030-01-21"]


def test_override_ownership(db, provider_setup):
    obj = availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)

    with pytest.raises(AuthorizationError):
        availability.update_override(db, OTHER_PROVIDER, obj.id, {"reason": "x"}, now=NOW)
    with pytest.raises(NotFoundError):
        availability.delete_override(db, PROVIDER, obj.id + 100)

    availability.delete_override(db, PROVIDER, obj.id)
    assert availability.list_overrides(db, PROVIDER) == []


def test_concurrent_override_create_conflicts(db, provider_setup, monkeypatch):
    availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)
    # Date lookup ran before the other writer committed
    monkeypatch.setattr(availability, "_override_on", lambda *args, **kwargs: None)

    with pytest.raises(ConflictError, match="already exists"):
        availability.create_override(
            db,
            PROVIDER,
            {"date": MONDAY, "type": "CUSTOM", "start_time": "10:00", "end_time": "12:00"},
            now=NOW,
        )

    found = availability.list_overrides(db, PROVIDER)
    assert [(o.date, o.type) for o in found] == [(MONDAY.isoformat(), "OFF")]


def test_concurrent_override_move_conflicts(db, provider_setup, monkeypatch):
    availability.create_override(db, PROVIDER, {"date": MONDAY, "type": "OFF"}, now=NOW)
    other = availability.create_override(
        db, PROVIDER, {"date": date(2030, 1, 8), "type": "OFF"}, now=NOW
    )
    monkeypatch.setattr(availability, "_override_on", lambda *args, **kwargs: None)

    with pytest.raises(ConflictError, match="already exists"):
        availability.update_override(db, PROVIDER, other.id, {"date": MONDAY}, now=NOW)

    db.refresh(other)
    assert other.date == "2030-01-08"
