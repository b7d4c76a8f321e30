from datetime import date, datetime
from types import SimpleNamespace

import pytest

from session_booking.services.slots import (
    CustomHours,
    DayOff,
    NoHours,
    RuleHours,
    SlotLimits,
    TimeWindow,
    calculate_day_slots,
    generate_window_slots,
    resolve_day_source,
)
from session_booking.services.slots.config import time_str_to_minutes

MONDAY = date(2030, 1, 7)


def rule(day="MON", start="09:00", end="17:00", active=True):
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end, is_active=active)


def override(kind, start=None, end=None, reason=None):
    return SimpleNamespace(type=kind, start_time=start, end_time=end, reason=reason)


def pairs(slots):
    return [(s.start_time, s.end_time) for s in slots]


def test_working_day_with_break_yields_six_slots():
    source = resolve_day_source(MONDAY, [rule()], None)
    slots = calculate_day_slots(source, MONDAY, 60, 15)

    assert pairs(slots) == [
        ("09:00", "10:00"),
        ("10:15", "11:15"),
        ("11:30", "12:30"),
        ("12:45", "13:45"),
        ("14:00", "15:00"),
        ("15:15", "16:15"),
    ]


@pytest.mark.parametrize("duration,brk", [(15, 0), (30, 10), (45, 15), (60, 0), (90, 30), (480, 60)])
def test_generated_slots_are_full_length_spaced_and_inside_window(duration, brk):
    window = TimeWindow("08:30", "18:10")
    slots = generate_window_slots(window, duration, brk)

    for slot in slots:
        assert slot.end_minutes - slot.start_minutes == duration
        assert slot.start_minutes >= window.start_minutes
        assert slot.end_minutes <= window.end_minutes
    for prev, nxt in zip(slots, slots[1:]):
        assert nxt.start_minutes - prev.end_minutes >= brk


def test_window_shorter_than_slot_yields_nothing():
    assert generate_window_slots(TimeWindow("09:00", "09:45"), 60, 0) == []


def test_no_truncated_last_slot():
    slots = generate_window_slots(TimeWindow("09:00", "11:30"), 60, 15)
    assert pairs(slots) == [("09:00", "10:00"), ("10:15", "11:15")]


def test_off_override_wins_over_rules():
    source = resolve_day_source(MONDAY, [rule()], override("OFF", reason="holiday"))

    assert isinstance(source, DayOff)
    assert source.reason == "holiday"
    assert calculate_day_slots(source, MONDAY, 60, 15) == []


def test_custom_override_replaces_rule_hours():
    source = resolve_day_source(MONDAY, [rule()], override("CUSTOM", "13:00", "15:00"))

    assert isinstance(source, CustomHours)
    slots = calculate_day_slots(source, MONDAY, 60, 0)
    assert pairs(slots) == [("13:00", "14:00"), ("14:00", "15:00")]


def test_no_rule_for_weekday():
    source = resolve_day_source(MONDAY, [rule(day="TUE")], None)
    assert isinstance(source, NoHours)
    assert calculate_day_slots(source, MONDAY, 60, 15) == []


def test_inactive_rules_are_ignored():
    source = resolve_day_source(MONDAY, [rule(active=False)], None)
    assert isinstance(source, NoHours)


def test_several_rules_on_one_day_are_merged_in_order():
    source = resolve_day_source(
        MONDAY,
        [rule(start="14:00", end="16:00"), rule(start="09:00", end="11:00")],
        None,
    )

    assert isinstance(source, RuleHours)
    slots = calculate_day_slots(source, MONDAY, 60, 0)
    assert pairs(slots) == [
        ("09:00", "10:00"),
        ("10:00", "11:00"),
        ("14:00", "15:00"),
        ("15:00", "16:00"),
    ]


def test_today_drops_slots_that_already_started():
    source = resolve_day_source(MONDAY, [rule()], None)
    now_local = datetime(2030, 1, 7, 10, 20)

    slots = calculate_day_slots(source, MONDAY, 60, 15, now_local=now_local)

    assert pairs(slots)[0] == ("11:30", "12:30")
    assert all(time_str_to_minutes(s.start_time) >= 10 * 60 + 20 for s in slots)


def test_future_date_ignores_current_time():
    source = resolve_day_source(MONDAY, [rule()], None)
    now_local = datetime(2030, 1, 6, 23, 0)

    assert len(calculate_day_slots(source, MONDAY, 60, 15, now_local=now_local)) == 6


def test_reserved_intervals_removed_only_on_exact_match():
    source = resolve_day_source(MONDAY, [rule()], None)
    reserved = [("10:15", "11:15"), ("12:00", "13:00")]

    slots = calculate_day_slots(source, MONDAY, 60, 15, reserved=reserved)

    assert ("10:15", "11:15") not in pairs(slots)
    assert ("11:30", "12:30") in pairs(slots)
    assert len(slots) == 5


def test_listing_is_deterministic():
    source = resolve_day_source(MONDAY, [rule()], None)
    first = calculate_day_slots(source, MONDAY, 45, 10, reserved=[("09:00", "09:45")])
    second = calculate_day_slots(source, MONDAY, 45, 10, reserved=[("09:00", "09:45")])
    assert first == second


def test_slot_limits_reject_inverted_bounds():
    with pytest.raises(ValueError):
        SlotLimits(min_slot_minutes=60, max_slot_minutes=30)
