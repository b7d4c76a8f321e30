# backend/session_booking/services/slots/calculator.py
"""
Slot generation for one provider on one date.

Pure: takes already-loaded data, returns slots. No DB, no clock.

Per window:
  cursor = open
  while cursor + duration <= close:
      emit [cursor, cursor + duration)
      cursor += duration + break

Then:
✓ drops slots that already started (only when target_date is provider-local today)
✓ drops slots matching a confirmed session or an active lock exactly
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from .config import minutes_to_time_str, time_str_to_minutes
from .day_source import DaySource, TimeWindow, source_windows


@dataclass(frozen=True, order=True)
class Slot:
    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_time)


def generate_window_slots(
    window: TimeWindow,
    slot_duration_minutes: int,
    break_minutes: int,
) -> list[Slot]:
    """Full-length slots inside one window; a slot that would overrun the close is never emitted."""
    if slot_duration_minutes <= 0:
        raise ValueError("slot_duration_minutes must be positive")

    step = slot_duration_minutes + break_minutes
    close = window.end_minutes
    cursor = window.start_minutes

    slots: list[Slot] = []
    while cursor + slot_duration_minutes <= close:
        slots.append(Slot(
            start_time=minutes_to_time_str(cursor),
            end_time=minutes_to_time_str(cursor + slot_duration_minutes),
        ))
        cursor += step
    return slots


def calculate_day_slots(
    source: DaySource,
    target_date: date,
    slot_duration_minutes: int,
    break_minutes: int,
    reserved: Iterable[tuple[str, str]] = (),
    now_local: datetime | None = None,
) -> list[Slot]:
    """
    Bookable slots for target_date.

    Args:
        source: Resolved hours for the date
        target_date: Date being listed
        slot_duration_minutes: Length of every slot
        break_minutes: Gap after every slot
        reserved: (start_time, end_time) pairs of confirmed sessions and active locks
        now_local: Provider-local wall-clock now; slots starting before it are
                   dropped when target_date is that day

    Returns:
        Slots ordered by start time. Empty list = nothing bookable.
    """
    slots: list[Slot] = []
    for window in source_windows(source):
        slots.extend(generate_window_slots(window, slot_duration_minutes, break_minutes))

    if now_local is not None and now_local.date() == target_date:
        day_start = datetime.combine(target_date, datetime.min.time())
        slots = [
            s for s in slots
            if day_start + timedelta(minutes=s.start_minutes) >= now_local
        ]

    taken = set(reserved)
    slots = [s for s in slots if (s.start_time, s.end_time) not in taken]

    return sorted(slots)
