# backend/session_booking/services/slots/day_source.py
"""
Where a provider's hours for one calendar date come from.

    DaySource = RuleHours | DayOff | CustomHours | NoHours

An override for the date always wins over the weekly rules; there is no
merging between the two.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from ...models import AvailabilityOverrides, AvailabilityRules, DayOfWeek, OverrideType
from .config import time_str_to_minutes


@dataclass(frozen=True)
class TimeWindow:
    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_time)


@dataclass(frozen=True)
class RuleHours:
    """Active weekly rules for the weekday, sorted by start time."""
    windows: tuple[TimeWindow, ...]
    kind = "rule"


@dataclass(frozen=True)
class DayOff:
    reason: Optional[str] = None
    kind = "override_off"


@dataclass(frozen=True)
class CustomHours:
    window: TimeWindow
    reason: Optional[str] = None
    kind = "override_custom"


@dataclass(frozen=True)
class NoHours:
    kind = "none"


DaySource = Union[RuleHours, DayOff, CustomHours, NoHours]


def resolve_day_source(
    target_date: date,
    rules: Iterable[AvailabilityRules],
    override: AvailabilityOverrides | None,
) -> DaySource:
    """
    Pick the single source of hours for target_date.

    Args:
        target_date: Calendar date being booked
        rules: Provider's weekly rules (any day, any state; filtered here)
        override: Provider's override for target_date, if any
    """
    if override is not None:
        if override.type == OverrideType.OFF.value:
            return DayOff(reason=override.reason)
        return CustomHours(
            window=TimeWindow(override.start_time, override.end_time),
            reason=override.reason,
        )

    day = DayOfWeek.from_weekday(target_date.weekday()).value
    windows = sorted(
        (
            TimeWindow(rule.start_time, rule.end_time)
            for rule in rules
            if rule.is_active and rule.day_of_week == day
        ),
        key=lambda w: w.start_minutes,
    )
    if not windows:
        return NoHours()
    return RuleHours(windows=tuple(windows))


def source_windows(source: DaySource) -> list[TimeWindow]:
    if isinstance(source, RuleHours):
        return list(source.windows)
    if isinstance(source, CustomHours):
        return [source.window]
    return []


def empty_reason(source: DaySource) -> str | None:
    """Explanation shown when a source yields no hours at all."""
    if isinstance(source, DayOff):
        return "Provider is not available on this date"
    if isinstance(source, NoHours):
        return "No availability rule for this day"
    return None
