# backend/session_booking/services/slots/config.py
"""
Slot generation limits and wall-clock helpers.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


@dataclass(frozen=True)
class SlotLimits:
    """
    Bounds for provider availability settings.

    Attributes:
        min_slot_minutes: Shortest bookable slot
        max_slot_minutes: Longest bookable slot (8 hours)
        min_break_minutes: Smallest gap between consecutive slots
        max_break_minutes: Largest gap between consecutive slots
    """
    min_slot_minutes: int = 15
    max_slot_minutes: int = 480
    min_break_minutes: int = 0
    max_break_minutes: int = 60

    def __post_init__(self):
        if self.min_slot_minutes <= 0 or self.min_slot_minutes > self.max_slot_minutes:
            raise ValueError(
                f"invalid slot bounds {self.min_slot_minutes}..{self.max_slot_minutes}"
            )
        if self.min_break_minutes < 0 or self.min_break_minutes > self.max_break_minutes:
            raise ValueError(
                f"invalid break bounds {self.min_break_minutes}..{self.max_break_minutes}"
            )


@lru_cache
def get_slot_limits() -> SlotLimits:
    return SlotLimits()


# ── Wall-clock helpers ───────────────────────────────────────────────────


def is_valid_time_str(value: str) -> bool:
    return bool(value) and TIME_RE.match(value) is not None


def time_str_to_minutes(value: str) -> int:
    """"HH:MM" -> minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Minutes since midnight -> "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def utcnow() -> datetime:
    """Naive UTC now, the representation stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}") from None


def local_now(tz_name: str, now: datetime | None = None) -> datetime:
    """
    Provider-local wall-clock time (naive) for a naive UTC instant.
    """
    now = now or utcnow()
    aware = now.replace(tzinfo=timezone.utc).astimezone(get_zone(tz_name))
    return aware.replace(tzinfo=None)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    return local_now(tz_name, now).date()
