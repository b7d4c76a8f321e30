# backend/session_booking/services/slots/__init__.py
"""
Slots calculation module.

DaySource resolution (override vs weekly rules) and the pure calculator,
plus the DB-backed entry point used by the API and the request flow.
"""

from .config import SlotLimits, get_slot_limits
from .day_source import (
    DaySource,
    RuleHours,
    DayOff,
    CustomHours,
    NoHours,
    TimeWindow,
    resolve_day_source,
)
from .calculator import Slot, calculate_day_slots, generate_window_slots
from .availability import DaySlots, get_available_slots

__all__ = [
    "SlotLimits",
    "get_slot_limits",
    "DaySource",
    "RuleHours",
    "DayOff",
    "CustomHours",
    "NoHours",
    "TimeWindow",
    "resolve_day_source",
    "Slot",
    "calculate_day_slots",
    "generate_window_slots",
    "DaySlots",
    "get_available_slots",
]
