# backend/session_booking/services/slots/availability.py
"""
Available slots for a provider on a date.

Loads everything the pure calculator needs:
- Provider settings (duration, break, timezone)
- Weekly rules and the date override -> DaySource
- Confirmed sessions on the date
- Active (non-expired) blocked slots on the date
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.orm import Session

from ...exceptions import NotFoundError, ValidationError
from ...models import AvailabilityOverrides, AvailabilityRules, AvailabilitySettings
from ..reservations import active_block_intervals
from ..sessions import confirmed_intervals
from .calculator import Slot, calculate_day_slots
from .config import local_now, utcnow
from .day_source import DaySource, empty_reason, resolve_day_source


@dataclass
class DaySlots:
    provider_id: int
    date: date
    settings: AvailabilitySettings
    source: DaySource
    slots: list[Slot] = field(default_factory=list)
    message: str | None = None

    def has(self, start_time: str, end_time: str) -> bool:
        return Slot(start_time, end_time) in self.slots


def get_available_slots(
    db: Session,
    provider_id: int,
    target_date: date,
    now: datetime | None = None,
) -> DaySlots:
    """
    Calculate open slots.

    Raises:
        NotFoundError: provider has no availability settings
        ValidationError: target_date is before the provider's today
    """
    now = now or utcnow()

    settings = _get_settings(db, provider_id)
    if not settings:
        raise NotFoundError(f"Provider {provider_id} has not set up availability settings")

    provider_now = local_now(settings.timezone, now)
    if target_date < provider_now.date():
        raise ValidationError("Cannot get slots for past dates")

    date_str = target_date.isoformat()
    source = resolve_day_source(
        target_date,
        _get_rules(db, provider_id),
        _get_override(db, provider_id, date_str),
    )

    reserved = confirmed_intervals(db, provider_id, date_str)
    reserved += active_block_intervals(db, provider_id, date_str, now)

    slots = calculate_day_slots(
        source,
        target_date,
        settings.slot_duration_minutes,
        settings.break_minutes,
        reserved=reserved,
        now_local=provider_now,
    )

    message = empty_reason(source)
    if message is None and not slots:
        message = "No open slots left on this date"

    return DaySlots(
        provider_id=provider_id,
        date=target_date,
        settings=settings,
        source=source,
        slots=slots,
        message=message,
    )


# ── Database helpers ─────────────────────────────────────────────────────


def _get_settings(db: Session, provider_id: int) -> AvailabilitySettings | None:
    return (
        db.query(AvailabilitySettings)
        .filter(AvailabilitySettings.provider_id == provider_id)
        .first()
    )


def _get_rules(db: Session, provider_id: int) -> list[AvailabilityRules]:
    return (
        db.query(AvailabilityRules)
        .filter(
            AvailabilityRules.provider_id == provider_id,
            AvailabilityRules.is_active.is_(True),
        )
        .all()
    )


def _get_override(db: Session, provider_id: int, date_str: str) -> AvailabilityOverrides | None:
    return (
        db.query(AvailabilityOverrides)
        .filter(
            AvailabilityOverrides.provider_id == provider_id,
            AvailabilityOverrides.date == date_str,
        )
        .first()
    )
