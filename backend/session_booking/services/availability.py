# backend/session_booking/services/availability.py
"""
Availability store: provider settings, weekly rules and date overrides.

✓ Settings are created once and updated in place (never deleted)
✓ Rules require settings; active rules of one day never overlap
✓ One override per provider and date, never in the past (provider tz)
✗ Deleting a rule or override does not touch existing session requests
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal, ensure_provider
from ..config import settings as app_settings
from ..exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models import (
    AvailabilityOverrides,
    AvailabilityRules,
    AvailabilitySettings,
    DayOfWeek,
    OverrideType,
)
from .slots.config import (
    get_slot_limits,
    get_zone,
    is_valid_time_str,
    local_today,
    time_str_to_minutes,
    utcnow,
)

logger = logging.getLogger(__name__)

DAY_ORDER = {day.value: i for i, day in enumerate(DayOfWeek)}


# ── Validation helpers ───────────────────────────────────────────────────


def _validate_time_range(start_time: str, end_time: str) -> None:
    if not is_valid_time_str(start_time) or not is_valid_time_str(end_time):
        raise ValidationError("Times must be in HH:MM format")
    if time_str_to_minutes(start_time) >= time_str_to_minutes(end_time):
        raise ValidationError("start_time must be before end_time")


def _validate_settings_values(slot_duration_minutes: int, break_minutes: int, tz_name: str) -> None:
    limits = get_slot_limits()
    if not limits.min_slot_minutes <= slot_duration_minutes <= limits.max_slot_minutes:
        raise ValidationError(
            f"slot_duration_minutes must be between "
            f"{limits.min_slot_minutes} and {limits.max_slot_minutes}"
        )
    if not limits.min_break_minutes <= break_minutes <= limits.max_break_minutes:
        raise ValidationError(
            f"break_minutes must be between "
            f"{limits.min_break_minutes} and {limits.max_break_minutes}"
        )
    try:
        get_zone(tz_name)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def _overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    return (
        time_str_to_minutes(a_start) < time_str_to_minutes(b_end)
        and time_str_to_minutes(b_start) < time_str_to_minutes(a_end)
    )


def _commit_or_conflict(db: Session, message: str) -> None:
    """Commit; a unique-index violation from a concurrent writer becomes a ConflictError."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Unique constraint hit on commit: {message}")
        raise ConflictError(message) from None


# ── Settings ─────────────────────────────────────────────────────────────


def get_provider_settings(db: Session, provider_id: int) -> AvailabilitySettings | None:
    return (
        db.query(AvailabilitySettings)
        .filter(AvailabilitySettings.provider_id == provider_id)
        .first()
    )


def create_settings(db: Session, principal: Principal, data: dict) -> AvailabilitySettings:
    ensure_provider(principal)
    if get_provider_settings(db, principal.id):
        raise ConflictError("Availability settings already exist. Use update instead.")

    data = {k: v for k, v in data.items() if v is not None}
    data.setdefault("slot_duration_minutes", 60)
    data.setdefault("break_minutes", 15)
    data.setdefault("timezone", app_settings.default_timezone)
    data.setdefault("currency", app_settings.default_currency)
    _validate_settings_values(data["slot_duration_minutes"], data["break_minutes"], data["timezone"])

    obj = AvailabilitySettings(provider_id=principal.id, **data)
    db.add(obj)
    _commit_or_conflict(db, "Availability settings already exist. Use update instead.")
    db.refresh(obj)
    logger.info(f"Availability settings created for provider={principal.id}")
    return obj


def get_settings(db: Session, principal: Principal) -> AvailabilitySettings:
    ensure_provider(principal)
    obj = get_provider_settings(db, principal.id)
    if not obj:
        raise NotFoundError("Availability settings not found")
    return obj


def update_settings(db: Session, principal: Principal, data: dict) -> AvailabilitySettings:
    obj = get_settings(db, principal)

    for field, value in data.items():
        # session_price may be cleared back to the default price
        if value is None and field != "session_price":
            continue
        setattr(obj, field, value)
    _validate_settings_values(obj.slot_duration_minutes, obj.break_minutes, obj.timezone)

    obj.updated_at = utcnow()
    db.commit()
    db.refresh(obj)
    return obj


# ── Rules ────────────────────────────────────────────────────────────────


def _lock_provider_rules(db: Session, provider_id: int) -> None:
    """
    Write the provider's settings row before reading its rules.

    Concurrent rule writes of one provider queue on that row lock (the
    database write lock on SQLite), so each overlap check sees the rules
    the previous writer committed.
    """
    db.execute(
        update(AvailabilitySettings)
        .where(AvailabilitySettings.provider_id == provider_id)
        .values(updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )


def _check_rule_overlap(
    db: Session,
    provider_id: int,
    day_of_week: str,
    start_time: str,
    end_time: str,
    exclude_id: Optional[int] = None,
) -> None:
    query = db.query(AvailabilityRules).filter(
        AvailabilityRules.provider_id == provider_id,
        AvailabilityRules.day_of_week == day_of_week,
        AvailabilityRules.is_active.is_(True),
    )
    if exclude_id is not None:
        query = query.filter(AvailabilityRules.id != exclude_id)

    for other in query.all():
        if _overlaps(start_time, end_time, other.start_time, other.end_time):
            raise ConflictError(
                f"Rule overlaps existing {day_of_week} rule "
                f"{other.start_time}-{other.end_time}"
            )


def _owned_rule(db: Session, principal: Principal, rule_id: int) -> AvailabilityRules:
    ensure_provider(principal)
    rule = db.get(AvailabilityRules, rule_id)
    if not rule:
        raise NotFoundError("Availability rule not found")
    if rule.provider_id != principal.id:
        raise AuthorizationError("You can only manage your own availability rules")
    return rule


def create_rule(db: Session, principal: Principal, data: dict) -> AvailabilityRules:
    ensure_provider(principal)
    if not get_provider_settings(db, principal.id):
        raise ValidationError("Create availability settings before adding rules")

    day = DayOfWeek(data["day_of_week"]).value
    _validate_time_range(data["start_time"], data["end_time"])

    is_active = data.get("is_active")
    if is_active is None:
        is_active = True
    _lock_provider_rules(db, principal.id)
    if is_active:
        _check_rule_overlap(db, principal.id, day, data["start_time"], data["end_time"])

    rule = AvailabilityRules(
        provider_id=principal.id,
        day_of_week=day,
        start_time=data["start_time"],
        end_time=data["end_time"],
        is_active=is_active,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


def list_rules(db: Session, principal: Principal) -> list[AvailabilityRules]:
    ensure_provider(principal)
    rules = (
        db.query(AvailabilityRules)
        .filter(AvailabilityRules.provider_id == principal.id)
        .all()
    )
    return sorted(rules, key=lambda r: (DAY_ORDER.get(r.day_of_week, 7), r.start_time))


def get_rule(db: Session, principal: Principal, rule_id: int) -> AvailabilityRules:
    return _owned_rule(db, principal, rule_id)


def update_rule(db: Session, principal: Principal, rule_id: int, data: dict) -> AvailabilityRules:
    rule = _owned_rule(db, principal, rule_id)

    day = DayOfWeek(data["day_of_week"]).value if data.get("day_of_week") else rule.day_of_week
    start_time = data.get("start_time") or rule.start_time
    end_time = data.get("end_time") or rule.end_time
    is_active = data["is_active"] if data.get("is_active") is not None else rule.is_active

    _validate_time_range(start_time, end_time)
    _lock_provider_rules(db, principal.id)
    if is_active:
        _check_rule_overlap(db, principal.id, day, start_time, end_time, exclude_id=rule.id)

    rule.day_of_week = day
    rule.start_time = start_time
    rule.end_time = end_time
    rule.is_active = is_active
    rule.updated_at = utcnow()
    db.commit()
    db.refresh(rule)
    return rule


def delete_rule(db: Session, principal: Principal, rule_id: int) -> None:
    rule = _owned_rule(db, principal, rule_id)
    db.delete(rule)
    db.commit()


# ── Overrides ────────────────────────────────────────────────────────────


def _provider_today(db: Session, provider_id: int, now: Optional[datetime] = None) -> date:
    provider_settings = get_provider_settings(db, provider_id)
    tz_name = provider_settings.timezone if provider_settings else app_settings.default_timezone
    return local_today(tz_name, now)


def _normalize_override(
    override_type: str,
    start_time: Optional[str],
    end_time: Optional[str],
) -> tuple[str, Optional[str], Optional[str]]:
    kind = OverrideType(override_type).value
    if kind == OverrideType.CUSTOM.value:
        if not start_time or not end_time:
            raise ValidationError("CUSTOM overrides require start_time and end_time")
        _validate_time_range(start_time, end_time)
        return kind, start_time, end_time
    # OFF carries no hours
    return kind, None, None


def _owned_override(db: Session, principal: Principal, override_id: int) -> AvailabilityOverrides:
    ensure_provider(principal)
    obj = db.get(AvailabilityOverrides, override_id)
    if not obj:
        raise NotFoundError("Availability override not found")
    if obj.provider_id != principal.id:
        raise AuthorizationError("You can only manage your own availability overrides")
    return obj


def _override_on(db: Session, provider_id: int, date_str: str) -> AvailabilityOverrides | None:
    return (
        db.query(AvailabilityOverrides)
        .filter(
            AvailabilityOverrides.provider_id == provider_id,
            AvailabilityOverrides.date == date_str,
        )
        .first()
    )


def create_override(
    db: Session,
    principal: Principal,
    data: dict,
    now: Optional[datetime] = None,
) -> AvailabilityOverrides:
    ensure_provider(principal)

    target_date: date = data["date"]
    if target_date < _provider_today(db, principal.id, now):
        raise ValidationError("Cannot create an override for a past date")

    kind, start_time, end_time = _normalize_override(
        data["type"], data.get("start_time"), data.get("end_time")
    )

    date_str = target_date.isoformat()
    if _override_on(db, principal.id, date_str):
        raise ConflictError(f"An override already exists for {date_str}")

    obj = AvailabilityOverrides(
        provider_id=principal.id,
        date=date_str,
        type=kind,
        start_time=start_time,
        end_time=end_time,
        reason=data.get("reason"),
    )
    db.add(obj)
    _commit_or_conflict(db, f"An override already exists for {date_str}")
    db.refresh(obj)
    logger.info(f"Override {kind} on {date_str} created for provider={principal.id}")
    return obj


def list_overrides(
    db: Session,
    principal: Principal,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[AvailabilityOverrides]:
    ensure_provider(principal)
    query = db.query(AvailabilityOverrides).filter(
        AvailabilityOverrides.provider_id == principal.id
    )
    if start_date:
        query = query.filter(AvailabilityOverrides.date >= start_date.isoformat())
    if end_date:
        query = query.filter(AvailabilityOverrides.date <= end_date.isoformat())
    return query.order_by(AvailabilityOverrides.date).all()


def get_override(db: Session, principal: Principal, override_id: int) -> AvailabilityOverrides:
    return _owned_override(db, principal, override_id)


def update_override(
    db: Session,
    principal: Principal,
    override_id: int,
    data: dict,
    now: Optional[datetime] = None,
) -> AvailabilityOverrides:
    obj = _owned_override(db, principal, override_id)

    target_date: date = data.get("date") or date.fromisoformat(obj.date)
    if target_date < _provider_today(db, principal.id, now):
        raise ValidationError("Cannot move an override to a past date")

    date_str = target_date.isoformat()
    if date_str != obj.date and _override_on(db, principal.id, date_str):
        raise ConflictError(f"An override already exists for {date_str}")

    kind, start_time, end_time = _normalize_override(
        data.get("type") or obj.type,
        data.get("start_time") or obj.start_time,
        data.get("end_time") or obj.end_time,
    )

    obj.date = date_str
    obj.type = kind
    obj.start_time = start_time
    obj.end_time = end_time
    if "reason" in data:
        obj.reason = data["reason"]
    obj.updated_at = utcnow()
    _commit_or_conflict(db, f"An override already exists for {date_str}")
    db.refresh(obj)
    return obj


def delete_override(db: Session, principal: Principal, override_id: int) -> None:
    obj = _owned_override(db, principal, override_id)
    db.delete(obj)
    db.commit()
