# backend/session_booking/schemas/availability.py

from datetime import date, datetime
from datetime import date as _date  # field named "date" shadows the type below
from typing import Optional
from pydantic import BaseModel, Field

from ..models import DayOfWeek, OverrideType

TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
CURRENCY_PATTERN = r"^[A-Z]{3}$"


# ── Settings ─────────────────────────────────────────────────────────────


class AvailabilitySettingsCreate(BaseModel):
    slot_duration_minutes: int = 60
    break_minutes: int = 15
    timezone: Optional[str] = None
    session_price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, pattern=CURRENCY_PATTERN)

    model_config = {"from_attributes": True}


class AvailabilitySettingsUpdate(BaseModel):
    slot_duration_minutes: Optional[int] = None
    break_minutes: Optional[int] = None
    timezone: Optional[str] = None
    session_price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, pattern=CURRENCY_PATTERN)

    model_config = {"from_attributes": True}


class AvailabilitySettingsRead(BaseModel):
    id: int
    provider_id: int
    slot_duration_minutes: int
    break_minutes: int
    timezone: str
    session_price: Optional[float] = None
    currency: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ── Weekly rules ─────────────────────────────────────────────────────────


class AvailabilityRuleCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    is_active: bool = True

    model_config = {"from_attributes": True}


class AvailabilityRuleUpdate(BaseModel):
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_active: Optional[bool] = None

    model_config = {"from_attributes": True}


class AvailabilityRuleRead(BaseModel):
    id: int
    provider_id: int
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ── Date overrides ───────────────────────────────────────────────────────


class AvailabilityOverrideCreate(BaseModel):
    date: date
    type: OverrideType
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class AvailabilityOverrideUpdate(BaseModel):
    date: Optional[_date] = None
    type: Optional[OverrideType] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class AvailabilityOverrideRead(BaseModel):
    id: int
    provider_id: int
    date: date
    type: OverrideType
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
