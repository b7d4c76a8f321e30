# backend/session_booking/schemas/slots.py

from datetime import date
from typing import Optional
from pydantic import BaseModel


class SlotRead(BaseModel):
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class AvailableSlotsResponse(BaseModel):
    provider_id: int
    date: date
    timezone: str
    slot_duration_minutes: int
    break_minutes: int
    source: str  # rule | override_off | override_custom | none
    slots: list[SlotRead]
    message: Optional[str] = None
