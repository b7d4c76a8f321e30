# backend/session_booking/routers/slots.py

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.slots import AvailableSlotsResponse, SlotRead
from ..services.slots import get_available_slots

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
def available_slots(
    provider_id: int = Query(...),
    date: date = Query(...),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Open slots of a provider on a date (provider-local times).

    Confirmed sessions and live locks are already removed; an empty list
    comes with a message explaining why.
    """
    day = get_available_slots(db, provider_id, date)
    return AvailableSlotsResponse(
        provider_id=day.provider_id,
        date=day.date,
        timezone=day.settings.timezone,
        slot_duration_minutes=day.settings.slot_duration_minutes,
        break_minutes=day.settings.break_minutes,
        source=day.source.kind,
        slots=[SlotRead(start_time=s.start_time, end_time=s.end_time) for s in day.slots],
        message=day.message,
    )
