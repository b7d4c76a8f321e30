# backend/session_booking/routers/availability_settings.py
# One settings row per provider: POST once, then PUT. DELETE = not offered.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.availability import (
    AvailabilitySettingsCreate,
    AvailabilitySettingsRead,
    AvailabilitySettingsUpdate,
)
from ..services import availability

router = APIRouter(prefix="/availability/settings", tags=["availability"])


@router.post("", response_model=AvailabilitySettingsRead, status_code=status.HTTP_201_CREATED)
def create_settings(
    data: AvailabilitySettingsCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.create_settings(db, principal, data.model_dump())


@router.get("", response_model=AvailabilitySettingsRead)
def get_settings(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.get_settings(db, principal)


@router.put("", response_model=AvailabilitySettingsRead)
def update_settings(
    data: AvailabilitySettingsUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.update_settings(db, principal, data.model_dump(exclude_unset=True))
