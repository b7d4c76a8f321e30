# backend/session_booking/routers/availability_overrides.py
# Date overrides (OFF / CUSTOM). PUT = partial update, DELETE = hard.

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.availability import (
    AvailabilityOverrideCreate,
    AvailabilityOverrideRead,
    AvailabilityOverrideUpdate,
)
from ..schemas.common import MessageResponse
from ..services import availability

router = APIRouter(prefix="/availability/overrides", tags=["availability"])


@router.post("", response_model=AvailabilityOverrideRead, status_code=status.HTTP_201_CREATED)
def create_override(
    data: AvailabilityOverrideCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.create_override(db, principal, data.model_dump())


@router.get("", response_model=list[AvailabilityOverrideRead])
def list_overrides(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.list_overrides(db, principal, start_date=start_date, end_date=end_date)


@router.get("/{id}", response_model=AvailabilityOverrideRead)
def get_override(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.get_override(db, principal, id)


@router.put("/{id}", response_model=AvailabilityOverrideRead)
def update_override(
    id: int,
    data: AvailabilityOverrideUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.update_override(db, principal, id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", response_model=MessageResponse)
def delete_override(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    availability.delete_override(db, principal, id)
    return {"message": "Availability override deleted"}
