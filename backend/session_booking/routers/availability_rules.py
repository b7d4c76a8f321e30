# backend/session_booking/routers/availability_rules.py
# Weekly rules. PUT = partial update, DELETE = hard.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleRead,
    AvailabilityRuleUpdate,
)
from ..schemas.common import MessageResponse
from ..services import availability

router = APIRouter(prefix="/availability/rules", tags=["availability"])


@router.post("", response_model=AvailabilityRuleRead, status_code=status.HTTP_201_CREATED)
def create_rule(
    data: AvailabilityRuleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.create_rule(db, principal, data.model_dump())


@router.get("", response_model=list[AvailabilityRuleRead])
def list_rules(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.list_rules(db, principal)


@router.get("/{id}", response_model=AvailabilityRuleRead)
def get_rule(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.get_rule(db, principal, id)


@router.put("/{id}", response_model=AvailabilityRuleRead)
def update_rule(
    id: int,
    data: AvailabilityRuleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return availability.update_rule(db, principal, id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", response_model=MessageResponse)
def delete_rule(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    availability.delete_rule(db, principal, id)
    return {"message": "Availability rule deleted"}
