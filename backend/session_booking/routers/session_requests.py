# backend/session_booking/routers/session_requests.py
# Requester side of the booking flow. Hard DELETE = not offered (DELETE cancels).

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..models import SessionRequestStatus
from ..schemas.session_requests import (
    PaymentProofUpload,
    SessionRequestCreate,
    SessionRequestRead,
)
from ..services import session_requests as flow

router = APIRouter(prefix="/session-requests", tags=["session_requests"])


@router.post("", response_model=SessionRequestRead, status_code=status.HTTP_201_CREATED)
def create_session_request(
    data: SessionRequestCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.create_session_request(
        db,
        principal,
        provider_id=data.provider_id,
        target_date=data.date,
        start_time=data.start_time,
        end_time=data.end_time,
        session_title=data.session_title,
        session_type=data.session_type.value if data.session_type else None,
    )


@router.get("/my-requests", response_model=list[SessionRequestRead])
def my_requests(
    status: Optional[SessionRequestStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.list_my_requests(db, principal, status=status)


@router.get("/incoming", response_model=list[SessionRequestRead])
def incoming_requests(
    status: Optional[SessionRequestStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.list_incoming_requests(db, principal, status=status)


@router.get("/{id}", response_model=SessionRequestRead)
def get_session_request(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.get_session_request(db, principal, id)


@router.put("/{id}/payment", response_model=SessionRequestRead)
def upload_payment_proof(
    id: int,
    data: PaymentProofUpload,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.upload_payment_proof(db, principal, id, data.payment_proof_ref)


@router.delete("/{id}", response_model=SessionRequestRead)
def cancel_session_request(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.cancel_session_request(db, principal, id)
