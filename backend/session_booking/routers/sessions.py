# backend/session_booking/routers/sessions.py
# Confirmed sessions, read-only. Created by approving a session request.

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..database import get_db
from ..models import SessionStatus
from ..schemas.sessions import SessionRead
from ..services import sessions

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/my", response_model=list[SessionRead])
def my_sessions(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    status: Optional[SessionStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return sessions.list_requester_sessions(
        db, principal,
        start_date=start_date, end_date=end_date, on_date=on_date, status=status,
    )


@router.get("/provider", response_model=list[SessionRead])
def provider_sessions(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    status: Optional[SessionStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return sessions.list_provider_sessions(
        db, principal,
        start_date=start_date, end_date=end_date, on_date=on_date, status=status,
    )


@router.get("/{id}", response_model=SessionRead)
def get_session(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return sessions.get_session(db, principal, id)
