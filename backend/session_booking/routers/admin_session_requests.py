# backend/session_booking/routers/admin_session_requests.py
# Approval queue. Admins see everything, providers only requests addressed to them.

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..config import settings
from ..database import get_db
from ..schemas.session_requests import (
    ApproveSessionRequest,
    PendingSessionRequestsPage,
    RejectSessionRequest,
    SessionRequestApproved,
    SessionRequestRead,
)
from ..services import session_requests as flow
from ..services.notifications import NotificationSink, get_notifier

router = APIRouter(prefix="/admin/session-requests", tags=["admin"])


@router.get("/pending", response_model=PendingSessionRequestsPage)
def pending_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.pending_page_limit_max),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    items, pagination = flow.list_pending_requests(db, principal, page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.get("/{id}", response_model=SessionRequestRead)
def get_pending_request(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return flow.get_pending_request(db, principal, id)


@router.post("/{id}/approve", response_model=SessionRequestApproved)
def approve_session_request(
    id: int,
    data: ApproveSessionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    notifier: NotificationSink = Depends(get_notifier),
):
    request, session = flow.approve_session_request(
        db, principal, id, notes=data.notes, notifier=notifier
    )
    return {"request": request, "session": session}


@router.post("/{id}/reject", response_model=SessionRequestRead)
def reject_session_request(
    id: int,
    data: RejectSessionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    notifier: NotificationSink = Depends(get_notifier),
):
    return flow.reject_session_request(db, principal, id, data.reason, notifier=notifier)
