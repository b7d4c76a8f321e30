# backend/session_booking/routers/admin_sessions.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..config import settings
from ..database import get_db
from ..models import SessionStatus
from ..schemas.sessions import SessionsPage
from ..services import sessions

router = APIRouter(prefix="/admin/sessions", tags=["admin"])


@router.get("", response_model=SessionsPage)
def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.pending_page_limit_max),
    provider_id: Optional[int] = Query(None),
    requester_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[SessionStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    items, pagination = sessions.admin_list_sessions(
        db, principal,
        page=page, limit=limit,
        provider_id=provider_id, requester_id=requester_id,
        start_date=start_date, end_date=end_date, status=status,
    )
    return {"items": items, "pagination": pagination}
