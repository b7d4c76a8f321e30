# backend/session_booking/services/sessions.py
"""
Confirmed session store.

Sessions are created only by approving a session request and keep the
request's interval unchanged.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import Principal, ensure_admin, ensure_provider
from ..exceptions import AuthorizationError, NotFoundError
from ..models import SessionRequests, Sessions, SessionStatus
from .pagination import paginate


# Statuses that occupy the provider's calendar
BLOCKING_STATUSES = (SessionStatus.CONFIRMED.value, SessionStatus.COMPLETED.value)


def confirmed_intervals(db: Session, provider_id: int, date_str: str) -> list[tuple[str, str]]:
    rows = db.execute(
        select(Sessions.start_time, Sessions.end_time).where(
            Sessions.provider_id == provider_id,
            Sessions.date == date_str,
            Sessions.status.in_(BLOCKING_STATUSES),
        )
    ).all()
    return [(r.start_time, r.end_time) for r in rows]


def find_conflicting_session(db: Session, request: SessionRequests) -> Sessions | None:
    return (
        db.query(Sessions)
        .filter(
            Sessions.provider_id == request.provider_id,
            Sessions.date == request.date,
            Sessions.start_time == request.start_time,
            Sessions.end_time == request.end_time,
            Sessions.status.in_(BLOCKING_STATUSES),
        )
        .first()
    )


def create_session_from_request(
    db: Session,
    request: SessionRequests,
    notes: Optional[str] = None,
) -> Sessions:
    """Add the confirmed session for an approved request (caller commits)."""
    session = Sessions(
        provider_id=request.provider_id,
        requester_id=request.requester_id,
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        amount=request.amount,
        currency=request.currency,
        status=SessionStatus.CONFIRMED.value,
        session_request_id=request.id,
        notes=notes,
        session_title=request.session_title,
        session_type=request.session_type,
    )
    db.add(session)
    db.flush()
    return session


# ── Queries ──────────────────────────────────────────────────────────────


def _apply_filters(
    query,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    on_date: Optional[date] = None,
    status: Optional[SessionStatus] = None,
):
    if on_date:
        query = query.filter(Sessions.date == on_date.isoformat())
    if start_date:
        query = query.filter(Sessions.date >= start_date.isoformat())
    if end_date:
        query = query.filter(Sessions.date <= end_date.isoformat())
    if status:
        query = query.filter(Sessions.status == SessionStatus(status).value)
    return query


def list_requester_sessions(db: Session, principal: Principal, **filters) -> list[Sessions]:
    query = db.query(Sessions).filter(Sessions.requester_id == principal.id)
    query = _apply_filters(query, **filters)
    return query.order_by(Sessions.date, Sessions.start_time).all()


def list_provider_sessions(db: Session, principal: Principal, **filters) -> list[Sessions]:
    ensure_provider(principal)
    query = db.query(Sessions).filter(Sessions.provider_id == principal.id)
    query = _apply_filters(query, **filters)
    return query.order_by(Sessions.date, Sessions.start_time).all()


def get_session(db: Session, principal: Principal, session_id: int) -> Sessions:
    session = db.get(Sessions, session_id)
    if not session:
        raise NotFoundError("Session not found")
    if not principal.is_admin and principal.id not in (session.requester_id, session.provider_id):
        raise AuthorizationError("You do not have access to this session")
    return session


def admin_list_sessions(
    db: Session,
    principal: Principal,
    page: int = 1,
    limit: int = 20,
    provider_id: Optional[int] = None,
    requester_id: Optional[int] = None,
    **filters,
) -> tuple[list[Sessions], dict]:
    ensure_admin(principal)
    query = db.query(Sessions)
    if provider_id:
        query = query.filter(Sessions.provider_id == provider_id)
    if requester_id:
        query = query.filter(Sessions.requester_id == requester_id)
    query = _apply_filters(query, **filters)
    query = query.order_by(Sessions.date.desc(), Sessions.start_time)
    return paginate(query, page, limit)
