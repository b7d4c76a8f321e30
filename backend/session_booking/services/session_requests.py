# backend/session_booking/services/session_requests.py
"""
Session request lifecycle.

    PENDING_PAYMENT ──upload──▶ PENDING_APPROVAL ──approve──▶ CONFIRMED
          │                           │
          ├──cancel──▶ CANCELLED      ├──reject──▶ REJECTED
          └──deadline──▶ EXPIRED      └──deadline──▶ EXPIRED

Every status write is a conditional UPDATE on (id, status, version).
Zero affected rows means another writer got there first: the reaper
ignores it, user actions re-read and report what happened.

Overdue pending requests are expired by the reaper and, in addition,
whenever a request is read or acted upon.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal, ensure_provider, ensure_requester, ensure_reviewer
from ..config import settings as app_settings
from ..exceptions import (
    AuthorizationError,
    ConflictError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)
from ..models import SessionRequests, SessionRequestStatus, Sessions
from .notifications import NotificationSink, notify_session_approved, notify_session_rejected
from .pagination import paginate
from .pricing import resolve_session_price
from .reservations import extend_block, place_block, release_block, stale_block_owners
from .sessions import create_session_from_request, find_conflicting_session
from .slots import get_available_slots
from .slots.config import utcnow

logger = logging.getLogger(__name__)

S = SessionRequestStatus

ALLOWED_TRANSITIONS: dict[SessionRequestStatus, frozenset[SessionRequestStatus]] = {
    S.PENDING_PAYMENT: frozenset({S.PENDING_APPROVAL, S.CANCELLED, S.EXPIRED}),
    S.PENDING_APPROVAL: frozenset({S.CONFIRMED, S.REJECTED, S.EXPIRED}),
    S.CONFIRMED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REJECTED: frozenset(),
    S.EXPIRED: frozenset(),
}

PENDING_STATUSES = (S.PENDING_PAYMENT.value, S.PENDING_APPROVAL.value)


def can_transition(current: str, target: SessionRequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[S(current)]


def is_overdue(request: SessionRequests, now: datetime) -> bool:
    return (
        request.status in PENDING_STATUSES
        and request.expires_at is not None
        and request.expires_at <= now
    )


# ── Guarded transitions ──────────────────────────────────────────────────


def _transition(db: Session, request: SessionRequests, target: SessionRequestStatus, **values) -> bool:
    """
    Move request to target if nobody changed it since it was loaded.

    Returns False when the guard matched no row. The instance is expired
    afterwards so the next attribute access reloads it.
    """
    if not can_transition(request.status, target):
        raise ConflictError(f"Cannot move session request from {request.status} to {target.value}")

    result = db.execute(
        update(SessionRequests)
        .where(
            SessionRequests.id == request.id,
            SessionRequests.status == request.status,
            SessionRequests.version == request.version,
        )
        .values(
            status=target.value,
            version=request.version + 1,
            updated_at=utcnow(),
            **values,
        )
        .execution_options(synchronize_session=False)
    )
    won = result.rowcount == 1
    if won:
        logger.info(f"session_request={request.id}: {request.status} → {target.value}")
    db.expire(request)
    return won


def _lost_race(db: Session, request: SessionRequests) -> None:
    """Another writer resolved the request first: report its outcome."""
    db.rollback()
    db.refresh(request)
    if request.status == S.EXPIRED.value:
        raise ExpiredError("This session request has expired")
    raise ConflictError(f"Session request was already updated (status {request.status})")


def force_expire(db: Session, request: SessionRequests, now: datetime) -> bool:
    """
    Expire an overdue pending request and release its lock (caller commits).

    Returns False if the request is not overdue or another writer won.
    """
    if not is_overdue(request, now):
        return False

    request_id = request.id
    if not _transition(db, request, S.EXPIRED, blocked_slot_id=None):
        return False
    release_block(db, request_id)
    return True


def expire_overdue(
    db: Session,
    now: datetime,
    requester_id: Optional[int] = None,
    provider_id: Optional[int] = None,
) -> int:
    """Expire every overdue pending request matching the filters. Commits."""
    query = db.query(SessionRequests).filter(
        SessionRequests.status.in_(PENDING_STATUSES),
        SessionRequests.expires_at <= now,
    )
    if requester_id is not None:
        query = query.filter(SessionRequests.requester_id == requester_id)
    if provider_id is not None:
        query = query.filter(SessionRequests.provider_id == provider_id)

    expired = 0
    for request in query.all():
        if force_expire(db, request, now):
            expired += 1
        db.commit()
    return expired


def _heal_if_expired(db: Session, request: SessionRequests, now: datetime) -> None:
    if not is_overdue(request, now):
        return
    if force_expire(db, request, now):
        db.commit()
    else:
        db.rollback()
    db.refresh(request)


# ── Lookups ──────────────────────────────────────────────────────────────


def _get_request(db: Session, request_id: int) -> SessionRequests:
    request = db.get(SessionRequests, request_id)
    if not request:
        raise NotFoundError("Session request not found")
    return request


def _get_own_request(db: Session, principal: Principal, request_id: int) -> SessionRequests:
    request = _get_request(db, request_id)
    if request.requester_id != principal.id:
        raise AuthorizationError("You can only manage your own session requests")
    return request


def _get_for_review(db: Session, principal: Principal, request_id: int) -> SessionRequests:
    ensure_reviewer(principal)
    request = _get_request(db, request_id)
    if principal.is_provider and request.provider_id != principal.id:
        raise AuthorizationError("You can only review session requests addressed to you")
    return request


def _ensure_reviewable(request: SessionRequests) -> None:
    if request.status == S.PENDING_APPROVAL.value:
        return
    if request.status == S.PENDING_PAYMENT.value:
        raise NotFoundError("Session request is not awaiting approval yet")
    if request.status == S.EXPIRED.value:
        raise ExpiredError("This session request has expired")
    raise ConflictError(f"Session request is already {request.status}")


# ── Requester actions ────────────────────────────────────────────────────


def create_session_request(
    db: Session,
    principal: Principal,
    provider_id: int,
    target_date: date,
    start_time: str,
    end_time: str,
    session_title: str,
    session_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SessionRequests:
    """
    Reserve a slot: request (PENDING_PAYMENT) and its lock in one transaction.

    Raises:
        ConflictError: slot not open, or taken by a concurrent request
        ValidationError / NotFoundError: from the slot lookup
    """
    ensure_requester(principal)
    now = now or utcnow()

    day = get_available_slots(db, provider_id, target_date, now=now)
    if not day.has(start_time, end_time):
        raise ConflictError("Selected slot is not available")

    price = resolve_session_price(day.settings)
    date_str = target_date.isoformat()

    # Expired locks keep the interval's unique index entry until purged
    for owner_id in stale_block_owners(db, provider_id, date_str, start_time, end_time, now):
        owner = db.get(SessionRequests, owner_id)
        if owner is not None and force_expire(db, owner, now):
            continue
        if owner is None or owner.status not in PENDING_STATUSES:
            release_block(db, owner_id)

    request = SessionRequests(
        provider_id=provider_id,
        requester_id=principal.id,
        date=date_str,
        start_time=start_time,
        end_time=end_time,
        amount=price.amount,
        currency=price.currency,
        status=S.PENDING_PAYMENT.value,
        expires_at=now + timedelta(minutes=app_settings.payment_upload_window_minutes),
        session_title=session_title,
        session_type=session_type,
        version=0,
    )
    try:
        db.add(request)
        db.flush()
        block = place_block(db, request)
        request.blocked_slot_id = block.id
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Slot {date_str} {start_time}-{end_time} of provider={provider_id} "
            f"taken concurrently"
        )
        raise ConflictError("This slot is no longer available") from None

    db.refresh(request)
    logger.info(
        f"session_request={request.id} created by requester={principal.id} "
        f"for provider={provider_id} {date_str} {start_time}-{end_time} "
        f"at {price.amount} {price.currency} ({price.source} price)"
    )
    return request


def upload_payment_proof(
    db: Session,
    principal: Principal,
    request_id: int,
    payment_proof_ref: str,
    now: Optional[datetime] = None,
) -> SessionRequests:
    now = now or utcnow()
    request = _get_own_request(db, principal, request_id)

    _heal_if_expired(db, request, now)
    if request.status == S.EXPIRED.value:
        raise ExpiredError("Payment window has expired. Please book the slot again.")
    if request.status != S.PENDING_PAYMENT.value:
        raise ConflictError(f"Cannot upload payment proof for a {request.status} request")

    request_id = request.id
    new_expiry = now + timedelta(hours=app_settings.approval_window_hours)
    if not _transition(
        db, request, S.PENDING_APPROVAL,
        payment_proof_ref=payment_proof_ref,
        expires_at=new_expiry,
    ):
        _lost_race(db, request)
    extend_block(db, request_id, new_expiry)
    db.commit()
    db.refresh(request)
    return request


def cancel_session_request(
    db: Session,
    principal: Principal,
    request_id: int,
    now: Optional[datetime] = None,
) -> SessionRequests:
    now = now or utcnow()
    request = _get_own_request(db, principal, request_id)

    _heal_if_expired(db, request, now)
    if request.status == S.EXPIRED.value:
        raise ExpiredError("This session request has already expired")
    if request.status != S.PENDING_PAYMENT.value:
        raise ConflictError(f"Cannot cancel a {request.status} request")

    request_id = request.id
    if not _transition(db, request, S.CANCELLED, blocked_slot_id=None):
        _lost_race(db, request)
    release_block(db, request_id)
    db.commit()
    db.refresh(request)
    return request


# ── Review actions (admin, or the target provider) ───────────────────────


def approve_session_request(
    db: Session,
    principal: Principal,
    request_id: int,
    notes: Optional[str] = None,
    notifier: Optional[NotificationSink] = None,
    now: Optional[datetime] = None,
) -> tuple[SessionRequests, Sessions]:
    """
    Confirm a paid request: create the session and drop the lock together.

    Notifications go out after the commit and never affect the result.
    """
    now = now or utcnow()
    request = _get_for_review(db, principal, request_id)

    _heal_if_expired(db, request, now)
    _ensure_reviewable(request)

    if find_conflicting_session(db, request):
        raise ConflictError("This slot already has a confirmed session")

    request_id = request.id
    if not _transition(db, request, S.CONFIRMED, confirmed_at=now, blocked_slot_id=None):
        _lost_race(db, request)

    try:
        session = create_session_from_request(db, request, notes)
        release_block(db, request_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"session_request={request_id}: interval already booked")
        raise ConflictError("This slot already has a confirmed session") from None

    db.refresh(request)
    db.refresh(session)
    logger.info(f"session_request={request_id} approved by {principal.role.value}={principal.id}")

    if notifier is not None:
        notify_session_approved(notifier, request, session)
    return request, session


def reject_session_request(
    db: Session,
    principal: Principal,
    request_id: int,
    reason: str,
    notifier: Optional[NotificationSink] = None,
    now: Optional[datetime] = None,
) -> SessionRequests:
    now = now or utcnow()
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required")

    request = _get_for_review(db, principal, request_id)

    _heal_if_expired(db, request, now)
    _ensure_reviewable(request)

    request_id = request.id
    if not _transition(db, request, S.REJECTED, rejection_reason=reason, blocked_slot_id=None):
        _lost_race(db, request)
    release_block(db, request_id)
    db.commit()
    db.refresh(request)
    logger.info(f"session_request={request_id} rejected by {principal.role.value}={principal.id}")

    if notifier is not None:
        notify_session_rejected(notifier, request)
    return request


# ── Queries ──────────────────────────────────────────────────────────────


def get_session_request(
    db: Session,
    principal: Principal,
    request_id: int,
    now: Optional[datetime] = None,
) -> SessionRequests:
    request = _get_request(db, request_id)
    if not principal.is_admin and principal.id not in (request.requester_id, request.provider_id):
        raise AuthorizationError("You do not have access to this session request")
    _heal_if_expired(db, request, now or utcnow())
    return request


def list_my_requests(
    db: Session,
    principal: Principal,
    status: Optional[SessionRequestStatus] = None,
    now: Optional[datetime] = None,
) -> list[SessionRequests]:
    ensure_requester(principal)
    expire_overdue(db, now or utcnow(), requester_id=principal.id)

    query = db.query(SessionRequests).filter(SessionRequests.requester_id == principal.id)
    if status:
        query = query.filter(SessionRequests.status == S(status).value)
    return query.order_by(SessionRequests.created_at.desc(), SessionRequests.id.desc()).all()


def list_incoming_requests(
    db: Session,
    principal: Principal,
    status: Optional[SessionRequestStatus] = None,
    now: Optional[datetime] = None,
) -> list[SessionRequests]:
    ensure_provider(principal)
    expire_overdue(db, now or utcnow(), provider_id=principal.id)

    query = db.query(SessionRequests).filter(SessionRequests.provider_id == principal.id)
    if status:
        query = query.filter(SessionRequests.status == S(status).value)
    return query.order_by(SessionRequests.created_at.desc(), SessionRequests.id.desc()).all()


def list_pending_requests(
    db: Session,
    principal: Principal,
    page: int = 1,
    limit: int = 20,
    now: Optional[datetime] = None,
) -> tuple[list[SessionRequests], dict]:
    """Approval queue, oldest first. Providers see only their own requests."""
    ensure_reviewer(principal)
    provider_id = principal.id if principal.is_provider else None
    expire_overdue(db, now or utcnow(), provider_id=provider_id)

    query = db.query(SessionRequests).filter(
        SessionRequests.status == S.PENDING_APPROVAL.value
    )
    if provider_id is not None:
        query = query.filter(SessionRequests.provider_id == provider_id)
    query = query.order_by(SessionRequests.created_at, SessionRequests.id)
    return paginate(query, page, limit)


def get_pending_request(
    db: Session,
    principal: Principal,
    request_id: int,
    now: Optional[datetime] = None,
) -> SessionRequests:
    request = _get_for_review(db, principal, request_id)
    _heal_if_expired(db, request, now or utcnow())
    if request.status == S.EXPIRED.value:
        raise ExpiredError("This session request has expired")
    if request.status != S.PENDING_APPROVAL.value:
        raise NotFoundError("Pending session request not found")
    return request
