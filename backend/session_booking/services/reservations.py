# backend/session_booking/services/reservations.py
"""
Reservation ledger: time-boxed soft locks on exact slot intervals.

A BlockedSlot removes [start, end) on a date from the provider's available
slots until it expires or its session request resolves. The unique index
on (provider_id, date, start_time, end_time) is what actually prevents two
requests from holding the same interval; the slot check before insert is
only a fast path.
"""

import logging
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..models import BlockedSlots, SessionRequests

logger = logging.getLogger(__name__)


def active_block_intervals(
    db: Session,
    provider_id: int,
    date_str: str,
    now: datetime,
) -> list[tuple[str, str]]:
    """(start_time, end_time) of locks that have not expired yet."""
    rows = db.execute(
        select(BlockedSlots.start_time, BlockedSlots.end_time).where(
            BlockedSlots.provider_id == provider_id,
            BlockedSlots.date == date_str,
            BlockedSlots.expires_at > now,
        )
    ).all()
    return [(r.start_time, r.end_time) for r in rows]


def stale_block_owners(
    db: Session,
    provider_id: int,
    date_str: str,
    start_time: str,
    end_time: str,
    now: datetime,
) -> list[int]:
    """Request ids of expired locks still occupying the interval's unique index entry."""
    return list(db.scalars(
        select(BlockedSlots.session_request_id).where(
            BlockedSlots.provider_id == provider_id,
            BlockedSlots.date == date_str,
            BlockedSlots.start_time == start_time,
            BlockedSlots.end_time == end_time,
            BlockedSlots.expires_at <= now,
        )
    ))


def place_block(db: Session, request: SessionRequests) -> BlockedSlots:
    """
    Insert the lock for a freshly flushed session request.

    Flushes immediately so a unique-index violation surfaces here,
    inside the caller's transaction.
    """
    block = BlockedSlots(
        provider_id=request.provider_id,
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        expires_at=request.expires_at,
        session_request_id=request.id,
    )
    db.add(block)
    db.flush()
    return block


def extend_block(db: Session, session_request_id: int, expires_at: datetime) -> int:
    result = db.execute(
        update(BlockedSlots)
        .where(BlockedSlots.session_request_id == session_request_id)
        .values(expires_at=expires_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def release_block(db: Session, session_request_id: int) -> int:
    """Delete the lock held by a request. Returns number of deleted rows (0 or 1)."""
    result = db.execute(
        delete(BlockedSlots)
        .where(BlockedSlots.session_request_id == session_request_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info(f"Released blocked slot of session_request={session_request_id}")
    return result.rowcount


def purge_expired_blocks(db: Session, now: datetime) -> int:
    """
    Delete every lock whose expiry has passed.

    Owning requests are expired separately; this catches locks left behind
    by requests that resolved some other way.
    """
    result = db.execute(
        delete(BlockedSlots)
        .where(BlockedSlots.expires_at <= now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
