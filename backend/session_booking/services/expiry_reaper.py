"""
Expiry reaper.

Periodically expires session requests whose payment or approval window
has passed, releases their blocked slots, and purges any lock whose
expiry has passed.

Runs as an asyncio task in the application lifespan.
Uses the synchronous DB session (via asyncio.to_thread).
Safe to run in several instances: every expiry is a guarded UPDATE.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal
from .reservations import purge_expired_blocks
from .session_requests import expire_overdue
from .slots.config import utcnow

logger = logging.getLogger(__name__)


async def expiry_reaper_loop() -> None:
    """Run reap_expired() every reaper_interval_seconds until cancelled."""
    logger.info("expiry_reaper_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_reap_once)
            except asyncio.CancelledError:
                logger.info("expiry_reaper_loop cancelled")
                raise
            except Exception:
                logger.exception("expiry_reaper_loop error")

            await asyncio.sleep(settings.reaper_interval_seconds)
    except asyncio.CancelledError:
        pass


def _reap_once() -> None:
    db = SessionLocal()
    try:
        reap_expired(db)
    finally:
        db.close()


def reap_expired(db: Session, now: Optional[datetime] = None) -> tuple[int, int]:
    """
    One sweep (synchronous). Idempotent.

    Returns (expired requests, purged locks).
    """
    now = now or utcnow()

    expired = expire_overdue(db, now)

    purged = purge_expired_blocks(db, now)
    db.commit()

    if expired or purged:
        logger.info(f"Reaper: expired {expired} request(s), purged {purged} lock(s)")
    return expired, purged
