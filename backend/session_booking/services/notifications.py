# backend/session_booking/services/notifications.py
"""
Notification sink.

The booking flow only triggers notifications; rendering and delivery
belong to whoever consumes the event queue. Sending is fire-and-forget:
a failure is logged and never undoes the transition that caused it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models import SessionRequests, Sessions
from .events import emit_event

logger = logging.getLogger(__name__)

CATEGORY_BOOKING = "booking"


class NotificationSink(ABC):
    """Interface: notify(principal_id, title, body, category, metadata, link)."""

    @abstractmethod
    def notify(
        self,
        principal_id: int,
        title: str,
        body: str,
        category: str,
        metadata: dict[str, Any],
        link: Optional[str] = None,
    ) -> None:
        raise NotImplementedError


class RedisNotificationSink(NotificationSink):
    """Queues a `notification` event on events:p2p."""

    def notify(self, principal_id, title, body, category, metadata, link=None):
        emit_event("notification", {
            "principal_id": principal_id,
            "title": title,
            "body": body,
            "category": category,
            "metadata": metadata,
            "link": link,
        })


_default_sink = RedisNotificationSink()


def get_notifier() -> NotificationSink:
    """FastAPI dependency."""
    return _default_sink


def send_safe(sink: NotificationSink, principal_id: int, title: str, body: str,
              metadata: dict[str, Any], link: Optional[str] = None) -> None:
    try:
        sink.notify(principal_id, title, body, CATEGORY_BOOKING, metadata, link)
    except Exception:
        logger.exception(f"Failed to notify principal={principal_id} ({title})")


# ── Booking notifications ────────────────────────────────────────────────


def notify_session_approved(sink: NotificationSink, request: SessionRequests, session: Sessions) -> None:
    """One notification to the requester, one to the provider."""
    link = f"/sessions/{session.id}"
    when = f"{request.date} at {request.start_time}"

    send_safe(
        sink,
        request.requester_id,
        "Session Approved",
        f"Your session on {when} has been approved.",
        {
            "session_id": session.id,
            "provider_id": request.provider_id,
            "date": request.date,
            "start_time": request.start_time,
            "end_time": request.end_time,
        },
        link,
    )
    send_safe(
        sink,
        request.provider_id,
        "New Session Booked",
        f"A session has been booked with you on {when}.",
        {
            "session_id": session.id,
            "requester_id": request.requester_id,
            "date": request.date,
            "start_time": request.start_time,
            "end_time": request.end_time,
        },
        link,
    )


def notify_session_rejected(sink: NotificationSink, request: SessionRequests) -> None:
    send_safe(
        sink,
        request.requester_id,
        "Session Request Rejected",
        f"Your session request on {request.date} at {request.start_time} has been rejected. "
        f"Reason: {request.rejection_reason}",
        {
            "request_id": request.id,
            "provider_id": request.provider_id,
            "date": request.date,
            "rejection_reason": request.rejection_reason,
        },
    )
