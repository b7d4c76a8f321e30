# backend/session_booking/schemas/sessions.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

from ..models import SessionStatus, SessionType
from .common import Pagination


class SessionRead(BaseModel):
    id: int
    provider_id: int
    requester_id: int
    date: date
    start_time: str
    end_time: str
    amount: float
    currency: str
    status: SessionStatus
    session_request_id: int
    notes: Optional[str] = None
    session_title: Optional[str] = None
    session_type: Optional[SessionType] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SessionsPage(BaseModel):
    items: list[SessionRead]
    pagination: Pagination
