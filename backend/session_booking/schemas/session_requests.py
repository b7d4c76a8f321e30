# backend/session_booking/schemas/session_requests.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from ..models import SessionRequestStatus, SessionType
from .availability import TIME_PATTERN
from .common import Pagination
from .sessions import SessionRead


class SessionRequestCreate(BaseModel):
    provider_id: int
    date: date
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    session_title: str = Field(..., min_length=1, max_length=200)
    session_type: Optional[SessionType] = None


class PaymentProofUpload(BaseModel):
    # Opaque reference returned by the upload service
    payment_proof_ref: str = Field(..., min_length=1)


class ApproveSessionRequest(BaseModel):
    notes: Optional[str] = None


class RejectSessionRequest(BaseModel):
    reason: str


class SessionRequestRead(BaseModel):
    id: int
    provider_id: int
    requester_id: int
    date: date
    start_time: str
    end_time: str
    amount: float
    currency: str
    status: SessionRequestStatus
    payment_proof_ref: Optional[str] = None
    expires_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    blocked_slot_id: Optional[int] = None
    session_title: str
    session_type: Optional[SessionType] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SessionRequestApproved(BaseModel):
    request: SessionRequestRead
    session: SessionRead


class PendingSessionRequestsPage(BaseModel):
    items: list[SessionRequestRead]
    pagination: Pagination
