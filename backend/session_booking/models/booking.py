from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class DayOfWeek(str, Enum):
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"

    @classmethod
    def from_weekday(cls, weekday: int) -> "DayOfWeek":
        """0 = Monday ... 6 = Sunday (date.weekday())."""
        return list(cls)[weekday]


class OverrideType(str, Enum):
    OFF = "OFF"
    CUSTOM = "CUSTOM"


class SessionRequestStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class SessionStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class SessionType(str, Enum):
    VIDEO_CALL = "video call"
    AUDIO_CALL = "audio call"


class AvailabilitySettings(Base):
    __tablename__ = 'availability_settings'

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False, unique=True, index=True)
    slot_duration_minutes = Column(Integer, nullable=False, server_default=text('60'))
    break_minutes = Column(Integer, nullable=False, server_default=text('15'))
    timezone = Column(Text, nullable=False, server_default=text("'Asia/Karachi'"))
    session_price = Column(Float)
    currency = Column(Text, nullable=False, server_default=text("'PKR'"))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class AvailabilityRules(Base):
    __tablename__ = 'availability_rules'
    __table_args__ = (
        Index('ix_availability_rules_provider_day', 'provider_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False, index=True)
    day_of_week = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)  # "HH:MM", provider-local
    end_time = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class AvailabilityOverrides(Base):
    __tablename__ = 'availability_overrides'
    __table_args__ = (
        Index('uq_availability_overrides_provider_date', 'provider_id', 'date', unique=True),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False, index=True)
    date = Column(Text, nullable=False)  # "YYYY-MM-DD"
    type = Column(Text, nullable=False)
    start_time = Column(Text)  # CUSTOM only
    end_time = Column(Text)
    reason = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class SessionRequests(Base):
    __tablename__ = 'session_requests'
    __table_args__ = (
        Index('ix_session_requests_provider_date', 'provider_id', 'date', 'start_time'),
        Index('ix_session_requests_requester_status', 'requester_id', 'status'),
        Index('ix_session_requests_status_expires', 'status', 'expires_at'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False)
    requester_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'PENDING_PAYMENT'"))
    payment_proof_ref = Column(Text)
    expires_at = Column(DateTime)  # naive UTC
    rejection_reason = Column(Text)
    confirmed_at = Column(DateTime)
    blocked_slot_id = Column(Integer)
    session_title = Column(Text, nullable=False)
    session_type = Column(Text)
    # Optimistic concurrency: every status write is conditional on this value
    version = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    blocked_slot = relationship('BlockedSlots', uselist=False, back_populates='session_request')
    session = relationship('Sessions', uselist=False, back_populates='session_request')


class BlockedSlots(Base):
    __tablename__ = 'blocked_slots'
    __table_args__ = (
        # One live lock per exact interval. Locks are deleted on resolution and
        # expired ones are purged before a new lock for the interval is placed.
        Index(
            'uq_blocked_slots_interval',
            'provider_id', 'date', 'start_time', 'end_time',
            unique=True,
        ),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    session_request_id = Column(
        ForeignKey('session_requests.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
    )
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    session_request = relationship('SessionRequests', back_populates='blocked_slot')


class Sessions(Base):
    __tablename__ = 'sessions'
    __table_args__ = (
        Index(
            'uq_sessions_interval',
            'provider_id', 'date', 'start_time', 'end_time',
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
        Index('ix_sessions_requester_date', 'requester_id', 'date'),
        Index('ix_sessions_status_date', 'status', 'date'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False, index=True)
    requester_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'CONFIRMED'"))
    session_request_id = Column(
        ForeignKey('session_requests.id', ondelete='RESTRICT'),
        nullable=False,
        unique=True,
    )
    notes = Column(Text)
    session_title = Column(Text)
    session_type = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    session_request = relationship('SessionRequests', back_populates='session')
