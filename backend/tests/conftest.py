import os

# Must be set before session_booking.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REAPER_ENABLED"] = "false"

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from session_booking.auth import Principal, Role
from session_booking.database import enable_sqlite_fk, get_db
from session_booking.main import app
from session_booking.models import Base
from session_booking.services import availability
from session_booking.services.notifications import NotificationSink, get_notifier

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
event.listen(engine, "connect", enable_sqlite_fk)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 2030-01-07 is a Monday; NOW is a week earlier (11:00 in Asia/Karachi)
MONDAY = date(2030, 1, 7)
NOW = datetime(2030, 1, 1, 6, 0)

PROVIDER = Principal(id=10, role=Role.PROVIDER)
OTHER_PROVIDER = Principal(id=11, role=Role.PROVIDER)
REQUESTER = Principal(id=20, role=Role.REQUESTER)
OTHER_REQUESTER = Principal(id=21, role=Role.REQUESTER)
ADMIN = Principal(id=1, role=Role.ADMIN)


class RecordingSink(NotificationSink):
    def __init__(self):
        self.sent = []

    def notify(self, principal_id, title, body, category, metadata, link=None):
        self.sent.append({
            "principal_id": principal_id,
            "title": title,
            "body": body,
            "category": category,
            "metadata": metadata,
            "link": link,
        })


class FailingSink(NotificationSink):
    def notify(self, principal_id, title, body, category, metadata, link=None):
        raise ConnectionError("redis down")


def headers(principal: Principal) -> dict:
    return {
        "X-Principal-Id": str(principal.id),
        "X-Principal-Role": principal.role.value,
    }


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def client(db, sink):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: sink
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def provider_setup(db):
    """Provider 10: 60-minute slots, 15-minute break, MON 09:00-17:00."""
    settings_row = availability.create_settings(
        db, PROVIDER, {"slot_duration_minutes": 60, "break_minutes": 15}
    )
    availability.create_rule(
        db, PROVIDER, {"day_of_week": "MON", "start_time": "09:00", "end_time": "17:00"}
    )
    return settings_row
