"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///./slotbook-test.db")

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from slotbook.core.enums import Role
from slotbook.core.identity import Actor
from slotbook.db.session import Base, make_engine
from slotbook.models.resource import Resource
from slotbook.models.booking import Booking  # noqa: F401
from slotbook.models.payment import Payment  # noqa: F401
from slotbook.models.notification import Notification  # noqa: F401
from slotbook.models.audit_log import AuditLog  # noqa: F401

# A Monday morning; 2030-01-12 is the following Saturday
NOW = datetime(2030, 1, 7, 8, 0)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'slotbook.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def at():
    """at(day_offset, hour, minute=0) -> datetime relative to NOW's date."""
    def _at(day_offset: int, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(NOW.date() + timedelta(days=day_offset), datetime.min.time()).replace(
            hour=hour, minute=minute
        )
    return _at


@pytest.fixture
def make_resource(db):
    def _make(pricing="DEFAULT", approval="AUTO", cancellation="FLEXIBLE", rate="10.00",
              category="STUDY_ROOM_SMALL", name=None) -> Resource:
        r = Resource(
            id=str(uuid.uuid4()),
            name=name or f"Room {uuid.uuid4().hex[:6]}",
            category=category,
            base_price_per_hour=Decimal(rate),
            pricing_policy_key=pricing,
            approval_policy_key=approval,
            cancellation_policy_key=cancellation,
        )
        db.add(r)
        db.commit()
        return r
    return _make


@pytest.fixture
def alice():
    return Actor(user_id="alice", role=Role.USER)


@pytest.fixture
def bob():
    return Actor(user_id="bob", role=Role.USER)


@pytest.fixture
def admin():
    return Actor(user_id="admin", role=Role.ADMIN)
