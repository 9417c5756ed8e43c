"""Shared fixtures: in-memory database, fake transports and model factories."""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vehicle_care.db.models import User, Vehicle
from vehicle_care.db.session import Base
from vehicle_care.services.notification_dispatcher import Transports

TODAY = date(2026, 10, 18)


class FakeTransports:
    """Records every outbound message; individual channels can be made to fail."""

    def __init__(self, email_ok=True, sms_ok=True, email_raises=False, publish_raises=False):
        self.email_ok = email_ok
        self.sms_ok = sms_ok
        self.email_raises = email_raises
        self.publish_raises = publish_raises
        self.emails = []
        self.sms = []
        self.published = []

    def send_email(self, to, subject, html):
        if self.email_raises:
            raise ConnectionError("SMTP server unreachable")
        self.emails.append((to, subject, html))
        return self.email_ok

    def send_sms(self, to, body):
        self.sms.append((to, body))
        return self.sms_ok

    def publish(self, owner_id, event_name, payload):
        if self.publish_raises:
            raise RuntimeError("event loop gone")
        self.published.append((owner_id, event_name, payload))
        return 1

    @property
    def transports(self) -> Transports:
        return Transports(
            send_email=self.send_email,
            send_sms=self.send_sms,
            publish=self.publish,
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake():
    return FakeTransports()


@pytest.fixture
def make_owner(db):
    counter = {"n": 0}

    def _make(username=None, email=None, phone=None, preferences=None, role="user"):
        counter["n"] += 1
        n = counter["n"]
        owner = User(
            username=username or f"owner{n}",
            email=email or f"owner{n}@example.com",
            phone=phone,
            role=role,
            notification_preferences=preferences,
        )
        db.add(owner)
        db.commit()
        db.refresh(owner)
        return owner

    return _make


@pytest.fixture
def make_vehicle(db):
    counter = {"n": 0}

    def _make(owner, current_mileage=0, next_service_due=None, next_service_date=None, plate=None):
        counter["n"] += 1
        vehicle = Vehicle(
            owner_id=owner.id,
            plate_number=plate or f"ABC-{counter['n']:03d}",
            current_mileage=current_mileage,
            next_service_due=(
                next_service_due if next_service_due is not None else current_mileage + 5000
            ),
            next_service_date=next_service_date,
        )
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    return _make
