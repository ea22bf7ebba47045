from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tractorhire.core.enums import AdminStatus, BookingStatus, PaymentStatus, RoleName
from tractorhire.database import Base

# Import models so Base.metadata is populated for create_all.
import tractorhire.models  # noqa: F401
from tractorhire.models.booking import Booking
from tractorhire.models.payment import BookingPayment
from tractorhire.models.tractor import Tractor
from tractorhire.principal import Actor

BASE_TIME = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


def _at(hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
    return BASE_TIME.replace(hour=hour, minute=minute) + timedelta(days=day_offset)


@pytest.fixture(scope="session")
def _unit_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite defers BEGIN; take over so SAVEPOINTs nest inside the test transaction.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def unit_db(_unit_engine) -> Session:
    """
    Provide a session whose commits and rollbacks only move a savepoint inside
    an outer transaction that is discarded after the test.
    """
    connection = _unit_engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def at():
    """``at(hour, minute=0, day_offset=0)``: an aware UTC time on the test day."""
    return _at


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="admin-1", role=RoleName.ADMIN)


@pytest.fixture
def owner() -> Actor:
    return Actor(user_id="owner-1", role=RoleName.TRACTOR_OWNER)


@pytest.fixture
def customer() -> Actor:
    return Actor(user_id="customer-1", role=RoleName.CUSTOMER)


@pytest.fixture
def other_customer() -> Actor:
    return Actor(user_id="customer-2", role=RoleName.CUSTOMER)


@pytest.fixture
def make_tractor(unit_db):
    def _make(**overrides) -> Tractor:
        data = {
            "name": "Mahindra 575",
            "owner_id": "owner-1",
            "hourly_rate": Decimal("500.00"),
            "quantity": 1,
            "latitude": 27.7172,
            "longitude": 85.3240,
            "location": "Kathmandu Depot",
        }
        data.update(overrides)
        tractor = Tractor(**data)
        unit_db.add(tractor)
        unit_db.commit()
        return tractor

    return _make


@pytest.fixture
def tractor(make_tractor) -> Tractor:
    return make_tractor()


@pytest.fixture
def make_booking(unit_db):
    """Insert and commit a booking directly, bypassing the service rules."""

    def _make(tractor: Tractor, start_at: datetime, end_at: datetime, **overrides) -> Booking:
        minutes = int((end_at - start_at).total_seconds() // 60)
        data = {
            "customer_id": "customer-1",
            "tractor_id": tractor.id,
            "start_at": start_at,
            "end_at": end_at,
            "status": BookingStatus.PENDING.value,
            "admin_status": AdminStatus.PENDING_APPROVAL.value,
            "hourly_rate": Decimal(tractor.hourly_rate),
            "planned_price": Decimal(tractor.hourly_rate) * (minutes // 60 or 1),
            "booked_minutes": minutes,
        }
        payment_status = overrides.pop("payment_status", PaymentStatus.PENDING.value)
        data.update(overrides)
        booking = Booking(**data)
        unit_db.add(booking)
        unit_db.flush()
        if payment_status is not None:
            unit_db.add(
                BookingPayment(
                    booking_id=booking.id, amount=booking.planned_price, status=payment_status
                )
            )
        unit_db.commit()
        return booking

    return _make
