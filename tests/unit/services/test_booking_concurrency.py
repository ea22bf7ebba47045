"""
Concurrent approvals for the same tractor pool.

Each worker thread gets its own connection and session against a file-backed
SQLite database, so the only thing serialising the capacity checks is the
per-unit approval lock.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import threading
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session

from tractorhire.core.enums import AdminStatus, RoleName
from tractorhire.core.exceptions import CapacityExceededException
from tractorhire.database import Base
import tractorhire.models  # noqa: F401
from tractorhire.models.booking import Booking
from tractorhire.models.tractor import Tractor
from tractorhire.principal import Actor
from tractorhire.services.booking_service import BookingService
from tractorhire.services.notification_service import NotificationService

START = datetime(2025, 6, 2, 12, 0, tzinfo=timezone.utc)
ADMIN = Actor(user_id="admin-1", role=RoleName.ADMIN)


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )

    @event.listens_for(engine, "connect")
    def _enable_wal(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def _seed(engine, quantity: int, requests: int) -> list:
    with Session(engine, expire_on_commit=False) as db:
        tractor = Tractor(
            name="Swaraj 855", owner_id="owner-1", hourly_rate=Decimal("400.00"), quantity=quantity
        )
        db.add(tractor)
        db.flush()
        bookings = [
            Booking(
                customer_id=f"customer-{i}",
                tractor_id=tractor.id,
                start_at=START + timedelta(minutes=15 * i),
                end_at=START + timedelta(hours=2, minutes=15 * i),
                hourly_rate=Decimal("400.00"),
                planned_price=Decimal("800.00"),
                booked_minutes=120,
            )
            for i in range(requests)
        ]
        db.add_all(bookings)
        db.commit()
        return [b.id for b in bookings]


def _race(engine, booking_ids: list, operation: str) -> dict:
    barrier = threading.Barrier(len(booking_ids))
    outcomes: dict = {}
    guard = threading.Lock()

    def worker(booking_id: str) -> None:
        db = Session(engine, expire_on_commit=False)
        service = BookingService(db, notification_service=NotificationService(MagicMock()))
        try:
            barrier.wait()
            getattr(service, operation)(ADMIN, booking_id)
            outcome = "approved"
        except CapacityExceededException:
            outcome = "refused"
        except Exception as exc:  # surfaced through the outcome map
            outcome = f"error: {type(exc).__name__}: {exc}"
        finally:
            db.close()
        with guard:
            outcomes[booking_id] = outcome

    threads = [threading.Thread(target=worker, args=(bid,)) for bid in booking_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def _approved_count(engine) -> int:
    with Session(engine) as db:
        return db.query(Booking).filter(Booking.admin_status == AdminStatus.APPROVED.value).count()


@pytest.mark.parametrize("operation", ["approve_booking", "mark_paid"])
def test_pool_of_two_admits_exactly_two(file_engine, operation):
    booking_ids = _seed(file_engine, quantity=2, requests=3)

    outcomes = _race(file_engine, booking_ids, operation)

    assert sorted(outcomes.values()) == ["approved", "approved", "refused"]
    assert _approved_count(file_engine) == 2


def test_single_unit_admits_one(file_engine):
    booking_ids = _seed(file_engine, quantity=1, requests=4)

    outcomes = _race(file_engine, booking_ids, "approve_booking")

    assert list(outcomes.values()).count("approved") == 1
    assert list(outcomes.values()).count("refused") == 3
    assert _approved_count(file_engine) == 1
