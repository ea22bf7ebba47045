# tractorhire/models/booking.py
"""
Booking model.

A booking reserves one unit of a tractor pool for a half-open window
``[start_at, end_at)``. It moves along two independent axes: ``status``
(payment, delivery and completion) and ``admin_status`` (approval against
inventory). Prices are snapshotted at request time and the billing fields are
filled in as usage is recorded.
"""

import logging
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import MINIMUM_CHARGE_MINUTES as _MINIMUM_CHARGE_MINUTES
from ..core.enums import AdminStatus, BookingStatus
from ..database import Base
from ..utils.money import format_money
from ..utils.time_helpers import isoformat_or_none

logger = logging.getLogger(__name__)

MINIMUM_CHARGE_MINUTES = _MINIMUM_CHARGE_MINUTES


def _money(value: Any) -> Optional[str]:
    return format_money(value) if value is not None else None


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    customer_id = Column(String(26), nullable=False, index=True)
    tractor_id = Column(String(26), ForeignKey("tractors.id"), nullable=False, index=True)

    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    admin_status = Column(
        String(20), nullable=False, default=AdminStatus.PENDING_APPROVAL.value, index=True
    )

    # Delivery target
    delivery_latitude = Column(Float, nullable=True)
    delivery_longitude = Column(Float, nullable=True)
    delivery_address = Column(String(500), nullable=True)

    # Pricing snapshot
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    planned_price = Column(Numeric(10, 2), nullable=False)
    booked_minutes = Column(Integer, nullable=False)

    # Usage timer
    usage_started_at = Column(DateTime(timezone=True), nullable=True)
    usage_stopped_at = Column(DateTime(timezone=True), nullable=True)
    actual_usage_minutes = Column(Integer, nullable=True)

    # Billing outcome
    final_price = Column(Numeric(10, 2), nullable=True)
    refund_due = Column(Numeric(10, 2), nullable=True)
    cancellation_refund = Column(Numeric(10, 2), nullable=True)
    cancellation_fee = Column(Numeric(10, 2), nullable=True)
    commission_amount = Column(Numeric(10, 2), nullable=True)
    payment_released = Column(Boolean, nullable=False, default=False)

    reminder_sent = Column(Boolean, nullable=False, default=False)

    # Unit position captured at delivery, restored on completion
    original_latitude = Column(Float, nullable=True)
    original_longitude = Column(Float, nullable=True)
    original_location = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    tractor = relationship("Tractor", back_populates="bookings")
    payments = relationship(
        "BookingPayment",
        back_populates="booking",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("start_at < end_at", name="check_booking_window_order"),
        CheckConstraint("hourly_rate > 0", name="check_booking_rate_positive"),
        CheckConstraint("planned_price >= 0", name="check_booking_price_non_negative"),
        CheckConstraint(
            "status IN ('PENDING', 'PAID', 'DELIVERED', 'COMPLETED', 'CANCELLED', "
            "'REFUND_REQUESTED')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "admin_status IN ('PENDING_APPROVAL', 'APPROVED', 'DENIED')",
            name="ck_bookings_admin_status",
        ),
        Index("ix_bookings_tractor_window", "tractor_id", "start_at", "end_at"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        if not self.admin_status:
            self.admin_status = AdminStatus.PENDING_APPROVAL.value
        if self.payment_released is None:
            self.payment_released = False
        if self.reminder_sent is None:
            self.reminder_sent = False
        logger.info(f"Creating booking for customer {self.customer_id} on tractor {self.tractor_id}")

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: customer={self.customer_id}, tractor={self.tractor_id}, "
            f"window={self.start_at}-{self.end_at}, status={self.status}, "
            f"admin_status={self.admin_status}>"
        )

    @property
    def is_approved(self) -> bool:
        return self.admin_status == AdminStatus.APPROVED

    @property
    def has_delivery_target(self) -> bool:
        return self.delivery_latitude is not None and self.delivery_longitude is not None

    @property
    def usage_running(self) -> bool:
        return self.usage_started_at is not None and self.usage_stopped_at is None

    def is_owned_by(self, user_id: str) -> bool:
        return self.customer_id == user_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "tractor_id": self.tractor_id,
            "start_at": isoformat_or_none(self.start_at),
            "end_at": isoformat_or_none(self.end_at),
            "status": self.status,
            "admin_status": self.admin_status,
            "delivery_latitude": self.delivery_latitude,
            "delivery_longitude": self.delivery_longitude,
            "delivery_address": self.delivery_address,
            "hourly_rate": _money(self.hourly_rate),
            "planned_price": _money(self.planned_price),
            "booked_minutes": self.booked_minutes,
            "actual_usage_minutes": self.actual_usage_minutes,
            "final_price": _money(self.final_price),
            "refund_due": _money(self.refund_due),
            "commission_amount": _money(self.commission_amount),
            "payment_released": self.payment_released,
        }
