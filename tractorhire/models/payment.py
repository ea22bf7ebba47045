"""Payment records attached to a booking."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import PaymentMethod, PaymentStatus
from ..database import Base


class BookingPayment(Base):
    """One payment attempt for a booking (cash on delivery by default)."""

    __tablename__ = "booking_payments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(30), nullable=False, default=PaymentMethod.CASH_ON_DELIVERY.value)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    booking = relationship("Booking", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_payment_amount_non_negative"),
        CheckConstraint(
            "status IN ('PENDING', 'SUCCESS', 'REFUNDED', 'FAILED', 'CANCELLED')",
            name="ck_booking_payments_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<BookingPayment booking={self.booking_id} status={self.status}>"
