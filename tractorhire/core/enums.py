# tractorhire/core/enums.py
"""
Core enums for the tractor hire booking engine.

Statuses are closed (str, Enum) types so that the values persisted in the
database are the enum values and illegal strings cannot be constructed.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an acting user can hold."""

    ADMIN = "ADMIN"
    TRACTOR_OWNER = "TRACTOR_OWNER"
    CUSTOMER = "CUSTOMER"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses (payment, delivery, completion progress)."""

    PENDING = "PENDING"
    PAID = "PAID"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUND_REQUESTED = "REFUND_REQUESTED"


class AdminStatus(str, Enum):
    """Administrative approval of a booking against shared inventory."""

    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class UnitState(str, Enum):
    """Operational state of a rentable unit."""

    AVAILABLE = "AVAILABLE"
    IN_USE = "IN_USE"


class PaymentStatus(str, Enum):
    """Status of a payment record attached to a booking."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    """How the customer pays."""

    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    ONLINE = "ONLINE"


class NotificationEvent(str, Enum):
    """Notification intents dispatched by the booking engine."""

    BOOKING_REQUESTED = "booking_requested"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_DENIED = "booking_denied"
    BOOKING_PAID = "booking_paid"
    BOOKING_DELIVERED = "booking_delivered"
    BOOKING_COMPLETED = "booking_completed"
    BOOKING_CANCELLED = "booking_cancelled"
    REFUND_REQUESTED = "refund_requested"
    REFUND_APPROVED = "refund_approved"
    REFUND_REJECTED = "refund_rejected"
    PAYMENT_RELEASED = "payment_released"
    RETRIEVAL_REMINDER = "retrieval_reminder"
