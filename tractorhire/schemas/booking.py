"""Payloads returned by booking lifecycle operations."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field

from ..core.enums import AdminStatus, BookingStatus
from ._strict_base import StrictModel, StrictRequestModel


class DeliveryTarget(StrictRequestModel):
    """Where the customer wants the tractor delivered."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(default=None, max_length=500)


class BookingSnapshot(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    customer_id: str
    tractor_id: str
    start_at: datetime
    end_at: datetime
    status: BookingStatus
    admin_status: AdminStatus
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    delivery_address: Optional[str] = None
    hourly_rate: Decimal
    planned_price: Decimal
    booked_minutes: int
    usage_started_at: Optional[datetime] = None
    usage_stopped_at: Optional[datetime] = None
    actual_usage_minutes: Optional[int] = None
    final_price: Optional[Decimal] = None
    refund_due: Optional[Decimal] = None
    cancellation_refund: Optional[Decimal] = None
    cancellation_fee: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    payment_released: bool = False
    reminder_sent: bool = False


class TransitionResult(StrictModel):
    """
    Outcome of a lifecycle operation.

    ``changed`` is False when an idempotent operation found the booking
    already in the requested state.
    """

    booking_id: str
    status: BookingStatus
    admin_status: AdminStatus
    changed: bool = True
    planned_price: Optional[Decimal] = None
    final_price: Optional[Decimal] = None
    refund_due: Optional[Decimal] = None
    cancellation_refund: Optional[Decimal] = None
    cancellation_fee: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    owner_payout: Optional[Decimal] = None
    actual_usage_minutes: Optional[int] = None
    usage_started_at: Optional[datetime] = None
    usage_stopped_at: Optional[datetime] = None


class UsageDetails(StrictModel):
    booking_id: str
    booked_minutes: int
    actual_usage_minutes: Optional[int] = None
    current_usage_minutes: Optional[int] = None
    minimum_charge_minutes: int
    hourly_rate: Decimal
    planned_price: Decimal
    final_price: Optional[Decimal] = None
    refund_due: Optional[Decimal] = None
    usage_started_at: Optional[datetime] = None
    usage_stopped_at: Optional[datetime] = None
    is_running: bool


class ReminderSweepResult(StrictModel):
    candidates: int
    reminders_sent: int
    failed_reminders: int
