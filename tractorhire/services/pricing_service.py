# tractorhire/services/pricing_service.py
"""
Billing calculations for tractor bookings.

All amounts are ``Decimal`` quantised to the cent with half-up rounding. The
module-level functions are pure; ``PricingService`` applies them to a booking
and is the only place that writes the billing fields, so that the set-once
rules for the final price and commission live in one spot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Dict, Optional

from ..core.config import settings
from ..core.exceptions import AlreadyFinalizedException, InvalidWindowException
from ..models.booking import Booking
from ..utils.money import ZERO, Numeric, format_money, quantize_money, to_decimal
from ..utils.time_helpers import ensure_utc, isoformat_or_none, minutes_between, whole_hours
from .base import BaseService

logger = logging.getLogger(__name__)


def _minimum_charge_minutes(minimum: Optional[int]) -> int:
    return settings.minimum_charge_minutes if minimum is None else minimum


def billable_minutes(usage_minutes: int, minimum: Optional[int] = None) -> int:
    """Usage minutes after the minimum-charge floor."""
    return max(int(usage_minutes), _minimum_charge_minutes(minimum))


def price_for_minutes(hourly_rate: Numeric, minutes: int) -> Decimal:
    return quantize_money(to_decimal(hourly_rate) * Decimal(minutes) / Decimal(60))


def planned_price(
    hourly_rate: Numeric,
    start_at: datetime,
    end_at: datetime,
    minimum: Optional[int] = None,
) -> Decimal:
    """
    Up-front price for a booked window.

    The duration is truncated to whole hours and multiplied by the rate. The
    result never falls below the minimum-charge equivalent.
    """
    minutes = minutes_between(start_at, end_at)
    if minutes <= 0:
        raise InvalidWindowException(
            "Booking end must be after its start",
            details={"start_at": isoformat_or_none(start_at), "end_at": isoformat_or_none(end_at)},
        )
    hourly = quantize_money(to_decimal(hourly_rate) * whole_hours(minutes))
    floor = price_for_minutes(hourly_rate, _minimum_charge_minutes(minimum))
    return max(hourly, floor)


def final_price(
    hourly_rate: Numeric,
    usage_start: datetime,
    usage_stop: datetime,
    minimum: Optional[int] = None,
) -> Decimal:
    """Price of recorded usage: rate × billable minutes / 60."""
    used = max(0, minutes_between(usage_start, usage_stop))
    return price_for_minutes(hourly_rate, billable_minutes(used, minimum))


def refund_due(planned: Numeric, final: Numeric) -> Decimal:
    return max(ZERO, quantize_money(to_decimal(planned) - to_decimal(final)))


def commission(final: Numeric, rate: Optional[float] = None) -> Decimal:
    applied = settings.commission_rate if rate is None else rate
    return quantize_money(to_decimal(final) * to_decimal(applied))


@dataclass(frozen=True)
class UsageSettlement:
    usage_minutes: int
    billable_minutes: int
    final_price: Decimal
    refund_due: Decimal


class PricingService(BaseService):
    """Applies the billing rules to booking records."""

    def __init__(self, db=None):
        super().__init__(db)

    def settle_usage(self, booking: Booking, stopped_at: datetime) -> UsageSettlement:
        """
        Record the final price for a stopped usage timer.

        Raises:
            AlreadyFinalizedException: a final price was already recorded
        """
        if booking.final_price is not None:
            raise AlreadyFinalizedException(booking.id, booking.status, field="final_price")

        started = ensure_utc(booking.usage_started_at)
        stopped = ensure_utc(stopped_at)
        used = max(0, minutes_between(started, stopped))
        final = final_price(booking.hourly_rate, started, stopped)
        settlement = UsageSettlement(
            usage_minutes=used,
            billable_minutes=billable_minutes(used),
            final_price=final,
            refund_due=refund_due(booking.planned_price, final),
        )

        booking.usage_stopped_at = stopped
        booking.actual_usage_minutes = settlement.usage_minutes
        booking.final_price = settlement.final_price
        booking.refund_due = settlement.refund_due

        self.logger.info(
            "Usage settled",
            extra={
                "booking_id": booking.id,
                "usage_minutes": settlement.usage_minutes,
                "billable_minutes": settlement.billable_minutes,
                "final_price": format_money(settlement.final_price),
                "refund_due": format_money(settlement.refund_due),
            },
        )
        return settlement

    def settle_completion(self, booking: Booking) -> Decimal:
        """
        Fix the final price (planned price when usage never started) and the
        platform commission. Both are written once.
        """
        if booking.final_price is None:
            booking.final_price = quantize_money(booking.planned_price)
            booking.refund_due = ZERO
        if booking.commission_amount is not None:
            raise AlreadyFinalizedException(booking.id, booking.status, field="commission_amount")
        booking.commission_amount = commission(booking.final_price)
        return booking.commission_amount

    @staticmethod
    def owner_payout(booking: Booking) -> Decimal:
        final = to_decimal(booking.final_price if booking.final_price is not None else ZERO)
        fee = to_decimal(booking.commission_amount if booking.commission_amount is not None else ZERO)
        return quantize_money(final - fee)

    def usage_breakdown(self, booking: Booking, now: datetime) -> Dict[str, Any]:
        """Snapshot of booked versus actual usage for display."""
        current_minutes = None
        if booking.usage_running:
            current_minutes = max(0, minutes_between(booking.usage_started_at, now))

        return {
            "booking_id": booking.id,
            "booked_minutes": booking.booked_minutes,
            "actual_usage_minutes": booking.actual_usage_minutes,
            "current_usage_minutes": current_minutes,
            "minimum_charge_minutes": settings.minimum_charge_minutes,
            "hourly_rate": quantize_money(booking.hourly_rate),
            "planned_price": quantize_money(booking.planned_price),
            "final_price": (
                quantize_money(booking.final_price) if booking.final_price is not None else None
            ),
            "refund_due": (
                quantize_money(booking.refund_due) if booking.refund_due is not None else None
            ),
            "usage_started_at": (
                ensure_utc(booking.usage_started_at) if booking.usage_started_at else None
            ),
            "usage_stopped_at": (
                ensure_utc(booking.usage_stopped_at) if booking.usage_stopped_at else None
            ),
            "is_running": booking.usage_running,
        }
