"""
Billing rules: minimum charge, planned and final prices, refunds and commission.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tractorhire.core.exceptions import AlreadyFinalizedException, InvalidWindowException
from tractorhire.models.booking import Booking
from tractorhire.services.pricing_service import (
    PricingService,
    billable_minutes,
    commission,
    final_price,
    planned_price,
    refund_due,
)

START = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)
RATE = Decimal("500.00")


def _booking(**overrides) -> Booking:
    data = {
        "customer_id": "customer-1",
        "tractor_id": "tractor-1",
        "start_at": START,
        "end_at": START + timedelta(hours=2),
        "hourly_rate": RATE,
        "planned_price": Decimal("1000.00"),
        "booked_minutes": 120,
        "status": "DELIVERED",
        "admin_status": "APPROVED",
    }
    data.update(overrides)
    return Booking(**data)


class TestPureCalculations:
    def test_short_usage_is_billed_as_minimum(self):
        assert billable_minutes(20) == 30
        assert billable_minutes(0) == 30
        assert billable_minutes(45) == 45

    def test_planned_price_uses_whole_hours(self):
        assert planned_price(RATE, START, START + timedelta(hours=2)) == Decimal("1000.00")
        assert planned_price(RATE, START, START + timedelta(hours=2, minutes=59)) == Decimal(
            "1000.00"
        )

    def test_planned_price_never_below_minimum_charge(self):
        assert planned_price(RATE, START, START + timedelta(minutes=45)) == Decimal("250.00")

    def test_planned_price_rejects_empty_window(self):
        with pytest.raises(InvalidWindowException):
            planned_price(RATE, START, START)

    def test_final_price_for_twenty_minutes(self):
        assert final_price(RATE, START, START + timedelta(minutes=20)) == Decimal("250.00")

    def test_final_price_is_monotonic_in_usage(self):
        prices = [final_price(RATE, START, START + timedelta(minutes=m)) for m in range(0, 300, 7)]
        assert prices == sorted(prices)

    def test_final_price_rounds_to_cents(self):
        assert final_price(Decimal("100.00"), START, START + timedelta(minutes=31)) == Decimal(
            "51.67"
        )

    def test_refund_due(self):
        assert refund_due(Decimal("1000.00"), Decimal("250.00")) == Decimal("750.00")

    def test_refund_due_never_negative(self):
        assert refund_due(Decimal("250.00"), Decimal("400.00")) == Decimal("0.00")

    def test_commission(self):
        assert commission(Decimal("1000.00")) == Decimal("150.00")
        assert commission(Decimal("333.33"), rate=0.1) == Decimal("33.33")


class TestPricingService:
    def test_settle_usage_writes_billing_fields(self):
        booking = _booking(usage_started_at=START)
        settlement = PricingService().settle_usage(booking, START + timedelta(minutes=20))

        assert settlement.usage_minutes == 20
        assert settlement.billable_minutes == 30
        assert booking.actual_usage_minutes == 20
        assert booking.final_price == Decimal("250.00")
        assert booking.refund_due == Decimal("750.00")
        assert booking.usage_stopped_at == START + timedelta(minutes=20)

    def test_settle_usage_is_set_once(self):
        booking = _booking(usage_started_at=START, final_price=Decimal("250.00"))
        with pytest.raises(AlreadyFinalizedException) as exc_info:
            PricingService().settle_usage(booking, START + timedelta(minutes=40))
        assert exc_info.value.details["field"] == "final_price"
        assert booking.final_price == Decimal("250.00")

    def test_completion_without_usage_charges_planned_price(self):
        booking = _booking()
        fee = PricingService().settle_completion(booking)

        assert booking.final_price == Decimal("1000.00")
        assert booking.refund_due == Decimal("0.00")
        assert fee == Decimal("150.00")
        assert booking.commission_amount == Decimal("150.00")

    def test_commission_is_computed_once(self):
        booking = _booking(final_price=Decimal("250.00"), commission_amount=Decimal("37.50"))
        with pytest.raises(AlreadyFinalizedException):
            PricingService().settle_completion(booking)
        assert booking.commission_amount == Decimal("37.50")

    def test_owner_payout(self):
        booking = _booking(final_price=Decimal("250.00"), commission_amount=Decimal("37.50"))
        assert PricingService.owner_payout(booking) == Decimal("212.50")

    def test_usage_breakdown_while_running(self):
        booking = _booking(usage_started_at=START)
        details = PricingService().usage_breakdown(booking, START + timedelta(minutes=12))

        assert details["is_running"] is True
        assert details["current_usage_minutes"] == 12
        assert details["final_price"] is None
        assert details["minimum_charge_minutes"] == 30
