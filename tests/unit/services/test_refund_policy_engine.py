from decimal import Decimal

import pytest

from tractorhire.services.refund_policy_engine import cancellation_refund


def test_three_percent_fee():
    split = cancellation_refund(Decimal("1000.00"))
    assert split.refund == Decimal("970.00")
    assert split.fee == Decimal("30.00")
    assert split.total == Decimal("1000.00")


@pytest.mark.parametrize("total", ["0.01", "0.50", "33.33", "250.00", "999.99", "12345.67"])
def test_refund_and_fee_add_up(total):
    split = cancellation_refund(Decimal(total))
    assert split.refund + split.fee == Decimal(total)
    assert split.refund >= 0
    assert split.fee >= 0


def test_custom_rate():
    split = cancellation_refund(Decimal("200.00"), fee_rate=0.1)
    assert split.refund == Decimal("180.00")
    assert split.fee == Decimal("20.00")


def test_payload():
    assert cancellation_refund(Decimal("100.00")).to_payload() == {
        "refund": Decimal("97.00"),
        "fee": Decimal("3.00"),
        "total": Decimal("100.00"),
    }
