"""Cancellation refund policy for paid bookings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.config import settings
from ..utils.money import Numeric, quantize_money, to_decimal


@dataclass(frozen=True)
class CancellationRefund:
    refund: Decimal
    fee: Decimal
    total: Decimal

    def to_payload(self) -> dict[str, object]:
        return {
            "refund": self.refund,
            "fee": self.fee,
            "total": self.total,
        }


def cancellation_refund(total: Numeric, fee_rate: Optional[float] = None) -> CancellationRefund:
    """
    Split a paid amount into the customer refund and the retained fee.

    The refund is rounded to the cent and the fee is the remainder, so the two
    always add back up to ``total``.
    """
    rate = settings.cancellation_fee_rate if fee_rate is None else fee_rate
    paid = quantize_money(total)
    refund = quantize_money(paid * (Decimal(1) - to_decimal(rate)))
    return CancellationRefund(refund=refund, fee=paid - refund, total=paid)
