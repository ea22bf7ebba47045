from decimal import Decimal

import pytest

from tractorhire.core.exceptions import ValidationException
from tractorhire.utils.money import format_money, quantize_money, to_decimal


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_is_returned_unchanged(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value

    def test_garbage_raises_validation_error(self):
        with pytest.raises(ValidationException) as exc_info:
            to_decimal("twelve")
        assert exc_info.value.code == "INVALID_AMOUNT"


class TestQuantizeMoney:
    def test_rounds_half_up(self):
        assert quantize_money("2.345") == Decimal("2.35")
        assert quantize_money("2.344") == Decimal("2.34")

    def test_integers_gain_two_places(self):
        assert str(quantize_money(500)) == "500.00"


def test_format_money():
    assert format_money(Decimal("1000")) == "1000.00"
    assert format_money("7.005") == "7.01"
