import logging
from decimal import Decimal

import pytest

from idpayroll.errors import NegativeAmountError
from idpayroll.logging_utils import RedactingFilter
from idpayroll.money import format_rupiah, month_name, require_non_negative, sum_amounts, to_decimal
from idpayroll.rounding import round_rupiah


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "Rp 0"),
        (999, "Rp 999"),
        (10_000_000, "Rp 10.000.000"),
        (Decimal("1234567.5"), "Rp 1.234.568"),
        (-1_500, "-Rp 1.500"),
    ],
)
def test_format_rupiah(amount, expected):
    assert format_rupiah(amount) == expected


@pytest.mark.parametrize("month, expected", [(1, "January"), (12, "December"), (0, ""), (13, "")])
def test_month_name(month, expected):
    assert month_name(month) == expected


def test_to_decimal_conversions():
    assert to_decimal(None) == 0
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 42 ") == Decimal("42")
    with pytest.raises(TypeError):
        to_decimal(True)
    with pytest.raises(ValueError):
        to_decimal("  ")


def test_require_non_negative():
    assert require_non_negative("0", "amount") == 0
    with pytest.raises(NegativeAmountError, match="amount"):
        require_non_negative(-0.01, "amount")


def test_sum_amounts():
    assert sum_amounts([1, "2", Decimal("3.5")]) == Decimal("6.5")


def test_round_rupiah_modes():
    assert round_rupiah(Decimal("2.5")) == 3
    assert round_rupiah(Decimal("2.5"), "HALF_EVEN") == 2
    with pytest.raises(ValueError):
        round_rupiah(1, "DOWN")


def _record(msg, args):
    return logging.LogRecord("idpayroll.test", logging.INFO, __file__, 1, msg, args, None)


def test_redacting_filter_masks_identifiers():
    record = _record("employee %s npwp %s nik %s", ("ani@example.co.id", "12.345.678.9-012.345", "3171234567890001"))

    assert RedactingFilter().filter(record)
    assert record.getMessage() == "employee [REDACTED] npwp [REDACTED] nik [REDACTED]"


def test_redacting_filter_leaves_amounts_alone():
    record = _record("gross=%s", (Decimal("10000000"),))
    RedactingFilter().filter(record)

    assert record.getMessage() == "gross=10000000"


def test_redacting_filter_handles_mapping_args():
    record = _record("contact %(email)s", ({"email": "hr@perusahaan.id"},))
    RedactingFilter().filter(record)

    assert record.getMessage() == "contact [REDACTED]"
