from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Union

from .errors import NegativeAmountError

ZERO = Decimal("0")
RUPIAH = Decimal("1")

NumberLike = Union[int, float, str, Decimal]

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def to_decimal(value: Any) -> Decimal:
    """Convert a number to ``Decimal`` preserving precision for ints/floats/strings."""

    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise TypeError("Booleans are not monetary amounts")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        if value.strip() == "":
            raise ValueError("empty string is not a valid amount")
        return Decimal(value.strip())
    raise TypeError(f"Unsupported numeric type: {type(value)!r}")


def require_non_negative(value: Any, field: str) -> Decimal:
    amount = to_decimal(value)
    if amount < ZERO:
        raise NegativeAmountError(f"{field} must be non-negative, got {amount}")
    return amount


def sum_amounts(values: Iterable[Any]) -> Decimal:
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return total


def format_rupiah(amount: NumberLike) -> str:
    """Render an amount the way the id-ID locale prints IDR: ``Rp 10.000.000``."""

    value = to_decimal(amount).quantize(RUPIAH, rounding=ROUND_HALF_UP)
    grouped = f"{abs(int(value)):,}".replace(",", ".")
    sign = "-" if value < ZERO else ""
    return f"{sign}Rp {grouped}"


def month_name(month: int) -> str:
    """English month name for ``1..12``; anything else gives an empty string."""

    if 1 <= month <= 12:
        return _MONTH_NAMES[month - 1]
    return ""


__all__ = [
    "ZERO",
    "RUPIAH",
    "NumberLike",
    "to_decimal",
    "require_non_negative",
    "sum_amounts",
    "format_rupiah",
    "month_name",
]
