"""Rounding helpers driven by the ``rounding`` key of the rate documents."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP

from .money import RUPIAH, to_decimal

DEFAULT_MODE = "HALF_UP"

ROUNDING_MODES = {
    "HALF_UP": ROUND_HALF_UP,
    "HALF_EVEN": ROUND_HALF_EVEN,
}


def is_supported(mode: str) -> bool:
    return mode in ROUNDING_MODES


def round_rupiah(amount: object, mode: str = DEFAULT_MODE) -> Decimal:
    """Quantize an amount to whole Rupiah using the named rounding mode."""
    if mode not in ROUNDING_MODES:
        raise ValueError(f"Unsupported rounding mode '{mode}'")
    return to_decimal(amount).quantize(RUPIAH, rounding=ROUNDING_MODES[mode])
