"""Environment driven settings for the payroll engine."""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

DEFAULT_RATES_VERSION = "2024"


def rates_version() -> str:
    """Return the rate table version used when callers do not pass one."""
    configured = os.getenv("IDPAYROLL_RATES_VERSION", "").strip()
    return configured or DEFAULT_RATES_VERSION


def rules_dir() -> Path:
    """Resolve the directory holding ``rates_<version>.yaml`` documents."""
    configured = os.getenv("IDPAYROLL_RULES_DIR")
    if configured:
        return Path(configured).expanduser().resolve()
    return Path(__file__).resolve().parent / "rules"


def default_jkk_rate() -> Optional[Decimal]:
    """Company-wide JKK override, or ``None`` to use the rate table default."""
    raw = os.getenv("IDPAYROLL_DEFAULT_JKK_RATE", "").strip()
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"IDPAYROLL_DEFAULT_JKK_RATE is not a number: {raw!r}") from exc


def lenient_tax_status() -> bool:
    """Return True when unknown tax statuses should fall back to TK/0."""
    flag = os.getenv("IDPAYROLL_LENIENT_TAX_STATUS", "false").strip().lower()
    return flag in {"1", "true", "on", "yes"}
