"""PTKP tax status categories."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Union

from .errors import UnknownTaxStatusError

logger = logging.getLogger(__name__)


class TaxStatus(str, Enum):
    """Marital status and dependent count used to pick the PTKP exemption.

    ``TK`` is single, ``K`` married, ``K/I`` married with the spouse's income
    combined with the employee's. The suffix is the number of dependents (0-3).
    """

    TK_0 = "TK/0"
    TK_1 = "TK/1"
    TK_2 = "TK/2"
    TK_3 = "TK/3"
    K_0 = "K/0"
    K_1 = "K/1"
    K_2 = "K/2"
    K_3 = "K/3"
    K_I_0 = "K/I/0"
    K_I_1 = "K/I/1"
    K_I_2 = "K/I/2"
    K_I_3 = "K/I/3"

    @property
    def married(self) -> bool:
        return not self.value.startswith("TK")

    @property
    def combined_income(self) -> bool:
        return self.value.startswith("K/I")

    @property
    def dependents(self) -> int:
        return int(self.value.rsplit("/", 1)[1])

    @classmethod
    def default(cls) -> "TaxStatus":
        return cls.TK_0

    @classmethod
    def parse(cls, value: Union["TaxStatus", str], *, strict: bool = True) -> "TaxStatus":
        """Resolve a status code such as ``"K/1"``, ``"tk0"`` or ``"K/I/2"``.

        With ``strict=False`` an unknown code falls back to ``TK/0`` and a
        warning is logged instead of raising.
        """
        if isinstance(value, cls):
            return value
        key = _compact(value) if isinstance(value, str) else None
        status = _BY_COMPACT.get(key) if key else None
        if status is not None:
            return status
        if strict:
            raise UnknownTaxStatusError(f"Unknown PTKP tax status: {value!r}")
        logger.warning("Unknown PTKP tax status %r, falling back to %s", value, cls.TK_0.value)
        return cls.TK_0


def _compact(value: str) -> str:
    return value.strip().upper().replace(" ", "").replace("/", "")


_BY_COMPACT: Dict[str, TaxStatus] = {_compact(status.value): status for status in TaxStatus}


__all__ = ["TaxStatus"]
