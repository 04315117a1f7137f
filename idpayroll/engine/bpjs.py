"""BPJS Kesehatan and Ketenagakerjaan contribution calculator.

Contributions are computed per program on the gross monthly salary, limited
to the program's wage cap where one exists, and rounded to whole Rupiah one
contribution at a time. Totals are sums of the rounded parts.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from ..errors import NegativeAmountError
from ..money import ZERO, NumberLike, require_non_negative, to_decimal
from ..rounding import round_rupiah
from ..rules import BPJSProgram, RateTableLike, resolve_rates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeContributions:
    kesehatan: Decimal
    jht: Decimal
    jp: Decimal

    @property
    def jkk(self) -> Decimal:
        return ZERO

    @property
    def jkm(self) -> Decimal:
        return ZERO

    @property
    def total(self) -> Decimal:
        return self.kesehatan + self.jht + self.jp

    def to_dict(self) -> Dict[str, Decimal]:
        return {
            "kesehatan": self.kesehatan,
            "jht": self.jht,
            "jp": self.jp,
            "jkk": self.jkk,
            "jkm": self.jkm,
            "total": self.total,
        }


@dataclass(frozen=True)
class EmployerContributions:
    kesehatan: Decimal
    jht: Decimal
    jp: Decimal
    jkk: Decimal
    jkm: Decimal

    @property
    def total(self) -> Decimal:
        return self.kesehatan + self.jht + self.jp + self.jkk + self.jkm

    def to_dict(self) -> Dict[str, Decimal]:
        return {
            "kesehatan": self.kesehatan,
            "jht": self.jht,
            "jp": self.jp,
            "jkk": self.jkk,
            "jkm": self.jkm,
            "total": self.total,
        }


@dataclass(frozen=True)
class BPJSResult:
    gross_salary: Decimal
    kesehatan_base: Decimal
    jp_base: Decimal
    jkk_rate: Decimal
    employee: EmployeeContributions
    employer: EmployerContributions
    rates_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gross_salary": self.gross_salary,
            "kesehatan_base": self.kesehatan_base,
            "jp_base": self.jp_base,
            "jkk_rate": self.jkk_rate,
            "employee": self.employee.to_dict(),
            "employer": self.employer.to_dict(),
            "rates_version": self.rates_version,
        }


def calculate_bpjs(
    gross_salary: NumberLike,
    jkk_rate: Optional[NumberLike] = None,
    *,
    rates: RateTableLike = None,
) -> BPJSResult:
    """Compute employee and employer BPJS contributions for one month.

    ``jkk_rate`` is the company's work-accident rate (0.24%-1.74% depending on
    its risk group); ``None`` uses the rate table default.
    """
    table = resolve_rates(rates)
    gross = require_non_negative(gross_salary, "gross_salary")
    jkk = table.jkk_default_rate if jkk_rate is None else to_decimal(jkk_rate)
    if jkk < ZERO:
        raise NegativeAmountError(f"jkk_rate must be non-negative, got {jkk}")

    kesehatan = table.program(BPJSProgram.KESEHATAN)
    jht = table.program(BPJSProgram.JHT)
    jp = table.program(BPJSProgram.JP)
    jkm = table.program(BPJSProgram.JKM)

    kesehatan_base = kesehatan.base(gross)
    jp_base = jp.base(gross)
    # JKK uses the caller's rate and JKM has no cap; both apply to full gross
    jkk_base = table.program(BPJSProgram.JKK).base(gross)

    mode = table.rounding
    employee = EmployeeContributions(
        kesehatan=round_rupiah(kesehatan_base * kesehatan.employee_rate, mode),
        jht=round_rupiah(jht.base(gross) * jht.employee_rate, mode),
        jp=round_rupiah(jp_base * jp.employee_rate, mode),
    )
    employer = EmployerContributions(
        kesehatan=round_rupiah(kesehatan_base * kesehatan.employer_rate, mode),
        jht=round_rupiah(jht.base(gross) * jht.employer_rate, mode),
        jp=round_rupiah(jp_base * jp.employer_rate, mode),
        jkk=round_rupiah(jkk_base * jkk, mode),
        jkm=round_rupiah(jkm.base(gross) * jkm.employer_rate, mode),
    )
    logger.debug(
        "BPJS gross=%s employee_total=%s employer_total=%s (rates %s)",
        gross,
        employee.total,
        employer.total,
        table.version,
    )
    return BPJSResult(
        gross_salary=gross,
        kesehatan_base=kesehatan_base,
        jp_base=jp_base,
        jkk_rate=jkk,
        employee=employee,
        employer=employer,
        rates_version=table.version,
    )


def jkk_rate_from_percent(percent: NumberLike) -> Decimal:
    """Convert a company JKK setting expressed in percent (``"0.54"``) to a rate."""
    value = require_non_negative(percent, "jkk_percent")
    return value / Decimal("100")


__all__ = [
    "EmployeeContributions",
    "EmployerContributions",
    "BPJSResult",
    "calculate_bpjs",
    "jkk_rate_from_percent",
]
