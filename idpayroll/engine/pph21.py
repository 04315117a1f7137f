"""PPh 21 monthly withholding using annualised progressive brackets.

The monthly gross is annualised, reduced by the occupational expense
deduction (biaya jabatan) and the employee's BPJS contributions, then by the
PTKP exemption for the tax status. The remaining taxable income (PKP) is
taxed slice by slice across the bracket table and the annual tax is divided
by twelve once, after accumulation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..money import ZERO, NumberLike, require_non_negative
from ..rounding import round_rupiah
from ..rules import RateTableLike, TaxBracket, resolve_rates
from ..tax_status import TaxStatus

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class BracketLayer:
    lower: Decimal
    upper: Optional[Decimal]
    rate: Decimal
    taxable: Decimal
    tax: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "rate": self.rate,
            "taxable": self.taxable,
            "tax": self.tax,
        }


@dataclass(frozen=True)
class PPh21Result:
    tax_status: TaxStatus
    annual_gross: Decimal
    occupational_expense: Decimal
    bpjs_deductible: Decimal
    net_annual_income: Decimal
    exemption: Decimal
    taxable_income: Decimal
    annual_tax: Decimal
    monthly_tax: Decimal
    layers: Tuple[BracketLayer, ...]
    rates_version: str
    explain: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tax_status": self.tax_status.value,
            "annual_gross": self.annual_gross,
            "occupational_expense": self.occupational_expense,
            "bpjs_deductible": self.bpjs_deductible,
            "net_annual_income": self.net_annual_income,
            "exemption": self.exemption,
            "taxable_income": self.taxable_income,
            "annual_tax": self.annual_tax,
            "monthly_tax": self.monthly_tax,
            "layers": [layer.to_dict() for layer in self.layers],
            "rates_version": self.rates_version,
            "explain": list(self.explain),
        }


def apply_brackets(amount: Decimal, brackets: Iterable[TaxBracket]) -> Tuple[Decimal, Tuple[BracketLayer, ...]]:
    """Tax ``amount`` progressively; returns the total and the per-bracket layers.

    Each bracket taxes the slice of ``amount`` in ``(previous_limit, limit]``.
    """
    tax = ZERO
    remaining = amount
    previous_limit = ZERO
    layers: List[BracketLayer] = []

    for bracket in brackets:
        if remaining <= ZERO:
            break
        if bracket.limit is None:
            slice_amount = remaining
        else:
            slice_amount = min(remaining, bracket.limit - previous_limit)
        if slice_amount <= ZERO:
            break
        slice_tax = slice_amount * bracket.rate
        layers.append(
            BracketLayer(
                lower=previous_limit,
                upper=bracket.limit,
                rate=bracket.rate,
                taxable=slice_amount,
                tax=slice_tax,
            )
        )
        tax += slice_tax
        remaining -= slice_amount
        if bracket.limit is None:
            break
        previous_limit = bracket.limit
    return tax, tuple(layers)


def calculate_pph21(
    gross_monthly: NumberLike,
    tax_status: Union[TaxStatus, str],
    bpjs_employee_deductions: NumberLike,
    *,
    rates: RateTableLike = None,
) -> PPh21Result:
    """Compute the monthly PPh 21 withholding for one employee."""
    table = resolve_rates(rates)
    status = TaxStatus.parse(tax_status)
    gross = require_non_negative(gross_monthly, "gross_monthly")
    bpjs_monthly = require_non_negative(bpjs_employee_deductions, "bpjs_employee_deductions")

    annual_gross = gross * MONTHS_PER_YEAR
    occupational_expense = min(
        annual_gross * table.occupational_expense_rate,
        table.occupational_expense_cap,
    )
    bpjs_deductible = bpjs_monthly * MONTHS_PER_YEAR
    net_annual_income = annual_gross - occupational_expense - bpjs_deductible
    exemption = table.exemption(status)
    taxable_income = max(ZERO, net_annual_income - exemption)

    annual_tax, layers = apply_brackets(taxable_income, table.brackets)
    monthly_tax = round_rupiah(annual_tax / MONTHS_PER_YEAR, table.rounding)

    explain = [
        f"status={status.value} ptkp={exemption}",
        f"annual_gross={annual_gross} biaya_jabatan={occupational_expense} bpjs={bpjs_deductible}",
        f"netto={net_annual_income} pkp={taxable_income}",
    ]
    explain.extend(
        f"{layer.rate:.0%} on {layer.taxable} = {layer.tax}" for layer in layers
    )
    explain.append(f"annual_tax={annual_tax} monthly_tax={monthly_tax}")

    logger.debug("PPh21 %s gross=%s monthly_tax=%s", status.value, gross, monthly_tax)
    return PPh21Result(
        tax_status=status,
        annual_gross=annual_gross,
        occupational_expense=occupational_expense,
        bpjs_deductible=bpjs_deductible,
        net_annual_income=net_annual_income,
        exemption=exemption,
        taxable_income=taxable_income,
        annual_tax=annual_tax,
        monthly_tax=monthly_tax,
        layers=layers,
        rates_version=table.version,
        explain=tuple(explain),
    )


__all__ = ["BracketLayer", "PPh21Result", "apply_brackets", "calculate_pph21", "MONTHS_PER_YEAR"]
