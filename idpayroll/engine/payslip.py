"""Payslip composition: gross salary, BPJS, PPh 21 and net pay."""
from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from ..errors import SalaryComponentError
from ..money import ZERO, NumberLike, require_non_negative
from ..rules import RateTableLike, resolve_rates
from ..tax_status import TaxStatus
from .bpjs import BPJSResult, calculate_bpjs
from .pph21 import PPh21Result, calculate_pph21

# Indonesian field names used by salary records in the portal database
_ALIASES = {
    "gaji_pokok": "base_salary",
    "tunjangan_transport": "transport_allowance",
    "tunjangan_makan": "meal_allowance",
    "tunjangan_komunikasi": "communication_allowance",
    "tunjangan_jabatan": "position_allowance",
    "tunjangan_lainnya": "other_allowance",
}


@dataclass(frozen=True)
class SalaryComponents:
    base_salary: Decimal
    transport_allowance: Decimal = ZERO
    meal_allowance: Decimal = ZERO
    communication_allowance: Decimal = ZERO
    position_allowance: Decimal = ZERO
    other_allowance: Decimal = ZERO
    bonus: Decimal = ZERO
    overtime: Decimal = ZERO
    reimbursements: Decimal = ZERO

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            object.__setattr__(self, item.name, require_non_negative(value, item.name))

    @property
    def gross(self) -> Decimal:
        return sum((getattr(self, item.name) for item in fields(self)), ZERO)

    def with_reimbursements(self, amount: NumberLike) -> "SalaryComponents":
        values = self.to_dict()
        values["reimbursements"] = amount
        return SalaryComponents(**values)

    def to_dict(self) -> Dict[str, Decimal]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SalaryComponents":
        """Build from English or Indonesian keys; missing or ``None`` optional fields are 0.

        Any other key is rejected so a misspelt component cannot drop out of gross.
        """
        known = {item.name for item in fields(cls)}
        values: Dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                unknown.append(str(key))
            elif value is not None:
                values[name] = value
        if unknown:
            raise SalaryComponentError(f"Unknown salary components: {', '.join(sorted(unknown))}")
        if "base_salary" not in values:
            raise SalaryComponentError("base_salary (gaji_pokok) is required")
        return cls(**values)


@dataclass(frozen=True)
class PayslipCalculation:
    components: SalaryComponents
    gross_salary: Decimal
    bpjs: BPJSResult
    pph21: PPh21Result
    other_deductions: Decimal
    total_deductions: Decimal
    net_salary: Decimal

    @property
    def tax_status(self) -> TaxStatus:
        return self.pph21.tax_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "earnings": self.components.to_dict(),
            "gross_salary": self.gross_salary,
            "bpjs": self.bpjs.to_dict(),
            "pph21": self.pph21.to_dict(),
            "other_deductions": self.other_deductions,
            "total_deductions": self.total_deductions,
            "net_salary": self.net_salary,
        }


def calculate_payslip(
    components: Union[SalaryComponents, Mapping[str, Any]],
    tax_status: Union[TaxStatus, str],
    jkk_rate: Optional[NumberLike] = None,
    other_deductions: NumberLike = 0,
    *,
    rates: RateTableLike = None,
) -> PayslipCalculation:
    """Compose a monthly payslip.

    The employee BPJS total, not gross or the employer share, is the
    deductible figure passed to the PPh 21 calculation. Net salary may be
    negative when ``other_deductions`` is large.
    """
    table = resolve_rates(rates)
    if not isinstance(components, SalaryComponents):
        components = SalaryComponents.from_mapping(components)
    other = require_non_negative(other_deductions, "other_deductions")

    gross = components.gross
    bpjs = calculate_bpjs(gross, jkk_rate, rates=table)
    pph21 = calculate_pph21(gross, tax_status, bpjs.employee.total, rates=table)

    total_deductions = bpjs.employee.total + pph21.monthly_tax + other
    return PayslipCalculation(
        components=components,
        gross_salary=gross,
        bpjs=bpjs,
        pph21=pph21,
        other_deductions=other,
        total_deductions=total_deductions,
        net_salary=gross - total_deductions,
    )


__all__ = ["SalaryComponents", "PayslipCalculation", "calculate_payslip"]
