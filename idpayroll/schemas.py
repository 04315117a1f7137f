"""Pydantic models validating payslip input at the process boundary."""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .engine import SalaryComponents
from .tax_status import TaxStatus


def _amount(*names: str, required: bool = False):
    default = ... if required else Decimal("0")
    return Field(default, ge=0, validation_alias=AliasChoices(*names))


class PayslipRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_salary: Decimal = _amount("base_salary", "gaji_pokok", required=True)
    transport_allowance: Decimal = _amount("transport_allowance", "tunjangan_transport")
    meal_allowance: Decimal = _amount("meal_allowance", "tunjangan_makan")
    communication_allowance: Decimal = _amount("communication_allowance", "tunjangan_komunikasi")
    position_allowance: Decimal = _amount("position_allowance", "tunjangan_jabatan")
    other_allowance: Decimal = _amount("other_allowance", "tunjangan_lainnya")
    bonus: Decimal = _amount("bonus")
    overtime: Decimal = _amount("overtime")
    reimbursements: Decimal = _amount("reimbursements")
    tax_status: TaxStatus = Field(
        TaxStatus.TK_0,
        validation_alias=AliasChoices("tax_status", "ptkp_status"),
        description="PTKP category such as TK/0, K/1 or K/I/2",
    )
    jkk_rate: Optional[Decimal] = Field(None, ge=0, le=1, description="Employer JKK rate, e.g. 0.0054")
    other_deductions: Decimal = Field(Decimal("0"), ge=0)
    rates_version: Optional[str] = None

    @field_validator("tax_status", mode="before")
    @classmethod
    def _parse_tax_status(cls, value: object) -> TaxStatus:
        if isinstance(value, TaxStatus):
            return value
        return TaxStatus.parse(str(value))

    def to_components(self) -> SalaryComponents:
        return SalaryComponents(
            base_salary=self.base_salary,
            transport_allowance=self.transport_allowance,
            meal_allowance=self.meal_allowance,
            communication_allowance=self.communication_allowance,
            position_allowance=self.position_allowance,
            other_allowance=self.other_allowance,
            bonus=self.bonus,
            overtime=self.overtime,
            reimbursements=self.reimbursements,
        )


__all__ = ["PayslipRequest"]
