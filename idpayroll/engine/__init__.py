"""Pure payroll calculators: BPJS, PPh 21 and payslip composition."""

from .bpjs import (
    BPJSResult,
    EmployeeContributions,
    EmployerContributions,
    calculate_bpjs,
    jkk_rate_from_percent,
)
from .payslip import PayslipCalculation, SalaryComponents, calculate_payslip
from .pph21 import BracketLayer, PPh21Result, apply_brackets, calculate_pph21

__all__ = [
    "BPJSResult",
    "EmployeeContributions",
    "EmployerContributions",
    "calculate_bpjs",
    "jkk_rate_from_percent",
    "PayslipCalculation",
    "SalaryComponents",
    "calculate_payslip",
    "BracketLayer",
    "PPh21Result",
    "apply_brackets",
    "calculate_pph21",
]
