"""Indonesian statutory payroll engine: BPJS contributions and PPh 21 withholding."""

from .engine import (
    BPJSResult,
    PayslipCalculation,
    PPh21Result,
    SalaryComponents,
    calculate_bpjs,
    calculate_payslip,
    calculate_pph21,
)
from .errors import (
    NegativeAmountError,
    PayrollError,
    PayrollRunError,
    PayrollRunStateError,
    RateTableError,
    SalaryComponentError,
    UnknownTaxStatusError,
)
from .money import format_rupiah, month_name
from .rules import RateTable, load_rate_table, rate_table_for
from .tax_status import TaxStatus

__version__ = "1.0.0"

__all__ = [
    "BPJSResult",
    "PayslipCalculation",
    "PPh21Result",
    "SalaryComponents",
    "calculate_bpjs",
    "calculate_payslip",
    "calculate_pph21",
    "NegativeAmountError",
    "PayrollError",
    "PayrollRunError",
    "PayrollRunStateError",
    "RateTableError",
    "SalaryComponentError",
    "UnknownTaxStatusError",
    "format_rupiah",
    "month_name",
    "RateTable",
    "load_rate_table",
    "rate_table_for",
    "TaxStatus",
]
