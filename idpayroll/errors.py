"""Exception hierarchy shared by the payroll engine and its consumers."""
from __future__ import annotations


class PayrollError(Exception):
    """Base class for every error raised by :mod:`idpayroll`."""


class NegativeAmountError(PayrollError, ValueError):
    """Raised when a monetary input or rate is negative."""


class UnknownTaxStatusError(PayrollError, ValueError):
    """Raised when a tax status string does not name a PTKP category."""


class SalaryComponentError(PayrollError, ValueError):
    """Raised when salary input names an unknown component or omits the base salary."""


class RateTableError(PayrollError):
    """Raised when a rate document is missing or fails validation."""


class PayrollRunError(PayrollError, ValueError):
    """Raised when a payroll run is created for an invalid period."""


class PayrollRunStateError(PayrollError):
    """Raised on an illegal payroll run lifecycle transition."""


__all__ = [
    "PayrollError",
    "NegativeAmountError",
    "UnknownTaxStatusError",
    "SalaryComponentError",
    "RateTableError",
    "PayrollRunError",
    "PayrollRunStateError",
]
