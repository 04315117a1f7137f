"""Prometheus instruments for payroll runs."""
from __future__ import annotations

from prometheus_client import Counter, Histogram

PAYSLIPS_CALCULATED = Counter(
    "idpayroll_payslips_calculated_total",
    "Payslips produced by payroll runs",
)
EMPLOYEES_SKIPPED = Counter(
    "idpayroll_employees_skipped_total",
    "Active employees skipped because no salary record applied",
)
RUN_TRANSITIONS = Counter(
    "idpayroll_run_transitions_total",
    "Payroll run lifecycle transitions",
    ["status"],
)
RUN_LATENCY = Histogram(
    "idpayroll_run_calculate_seconds",
    "Time spent calculating a payroll run",
)

__all__ = ["PAYSLIPS_CALCULATED", "EMPLOYEES_SKIPPED", "RUN_TRANSITIONS", "RUN_LATENCY"]
