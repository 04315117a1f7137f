"""Monthly payroll run: applies the payslip composer to every active employee.

The run owns only its own lifecycle (draft -> calculated -> approved -> paid).
Employees, salary records and expenses are passed in as immutable records and
the run returns new records rather than mutating its inputs; persisting them
is the caller's job.
"""
from __future__ import annotations

import calendar
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from . import config, metrics
from .engine import PayslipCalculation, SalaryComponents, calculate_payslip
from .errors import PayrollRunError, PayrollRunStateError
from .money import ZERO, NumberLike, month_name, require_non_negative, sum_amounts
from .rules import RateTable, RateTableLike, rate_table_for, resolve_rates
from .tax_status import TaxStatus

logger = logging.getLogger(__name__)

MIN_PERIOD_YEAR = 2020
MAX_PERIOD_YEAR = 2100
ACTIVE = "active"


class RunStatus(str, Enum):
    DRAFT = "draft"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REIMBURSED = "reimbursed"


@dataclass(frozen=True)
class Employee:
    id: str
    full_name: str
    tax_status: Union[TaxStatus, str] = TaxStatus.TK_0
    status: str = ACTIVE
    employee_number: Optional[str] = None
    nik: Optional[str] = None
    npwp: Optional[str] = None
    bpjs_kesehatan_number: Optional[str] = None
    bpjs_ketenagakerjaan_number: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.status == ACTIVE


@dataclass(frozen=True)
class SalaryRecord:
    employee_id: str
    effective_date: date
    components: SalaryComponents


@dataclass(frozen=True)
class Expense:
    id: str
    employee_id: str
    amount: Decimal
    status: ExpenseStatus = ExpenseStatus.PENDING
    payslip_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", require_non_negative(self.amount, "expense amount"))
        object.__setattr__(self, "status", ExpenseStatus(self.status))


@dataclass(frozen=True)
class EmployeePayslip:
    id: str
    run_id: str
    employee: Employee
    calculation: PayslipCalculation
    expense_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload = self.calculation.to_dict()
        payload.update(
            {
                "id": self.id,
                "run_id": self.run_id,
                "employee_id": self.employee.id,
                "tax_status": self.calculation.tax_status.value,
                "expense_ids": list(self.expense_ids),
            }
        )
        return payload


@dataclass(frozen=True)
class RunTotals:
    gross: Decimal = ZERO
    deductions: Decimal = ZERO
    net: Decimal = ZERO
    pph21: Decimal = ZERO
    bpjs_employee: Decimal = ZERO
    bpjs_employer: Decimal = ZERO

    @classmethod
    def from_payslips(cls, payslips: Iterable[EmployeePayslip]) -> "RunTotals":
        totals = cls()
        for payslip in payslips:
            calc = payslip.calculation
            totals = cls(
                gross=totals.gross + calc.gross_salary,
                deductions=totals.deductions + calc.total_deductions,
                net=totals.net + calc.net_salary,
                pph21=totals.pph21 + calc.pph21.monthly_tax,
                bpjs_employee=totals.bpjs_employee + calc.bpjs.employee.total,
                bpjs_employer=totals.bpjs_employer + calc.bpjs.employer.total,
            )
        return totals

    def to_dict(self) -> Dict[str, Decimal]:
        return {
            "total_gross": self.gross,
            "total_deductions": self.deductions,
            "total_net": self.net,
            "total_pph21": self.pph21,
            "total_bpjs_employee": self.bpjs_employee,
            "total_bpjs_employer": self.bpjs_employer,
        }


@dataclass(frozen=True)
class PayrollRunResult:
    payslips: Tuple[EmployeePayslip, ...]
    reimbursed_expenses: Tuple[Expense, ...]
    totals: RunTotals
    processed: Tuple[str, ...]
    skipped: Tuple[str, ...]
    rates_version: str

    @property
    def employees_processed(self) -> int:
        return len(self.processed)


def select_salary_record(
    records: Iterable[SalaryRecord], employee_id: str, as_of: date
) -> Optional[SalaryRecord]:
    """Latest salary record for the employee already effective on ``as_of``."""
    best: Optional[SalaryRecord] = None
    for record in records:
        if record.employee_id != employee_id or record.effective_date > as_of:
            continue
        if best is None or record.effective_date > best.effective_date:
            best = record
    return best


@dataclass
class PayrollRun:
    period_month: int
    period_year: int
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: RunStatus = RunStatus.DRAFT
    totals: RunTotals = field(default_factory=RunTotals)
    payslips: Tuple[EmployeePayslip, ...] = ()
    calculated_at: Optional[datetime] = None
    calculated_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None

    def __post_init__(self) -> None:
        if not 1 <= int(self.period_month) <= 12:
            raise PayrollRunError(f"period_month must be 1-12, got {self.period_month}")
        if not MIN_PERIOD_YEAR <= int(self.period_year) <= MAX_PERIOD_YEAR:
            raise PayrollRunError(
                f"period_year must be {MIN_PERIOD_YEAR}-{MAX_PERIOD_YEAR}, got {self.period_year}"
            )

    @property
    def period_start(self) -> date:
        return date(self.period_year, self.period_month, 1)

    @property
    def period_end(self) -> date:
        last_day = calendar.monthrange(self.period_year, self.period_month)[1]
        return date(self.period_year, self.period_month, last_day)

    @property
    def label(self) -> str:
        return f"{month_name(self.period_month)} {self.period_year}"

    def _require(self, expected: RunStatus, action: str) -> None:
        if self.status != expected:
            raise PayrollRunStateError(
                f"Cannot {action} payroll run {self.label}: status is {self.status.value}, "
                f"expected {expected.value}"
            )

    def calculate(
        self,
        employees: Sequence[Employee],
        salary_records: Iterable[SalaryRecord],
        expenses: Iterable[Expense] = (),
        *,
        jkk_rate: Optional[NumberLike] = None,
        rates: RateTableLike = None,
        lenient_tax_status: Optional[bool] = None,
        calculated_by: Optional[str] = None,
    ) -> PayrollRunResult:
        """Compute payslips for all active employees and move the run to ``calculated``.

        Approved expenses are paid out as reimbursements and returned marked
        ``reimbursed``. Employees without an effective salary record are skipped.
        """
        self._require(RunStatus.DRAFT, "calculate")
        table = self._rates_for_period(rates)
        if jkk_rate is None:
            jkk_rate = config.default_jkk_rate()
        lenient = config.lenient_tax_status() if lenient_tax_status is None else lenient_tax_status

        records = list(salary_records)
        approved_by_employee: Dict[str, List[Expense]] = {}
        for expense in expenses:
            if expense.status == ExpenseStatus.APPROVED:
                approved_by_employee.setdefault(expense.employee_id, []).append(expense)

        payslips: List[EmployeePayslip] = []
        reimbursed: List[Expense] = []
        processed: List[str] = []
        skipped: List[str] = []

        with metrics.RUN_LATENCY.time():
            for employee in employees:
                if not employee.active:
                    continue
                record = select_salary_record(records, employee.id, self.period_end)
                if record is None:
                    logger.warning("No salary record for employee %s in %s, skipping", employee.id, self.label)
                    skipped.append(employee.id)
                    continue

                employee_expenses = approved_by_employee.get(employee.id, [])
                reimbursement = sum_amounts(expense.amount for expense in employee_expenses)
                components = record.components.with_reimbursements(reimbursement)
                status = TaxStatus.parse(employee.tax_status, strict=not lenient)

                calculation = calculate_payslip(components, status, jkk_rate, rates=table)
                payslip = EmployeePayslip(
                    id=str(uuid.uuid4()),
                    run_id=self.id,
                    employee=employee,
                    calculation=calculation,
                    expense_ids=tuple(expense.id for expense in employee_expenses),
                )
                payslips.append(payslip)
                reimbursed.extend(
                    replace(expense, status=ExpenseStatus.REIMBURSED, payslip_id=payslip.id)
                    for expense in employee_expenses
                )
                processed.append(employee.id)

        # counted only once every employee went through
        metrics.PAYSLIPS_CALCULATED.inc(len(payslips))
        metrics.EMPLOYEES_SKIPPED.inc(len(skipped))
        self.payslips = tuple(payslips)
        self.totals = RunTotals.from_payslips(payslips)
        self.status = RunStatus.CALCULATED
        self.calculated_at = datetime.now(timezone.utc)
        self.calculated_by = calculated_by
        metrics.RUN_TRANSITIONS.labels(status=self.status.value).inc()
        logger.info(
            "Payroll run %s calculated: %d payslips, %d skipped, gross=%s pph21=%s (rates %s)",
            self.label,
            len(payslips),
            len(skipped),
            self.totals.gross,
            self.totals.pph21,
            table.version,
        )
        return PayrollRunResult(
            payslips=self.payslips,
            reimbursed_expenses=tuple(reimbursed),
            totals=self.totals,
            processed=tuple(processed),
            skipped=tuple(skipped),
            rates_version=table.version,
        )

    def approve(self, approved_by: Optional[str] = None) -> None:
        self._require(RunStatus.CALCULATED, "approve")
        self.status = RunStatus.APPROVED
        self.approved_at = datetime.now(timezone.utc)
        self.approved_by = approved_by
        metrics.RUN_TRANSITIONS.labels(status=self.status.value).inc()
        logger.info("Payroll run %s approved", self.label)

    def pay(self, paid_by: Optional[str] = None) -> None:
        self._require(RunStatus.APPROVED, "mark as paid")
        self.status = RunStatus.PAID
        self.paid_at = datetime.now(timezone.utc)
        self.paid_by = paid_by
        metrics.RUN_TRANSITIONS.labels(status=self.status.value).inc()
        logger.info("Payroll run %s paid", self.label)

    def _rates_for_period(self, rates: RateTableLike) -> RateTable:
        if rates is None:
            return rate_table_for(self.period_start)
        return resolve_rates(rates)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "period_month": self.period_month,
            "period_year": self.period_year,
            "status": self.status.value,
            "notes": self.notes,
            "calculated_at": self.calculated_at,
            "approved_at": self.approved_at,
            "paid_at": self.paid_at,
        }
        payload.update(self.totals.to_dict())
        return payload


__all__ = [
    "RunStatus",
    "ExpenseStatus",
    "Employee",
    "SalaryRecord",
    "Expense",
    "EmployeePayslip",
    "RunTotals",
    "PayrollRunResult",
    "PayrollRun",
    "select_salary_record",
]
