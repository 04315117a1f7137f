"""Aggregations of payroll run payslips for PPh 21 and BPJS filings."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .money import ZERO, format_rupiah, month_name, sum_amounts
from .payroll_run import Employee, EmployeePayslip, PayrollRun, RunStatus


def _with_formatted(values: Dict[str, Decimal]) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(values)
    for key, value in values.items():
        payload[f"{key}_formatted"] = format_rupiah(value)
    return payload


def _period(month: int, year: int) -> Dict[str, Any]:
    return {"month": month, "year": year, "month_name": month_name(month)}


def _payslips(run: PayrollRun, payslips: Optional[Sequence[EmployeePayslip]]) -> Sequence[EmployeePayslip]:
    return run.payslips if payslips is None else payslips


def monthly_pph21_report(
    run: PayrollRun, payslips: Optional[Sequence[EmployeePayslip]] = None
) -> Dict[str, Any]:
    """Monthly PPh 21 withholding report (basis for SPT Masa PPh 21)."""
    slips = _payslips(run, payslips)
    total_gross = sum_amounts(slip.calculation.gross_salary for slip in slips)
    total_pph21 = sum_amounts(slip.calculation.pph21.monthly_tax for slip in slips)

    rows: List[Dict[str, Any]] = []
    for slip in slips:
        employee = slip.employee
        calc = slip.calculation
        row: Dict[str, Any] = {
            "employee_id": employee.id,
            "employee_number": employee.employee_number,
            "full_name": employee.full_name,
            "nik": employee.nik,
            "npwp": employee.npwp,
            "ptkp_status": calc.tax_status.value,
        }
        row.update(_with_formatted({"gross_salary": calc.gross_salary, "pph21": calc.pph21.monthly_tax}))
        rows.append(row)

    summary: Dict[str, Any] = {"total_employees": len(slips)}
    summary.update(_with_formatted({"total_gross": total_gross, "total_pph21": total_pph21}))
    return {
        "period": _period(run.period_month, run.period_year),
        "payroll_run": {
            "id": run.id,
            "status": run.status.value,
            "calculated_at": run.calculated_at,
        },
        "summary": summary,
        "employees": rows,
    }


def annual_pph21_summary(
    year: int, employees: Iterable[Employee], runs: Iterable[PayrollRun]
) -> Dict[str, Any]:
    """Per-employee PPh 21 and BPJS totals for a tax year."""
    year_runs = [run for run in runs if run.period_year == year]
    active = [employee for employee in employees if employee.active]

    rows: List[Dict[str, Any]] = []
    company_gross = ZERO
    company_pph21 = ZERO
    for employee in active:
        slips = [slip for run in year_runs for slip in run.payslips if slip.employee.id == employee.id]
        total_gross = sum_amounts(slip.calculation.gross_salary for slip in slips)
        total_pph21 = sum_amounts(slip.calculation.pph21.monthly_tax for slip in slips)
        total_bpjs = sum_amounts(slip.calculation.bpjs.employee.total for slip in slips)
        company_gross += total_gross
        company_pph21 += total_pph21

        row: Dict[str, Any] = {
            "employee": {
                "id": employee.id,
                "employee_number": employee.employee_number,
                "full_name": employee.full_name,
                "nik": employee.nik,
                "npwp": employee.npwp,
                "ptkp_status": getattr(employee.tax_status, "value", employee.tax_status),
            },
            "months_worked": len(slips),
        }
        row.update(
            _with_formatted(
                {
                    "total_gross": total_gross,
                    "total_pph21": total_pph21,
                    "total_bpjs_employee": total_bpjs,
                }
            )
        )
        rows.append(row)

    summary: Dict[str, Any] = {"total_employees": len(active)}
    summary.update(_with_formatted({"total_gross": company_gross, "total_pph21": company_pph21}))
    summary["payroll_runs_completed"] = sum(1 for run in year_runs if run.status == RunStatus.PAID)
    return {"year": year, "summary": summary, "employees": rows}


def monthly_bpjs_report(
    run: PayrollRun, payslips: Optional[Sequence[EmployeePayslip]] = None
) -> Dict[str, Any]:
    """Monthly BPJS Kesehatan and Ketenagakerjaan contribution report."""
    slips = _payslips(run, payslips)

    def employee_sum(program: str) -> Decimal:
        return sum_amounts(getattr(slip.calculation.bpjs.employee, program) for slip in slips)

    def employer_sum(program: str) -> Decimal:
        return sum_amounts(getattr(slip.calculation.bpjs.employer, program) for slip in slips)

    def shared(program: str) -> Dict[str, Any]:
        employee = employee_sum(program)
        employer = employer_sum(program)
        return _with_formatted({"employee": employee, "employer": employer, "total": employee + employer})

    kesehatan = shared("kesehatan")
    jht = shared("jht")
    jp = shared("jp")
    jkk = employer_sum("jkk")
    jkm = employer_sum("jkm")

    grand_employee = kesehatan["employee"] + jht["employee"] + jp["employee"]
    grand_employer = kesehatan["employer"] + jht["employer"] + jp["employer"] + jkk + jkm

    rows: List[Dict[str, Any]] = []
    for slip in slips:
        employee = slip.employee
        bpjs = slip.calculation.bpjs
        rows.append(
            {
                "employee_id": employee.id,
                "employee_number": employee.employee_number,
                "full_name": employee.full_name,
                "bpjs_kesehatan_number": employee.bpjs_kesehatan_number,
                "bpjs_ketenagakerjaan_number": employee.bpjs_ketenagakerjaan_number,
                "gross_salary": slip.calculation.gross_salary,
                "kesehatan": {"employee": bpjs.employee.kesehatan, "employer": bpjs.employer.kesehatan},
                "jht": {"employee": bpjs.employee.jht, "employer": bpjs.employer.jht},
                "jp": {"employee": bpjs.employee.jp, "employer": bpjs.employer.jp},
                "jkk": bpjs.employer.jkk,
                "jkm": bpjs.employer.jkm,
            }
        )

    return {
        "period": _period(run.period_month, run.period_year),
        "summary": {
            "total_employees": len(slips),
            "bpjs_kesehatan": kesehatan,
            "bpjs_ketenagakerjaan": {
                "jht": jht,
                "jp": jp,
                "jkk": _with_formatted({"employer": jkk}),
                "jkm": _with_formatted({"employer": jkm}),
            },
            "grand_total": _with_formatted({"employee": grand_employee, "employer": grand_employer}),
        },
        "employees": rows,
    }


def payroll_summary(year: int, runs: Iterable[PayrollRun]) -> Dict[str, Any]:
    """Month-by-month run totals for a year plus the annual totals."""
    year_runs = sorted((run for run in runs if run.period_year == year), key=lambda run: run.period_month)

    monthly: List[Dict[str, Any]] = []
    annual = {
        "total_gross": ZERO,
        "total_net": ZERO,
        "total_pph21": ZERO,
        "total_bpjs_employee": ZERO,
        "total_bpjs_employer": ZERO,
    }
    for run in year_runs:
        totals = run.totals.to_dict()
        row: Dict[str, Any] = {
            "month": run.period_month,
            "month_name": month_name(run.period_month),
            "status": run.status.value,
        }
        row.update(_with_formatted(totals))
        monthly.append(row)
        for key in annual:
            annual[key] += totals[key]

    return {"year": year, "monthly_data": monthly, "annual_totals": _with_formatted(annual)}


__all__ = [
    "monthly_pph21_report",
    "annual_pph21_summary",
    "monthly_bpjs_report",
    "payroll_summary",
]
