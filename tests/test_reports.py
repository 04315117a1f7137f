from datetime import date

import pytest

from idpayroll.engine import SalaryComponents
from idpayroll.payroll_run import Employee, PayrollRun, SalaryRecord
from idpayroll.reports import (
    annual_pph21_summary,
    monthly_bpjs_report,
    monthly_pph21_report,
    payroll_summary,
)


@pytest.fixture
def employees():
    return [
        Employee(
            "emp-a",
            "Ani Wijaya",
            "TK/0",
            employee_number="E001",
            npwp="12.345.678.9-012.345",
            bpjs_kesehatan_number="0001234567890",
        ),
        Employee("emp-b", "Budi Santoso", "K/2", employee_number="E002"),
        Employee("emp-c", "Citra Lestari", "TK/1", status="terminated"),
    ]


@pytest.fixture
def records():
    return [
        SalaryRecord("emp-a", date(2024, 1, 1), SalaryComponents(base_salary=10_000_000)),
        SalaryRecord("emp-b", date(2024, 1, 1), SalaryComponents(base_salary=20_000_000)),
    ]


@pytest.fixture
def june(employees, records):
    run = PayrollRun(6, 2024)
    run.calculate(employees, records)
    run.approve()
    run.pay()
    return run


@pytest.fixture
def july(employees, records):
    run = PayrollRun(7, 2024)
    run.calculate(employees, records)
    return run


def test_monthly_pph21_report(june):
    report = monthly_pph21_report(june)

    assert report["period"] == {"month": 6, "year": 2024, "month_name": "June"}
    assert report["payroll_run"]["id"] == june.id
    assert report["payroll_run"]["status"] == "paid"
    summary = report["summary"]
    assert summary["total_employees"] == 2
    assert summary["total_gross"] == 30_000_000
    assert summary["total_gross_formatted"] == "Rp 30.000.000"
    assert summary["total_pph21"] == 1_719_131
    assert summary["total_pph21_formatted"] == "Rp 1.719.131"

    first = report["employees"][0]
    assert first["employee_number"] == "E001"
    assert first["npwp"] == "12.345.678.9-012.345"
    assert first["ptkp_status"] == "TK/0"
    assert first["pph21"] == 230_220
    assert first["pph21_formatted"] == "Rp 230.220"


def test_monthly_pph21_report_with_explicit_payslips(june):
    report = monthly_pph21_report(june, payslips=june.payslips[:1])

    assert report["summary"]["total_employees"] == 1
    assert report["summary"]["total_pph21"] == 230_220


def test_monthly_bpjs_report(june):
    summary = monthly_bpjs_report(june)["summary"]

    kesehatan = summary["bpjs_kesehatan"]
    assert kesehatan["employee"] == 220_000
    assert kesehatan["employer"] == 880_000
    assert kesehatan["total"] == 1_100_000
    assert kesehatan["total_formatted"] == "Rp 1.100.000"

    ketenagakerjaan = summary["bpjs_ketenagakerjaan"]
    assert ketenagakerjaan["jht"]["employee"] == 600_000
    assert ketenagakerjaan["jht"]["employer"] == 1_110_000
    assert ketenagakerjaan["jp"]["employee"] == 191_192
    assert ketenagakerjaan["jp"]["employer"] == 382_384
    assert ketenagakerjaan["jkk"]["employer"] == 72_000
    assert ketenagakerjaan["jkm"]["employer"] == 90_000

    assert summary["grand_total"]["employee"] == 1_011_192
    assert summary["grand_total"]["employer"] == 2_534_384


def test_monthly_bpjs_report_rows(june):
    rows = monthly_bpjs_report(june)["employees"]

    assert [row["employee_id"] for row in rows] == ["emp-a", "emp-b"]
    assert rows[0]["bpjs_kesehatan_number"] == "0001234567890"
    assert rows[1]["kesehatan"] == {"employee": 120_000, "employer": 480_000}
    assert rows[1]["jkk"] == 48_000


def test_annual_pph21_summary(employees, june, july):
    stale = PayrollRun(12, 2023)
    report = annual_pph21_summary(2024, employees, [june, july, stale])

    assert report["year"] == 2024
    summary = report["summary"]
    assert summary["total_employees"] == 2
    assert summary["payroll_runs_completed"] == 1
    assert summary["total_gross"] == 60_000_000
    assert summary["total_pph21"] == 3_438_262

    ani = report["employees"][0]
    assert ani["employee"]["ptkp_status"] == "TK/0"
    assert ani["months_worked"] == 2
    assert ani["total_gross"] == 20_000_000
    assert ani["total_pph21"] == 460_440
    assert ani["total_bpjs_employee"] == 791_192
    assert ani["total_bpjs_employee_formatted"] == "Rp 791.192"


def test_annual_summary_for_year_without_runs(employees, june):
    report = annual_pph21_summary(2025, employees, [june])

    assert report["summary"]["payroll_runs_completed"] == 0
    assert all(row["months_worked"] == 0 for row in report["employees"])
    assert report["summary"]["total_gross_formatted"] == "Rp 0"


def test_payroll_summary(june, july):
    report = payroll_summary(2024, [july, june])

    assert [row["month"] for row in report["monthly_data"]] == [6, 7]
    assert report["monthly_data"][0]["month_name"] == "June"
    assert report["monthly_data"][0]["status"] == "paid"
    assert report["monthly_data"][1]["status"] == "calculated"
    assert report["monthly_data"][0]["total_net"] == 27_269_677

    annual = report["annual_totals"]
    assert annual["total_gross"] == 60_000_000
    assert annual["total_net"] == 54_539_354
    assert annual["total_pph21"] == 3_438_262
    assert annual["total_bpjs_employee"] == 2_022_384
    assert annual["total_bpjs_employer"] == 5_068_768
    assert annual["total_gross_formatted"] == "Rp 60.000.000"


def test_report_totals_equal_payslip_sums(june):
    report = monthly_pph21_report(june)

    assert report["summary"]["total_gross"] == sum(row["gross_salary"] for row in report["employees"])
    assert report["summary"]["total_pph21"] == sum(row["pph21"] for row in report["employees"])
