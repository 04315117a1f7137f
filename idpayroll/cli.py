from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from . import config
from .engine import PayslipCalculation, calculate_payslip
from .errors import PayrollError
from .logging_utils import configure_logging
from .money import format_rupiah
from .rules import RULES_VERSION, available_versions, load_rate_table
from .schemas import PayslipRequest

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2

# flag name -> request field
_AMOUNT_FLAGS = {
    "base": "base_salary",
    "transport": "transport_allowance",
    "meal": "meal_allowance",
    "communication": "communication_allowance",
    "position": "position_allowance",
    "other": "other_allowance",
    "bonus": "bonus",
    "overtime": "overtime",
    "reimbursements": "reimbursements",
    "other_deductions": "other_deductions",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idpayroll",
        description="Indonesian payroll calculator: BPJS contributions and PPh 21 withholding.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    payslip = sub.add_parser("payslip", help="Compute a monthly payslip.")
    payslip.add_argument("--input", "-i", metavar="FILE", help="JSON or YAML document with payslip fields.")
    for flag, field_name in _AMOUNT_FLAGS.items():
        payslip.add_argument(
            f"--{flag.replace('_', '-')}",
            dest=field_name,
            metavar="IDR",
            help=f"{field_name.replace('_', ' ')} in whole Rupiah",
        )
    payslip.add_argument("--status", dest="tax_status", metavar="PTKP", help="Tax status, e.g. TK/0 or K/1.")
    payslip.add_argument("--jkk-rate", dest="jkk_rate", metavar="RATE", help="Employer JKK rate, e.g. 0.0054.")
    payslip.add_argument("--rates-version", dest="rates_version", metavar="VERSION", help="Rate table version.")
    payslip.add_argument("--json", action="store_true", help="Print the full breakdown as JSON.")

    sub.add_parser("rates", help="List the shipped rate table versions.")
    return parser


def _load_document(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: invalid YAML: {exc}") from exc
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of payslip fields")
    return data


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _render_text(result: PayslipCalculation) -> List[str]:
    bpjs = result.bpjs
    pph21 = result.pph21
    lines = [
        f"Tax status        {pph21.tax_status.value} (rates {pph21.rates_version})",
        f"Gross salary      {format_rupiah(result.gross_salary)}",
        "BPJS employee",
        f"  Kesehatan       {format_rupiah(bpjs.employee.kesehatan)}",
        f"  JHT             {format_rupiah(bpjs.employee.jht)}",
        f"  JP              {format_rupiah(bpjs.employee.jp)}",
        f"  Total           {format_rupiah(bpjs.employee.total)}",
        "BPJS employer",
        f"  Kesehatan       {format_rupiah(bpjs.employer.kesehatan)}",
        f"  JHT             {format_rupiah(bpjs.employer.jht)}",
        f"  JP              {format_rupiah(bpjs.employer.jp)}",
        f"  JKK             {format_rupiah(bpjs.employer.jkk)}",
        f"  JKM             {format_rupiah(bpjs.employer.jkm)}",
        f"  Total           {format_rupiah(bpjs.employer.total)}",
        f"PKP (annual)      {format_rupiah(pph21.taxable_income)}",
        f"PPh 21 (monthly)  {format_rupiah(pph21.monthly_tax)}",
        f"Other deductions  {format_rupiah(result.other_deductions)}",
        f"Total deductions  {format_rupiah(result.total_deductions)}",
        f"Net salary        {format_rupiah(result.net_salary)}",
    ]
    return lines


def _payslip(args: argparse.Namespace) -> int:
    data: Dict[str, Any] = {}
    if args.input:
        data.update(_load_document(Path(args.input)))
    for field_name in list(_AMOUNT_FLAGS.values()) + ["tax_status", "jkk_rate", "rates_version"]:
        value = getattr(args, field_name, None)
        if value is not None:
            data[field_name] = value

    request = PayslipRequest.model_validate(data)
    table = load_rate_table(request.rates_version)
    result = calculate_payslip(
        request.to_components(),
        request.tax_status,
        config.default_jkk_rate() if request.jkk_rate is None else request.jkk_rate,
        request.other_deductions,
        rates=table,
    )
    if args.json:
        print(json.dumps(result.to_dict(), default=_json_default, indent=2))
    else:
        print("\n".join(_render_text(result)))
    return 0


def _rates(_: argparse.Namespace) -> int:
    print(f"rules {RULES_VERSION}")
    for version in available_versions():
        table = load_rate_table(version)
        print(f"{table.version}\teffective {table.effective_from.isoformat()}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    handlers = {"payslip": _payslip, "rates": _rates}
    try:
        return handlers[args.command](args)
    except ValidationError as exc:
        print(f"invalid input:\n{exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except (PayrollError, ValueError, OSError) as exc:
        logger.debug("payslip command failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
