"""Immutable rate tables built from the YAML rate documents."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..errors import RateTableError, UnknownTaxStatusError
from ..money import ZERO
from ..rounding import DEFAULT_MODE, is_supported
from ..tax_status import TaxStatus

ONE = Decimal("1")


class BPJSProgram(str, Enum):
    KESEHATAN = "kesehatan"  # health insurance
    JHT = "jht"  # old-age savings
    JP = "jp"  # pension
    JKK = "jkk"  # work-accident insurance
    JKM = "jkm"  # death insurance


# programs whose employee share is zero by regulation
EMPLOYER_ONLY_PROGRAMS = frozenset({BPJSProgram.JKK, BPJSProgram.JKM})


def _dec(value: Any, where: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise RateTableError(f"{where}: expected a number, got {value!r}")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise RateTableError(f"{where}: not a number: {value!r}") from exc


def _optional_dec(value: Any, where: str) -> Optional[Decimal]:
    if value is None:
        return None
    return _dec(value, where)


def _rate(value: Any, where: str) -> Decimal:
    rate = _dec(value, where)
    if rate < ZERO or rate > ONE:
        raise RateTableError(f"{where}: rate {rate} outside [0, 1]")
    return rate


def _parse_date(value: Any, where: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError as exc:
        raise RateTableError(f"{where}: invalid date {value!r}") from exc


@dataclass(frozen=True)
class TaxBracket:
    """Marginal rate applying up to ``limit``; ``None`` marks the open top bracket."""

    limit: Optional[Decimal]
    rate: Decimal

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str = "bracket") -> "TaxBracket":
        if "rate" not in data:
            raise RateTableError(f"{where}: missing 'rate'")
        return cls(
            limit=_optional_dec(data.get("limit"), f"{where}.limit"),
            rate=_rate(data["rate"], f"{where}.rate"),
        )


@dataclass(frozen=True)
class ProgramRate:
    program: BPJSProgram
    employee_rate: Decimal
    employer_rate: Decimal
    cap: Optional[Decimal] = None

    def base(self, gross: Decimal) -> Decimal:
        """Contribution base: gross salary limited to the monthly cap, if any."""
        if self.cap is None:
            return gross
        return min(gross, self.cap)

    @classmethod
    def from_dict(cls, program: BPJSProgram, data: Mapping[str, Any]) -> "ProgramRate":
        where = f"bpjs.{program.value}"
        employee_rate = _rate(data.get("employee_rate", 0), f"{where}.employee_rate")
        if program in EMPLOYER_ONLY_PROGRAMS and employee_rate != ZERO:
            raise RateTableError(f"{where}: employee share must be 0, got {employee_rate}")
        if "employer_rate" not in data:
            raise RateTableError(f"{where}: missing 'employer_rate'")
        cap = _optional_dec(data.get("cap"), f"{where}.cap")
        if cap is not None and cap <= ZERO:
            raise RateTableError(f"{where}: cap must be positive, got {cap}")
        return cls(
            program=program,
            employee_rate=employee_rate,
            employer_rate=_rate(data["employer_rate"], f"{where}.employer_rate"),
            cap=cap,
        )


def validate_brackets(brackets: Tuple[TaxBracket, ...]) -> None:
    """Brackets must be contiguous and exhaustive: increasing limits, open top."""
    if not brackets:
        raise RateTableError("brackets: at least one bracket is required")
    previous = ZERO
    for index, bracket in enumerate(brackets):
        last = index == len(brackets) - 1
        if bracket.limit is None:
            if not last:
                raise RateTableError(f"brackets[{index}]: only the final bracket may be unbounded")
            continue
        if last:
            raise RateTableError("brackets: the final bracket must be unbounded (limit: null)")
        if bracket.limit <= previous:
            raise RateTableError(
                f"brackets[{index}]: limit {bracket.limit} must exceed previous limit {previous}"
            )
        previous = bracket.limit


@dataclass(frozen=True, eq=False)
class RateTable:
    """One published version of PTKP, PPh 21 brackets and BPJS rates."""

    version: str
    effective_from: date
    ptkp: Mapping[TaxStatus, Decimal]
    brackets: Tuple[TaxBracket, ...]
    bpjs: Mapping[BPJSProgram, ProgramRate]
    jkk_risk_groups: Mapping[str, Decimal]
    occupational_expense_rate: Decimal
    occupational_expense_cap: Decimal
    rounding: str = DEFAULT_MODE
    source_url: Optional[str] = None
    last_reviewed: Optional[str] = None
    notes: Tuple[str, ...] = field(default_factory=tuple)

    def exemption(self, status: TaxStatus) -> Decimal:
        return self.ptkp[status]

    def program(self, program: BPJSProgram) -> ProgramRate:
        return self.bpjs[program]

    @property
    def jkk_default_rate(self) -> Decimal:
        return self.bpjs[BPJSProgram.JKK].employer_rate

    def jkk_rate_for(self, group: str) -> Decimal:
        """Employer JKK rate for a named company risk group."""
        key = str(group).strip().lower()
        if key not in self.jkk_risk_groups:
            known = ", ".join(sorted(self.jkk_risk_groups))
            raise RateTableError(f"Unknown JKK risk group '{group}' (known: {known})")
        return self.jkk_risk_groups[key]

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "RateTable":
        if not isinstance(payload, Mapping):
            raise RateTableError("rate document must be a mapping")
        version = str(payload.get("version") or "").strip()
        if not version:
            raise RateTableError("rate document is missing 'version'")

        rounding = str(payload.get("rounding") or DEFAULT_MODE)
        if not is_supported(rounding):
            raise RateTableError(f"Unsupported rounding mode '{rounding}'")

        ptkp: Dict[TaxStatus, Decimal] = {}
        for code, amount in (payload.get("ptkp") or {}).items():
            try:
                status = TaxStatus.parse(str(code))
            except UnknownTaxStatusError as exc:
                raise RateTableError(f"ptkp: {exc}") from exc
            ptkp[status] = _dec(amount, f"ptkp.{code}")
        missing = [status.value for status in TaxStatus if status not in ptkp]
        if missing:
            raise RateTableError(f"ptkp: missing amounts for {', '.join(missing)}")

        brackets = tuple(
            TaxBracket.from_dict(entry, f"brackets[{index}]")
            for index, entry in enumerate(payload.get("brackets") or [])
        )
        validate_brackets(brackets)

        bpjs_raw = payload.get("bpjs") or {}
        bpjs: Dict[BPJSProgram, ProgramRate] = {}
        for program in BPJSProgram:
            if program.value not in bpjs_raw:
                raise RateTableError(f"bpjs: missing program '{program.value}'")
            bpjs[program] = ProgramRate.from_dict(program, bpjs_raw[program.value])

        risk_groups = {
            str(name).lower(): _rate(rate, f"bpjs.jkk.risk_groups.{name}")
            for name, rate in (bpjs_raw[BPJSProgram.JKK.value].get("risk_groups") or {}).items()
        }

        occupational = payload.get("occupational_expense") or {}
        if "rate" not in occupational or "annual_cap" not in occupational:
            raise RateTableError("occupational_expense requires 'rate' and 'annual_cap'")

        return cls(
            version=version,
            effective_from=_parse_date(payload.get("effective_from"), "effective_from"),
            ptkp=MappingProxyType(ptkp),
            brackets=brackets,
            bpjs=MappingProxyType(bpjs),
            jkk_risk_groups=MappingProxyType(risk_groups),
            occupational_expense_rate=_rate(occupational["rate"], "occupational_expense.rate"),
            occupational_expense_cap=_dec(occupational["annual_cap"], "occupational_expense.annual_cap"),
            rounding=rounding,
            source_url=payload.get("source_url"),
            last_reviewed=None if payload.get("last_reviewed") is None else str(payload["last_reviewed"]),
            notes=tuple(str(note) for note in payload.get("notes") or ()),
        )


RateTableLike = Union[RateTable, str, None]

__all__ = [
    "BPJSProgram",
    "EMPLOYER_ONLY_PROGRAMS",
    "TaxBracket",
    "ProgramRate",
    "RateTable",
    "RateTableLike",
    "validate_brackets",
]
