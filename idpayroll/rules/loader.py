"""Utilities for loading and validating rate documents."""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .. import config
from ..errors import RateTableError
from .tables import RateTable, RateTableLike
from .version import KNOWN_RULE_FILE_HASHES

logger = logging.getLogger(__name__)

RULES_FILE_PATTERN = "rates_*.yaml"


@dataclass(frozen=True)
class RuleDocument:
    """Container for a single rates file."""

    name: str
    path: Path
    sha256: str
    version: str
    effective_from: date
    table: RateTable


def _compute_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _resolve_dir(directory: Optional[Path]) -> str:
    return str(Path(directory).resolve() if directory is not None else config.rules_dir())


@lru_cache(maxsize=None)
def _load_documents(directory: str) -> Dict[str, RuleDocument]:
    base = Path(directory)
    if not base.is_dir():
        raise RateTableError(f"Rules directory not found: {base}")

    documents: Dict[str, RuleDocument] = {}
    for path in sorted(base.glob(RULES_FILE_PATTERN)):
        data = path.read_bytes()
        try:
            payload: Any = yaml.safe_load(data.decode("utf-8"))
        except yaml.YAMLError as exc:
            raise RateTableError(f"{path.name}: invalid YAML: {exc}") from exc
        try:
            table = RateTable.from_mapping(payload or {})
        except RateTableError as exc:
            raise RateTableError(f"{path.name}: {exc}") from exc
        if table.version in documents:
            raise RateTableError(
                f"{path.name}: version {table.version} already defined by {documents[table.version].name}"
            )
        documents[table.version] = RuleDocument(
            name=path.name,
            path=path,
            sha256=_compute_sha256(data),
            version=table.version,
            effective_from=table.effective_from,
            table=table,
        )
        logger.debug("Loaded rate table %s from %s", table.version, path.name)

    if not documents:
        raise RateTableError(f"No rate documents matching {RULES_FILE_PATTERN} in {base}")
    return documents


def load_rule_documents(directory: Optional[Path] = None) -> Dict[str, RuleDocument]:
    """Return all rate documents keyed by version."""

    return dict(_load_documents(_resolve_dir(directory)))


def available_versions(directory: Optional[Path] = None) -> Tuple[str, ...]:
    """Shipped versions ordered by the date they came into force."""

    documents = _load_documents(_resolve_dir(directory))
    ordered = sorted(documents.values(), key=lambda doc: doc.effective_from)
    return tuple(doc.version for doc in ordered)


def load_rate_table(version: Optional[str] = None, *, directory: Optional[Path] = None) -> RateTable:
    """Return the rate table for ``version`` (configured default when omitted)."""

    wanted = version or config.rates_version()
    documents = _load_documents(_resolve_dir(directory))
    if wanted not in documents:
        known = ", ".join(sorted(documents))
        raise RateTableError(f"Unknown rate table version '{wanted}' (known: {known})")
    return documents[wanted].table


def rate_table_for(moment: date | datetime | str, *, directory: Optional[Path] = None) -> RateTable:
    """Return the newest rate table already in force on ``moment``."""

    if isinstance(moment, datetime):
        moment = moment.date()
    elif isinstance(moment, str):
        moment = datetime.strptime(moment, "%Y-%m-%d").date()

    documents = _load_documents(_resolve_dir(directory))
    applicable: Optional[RuleDocument] = None
    for doc in sorted(documents.values(), key=lambda d: d.effective_from):
        if doc.effective_from <= moment:
            applicable = doc
        else:
            break
    if applicable is None:
        raise RateTableError(f"No rate table in force on {moment.isoformat()}")
    return applicable.table


def resolve_rates(rates: RateTableLike = None) -> RateTable:
    """Accept a table, a version string or ``None`` for the configured default."""

    if isinstance(rates, RateTable):
        return rates
    return load_rate_table(rates)


def clear_cache() -> None:
    _load_documents.cache_clear()


def validate_known_hashes(directory: Optional[Path] = None) -> List[str]:
    """Return a list of human readable mismatch messages."""

    documents = {doc.name: doc for doc in load_rule_documents(directory).values()}
    mismatches: List[str] = []
    expected_files = set(KNOWN_RULE_FILE_HASHES.keys())
    actual_files = set(documents.keys())

    missing_in_expected = actual_files - expected_files
    if missing_in_expected:
        mismatches.append("New rates files detected: " + ", ".join(sorted(missing_in_expected)))

    missing_on_disk = expected_files - actual_files
    if missing_on_disk:
        mismatches.append("Rates files missing from disk: " + ", ".join(sorted(missing_on_disk)))

    for name, expected_sha in KNOWN_RULE_FILE_HASHES.items():
        doc = documents.get(name)
        if not doc:
            continue
        if doc.sha256 != expected_sha:
            mismatches.append(f"Hash mismatch for {name}: expected {expected_sha}, found {doc.sha256}")

    return mismatches


__all__ = [
    "RuleDocument",
    "RULES_FILE_PATTERN",
    "load_rule_documents",
    "available_versions",
    "load_rate_table",
    "rate_table_for",
    "resolve_rates",
    "clear_cache",
    "validate_known_hashes",
]
