"""Versioned PTKP, PPh 21 bracket and BPJS rate tables."""

from .loader import (
    RuleDocument,
    available_versions,
    clear_cache,
    load_rate_table,
    load_rule_documents,
    rate_table_for,
    resolve_rates,
    validate_known_hashes,
)
from .tables import (
    EMPLOYER_ONLY_PROGRAMS,
    BPJSProgram,
    ProgramRate,
    RateTable,
    RateTableLike,
    TaxBracket,
    validate_brackets,
)
from .version import KNOWN_RULE_FILE_HASHES, RULES_VERSION

__all__ = [
    "RuleDocument",
    "available_versions",
    "clear_cache",
    "load_rate_table",
    "load_rule_documents",
    "rate_table_for",
    "resolve_rates",
    "validate_known_hashes",
    "EMPLOYER_ONLY_PROGRAMS",
    "BPJSProgram",
    "ProgramRate",
    "RateTable",
    "RateTableLike",
    "TaxBracket",
    "validate_brackets",
    "KNOWN_RULE_FILE_HASHES",
    "RULES_VERSION",
]
