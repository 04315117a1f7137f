"""Canonical versioning for published rate documents."""
from __future__ import annotations

from typing import Dict

# Update this version whenever any document in ``idpayroll/rules`` changes.
RULES_VERSION: str = "2025-03-01.0"

# Expected SHA-256 digests for each rates file; tests keep these in sync with the YAML.
KNOWN_RULE_FILE_HASHES: Dict[str, str] = {
    "rates_2024.yaml": "025fde4b7e5b514cac5f338afd229696544d023377da117eed77536154c95e5f",
    "rates_2025.yaml": "09ccbf21db2fccb905a3296bdfe17f7ff6533d6e67e4bef8748b8822b39f8a2e",
}

__all__ = ["RULES_VERSION", "KNOWN_RULE_FILE_HASHES"]
