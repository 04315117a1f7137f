"""Logging helpers that redact personal identifiers before writing to logs."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Set

# e-mail addresses, dotted NPWP (12.345.678.9-012.345) and bare NIK/NPWP digit runs
PII_PATTERN = re.compile(
    r"([A-Za-z0-9_.+-]+@[A-Za-z0-9-]+\.[A-Za-z0-9.-]+)"
    r"|\b\d{2}\.\d{3}\.\d{3}\.\d-\d{3}\.\d{3}\b"
    r"|\b\d{15,16}\b"
)

REDACTED = "[REDACTED]"


class RedactingFilter(logging.Filter):
    """Mask e-mail addresses and NIK/NPWP numbers in the message and its arguments."""

    def _redact(self, value: object) -> object:
        return PII_PATTERN.sub(REDACTED, value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact(record.msg)
        if isinstance(record.args, dict):
            record.args = {key: self._redact(arg) for key, arg in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact(arg) for arg in record.args)
        return True


_filtered: Set[str] = set()


def install_redacting_filter(target_loggers: Optional[Iterable[str]] = None) -> None:
    """Attach one redacting filter to each named logger (``idpayroll`` by default)."""
    for name in target_loggers or ("idpayroll",):
        if name in _filtered:
            continue
        logging.getLogger(name).addFilter(RedactingFilter())
        _filtered.add(name)


def configure_logging(level: int = logging.INFO) -> None:
    """Basic console logging for the command line entry point."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # logger filters do not apply to records propagated from child loggers
    for handler in logging.getLogger().handlers:
        if not any(isinstance(existing, RedactingFilter) for existing in handler.filters):
            handler.addFilter(RedactingFilter())
    install_redacting_filter()
