from __future__ import annotations

import pytest

from idpayroll.rules import clear_cache

_ENV_VARS = (
    "IDPAYROLL_RATES_VERSION",
    "IDPAYROLL_RULES_DIR",
    "IDPAYROLL_DEFAULT_JKK_RATE",
    "IDPAYROLL_LENIENT_TAX_STATUS",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    clear_cache()
