"""Test configuration for ensuring the in-repo package is importable."""
from __future__ import annotations

import sys
from pathlib import Path

# Allow running the suite from a checkout without installing the package.
ROOT = Path(__file__).resolve().parent

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
