"""Test configuration to ensure repo modules and shared fakes are importable."""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
FAKES = Path(__file__).resolve().parent / "registrar"
for entry in (ROOT, FAKES):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

os.environ.setdefault("PYTHONPATH", str(ROOT))
