"""Repository-wide pytest configuration.

This file keeps test discovery deterministic by pinning the import path and
clearing the environment variables the registrar reads, so a developer's
shell (for example a real ``PRIVATE_KEY``) never leaks into a test run.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent

# Make repository modules importable regardless of the invocation directory.
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("PYTHONPATH", str(ROOT))

_REGISTRAR_ENV = (
    "ENS_NETWORK",
    "NETWORK",
    "ENS_RPC_URL",
    "RPC_URL",
    "ENS_PRIVATE_KEY",
    "PRIVATE_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_registrar_env(monkeypatch: pytest.MonkeyPatch):
    """Drop registrar settings and the cached API service around each test."""

    for key in _REGISTRAR_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENS_AGENT_PROFILE", "off")

    module = sys.modules.get("routes.ens")
    if module is not None:
        module._default_service.cache_clear()
    yield
    module = sys.modules.get("routes.ens")
    if module is not None:
        module._default_service.cache_clear()
