"""Prometheus counters for registrar activity."""

from __future__ import annotations

from typing import Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

REGISTRY = CollectorRegistry()

REGISTRATIONS_TOTAL = Counter(
    "ens_registrations_total",
    "Registration runs by outcome",
    labelnames=("outcome",),
    registry=REGISTRY,
)

QUOTES_TOTAL = Counter(
    "ens_quotes_total",
    "Rent price lookups by status",
    labelnames=("status",),
    registry=REGISTRY,
)


def render() -> Tuple[bytes, str]:
    """Return the exposition payload and its content type."""

    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = ["QUOTES_TOTAL", "REGISTRATIONS_TOTAL", "REGISTRY", "render"]
