"""Rent price and availability lookups against the controller."""

from __future__ import annotations

import logging

from .chain import RegistryReader
from .errors import AvailabilityQueryFailed, PriceQueryFailed
from .metrics import QUOTES_TOTAL
from .models import PriceQuote
from .names import label_of, normalize_name

logger = logging.getLogger(__name__)


def quote_price(name: str, duration: int, reader: RegistryReader) -> PriceQuote:
    """Quote ``name`` for ``duration`` seconds. Read-only, never retried."""

    label = label_of(normalize_name(name))
    try:
        quote = reader.rent_price(label, duration)
    except Exception as exc:
        QUOTES_TOTAL.labels(status="error").inc()
        raise PriceQueryFailed(f"Price lookup failed for {label}.eth: {exc}") from exc
    QUOTES_TOTAL.labels(status="premium" if quote.premium > 0 else "ok").inc()
    logger.debug(
        "price quoted",
        extra={"event": "price_quoted", "data": {"name": f"{label}.eth", "duration": duration, **quote.to_dict()}},
    )
    return quote


def check_availability(name: str, reader: RegistryReader) -> bool:
    label = label_of(normalize_name(name))
    try:
        return bool(reader.is_available(label))
    except Exception as exc:
        raise AvailabilityQueryFailed(f"Availability lookup failed for {label}.eth: {exc}") from exc


def authorised_value(quote: PriceQuote, buffer_pct: int, max_price_wei: int | None = None) -> int:
    """Wei to attach to ``register``: total plus buffer, capped at the limit.

    Never below ``quote.total``; the controller refunds any excess.
    """

    value = quote.total * (100 + buffer_pct) // 100
    if max_price_wei is not None:
        value = max(quote.total, min(value, max_price_wei))
    return value


def default_price_limit(quote: PriceQuote, buffer_pct: int = 10) -> int:
    """Limit used when a transport does not receive one: first quote plus buffer."""

    return quote.total * (100 + buffer_pct) // 100


__all__ = ["authorised_value", "check_availability", "default_price_limit", "quote_price"]
