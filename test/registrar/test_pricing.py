"""Tests for price quotes, availability and the value calculation."""

from __future__ import annotations

import pytest

from ens_fakes import FakeRegistry
from registrar import metrics
from registrar.errors import AvailabilityQueryFailed, InvalidNameFormat, PriceQueryFailed
from registrar.models import PriceQuote
from registrar.pricing import authorised_value, check_availability, default_price_limit, quote_price


def _sample(name: str, labels: dict) -> float:
    value = metrics.REGISTRY.get_sample_value(name, labels)
    return value or 0.0


def test_quote_price_uses_canonical_label() -> None:
    registry = FakeRegistry([PriceQuote(base=1000, premium=5)])
    quote = quote_price("Alice12345.eth", 31_536_000, registry)
    assert quote == PriceQuote(base=1000, premium=5)
    assert quote.total == 1005
    assert registry.price_calls == [("alice12345", 31_536_000)]


def test_quote_is_idempotent_for_unchanged_state() -> None:
    registry = FakeRegistry([PriceQuote(base=1000)])
    first = quote_price("alice12345.eth", 31_536_000, registry)
    second = quote_price("alice12345.eth", 31_536_000, registry)
    assert first == second


def test_quote_price_wraps_lookup_errors() -> None:
    registry = FakeRegistry(price_error=ConnectionError("rpc down"))
    before = _sample("ens_quotes_total", {"status": "error"})
    with pytest.raises(PriceQueryFailed) as excinfo:
        quote_price("alice12345.eth", 31_536_000, registry)
    assert excinfo.value.retryable
    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert _sample("ens_quotes_total", {"status": "error"}) == before + 1


def test_quote_price_rejects_invalid_names_without_lookup() -> None:
    registry = FakeRegistry()
    with pytest.raises(InvalidNameFormat):
        quote_price("alice12345", 31_536_000, registry)
    assert registry.calls == 0


def test_check_availability() -> None:
    assert check_availability("alice12345.eth", FakeRegistry(available=True)) is True
    registry = FakeRegistry(available=False)
    assert check_availability("alice12345.eth", registry) is False
    assert registry.availability_calls == ["alice12345"]


def test_check_availability_wraps_lookup_errors() -> None:
    registry = FakeRegistry(availability_error=TimeoutError("slow"))
    with pytest.raises(AvailabilityQueryFailed):
        check_availability("alice12345.eth", registry)


def test_price_quote_rejects_negative_components() -> None:
    with pytest.raises(ValueError):
        PriceQuote(base=-1)


@pytest.mark.parametrize(
    "total, buffer_pct, limit, expected",
    [
        (1000, 10, None, 1100),
        (1000, 10, 1100, 1100),
        (1000, 10, 1050, 1050),
        (1000, 10, 1000, 1000),
        (1000, 0, None, 1000),
    ],
)
def test_authorised_value(total: int, buffer_pct: int, limit, expected: int) -> None:
    assert authorised_value(PriceQuote(base=total), buffer_pct, limit) == expected


def test_authorised_value_is_exact_for_large_prices() -> None:
    total = 10**30 + 7
    assert authorised_value(PriceQuote(base=total), 10) == total * 110 // 100


def test_default_price_limit_adds_ten_percent() -> None:
    assert default_price_limit(PriceQuote(base=1000)) == 1100
