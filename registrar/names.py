"""Canonicalisation of registrable ``.eth`` names."""

from __future__ import annotations

import math

from ens.exceptions import InvalidName
from ens.utils import normalize_name as ensip15_normalize

from .errors import InvalidDuration, InvalidNameFormat
from .models import SECONDS_PER_YEAR

ETH_SUFFIX = ".eth"


def normalize_name(raw: str) -> str:
    """Return the canonical form of ``raw`` or raise :class:`InvalidNameFormat`.

    The suffix is required, never appended: a caller who typed ``alice`` most
    likely meant something other than ``alice.eth``.
    """

    if not isinstance(raw, str) or not raw.strip():
        raise InvalidNameFormat("Name must not be empty")
    candidate = raw.strip()
    try:
        canonical = ensip15_normalize(candidate)
    except InvalidName as exc:
        raise InvalidNameFormat(f"Name {candidate!r} is not a valid ENS name: {exc}") from exc
    if not canonical.endswith(ETH_SUFFIX):
        raise InvalidNameFormat(f"Name must end with {ETH_SUFFIX}: {candidate}")
    label = canonical[: -len(ETH_SUFFIX)]
    if not label:
        raise InvalidNameFormat(f"Name has no label before {ETH_SUFFIX}: {candidate}")
    if "." in label:
        raise InvalidNameFormat(f"Only second-level {ETH_SUFFIX} names can be registered: {candidate}")
    return canonical


def label_of(canonical: str) -> str:
    """Strip the ``.eth`` suffix from an already canonical name."""

    return canonical[: -len(ETH_SUFFIX)]


def years_to_seconds(years: object) -> int:
    if isinstance(years, bool):
        raise InvalidDuration(f"Duration must be a number of years, got {years!r}")
    try:
        value = float(years)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidDuration(f"Duration must be a number of years, got {years!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidDuration(f"Duration must be positive, got {years!r}")
    seconds = int(value * SECONDS_PER_YEAR)
    if seconds <= 0:
        raise InvalidDuration(f"Duration of {years!r} years rounds down to zero seconds")
    return seconds


__all__ = ["ETH_SUFFIX", "label_of", "normalize_name", "years_to_seconds"]
