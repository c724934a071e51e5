"""Owner specifier resolution."""

from __future__ import annotations

import logging

from eth_utils import is_address

from .chain import RegistryReader
from .commitment import ZERO_ADDRESS
from .errors import InvalidOwnerAddress, OwnerResolutionFailed

logger = logging.getLogger(__name__)


def is_address_like(specifier: str) -> bool:
    """True when ``specifier`` claims to be a hex address (``0x`` prefix)."""

    return specifier[:2].lower() == "0x"


def check_owner_format(specifier: str) -> None:
    """Reject empty specifiers and malformed explicit addresses.

    Pure, so it can run during validation before any network call.
    """

    if not isinstance(specifier, str) or not specifier.strip():
        raise InvalidOwnerAddress("Owner must not be empty")
    candidate = specifier.strip()
    if is_address_like(candidate) and not is_address(candidate):
        raise InvalidOwnerAddress(f"Invalid owner address: {candidate}")


def resolve_owner(specifier: str, reader: RegistryReader) -> str:
    """Return the address that should own the registered name.

    Well-formed addresses come back unchanged without touching ``reader``;
    anything else is forward resolved.
    """

    check_owner_format(specifier)
    candidate = specifier.strip()
    if is_address_like(candidate):
        return candidate
    try:
        address = reader.resolve_forward(candidate)
    except Exception as exc:
        raise OwnerResolutionFailed(candidate) from exc
    if not address or int(address, 16) == int(ZERO_ADDRESS, 16):
        raise OwnerResolutionFailed(candidate)
    logger.info(
        "owner resolved",
        extra={"event": "owner_resolved", "data": {"specifier": candidate, "address": address}},
    )
    return address


__all__ = ["check_owner_format", "is_address_like", "resolve_owner"]
