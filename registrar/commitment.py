"""Commitment secrets and hashes for the registrar controller."""

from __future__ import annotations

import secrets
from typing import Sequence

from eth_abi import encode
from eth_utils import keccak, to_bytes, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
SECRET_BYTES = 32

_COMMITMENT_TYPES = [
    "bytes32",
    "address",
    "uint256",
    "bytes32",
    "address",
    "bytes[]",
    "bool",
    "uint16",
]


def generate_secret() -> bytes:
    """Return a fresh 32-byte secret from the OS CSPRNG."""

    return secrets.token_bytes(SECRET_BYTES)


def make_commitment(
    label: str,
    owner: str,
    duration: int,
    secret: bytes,
    *,
    resolver: str = ZERO_ADDRESS,
    data: Sequence[bytes] = (),
    reverse_record: bool = False,
    owner_controlled_fuses: int = 0,
) -> bytes:
    """Mirror ``ETHRegistrarController.makeCommitment`` without a network call."""

    if len(secret) != SECRET_BYTES:
        raise ValueError("secret must be exactly 32 bytes")
    if data and int(resolver, 16) == 0:
        raise ValueError("a resolver is required when resolver data is supplied")
    label_hash = keccak(to_bytes(text=label))
    encoded = encode(
        _COMMITMENT_TYPES,
        [
            label_hash,
            to_checksum_address(owner),
            duration,
            secret,
            to_checksum_address(resolver),
            list(data),
            reverse_record,
            owner_controlled_fuses,
        ],
    )
    return keccak(encoded)


__all__ = ["SECRET_BYTES", "ZERO_ADDRESS", "generate_secret", "make_commitment"]
