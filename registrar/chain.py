"""Chain collaborators used by the registrar.

The orchestrator only talks to the two protocols defined here. The web3.py
implementations are synchronous; async callers run them through
``asyncio.to_thread``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from eth_account import Account
from eth_utils import to_checksum_address
from web3 import Web3

from .commitment import ZERO_ADDRESS
from .config import NetworkProfile, RegistrarSettings
from .errors import ConfigurationError
from .models import PriceQuote

logger = logging.getLogger(__name__)

CONTROLLER_ABI = [
    {
        "inputs": [{"name": "commitment", "type": "bytes32"}],
        "name": "commit",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "owner", "type": "address"},
            {"name": "duration", "type": "uint256"},
            {"name": "secret", "type": "bytes32"},
            {"name": "resolver", "type": "address"},
            {"name": "data", "type": "bytes[]"},
            {"name": "reverseRecord", "type": "bool"},
            {"name": "ownerControlledFuses", "type": "uint16"},
        ],
        "name": "register",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [{"name": "name", "type": "string"}],
        "name": "available",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "duration", "type": "uint256"},
        ],
        "name": "rentPrice",
        "outputs": [
            {
                "components": [
                    {"name": "base", "type": "uint256"},
                    {"name": "premium", "type": "uint256"},
                ],
                "name": "price",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


class TransactionReverted(RuntimeError):
    """Raised when a mined transaction reports a failed status."""

    def __init__(self, tx_hash: str, status: Any) -> None:
        super().__init__(f"Transaction {tx_hash} reverted (status {status})")
        self.tx_hash = tx_hash
        self.status = status


class RegistryReader(Protocol):
    """Read-only view of the registrar controller and name resolution."""

    def is_available(self, label: str) -> bool:
        ...

    def rent_price(self, label: str, duration: int) -> PriceQuote:
        ...

    def resolve_forward(self, identifier: str) -> Optional[str]:
        ...


class TransactionSender(Protocol):
    """Signs and submits controller transactions for one wallet."""

    def submit_commit(self, commitment: bytes) -> str:
        ...

    def submit_register(
        self,
        label: str,
        owner: str,
        duration: int,
        secret: bytes,
        value: int,
        *,
        resolver: str = ZERO_ADDRESS,
    ) -> str:
        ...

    def wait_for_confirmation(self, tx_hash: str) -> Mapping[str, Any]:
        ...


def build_web3(settings: RegistrarSettings) -> Web3:
    provider = Web3.HTTPProvider(
        settings.rpc_url,
        request_kwargs={"timeout": settings.profile.request_timeout},
    )
    return Web3(provider)


def _controller(w3: Web3, profile: NetworkProfile) -> Any:
    return w3.eth.contract(address=profile.controller, abi=CONTROLLER_ABI)


class Web3RegistryReader:
    """:class:`RegistryReader` backed by a JSON-RPC endpoint."""

    def __init__(self, w3: Web3, profile: NetworkProfile) -> None:
        self._w3 = w3
        self._controller = _controller(w3, profile)

    def is_available(self, label: str) -> bool:
        return bool(self._controller.functions.available(label).call())

    def rent_price(self, label: str, duration: int) -> PriceQuote:
        base, premium = self._controller.functions.rentPrice(label, duration).call()
        return PriceQuote(base=int(base), premium=int(premium))

    def resolve_forward(self, identifier: str) -> Optional[str]:
        return self._w3.ens.address(identifier)


class Web3TransactionSender:
    """:class:`TransactionSender` that signs locally and broadcasts raw txs."""

    def __init__(self, w3: Web3, profile: NetworkProfile, private_key: str) -> None:
        try:
            self._account = Account.from_key(private_key)
        except Exception as exc:  # eth_keys raises its own ValidationError
            raise ConfigurationError("PRIVATE_KEY is not a valid secp256k1 key") from exc
        self._w3 = w3
        self._profile = profile
        self._controller = _controller(w3, profile)

    @property
    def address(self) -> str:
        return self._account.address

    def _tx_params(self, value: int = 0) -> Dict[str, Any]:
        return {
            "from": self._account.address,
            "nonce": self._w3.eth.get_transaction_count(self._account.address, "pending"),
            "value": value,
            "chainId": self._profile.chain_id,
        }

    def _send(self, tx: Dict[str, Any]) -> str:
        signed = self._account.sign_transaction(tx)
        tx_hash = Web3.to_hex(self._w3.eth.send_raw_transaction(signed.raw_transaction))
        logger.info(
            "transaction broadcast",
            extra={"event": "tx_broadcast", "data": {"tx": tx_hash, "url": self._profile.explorer_url(tx_hash)}},
        )
        return tx_hash

    def submit_commit(self, commitment: bytes) -> str:
        tx = self._controller.functions.commit(commitment).build_transaction(self._tx_params())
        return self._send(tx)

    def submit_register(
        self,
        label: str,
        owner: str,
        duration: int,
        secret: bytes,
        value: int,
        *,
        resolver: str = ZERO_ADDRESS,
    ) -> str:
        call = self._controller.functions.register(
            label,
            to_checksum_address(owner),
            duration,
            secret,
            to_checksum_address(resolver),
            [],
            False,
            0,
        )
        return self._send(call.build_transaction(self._tx_params(value)))

    def wait_for_confirmation(self, tx_hash: str) -> Mapping[str, Any]:
        receipt = self._w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self._profile.confirmation_timeout
        )
        status = receipt.get("status")
        if status != 1:
            raise TransactionReverted(tx_hash, status)
        return dict(receipt)


@dataclass
class ChainClients:
    reader: RegistryReader
    sender: Optional[TransactionSender] = None


def connect(settings: RegistrarSettings, *, require_signer: bool = True) -> ChainClients:
    """Build the read client and, when a key is available, the signing client."""

    w3 = build_web3(settings)
    reader = Web3RegistryReader(w3, settings.profile)
    sender: Optional[TransactionSender] = None
    if settings.private_key:
        sender = Web3TransactionSender(w3, settings.profile, settings.private_key)
    elif require_signer:
        raise ConfigurationError("A signing key is required to submit transactions")
    return ChainClients(reader=reader, sender=sender)


__all__ = [
    "CONTROLLER_ABI",
    "ChainClients",
    "RegistryReader",
    "TransactionReverted",
    "TransactionSender",
    "Web3RegistryReader",
    "Web3TransactionSender",
    "build_web3",
    "connect",
]
