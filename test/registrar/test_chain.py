"""Tests for the web3.py collaborators, driven through stub clients."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from eth_account import Account

from ens_fakes import CONTROLLER, OWNER, RESOLVER, make_profile, make_settings
from registrar.chain import (
    TransactionReverted,
    Web3RegistryReader,
    Web3TransactionSender,
    connect,
)
from registrar.errors import ConfigurationError
from registrar.models import PriceQuote

KEY = "0x" + "11" * 32


class _Call:
    def __init__(self, contract: "_StubContract", name: str, args: tuple) -> None:
        self._contract = contract
        self._name = name
        self._args = args

    def call(self) -> Any:
        return self._contract.results[self._name]

    def build_transaction(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self._contract.built.append((self._name, self._args, dict(params)))
        tx = dict(params)
        tx.update(to=CONTROLLER, data="0x", gas=200_000, maxFeePerGas=2_000_000_000, maxPriorityFeePerGas=1_000_000_000)
        return tx


class _StubContract:
    def __init__(self, results: Dict[str, Any]) -> None:
        self.results = results
        self.built: List[tuple] = []
        self.functions = self

    def __getattr__(self, name: str) -> Any:
        def _fn(*args: Any) -> _Call:
            return _Call(self, name, args)

        return _fn


class _StubEth:
    def __init__(self, contract: _StubContract, receipt: Dict[str, Any]) -> None:
        self._contract = contract
        self._receipt = receipt
        self.raw: List[bytes] = []
        self.contract_kwargs: Dict[str, Any] = {}

    def contract(self, **kwargs: Any) -> _StubContract:
        self.contract_kwargs = kwargs
        return self._contract

    def get_transaction_count(self, address: str, block: str) -> int:
        return 7

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.raw.append(raw)
        return b"\xab" * 32

    def wait_for_transaction_receipt(self, tx_hash: str, timeout: int) -> Dict[str, Any]:
        return dict(self._receipt, transactionHash=tx_hash)


def _stub_w3(results: Dict[str, Any] | None = None, receipt: Dict[str, Any] | None = None) -> SimpleNamespace:
    contract = _StubContract(results or {})
    eth = _StubEth(contract, receipt or {"status": 1})
    ens = SimpleNamespace(address=lambda name: {"bob.eth": RESOLVER}.get(name))
    return SimpleNamespace(eth=eth, ens=ens, contract=contract)


def test_reader_wraps_controller_views() -> None:
    w3 = _stub_w3({"available": True, "rentPrice": (1000, 25)})
    reader = Web3RegistryReader(w3, make_profile())
    assert reader.is_available("alice12345") is True
    assert reader.rent_price("alice12345", 31_536_000) == PriceQuote(base=1000, premium=25)
    assert reader.resolve_forward("bob.eth") == RESOLVER
    assert reader.resolve_forward("nobody.eth") is None
    assert w3.eth.contract_kwargs["address"] == CONTROLLER


def test_sender_signs_and_broadcasts_commit() -> None:
    w3 = _stub_w3()
    sender = Web3TransactionSender(w3, make_profile(), KEY)
    tx_hash = sender.submit_commit(b"\x01" * 32)

    assert tx_hash == "0x" + "ab" * 32
    assert len(w3.eth.raw) == 1
    name, args, params = w3.contract.built[0]
    assert name == "commit"
    assert params["from"] == Account.from_key(KEY).address
    assert params["nonce"] == 7
    assert params["chainId"] == 1
    assert params["value"] == 0


def test_sender_attaches_value_to_register() -> None:
    w3 = _stub_w3()
    sender = Web3TransactionSender(w3, make_profile(), KEY)
    sender.submit_register("alice12345", OWNER, 31_536_000, b"\x02" * 32, 1100, resolver=RESOLVER)

    name, args, params = w3.contract.built[0]
    assert name == "register"
    assert args == ("alice12345", OWNER, 31_536_000, b"\x02" * 32, RESOLVER, [], False, 0)
    assert params["value"] == 1100


def test_wait_for_confirmation_raises_on_revert() -> None:
    sender = Web3TransactionSender(_stub_w3(receipt={"status": 0}), make_profile(), KEY)
    with pytest.raises(TransactionReverted):
        sender.wait_for_confirmation("0x" + "ab" * 32)


def test_wait_for_confirmation_returns_receipt() -> None:
    sender = Web3TransactionSender(_stub_w3(), make_profile(), KEY)
    receipt = sender.wait_for_confirmation("0x" + "ab" * 32)
    assert receipt["status"] == 1


def test_invalid_key_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        Web3TransactionSender(_stub_w3(), make_profile(), "0x1234")


def test_connect_builds_reader_and_sender() -> None:
    clients = connect(make_settings())
    assert clients.reader is not None
    assert clients.sender.address == Account.from_key(KEY).address


def test_connect_without_key() -> None:
    clients = connect(make_settings(private_key=None), require_signer=False)
    assert clients.sender is None
    with pytest.raises(ConfigurationError):
        connect(make_settings(private_key=None))
