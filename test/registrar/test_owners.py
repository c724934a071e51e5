"""Tests for owner specifier resolution."""

from __future__ import annotations

import pytest

from ens_fakes import FakeRegistry, OWNER
from registrar.errors import InvalidOwnerAddress, OwnerResolutionFailed
from registrar.owners import check_owner_format, resolve_owner

CHECKSUMMED = "0x231b0Ee14048e9dCcD1d247744d114a4EB5E8E63"


@pytest.mark.parametrize("address", [OWNER, CHECKSUMMED, CHECKSUMMED.lower()])
def test_address_is_returned_unchanged_without_lookup(address: str) -> None:
    registry = FakeRegistry()
    assert resolve_owner(address, registry) == address
    assert registry.calls == 0


@pytest.mark.parametrize(
    "specifier",
    [
        "0x1234",
        "0xZZ00000000000000000000000000000000000001",
        "0x231b0Ee14048e9dCcD1d247744d114a4EB5E8E6A",
        "",
        "   ",
    ],
)
def test_malformed_explicit_address_is_rejected(specifier: str) -> None:
    registry = FakeRegistry()
    with pytest.raises(InvalidOwnerAddress):
        resolve_owner(specifier, registry)
    assert registry.calls == 0


def test_identifier_is_forward_resolved() -> None:
    registry = FakeRegistry(records={"vitalik.eth": CHECKSUMMED})
    assert resolve_owner("vitalik.eth", registry) == CHECKSUMMED
    assert registry.resolve_calls == ["vitalik.eth"]


def test_identifiers_with_other_suffixes_are_resolved() -> None:
    registry = FakeRegistry(records={"alice.xyz": CHECKSUMMED})
    assert resolve_owner("alice.xyz", registry) == CHECKSUMMED


@pytest.mark.parametrize("record", [None, "0x0000000000000000000000000000000000000000"])
def test_unresolvable_identifier_names_the_specifier(record) -> None:
    registry = FakeRegistry(records={"nobody.eth": record})
    with pytest.raises(OwnerResolutionFailed) as excinfo:
        resolve_owner("nobody.eth", registry)
    assert "nobody.eth" in str(excinfo.value)
    assert excinfo.value.specifier == "nobody.eth"


def test_lookup_errors_are_reported_as_resolution_failures() -> None:
    class BrokenRegistry(FakeRegistry):
        def resolve_forward(self, identifier: str):
            raise ConnectionError("rpc down")

    with pytest.raises(OwnerResolutionFailed) as excinfo:
        resolve_owner("alice.eth", BrokenRegistry())
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_check_owner_format_is_pure() -> None:
    check_owner_format(OWNER)
    check_owner_format("alice.eth")
    with pytest.raises(InvalidOwnerAddress):
        check_owner_format("0xdeadbeef")
