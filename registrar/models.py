"""Records exchanged between the registrar stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

SECONDS_PER_YEAR = 31_536_000


class RegistrationStage(str, Enum):
    """Linear stages of a single commit-reveal run."""

    VALIDATED = "validated"
    COMMITTED = "committed"
    MATURED = "matured"
    PRICE_CHECKED = "price_checked"
    REGISTERED = "registered"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PriceQuote:
    """Rent price for a label and duration, in wei."""

    base: int
    premium: int = 0

    def __post_init__(self) -> None:
        if self.base < 0 or self.premium < 0:
            raise ValueError("price components must be non-negative")

    @property
    def total(self) -> int:
        return self.base + self.premium

    def to_dict(self) -> Dict[str, str]:
        return {
            "baseWei": str(self.base),
            "premiumWei": str(self.premium),
            "totalWei": str(self.total),
        }


@dataclass(frozen=True)
class RegistrationRequest:
    """Inputs to one orchestration run."""

    name: str
    duration_years: float
    owner: str
    network: str = "mainnet"
    max_price_wei: Optional[int] = None


@dataclass(frozen=True)
class CommitmentRecord:
    """Everything needed to finish a registration from a confirmed commit."""

    name: str
    label: str
    owner: str
    duration: int
    secret: bytes = field(repr=False)
    commitment: bytes
    commit_tx: Optional[str] = None

    def to_dict(self, *, include_secret: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "owner": self.owner,
            "durationSeconds": self.duration,
            "commitment": "0x" + self.commitment.hex(),
            "commitTxHash": self.commit_tx,
        }
        if include_secret:
            payload["secret"] = "0x" + self.secret.hex()
        return payload


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a fully successful registration."""

    name: str
    owner: str
    duration: int
    commit_tx_hash: str
    register_tx_hash: str
    value_wei: int = 0
    quote: Optional[PriceQuote] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "owner": self.owner,
            "durationSeconds": self.duration,
            "commitTxHash": self.commit_tx_hash,
            "registerTxHash": self.register_tx_hash,
            "valueWei": str(self.value_wei),
        }
        if self.quote is not None:
            payload["price"] = self.quote.to_dict()
        return payload


__all__ = [
    "CommitmentRecord",
    "PriceQuote",
    "RegistrationRequest",
    "RegistrationResult",
    "RegistrationStage",
    "SECONDS_PER_YEAR",
]
