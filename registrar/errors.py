"""Typed failures raised by the registrar core.

Every failure carries a stable ``code`` so transports (HTTP, CLI, tool
adapter) can map it without string matching. Failures raised after a commit
transaction confirmed also carry the :class:`~registrar.models.CommitmentRecord`
needed to finish the registration by hand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .models import CommitmentRecord, RegistrationStage


class RegistrarError(RuntimeError):
    """Base class for every failure surfaced by the registrar."""

    code = "REGISTRAR_ERROR"
    hint: Optional[str] = None
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        stage: Optional["RegistrationStage"] = None,
        recovery: Optional["CommitmentRecord"] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.recovery = recovery

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.hint:
            payload["hint"] = self.hint
        if self.stage is not None:
            payload["stage"] = self.stage.value
        if self.recovery is not None:
            payload["recovery"] = self.recovery.to_dict(include_secret=True)
        return payload


class ConfigurationError(RegistrarError):
    code = "CONFIGURATION_ERROR"


class MissingRpcEndpoint(ConfigurationError):
    code = "RPC_URL_MISSING"
    hint = "Set ENS_RPC_URL (or RPC_URL) or pass an explicit endpoint."


class MissingSigningKey(ConfigurationError):
    code = "PRIVATE_KEY_MISSING"
    hint = "Set ENS_PRIVATE_KEY (or PRIVATE_KEY) to the funded signing key."


class UnsupportedNetwork(ConfigurationError):
    code = "NETWORK_UNSUPPORTED"


class ValidationError(RegistrarError):
    code = "VALIDATION_ERROR"


class InvalidNameFormat(ValidationError):
    code = "INVALID_NAME_FORMAT"
    hint = "Names must be a single label followed by .eth, e.g. example.eth."


class InvalidDuration(ValidationError):
    code = "INVALID_DURATION"


class InvalidOwnerAddress(ValidationError):
    code = "INVALID_OWNER_ADDRESS"


class InvalidMaxPrice(ValidationError):
    code = "INVALID_MAX_PRICE"


class OwnerResolutionFailed(RegistrarError):
    code = "OWNER_RESOLUTION_FAILED"
    hint = "Pass a 0x address or a name with an address record."

    def __init__(self, specifier: str, **kwargs: Any) -> None:
        super().__init__(f"Could not resolve: {specifier}", **kwargs)
        self.specifier = specifier


class PriceQueryFailed(RegistrarError):
    code = "PRICE_QUERY_FAILED"
    retryable = True


class AvailabilityQueryFailed(RegistrarError):
    code = "AVAILABILITY_QUERY_FAILED"
    retryable = True


class NameUnavailable(RegistrarError):
    code = "NAME_UNAVAILABLE"


class CommitTransactionFailed(RegistrarError):
    code = "COMMIT_TX_FAILED"


class PriceExceededLimit(RegistrarError):
    code = "PRICE_EXCEEDED_LIMIT"
    hint = "Start a new registration with a higher maximum price."

    def __init__(self, total_wei: int, max_price_wei: int, **kwargs: Any) -> None:
        super().__init__(
            f"Registration price {total_wei} wei exceeds the authorised maximum of {max_price_wei} wei",
            **kwargs,
        )
        self.total_wei = total_wei
        self.max_price_wei = max_price_wei


class TemporaryPremiumActive(RegistrarError):
    code = "TEMPORARY_PREMIUM_ACTIVE"
    hint = "Name is in temporary premium period. Please wait for premium to expire."

    def __init__(self, premium_wei: int, **kwargs: Any) -> None:
        super().__init__(f"Name carries a temporary premium of {premium_wei} wei", **kwargs)
        self.premium_wei = premium_wei


class RegisterTransactionFailed(RegistrarError):
    code = "REGISTER_TX_FAILED"
    hint = "The commitment may still be usable; retry register with the recovery details before it expires."


__all__ = [
    "AvailabilityQueryFailed",
    "CommitTransactionFailed",
    "ConfigurationError",
    "InvalidDuration",
    "InvalidMaxPrice",
    "InvalidNameFormat",
    "InvalidOwnerAddress",
    "MissingRpcEndpoint",
    "MissingSigningKey",
    "NameUnavailable",
    "OwnerResolutionFailed",
    "PriceExceededLimit",
    "PriceQueryFailed",
    "RegisterTransactionFailed",
    "RegistrarError",
    "TemporaryPremiumActive",
    "UnsupportedNetwork",
    "ValidationError",
]
