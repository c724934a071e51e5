"""Commit-reveal state machine for ``.eth`` registrations.

One call to :meth:`CommitRevealOrchestrator.register` is one run:

``VALIDATED -> COMMITTED -> MATURED -> PRICE_CHECKED -> REGISTERED -> DONE``

Any failure ends the run in ``FAILED`` and surfaces as a
:class:`~registrar.errors.RegistrarError` whose ``stage`` names the step that
failed. Once the commit transaction has confirmed, failures also carry the
:class:`~registrar.models.CommitmentRecord` so the registration can be
finished by hand while the commitment is still valid.

The record is journaled as soon as the commit is broadcast, before its
confirmation wait.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol

from web3.exceptions import TimeExhausted

from .chain import RegistryReader, TransactionSender
from .commitment import generate_secret, make_commitment
from .config import NetworkProfile
from .errors import (
    CommitTransactionFailed,
    ConfigurationError,
    InvalidDuration,
    InvalidMaxPrice,
    NameUnavailable,
    PriceExceededLimit,
    RegistrarError,
    RegisterTransactionFailed,
    TemporaryPremiumActive,
)
from .metrics import REGISTRATIONS_TOTAL
from .models import (
    CommitmentRecord,
    PriceQuote,
    RegistrationRequest,
    RegistrationResult,
    RegistrationStage,
)
from .names import label_of, normalize_name, years_to_seconds
from .owners import check_owner_format, resolve_owner
from .pricing import authorised_value, check_availability, quote_price

logger = logging.getLogger(__name__)

RECOVERY_LOGGER = "registrar.recovery"

SleepFn = Callable[[float], Awaitable[None]]


class RecoveryJournal(Protocol):
    def record(self, commitment: CommitmentRecord) -> None:
        ...


class LoggingRecoveryJournal:
    """Write commitment records, secret included, to a dedicated logger.

    The ``registrar.recovery`` logger does not propagate, so the secret stays
    out of the general stream. Attach a handler to it to keep the records.
    """

    def __init__(self, logger_name: str = RECOVERY_LOGGER) -> None:
        self._logger = logging.getLogger(logger_name)
        self._logger.propagate = False

    def record(self, commitment: CommitmentRecord) -> None:
        self._logger.warning(
            "commitment pending reveal",
            extra={"event": "commitment_recorded", "data": commitment.to_dict(include_secret=True)},
        )


def _validate_max_price(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidMaxPrice(f"Maximum price must be an integer number of wei, got {value!r}")
    if value < 0:
        raise InvalidMaxPrice(f"Maximum price must not be negative, got {value}")
    return value


class CommitRevealOrchestrator:
    """Drive one registration through commit, maturation and reveal."""

    def __init__(
        self,
        reader: RegistryReader,
        sender: TransactionSender,
        profile: NetworkProfile,
        *,
        sleep: SleepFn = asyncio.sleep,
        journal: Optional[RecoveryJournal] = None,
        secret_factory: Callable[[], bytes] = generate_secret,
    ) -> None:
        self._reader = reader
        self._sender = sender
        self._profile = profile
        self._sleep = sleep
        self._journal = journal or LoggingRecoveryJournal()
        self._secret_factory = secret_factory

    async def register(self, request: RegistrationRequest) -> RegistrationResult:
        stage = RegistrationStage.VALIDATED
        pending: Optional[CommitmentRecord] = None
        record: Optional[CommitmentRecord] = None
        try:
            canonical, duration, max_price = self._validate(request)
            label = label_of(canonical)
            self._log_stage(stage, canonical)

            stage = RegistrationStage.COMMITTED
            owner = await asyncio.to_thread(resolve_owner, request.owner, self._reader)
            first = await self._pre_commit_checks(canonical, duration, max_price)
            pending = await self._submit_commit(canonical, label, owner, duration)
            self._journal.record(pending)
            await self._confirm_commit(pending)
            record = pending
            self._log_stage(stage, canonical, tx=record.commit_tx)

            stage = RegistrationStage.MATURED
            await self._mature(record)
            self._log_stage(stage, canonical)

            stage = RegistrationStage.PRICE_CHECKED
            quote = await asyncio.to_thread(quote_price, canonical, duration, self._reader)
            self._guard(quote, max_price)
            self._log_stage(stage, canonical, first_total=first.total, total=quote.total)

            stage = RegistrationStage.REGISTERED
            value = authorised_value(quote, self._profile.value_buffer_pct, max_price)
            register_tx = await self._reveal(record, value)
            self._log_stage(stage, canonical, tx=register_tx)
        except RegistrarError as exc:
            if exc.stage is None:
                exc.stage = stage
            if record is not None and exc.recovery is None:
                exc.recovery = record
            REGISTRATIONS_TOTAL.labels(outcome=exc.code.lower()).inc()
            logger.error(
                "registration failed",
                extra={
                    "event": "registration_failed",
                    "data": {"name": request.name, "stage": stage.value, "code": exc.code, "reason": exc.message},
                },
            )
            raise
        except asyncio.CancelledError:
            if pending is not None:
                logger.warning(
                    "registration cancelled; commitment left pending",
                    extra={"event": "registration_cancelled", "data": pending.to_dict()},
                )
            REGISTRATIONS_TOTAL.labels(outcome="cancelled").inc()
            raise

        REGISTRATIONS_TOTAL.labels(outcome="registered").inc()
        self._log_stage(RegistrationStage.DONE, canonical)
        return RegistrationResult(
            name=canonical,
            owner=owner,
            duration=duration,
            commit_tx_hash=record.commit_tx or "",
            register_tx_hash=register_tx,
            value_wei=value,
            quote=quote,
        )

    def _validate(self, request: RegistrationRequest) -> tuple[str, int, Optional[int]]:
        if request.network != self._profile.name:
            raise ConfigurationError(
                f"Request targets {request.network} but the client is configured for {self._profile.name}"
            )
        canonical = normalize_name(request.name)
        duration = years_to_seconds(request.duration_years)
        if duration < self._profile.min_registration_seconds:
            raise InvalidDuration(
                f"Duration of {duration} seconds is below the minimum of "
                f"{self._profile.min_registration_seconds} seconds"
            )
        check_owner_format(request.owner)
        max_price = _validate_max_price(request.max_price_wei)
        return canonical, duration, max_price

    async def _pre_commit_checks(self, canonical: str, duration: int, max_price: Optional[int]) -> PriceQuote:
        available = await asyncio.to_thread(check_availability, canonical, self._reader)
        if not available:
            raise NameUnavailable(f"{canonical} is not available for registration")
        quote = await asyncio.to_thread(quote_price, canonical, duration, self._reader)
        self._guard(quote, max_price)
        return quote

    @staticmethod
    def _guard(quote: PriceQuote, max_price: Optional[int]) -> None:
        if max_price is not None and quote.total > max_price:
            raise PriceExceededLimit(quote.total, max_price)
        if quote.premium > 0:
            raise TemporaryPremiumActive(quote.premium)

    async def _submit_commit(self, canonical: str, label: str, owner: str, duration: int) -> CommitmentRecord:
        secret = self._secret_factory()
        commitment = make_commitment(
            label, owner, duration, secret, resolver=self._profile.public_resolver
        )
        try:
            commit_tx = await asyncio.to_thread(self._sender.submit_commit, commitment)
        except Exception as exc:
            raise CommitTransactionFailed(f"Commit submission failed: {exc}") from exc
        return CommitmentRecord(
            name=canonical,
            label=label,
            owner=owner,
            duration=duration,
            secret=secret,
            commitment=commitment,
            commit_tx=commit_tx,
        )

    async def _confirm_commit(self, record: CommitmentRecord) -> None:
        try:
            await asyncio.to_thread(self._sender.wait_for_confirmation, record.commit_tx)
        except TimeExhausted as exc:
            # Still in the mempool; it may confirm after we give up.
            raise CommitTransactionFailed(
                f"Commit {record.commit_tx} was not confirmed in time", recovery=record
            ) from exc
        except Exception as exc:
            raise CommitTransactionFailed(f"Commit {record.commit_tx} failed: {exc}") from exc

    async def _mature(self, record: CommitmentRecord) -> None:
        delay = self._profile.maturation_delay
        logger.info(
            "waiting for commitment to mature",
            extra={"event": "maturation_wait", "data": {"name": record.name, "seconds": delay}},
        )
        await self._sleep(delay)

    async def _reveal(self, record: CommitmentRecord, value: int) -> str:
        try:
            register_tx = await asyncio.to_thread(
                self._sender.submit_register,
                record.label,
                record.owner,
                record.duration,
                record.secret,
                value,
                resolver=self._profile.public_resolver,
            )
        except Exception as exc:
            raise RegisterTransactionFailed(f"Register submission failed: {exc}") from exc
        try:
            await asyncio.to_thread(self._sender.wait_for_confirmation, register_tx)
        except Exception as exc:
            raise RegisterTransactionFailed(f"Register {register_tx} failed: {exc}") from exc
        return register_tx

    def _log_stage(self, stage: RegistrationStage, name: str, **data: object) -> None:
        logger.info(
            "registration stage %s",
            stage.value,
            extra={"event": "registration_stage", "data": {"name": name, "stage": stage.value, **data}},
        )


__all__ = [
    "CommitRevealOrchestrator",
    "LoggingRecoveryJournal",
    "RECOVERY_LOGGER",
    "RecoveryJournal",
]
