"""Facade shared by the HTTP, CLI and tool transports."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .chain import RegistryReader, TransactionSender, connect
from .config import RegistrarSettings, resolve_settings
from .errors import MissingSigningKey
from .models import PriceQuote, RegistrationRequest, RegistrationResult
from .names import normalize_name, years_to_seconds
from .orchestrator import CommitRevealOrchestrator, RecoveryJournal, SleepFn
from .pricing import check_availability, default_price_limit, quote_price

logger = logging.getLogger(__name__)

DEFAULT_LIMIT_BUFFER_PCT = 10


class RegistrarService:
    """Read-only lookups plus the full commit-reveal registration."""

    def __init__(
        self,
        settings: RegistrarSettings,
        reader: RegistryReader,
        sender: Optional[TransactionSender] = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        journal: Optional[RecoveryJournal] = None,
    ) -> None:
        self.settings = settings
        self._reader = reader
        self._sender = sender
        self._sleep = sleep
        self._journal = journal

    @classmethod
    def from_settings(cls, settings: RegistrarSettings, *, require_signer: bool = False) -> "RegistrarService":
        clients = connect(settings, require_signer=require_signer)
        return cls(settings, clients.reader, clients.sender)

    @classmethod
    def from_env(
        cls,
        *,
        network: Optional[str] = None,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
        require_signer: bool = False,
    ) -> "RegistrarService":
        settings = resolve_settings(
            network=network,
            rpc_url=rpc_url,
            private_key=private_key,
            require_signer=require_signer,
        )
        return cls.from_settings(settings, require_signer=require_signer)

    @property
    def network(self) -> str:
        return self.settings.network

    @property
    def can_register(self) -> bool:
        return self._sender is not None

    async def check_availability(self, name: str) -> bool:
        canonical = normalize_name(name)
        return await asyncio.to_thread(check_availability, canonical, self._reader)

    async def quote(self, name: str, years: float = 1) -> PriceQuote:
        canonical = normalize_name(name)
        duration = years_to_seconds(years)
        return await asyncio.to_thread(quote_price, canonical, duration, self._reader)

    async def register(self, request: RegistrationRequest) -> RegistrationResult:
        if self._sender is None:
            raise MissingSigningKey("PRIVATE_KEY is not configured; a signing key is required to register names")
        kwargs = {"sleep": self._sleep}
        if self._journal is not None:
            kwargs["journal"] = self._journal
        orchestrator = CommitRevealOrchestrator(self._reader, self._sender, self.settings.profile, **kwargs)
        return await orchestrator.register(request)

    async def register_name(
        self,
        name: str,
        owner: str,
        *,
        years: float = 1,
        max_price_wei: Optional[int] = None,
    ) -> RegistrationResult:
        """Register ``name``, authorising the current quote plus 10% when no limit is given."""

        if self._sender is None:
            raise MissingSigningKey("PRIVATE_KEY is not configured; a signing key is required to register names")
        if max_price_wei is None:
            first = await self.quote(name, years)
            max_price_wei = default_price_limit(first, DEFAULT_LIMIT_BUFFER_PCT)
            logger.info(
                "authorising quoted price",
                extra={"event": "default_price_limit", "data": {"name": name, "maxPriceWei": str(max_price_wei)}},
            )
        request = RegistrationRequest(
            name=name,
            duration_years=years,
            owner=owner,
            network=self.network,
            max_price_wei=max_price_wei,
        )
        return await self.register(request)


__all__ = ["DEFAULT_LIMIT_BUFFER_PCT", "RegistrarService"]
