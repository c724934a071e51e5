"""FastAPI router exposing ENS availability, pricing and registration."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from registrar.errors import (
    AvailabilityQueryFailed,
    CommitTransactionFailed,
    ConfigurationError,
    InvalidMaxPrice,
    InvalidNameFormat,
    MissingSigningKey,
    NameUnavailable,
    OwnerResolutionFailed,
    PriceExceededLimit,
    PriceQueryFailed,
    RegisterTransactionFailed,
    RegistrarError,
    TemporaryPremiumActive,
    ValidationError,
)
from registrar.names import label_of, normalize_name
from registrar.service import RegistrarService

logger = logging.getLogger(__name__)

SERVICE_NAME = "ens-agent"
_DEFAULT_MIN_LABEL_LENGTH = 5
_DEFAULT_REGISTRATION_YEARS = 1.0
_WEI_PER_ETH = 10**18

router = APIRouter(prefix="/api", tags=["ens"])


class AvailabilityOut(BaseModel):
    name: str
    available: bool


class PriceOut(BaseModel):
    name: str
    years: float
    baseWei: str
    premiumWei: str
    totalWei: str
    totalEth: str


class RegisterIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    years: Optional[float] = Field(default=None, gt=0)
    maxPriceWei: Optional[Union[StrictInt, str]] = None


class RegisterOut(BaseModel):
    success: bool = True
    name: str
    owner: str
    durationSeconds: int
    commitTxHash: str
    registerTxHash: str
    valueWei: str
    ensCostEth: str
    commitTxUrl: Optional[str] = None
    registerTxUrl: Optional[str] = None


def min_label_length() -> int:
    raw = os.environ.get("ENS_MIN_LABEL_LENGTH")
    if not raw:
        return _DEFAULT_MIN_LABEL_LENGTH
    try:
        return max(1, int(raw))
    except ValueError:
        logger.warning("ignoring invalid ENS_MIN_LABEL_LENGTH=%s", raw)
        return _DEFAULT_MIN_LABEL_LENGTH


def registration_years() -> float:
    raw = os.environ.get("ENS_REGISTRATION_YEARS")
    if not raw:
        return _DEFAULT_REGISTRATION_YEARS
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        logger.warning("ignoring invalid ENS_REGISTRATION_YEARS=%s", raw)
        return _DEFAULT_REGISTRATION_YEARS
    return value


@lru_cache(maxsize=1)
def _default_service() -> RegistrarService:
    return RegistrarService.from_env(require_signer=False)


def get_service() -> RegistrarService:
    try:
        return _default_service()
    except RegistrarError as exc:
        _handle_error(exc)
        raise  # pragma: no cover - _handle_error always raises


def format_eth(wei: int) -> str:
    whole, fraction = divmod(wei, _WEI_PER_ETH)
    digits = f"{fraction:018d}".rstrip("0")
    return f"{whole}.{digits or '0'}"


def _error_detail(exc: RegistrarError) -> Dict[str, Any]:
    detail = exc.to_dict()
    if "hint" not in detail:
        detail["hint"] = None
    return detail


def _handle_error(exc: RegistrarError) -> None:
    if isinstance(exc, ConfigurationError):
        raise HTTPException(status_code=503, detail=_error_detail(exc)) from exc
    if isinstance(exc, (ValidationError, OwnerResolutionFailed)):
        raise HTTPException(status_code=400, detail=_error_detail(exc)) from exc
    if isinstance(exc, (NameUnavailable, TemporaryPremiumActive, PriceExceededLimit)):
        raise HTTPException(status_code=409, detail=_error_detail(exc)) from exc
    if isinstance(exc, (PriceQueryFailed, AvailabilityQueryFailed)):
        raise HTTPException(status_code=502, detail=_error_detail(exc)) from exc
    if isinstance(exc, (CommitTransactionFailed, RegisterTransactionFailed)):
        raise HTTPException(status_code=502, detail=_error_detail(exc)) from exc
    raise HTTPException(status_code=500, detail=_error_detail(exc)) from exc


def _parse_max_price(value: Optional[Union[int, str]]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate.isdigit():
            raise InvalidMaxPrice(f"maxPriceWei must be a non-negative integer, got {value!r}")
        return int(candidate)
    if value < 0:
        raise InvalidMaxPrice(f"maxPriceWei must be a non-negative integer, got {value!r}")
    return value


def _check_label_length(name: str) -> None:
    minimum = min_label_length()
    label = label_of(normalize_name(name))
    if len(label) < minimum:
        raise InvalidNameFormat(
            f"Name must be at least {minimum} characters (excluding .eth). Got: {len(label)}"
        )


@router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/availability/{name}", response_model=AvailabilityOut)
async def availability(name: str, service: RegistrarService = Depends(get_service)) -> AvailabilityOut:
    try:
        available = await service.check_availability(name)
    except RegistrarError as exc:
        _handle_error(exc)
    return AvailabilityOut(name=name, available=available)


@router.get("/price/{name}", response_model=PriceOut)
async def price(
    name: str,
    years: str = Query(default="1"),
    service: RegistrarService = Depends(get_service),
) -> PriceOut:
    try:
        quote = await service.quote(name, years)
    except RegistrarError as exc:
        _handle_error(exc)
    return PriceOut(
        name=name,
        years=float(years),
        baseWei=str(quote.base),
        premiumWei=str(quote.premium),
        totalWei=str(quote.total),
        totalEth=format_eth(quote.total),
    )


@router.get("/register")
def register_usage() -> Dict[str, Any]:
    minimum = min_label_length()
    years = registration_years()
    return {
        "service": SERVICE_NAME,
        "description": f"Register ENS name ({minimum}+ chars, {years:g} year)",
        "usage": {
            "method": "POST",
            "url": "/api/register",
            "body": {"name": "example.eth", "owner": "0x...", "years": years, "maxPriceWei": "optional"},
        },
        "freeEndpoints": {
            "availability": "GET /api/availability/:name",
            "price": "GET /api/price/:name?years=1",
        },
    }


@router.post("/register", response_model=RegisterOut)
async def register(payload: RegisterIn, service: RegistrarService = Depends(get_service)) -> RegisterOut:
    try:
        if not service.can_register:
            raise MissingSigningKey("PRIVATE_KEY is not configured; a signing key is required to register names")
        _check_label_length(payload.name)
        max_price = _parse_max_price(payload.maxPriceWei)
        result = await service.register_name(
            payload.name,
            payload.owner,
            years=payload.years or registration_years(),
            max_price_wei=max_price,
        )
    except RegistrarError as exc:
        _handle_error(exc)
    profile = service.settings.profile
    cost = result.quote.total if result.quote is not None else result.value_wei
    return RegisterOut(
        name=result.name,
        owner=result.owner,
        durationSeconds=result.duration,
        commitTxHash=result.commit_tx_hash,
        registerTxHash=result.register_tx_hash,
        valueWei=str(result.value_wei),
        ensCostEth=format_eth(cost),
        commitTxUrl=profile.explorer_url(result.commit_tx_hash),
        registerTxUrl=profile.explorer_url(result.register_tx_hash),
    )


__all__ = ["format_eth", "get_service", "router"]
