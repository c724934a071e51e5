"""Command line access to ENS availability, pricing and registration."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List

import httpx

from registrar.errors import RegistrarError
from registrar.logging_utils import configure_logging
from registrar.service import RegistrarService


def _build_service(args: argparse.Namespace, *, require_signer: bool) -> RegistrarService:
    return RegistrarService.from_env(
        network=args.network,
        rpc_url=args.rpc_url,
        require_signer=require_signer,
    )


def _use_remote(args: argparse.Namespace) -> bool:
    return bool(args.api_url)


def _perform_request(
    args: argparse.Namespace,
    method: str,
    suffix: str,
    json_payload: dict | None = None,
    params: dict | None = None,
) -> dict:
    url = f"{args.api_url.rstrip('/')}{suffix}"
    try:
        # Registration blocks for the full commit-reveal round trip.
        with httpx.Client(timeout=args.api_timeout) as client:
            response = client.request(method, url, json=json_payload, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        detail = exc.response.text if exc.response is not None else str(exc)
        status = exc.response.status_code if exc.response is not None else ""
        raise SystemExit(f"API {method} {url} failed: {status} {detail}") from exc
    except httpx.HTTPError as exc:
        raise SystemExit(f"API request failed: {exc}") from exc
    return response.json()


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def command_check(args: argparse.Namespace) -> None:
    if _use_remote(args):
        _emit(_perform_request(args, "GET", f"/api/availability/{args.name}"))
        return
    try:
        service = _build_service(args, require_signer=False)
        available = asyncio.run(service.check_availability(args.name))
    except RegistrarError as exc:
        raise SystemExit(f"Availability check failed: {exc}") from exc
    _emit({"name": args.name, "available": available})


def command_price(args: argparse.Namespace) -> None:
    if _use_remote(args):
        _emit(_perform_request(args, "GET", f"/api/price/{args.name}", params={"years": args.years}))
        return
    try:
        service = _build_service(args, require_signer=False)
        quote = asyncio.run(service.quote(args.name, args.years))
    except RegistrarError as exc:
        raise SystemExit(f"Price lookup failed: {exc}") from exc
    _emit({"name": args.name, "years": args.years, **quote.to_dict()})


def command_register(args: argparse.Namespace) -> None:
    if _use_remote(args):
        body: Dict[str, Any] = {"name": args.name, "owner": args.owner, "years": args.years}
        if args.max_price_wei is not None:
            body["maxPriceWei"] = str(args.max_price_wei)
        _emit(_perform_request(args, "POST", "/api/register", body))
        return
    try:
        service = _build_service(args, require_signer=True)
        result = asyncio.run(
            service.register_name(
                args.name,
                args.owner,
                years=args.years,
                max_price_wei=args.max_price_wei,
            )
        )
    except RegistrarError as exc:
        if exc.recovery is not None:
            print(json.dumps({"recovery": exc.recovery.to_dict(include_secret=True)}, indent=2), file=sys.stderr)
        raise SystemExit(f"Registration failed [{exc.code}]: {exc}") from exc
    payload = result.to_dict()
    profile = service.settings.profile
    payload["commitTxUrl"] = profile.explorer_url(result.commit_tx_hash)
    payload["registerTxUrl"] = profile.explorer_url(result.register_tx_hash)
    _emit(payload)


def _wei(value: str) -> int:
    if not value.strip().isdigit():
        raise argparse.ArgumentTypeError(f"expected a non-negative integer number of wei, got {value!r}")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check, price and register ENS .eth names.")
    parser.add_argument("--network", default=None, help="mainnet or sepolia (default: ENS_NETWORK or mainnet)")
    parser.add_argument("--rpc-url", default=None, help="JSON-RPC endpoint (default: ENS_RPC_URL)")
    parser.add_argument("--log-file", default=None, help="Write JSON lines logs to this file")
    parser.add_argument("--recovery-file", default=None, help="Write commitment recovery records to this file")
    parser.add_argument("--api-url", default=None, help="Use a running ENS API instead of the chain (e.g. http://localhost:8000)")
    parser.add_argument("--api-timeout", type=float, default=600.0, help="Seconds to wait for API responses")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check whether a name is available")
    check.add_argument("name")
    check.set_defaults(func=command_check)

    price = subparsers.add_parser("price", help="Quote the rent price of a name")
    price.add_argument("name")
    price.add_argument("--years", type=float, default=1.0)
    price.set_defaults(func=command_price)

    register = subparsers.add_parser("register", help="Register a name via commit-reveal")
    register.add_argument("name")
    register.add_argument("owner", help="Owner address or resolvable name")
    register.add_argument("--years", type=float, default=1.0)
    register.add_argument(
        "--max-price-wei",
        type=_wei,
        default=None,
        help="Abort if the total price exceeds this (default: current quote plus 10%%)",
    )
    register.set_defaults(func=command_register)

    return parser


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(
        args.log_file,
        level=logging.DEBUG if args.verbose else logging.INFO,
        recovery_file=args.recovery_file,
    )
    args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main(sys.argv[1:])
