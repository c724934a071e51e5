"""Named tools for chat-style agent runtimes.

Each tool takes a JSON object of arguments and returns a result of the form
``{"content": [{"type": "text", "text": <json>}], "isError": bool}``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as ArgumentsError

from .errors import RegistrarError
from .service import RegistrarService

logger = logging.getLogger(__name__)


class CheckAvailabilityArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="ENS name to check, e.g. alice.eth")


class GetPriceArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="ENS name to price, e.g. alice.eth")
    years: float = Field(1, gt=0, description="Registration length in years")


class RegisterNameArgs(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(..., description="ENS name to register, e.g. alice.eth")
    owner: str = Field(..., description="Owner address or resolvable name")
    years: float = Field(1, gt=0, description="Registration length in years")
    max_price_wei: Optional[int] = Field(
        None,
        alias="maxPriceWei",
        ge=0,
        description="Largest total price to accept, in wei",
    )


Handler = Callable[[BaseModel], Awaitable[Dict[str, Any]]]


class Tool:
    def __init__(self, name: str, description: str, args_model: Type[BaseModel], handler: Handler) -> None:
        self.name = name
        self.description = description
        self.args_model = args_model
        self.handler = handler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_model.model_json_schema(by_alias=True),
        }


def _text_result(payload: Mapping[str, Any], *, is_error: bool = False) -> Dict[str, Any]:
    return {
        "content": [{"type": "text", "text": json.dumps(payload, indent=2)}],
        "isError": is_error,
    }


class ToolRegistry:
    """Expose :class:`RegistrarService` operations as named tools."""

    def __init__(self, service: RegistrarService) -> None:
        self._service = service
        self._tools: Dict[str, Tool] = {}
        self._add(
            "checkAvailability",
            "Check if an ENS .eth name is available for registration",
            CheckAvailabilityArgs,
            self._check_availability,
        )
        self._add(
            "getPrice",
            "Quote the rent price of an ENS .eth name in wei",
            GetPriceArgs,
            self._get_price,
        )
        if service.can_register:
            self._add(
                "registerName",
                "Register an ENS .eth name through commit-reveal (takes over a minute)",
                RegisterNameArgs,
                self._register_name,
            )

    def _add(self, name: str, description: str, args_model: Type[BaseModel], handler: Handler) -> None:
        self._tools[name] = Tool(name, description, args_model, handler)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [tool.describe() for tool in self._tools.values()]

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        tool = self._tools.get(name)
        if tool is None:
            return _text_result({"error": f"Unknown tool: {name}"}, is_error=True)
        try:
            args = tool.args_model.model_validate(dict(arguments or {}))
        except ArgumentsError as exc:
            details = exc.errors(include_url=False, include_context=False)
            return _text_result({"error": "Invalid arguments", "details": details}, is_error=True)
        try:
            payload = await tool.handler(args)
        except RegistrarError as exc:
            logger.warning(
                "tool call failed",
                extra={"event": "tool_error", "data": {"tool": name, "code": exc.code}},
            )
            return _text_result({"error": exc.message, **exc.to_dict()}, is_error=True)
        return _text_result(payload)

    async def _check_availability(self, args: CheckAvailabilityArgs) -> Dict[str, Any]:
        available = await self._service.check_availability(args.name)
        return {"name": args.name, "available": available}

    async def _get_price(self, args: GetPriceArgs) -> Dict[str, Any]:
        quote = await self._service.quote(args.name, args.years)
        return {"name": args.name, "years": args.years, **quote.to_dict()}

    async def _register_name(self, args: RegisterNameArgs) -> Dict[str, Any]:
        result = await self._service.register_name(
            args.name,
            args.owner,
            years=args.years,
            max_price_wei=args.max_price_wei,
        )
        return result.to_dict()


__all__ = [
    "CheckAvailabilityArgs",
    "GetPriceArgs",
    "RegisterNameArgs",
    "Tool",
    "ToolRegistry",
]
