"""Envelope helpers for MCP tool results."""
from __future__ import annotations

import functools
import json
import logging
from typing import Any, Awaitable, Callable, ParamSpec

from mcp.types import CallToolResult, TextContent

from ..backends.invapi_errors import describe_api_error

_LOGGER = logging.getLogger("invapi_mcp.api.envelopes")

P = ParamSpec("P")


def text_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)


def json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def tool_errors(
    func: Callable[P, Awaitable[CallToolResult]],
) -> Callable[P, Awaitable[CallToolResult]]:
    """Report any failure of ``func`` as an error result instead of raising."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> CallToolResult:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            message = describe_api_error(exc)
            _LOGGER.warning("%s failed: %s", func.__name__, message.splitlines()[0])
            return error_result(message)

    return wrapper


__all__ = ["error_result", "json_text", "text_result", "tool_errors"]
