"""MCP tool reporting the current Invapi account and credit balance."""
from __future__ import annotations

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations

from ..api.envelopes import text_result, tool_errors
from .invapi_client import InvapiClient
from .invoice_models import UserInfo

USER_ENDPOINT = "/api/v1/user"


def _credit(value: int | None) -> str:
    return "N/A" if value is None else str(value)


def format_user_info(user: UserInfo) -> str:
    credits = user.credits
    lines = [
        f"Email: {user.email or 'N/A'}",
        f"Role:  {user.role or 'N/A'}",
        "",
        "Credits remaining:",
        f"  Extraction: {_credit(credits.extraction)}",
        f"  Conversion: {_credit(credits.conversion)}",
        f"  Validation: {_credit(credits.validation)}",
        f"  QR:         {_credit(credits.qr)}",
    ]
    return "\n".join(lines)


@tool_errors
async def get_user_impl(client: InvapiClient) -> CallToolResult:
    payload = await client.get_json(USER_ENDPOINT)
    return text_result(format_user_info(UserInfo.model_validate(payload)))


def register(server: FastMCP, client: InvapiClient) -> None:
    """Register the user info tool."""

    @server.tool(
        name="invapi_get_user",
        title="Get Invapi User Info",
        annotations=ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        structured_output=False,
    )
    async def get_user() -> CallToolResult:
        """Returns the current Invapi user's email, role, and remaining API credits.

        Credits cover extraction, conversion, validation and QR. Use this to check
        your credit balance.
        """
        return await get_user_impl(client)


__all__ = ["format_user_info", "get_user_impl", "register"]
