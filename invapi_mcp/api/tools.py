"""Tool registration for invapi-mcp."""
from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from ..backends import batch, conversion, extraction, user, validation
from ..backends.invapi_client import InvapiClient

_LOGGER = logging.getLogger("invapi_mcp.api.tools")

TOOL_GROUPS = (conversion, validation, extraction, user, batch)


def register_tools(server: FastMCP, client: InvapiClient) -> list[str]:
    """Register every tool group on the MCP server."""

    loaded: list[str] = []
    for group in TOOL_GROUPS:
        group.register(server, client)
        loaded.append(group.__name__)
    _LOGGER.debug("Registered tool groups: %s", ", ".join(loaded))
    return loaded


__all__ = ["TOOL_GROUPS", "register_tools"]
