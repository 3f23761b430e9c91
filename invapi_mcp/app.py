"""Server assembly: one FastMCP instance with every Invapi tool group."""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from .api import register_tools
from .backends.invapi_client import InvapiClient
from .utils.config import Settings

_LOGGER = logging.getLogger("invapi_mcp.app")

SERVER_NAME = "invapi-mcp"
INSTRUCTIONS = (
    "Tools for the Invapi E-Invoicing API: invoice conversion (JSON, UBL, CII, "
    "XLSX, ZUGFeRD), validation (XRechnung 3.0.2 / EN 16931), and extraction "
    "from PDFs and images."
)


def build_server(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastMCP:
    """Create the MCP server and register all tool groups against ``settings``."""

    server = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    client = InvapiClient(settings, transport=transport)
    loaded = register_tools(server, client)
    _LOGGER.info("Loaded %d tool groups against %s", len(loaded), settings.base_url)

    @server.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        """Health check endpoint for the HTTP transports."""
        tools = await server.list_tools()
        return JSONResponse(
            {
                "ok": True,
                "type": "mcp",
                "tools": len(tools),
                "endpoints": {"sse": "/sse", "messages": "/messages/", "mcp": "/mcp"},
            }
        )

    return server


__all__ = ["INSTRUCTIONS", "SERVER_NAME", "build_server"]
