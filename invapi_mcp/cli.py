"""Minimal CLI helpers for running the MCP server."""
from __future__ import annotations

import argparse
import logging
from typing import Callable

from mcp.server.fastmcp import FastMCP

from .utils.config import API_KEY_ENV, Settings

ServerFactory = Callable[[Settings], FastMCP]
ServeFn = Callable[[FastMCP, argparse.Namespace], None]

TRANSPORTS = ("stdio", "sse", "streamable-http")


def build_parser() -> argparse.ArgumentParser:
    """Create an argument parser for the runtime."""

    parser = argparse.ArgumentParser(description="invapi-mcp server")
    parser.add_argument(
        "--transport",
        type=str,
        default="stdio",
        choices=list(TRANSPORTS),
        help="Transport mechanism to expose (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host for the HTTP transports (sse, streamable-http)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8099,
        help="Port for the HTTP transports (sse, streamable-http)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def serve(server: FastMCP, args: argparse.Namespace) -> None:
    """Run ``server`` on the transport selected by ``args``; blocks until stopped."""

    if args.transport != "stdio":
        server.settings.host = args.host
        server.settings.port = int(args.port)
    server.run(transport=args.transport)


def run(
    args: argparse.Namespace,
    *,
    logger: logging.Logger,
    settings: Settings,
    server_factory: ServerFactory,
    serve_fn: ServeFn = serve,
) -> None:
    """Check the credential, build the server and serve until terminated."""

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    if not settings.is_ready:
        logger.error("%s environment variable is required.", API_KEY_ENV)
        logger.error("Get your API key at https://invapi.org")
        raise SystemExit(1)

    if args.transport != "stdio" and (args.port <= 0 or args.port > 65535):
        logger.error("Invalid --port: %s (must be between 1 and 65535)", args.port)
        raise SystemExit(2)

    logger.info(
        "Starting Invapi MCP server (transport=%s, api=%s)",
        args.transport,
        settings.base_url,
    )

    try:
        server = server_factory(settings)
        if args.transport != "stdio":
            logger.debug("Listening on http://%s:%s", args.host, args.port)
        serve_fn(server, args)
    except Exception:
        logger.exception("Fatal error")
        raise SystemExit(1)


__all__ = ["TRANSPORTS", "build_parser", "run", "serve"]
