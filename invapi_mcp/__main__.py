"""Entry point for python -m invapi_mcp."""
from __future__ import annotations

import logging
from typing import Sequence


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments, check the credential and serve."""
    from invapi_mcp.app import build_server
    from invapi_mcp.cli import build_parser, run
    from invapi_mcp.utils.config import Settings
    from invapi_mcp.utils.logging import configure_root

    configure_root()
    logger = logging.getLogger("invapi_mcp.cli")

    parser = build_parser()
    args = parser.parse_args(argv)

    run(
        args,
        logger=logger,
        settings=Settings.from_env(),
        server_factory=build_server,
    )


if __name__ == "__main__":
    main()
