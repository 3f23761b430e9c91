#!/usr/bin/env python3
"""
Lightweight smoke test for invapi-mcp against the live API.

Reads INVAPI_API_KEY (and optional INVAPI_BASE_URL) from the environment,
fetches the account overview, then validates a UBL file if one is given:

    python scripts/smoke_invapi.py [path/to/invoice.xml]

Each call consumes credits on the account.
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invapi_mcp.backends.invapi_client import InvapiClient  # noqa: E402
from invapi_mcp.backends.user import get_user_impl  # noqa: E402
from invapi_mcp.backends.validation import validate_ubl_impl  # noqa: E402
from invapi_mcp.utils.config import API_KEY_ENV, Settings  # noqa: E402


def _text(result) -> str:
    return "\n".join(block.text for block in result.content)


async def _smoke(settings: Settings, xml_path: str | None) -> int:
    client = InvapiClient(settings)

    user = await get_user_impl(client)
    print(f"[smoke] API: {settings.base_url}")
    print(_text(user))
    if user.isError:
        return 1

    if xml_path:
        report = await validate_ubl_impl(client, file_path=xml_path)
        print(f"[smoke] Validate {xml_path}:")
        print(_text(report))
        if report.isError:
            return 1

    print("[smoke] Done.")
    return 0


def main() -> None:
    settings = Settings.from_env()
    if not settings.is_ready:
        print(f"[smoke] {API_KEY_ENV} is not set; nothing to do.", file=sys.stderr)
        raise SystemExit(1)
    xml_path = sys.argv[1] if len(sys.argv) > 1 else None
    raise SystemExit(asyncio.run(_smoke(settings, xml_path)))


if __name__ == "__main__":
    main()
