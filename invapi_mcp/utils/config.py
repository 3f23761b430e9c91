"""Runtime configuration helpers for the MCP server."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Optional

from dotenv import load_dotenv

# Load .env file from project root (if it exists)
load_dotenv()

API_KEY_ENV: Final[str] = "INVAPI_API_KEY"
DEFAULT_BASE_URL: Final[str] = "https://api.invapi.org"
DEFAULT_TIMEOUT: Final[float] = 120.0
DEFAULT_LOOKUP_TIMEOUT: Final[float] = 30.0


def _parse_int(value: str | None, *, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_int(name: str, *, default: int) -> int:
    return _parse_int(os.getenv(name), default=default)


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Credential and endpoint settings shared read-only by every tool."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        timeout = _env_int("INVAPI_TIMEOUT", default=int(DEFAULT_TIMEOUT))
        lookup_timeout = _env_int(
            "INVAPI_LOOKUP_TIMEOUT", default=int(DEFAULT_LOOKUP_TIMEOUT)
        )
        return cls(
            api_key=_env_str(API_KEY_ENV),
            base_url=(_env_str("INVAPI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            timeout=float(timeout if timeout > 0 else DEFAULT_TIMEOUT),
            lookup_timeout=float(
                lookup_timeout if lookup_timeout > 0 else DEFAULT_LOOKUP_TIMEOUT
            ),
        )

    @property
    def is_ready(self) -> bool:
        return bool(self.api_key)


__all__ = [
    "API_KEY_ENV",
    "DEFAULT_BASE_URL",
    "DEFAULT_LOOKUP_TIMEOUT",
    "DEFAULT_TIMEOUT",
    "Settings",
]
