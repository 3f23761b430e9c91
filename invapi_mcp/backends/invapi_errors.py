"""Turn failures raised during a tool call into one readable message."""
from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from ..utils.config import DEFAULT_BASE_URL
from .invoice_models import format_validation_errors

DEFAULT_API_HOST = httpx.URL(DEFAULT_BASE_URL).host

STATUS_MESSAGES: dict[int, str] = {
    401: "Authentication failed. Ensure INVAPI_API_KEY is set correctly.",
    402: "Insufficient credits. Top up your account at https://invapi.org.",
    429: "Rate limit exceeded. Wait a moment and retry.",
}
TIMEOUT_MESSAGE = (
    "Error: Request timed out. The file may be too large or the server is busy."
)


class MissingInput(ValueError):
    """Raised when a tool got neither inline content nor a file path."""


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _field_errors(body: Any) -> list[Any] | None:
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    errors = data.get("errors")
    return errors if isinstance(errors, list) and errors else None


def _describe_status(response: httpx.Response) -> str:
    status = response.status_code
    body = _json_body(response)

    errors = _field_errors(body) if status == 400 else None
    if errors:
        lines = []
        for entry in errors:
            entry = entry if isinstance(entry, dict) else {}
            path = entry.get("path") or "unknown"
            message = entry.get("message") or "invalid"
            lines.append(f"  - {path}: {message}")
        return "Validation failed (400):\n" + "\n".join(lines)

    if status in STATUS_MESSAGES:
        return f"Error: {STATUS_MESSAGES[status]}"

    message = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("statusMessage")
    return f"API error ({status}): {message or 'Unknown error'}"


def _request_host(error: httpx.RequestError) -> str:
    try:
        return error.request.url.host or DEFAULT_API_HOST
    except RuntimeError:
        return DEFAULT_API_HOST


def describe_api_error(error: BaseException) -> str:
    """Classify ``error``; always returns a non-empty message and never raises."""

    try:
        if isinstance(error, httpx.HTTPStatusError):
            return _describe_status(error.response)
        if isinstance(error, httpx.TimeoutException):
            return TIMEOUT_MESSAGE
        if isinstance(error, httpx.ConnectError):
            return (
                f"Error: Cannot reach {_request_host(error)}. "
                "Check your internet connection."
            )
        if isinstance(error, ValidationError):
            lines = [f"  - {line}" for line in format_validation_errors(error)]
            return "Validation failed:\n" + "\n".join(lines)
        text = str(error)
    except Exception:
        text = ""
    return f"Error: {text or type(error).__name__}"


__all__ = ["MissingInput", "STATUS_MESSAGES", "TIMEOUT_MESSAGE", "describe_api_error"]
