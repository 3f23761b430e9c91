"""HTTP transport for the Invapi e-invoicing API.

One helper per (request body, response body) pairing the endpoints use.
Every call opens its own ``httpx.AsyncClient``, makes a single attempt and
raises ``httpx.HTTPStatusError`` for error statuses.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..utils.config import Settings

_LOGGER = logging.getLogger("invapi_mcp.backends.invapi_client")

API_KEY_HEADER = "x-api-key"
JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"


class InvapiClient:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    def _headers(self, **extra: str) -> dict[str, str]:
        if not self.settings.api_key:
            raise RuntimeError(
                "INVAPI_API_KEY environment variable is required. "
                "Get your API key at https://invapi.org"
            )
        headers = {API_KEY_HEADER: self.settings.api_key}
        headers.update(extra)
        return headers

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: dict[str, str],
        timeout: float,
        json: Any = None,
        content: bytes | str | None = None,
    ) -> httpx.Response:
        _LOGGER.debug("%s %s", method, endpoint)
        async with httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(
                method, endpoint, headers=headers, json=json, content=content
            )
        if response.is_error:
            _LOGGER.warning(
                "Invapi error status=%s method=%s endpoint=%s",
                response.status_code,
                method,
                endpoint,
            )
        response.raise_for_status()
        return response

    async def post_json_get_json(self, endpoint: str, data: Any) -> Any:
        """POST a JSON body, decode a JSON response."""
        response = await self._send(
            "POST",
            endpoint,
            headers=self._headers(
                **{"Content-Type": JSON_CONTENT_TYPE, "Accept": JSON_CONTENT_TYPE}
            ),
            timeout=self.settings.timeout,
            json=data,
        )
        return response.json()

    async def post_json_get_text(self, endpoint: str, data: Any) -> str:
        """POST a JSON body, return the response text (XML)."""
        response = await self._send(
            "POST",
            endpoint,
            headers=self._headers(**{"Content-Type": JSON_CONTENT_TYPE}),
            timeout=self.settings.timeout,
            json=data,
        )
        return response.text

    async def post_json_get_binary(self, endpoint: str, data: Any) -> bytes:
        """POST a JSON body, return the raw response bytes (XLSX, PDF)."""
        response = await self._send(
            "POST",
            endpoint,
            headers=self._headers(**{"Content-Type": JSON_CONTENT_TYPE}),
            timeout=self.settings.timeout,
            json=data,
        )
        return response.content

    async def post_xml_get_json(self, endpoint: str, xml: str) -> Any:
        """POST an XML document as-is, decode a JSON response."""
        response = await self._send(
            "POST",
            endpoint,
            headers=self._headers(
                **{"Content-Type": XML_CONTENT_TYPE, "Accept": JSON_CONTENT_TYPE}
            ),
            timeout=self.settings.timeout,
            content=xml.encode("utf-8"),
        )
        return response.json()

    async def post_binary_get_json(
        self, endpoint: str, payload: bytes, content_type: str
    ) -> Any:
        """POST raw bytes (PDF, image), decode a JSON response."""
        response = await self._send(
            "POST",
            endpoint,
            headers=self._headers(
                **{"Content-Type": content_type, "Accept": JSON_CONTENT_TYPE}
            ),
            timeout=self.settings.timeout,
            content=payload,
        )
        return response.json()

    async def get_json(self, endpoint: str) -> Any:
        """GET a JSON document using the shorter lookup timeout."""
        response = await self._send(
            "GET",
            endpoint,
            headers=self._headers(Accept=JSON_CONTENT_TYPE),
            timeout=self.settings.lookup_timeout,
        )
        return response.json()


__all__ = ["API_KEY_HEADER", "InvapiClient"]
