"""MCP tools extracting invoice data and QR payloads from PDFs and images."""
from __future__ import annotations

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from ..api.envelopes import json_text, text_result, tool_errors
from .invapi_client import InvapiClient
from .invapi_files import encode_file
from .invoice_models import Category, ExtractionParty

EXTRACT_INVOICE = "/api/v1/file/json"
EXTRACT_QR = "/api/v1/file/qr"

_READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)


async def build_extraction_request(
    file_path: str,
    *,
    qr: bool = False,
    parties: list[ExtractionParty] | None = None,
    instructions: str | None = None,
    categories: list[Category] | None = None,
) -> dict[str, Any]:
    """Assemble the request body; optional hints are only sent when given."""

    body: dict[str, Any] = {"file": await encode_file(file_path)}
    if qr:
        body["qr"] = True
    if parties:
        body["parties"] = [party.to_payload() for party in parties]
    if instructions:
        body["instructions"] = instructions
    if categories:
        body["categories"] = [category.to_payload() for category in categories]
    return body


@tool_errors
async def extract_invoice_impl(
    client: InvapiClient,
    file_path: str,
    qr: bool = False,
    parties: list[ExtractionParty] | None = None,
    instructions: str | None = None,
    categories: list[Category] | None = None,
) -> CallToolResult:
    body = await build_extraction_request(
        file_path,
        qr=qr,
        parties=parties,
        instructions=instructions,
        categories=categories,
    )
    result = await client.post_json_get_json(EXTRACT_INVOICE, body)
    return text_result(json_text(result))


@tool_errors
async def extract_qr_impl(client: InvapiClient, file_path: str) -> CallToolResult:
    body = {"file": await encode_file(file_path)}
    result = await client.post_json_get_json(EXTRACT_QR, body)
    return text_result(json_text(result))


def register(server: FastMCP, client: InvapiClient) -> None:
    """Register extraction tools."""

    @server.tool(
        name="invapi_extract_invoice",
        title="Extract Invoice from PDF/Image",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def extract_invoice(
        file_path: Annotated[
            str, Field(description="Path to the PDF or image file (PNG, JPG, etc.)")
        ],
        qr: Annotated[
            bool, Field(description="Whether to also extract QR code data from the file")
        ] = False,
        parties: Annotated[
            list[ExtractionParty] | None,
            Field(description="Known parties (sellers/buyers) to improve extraction accuracy"),
        ] = None,
        instructions: Annotated[
            str | None,
            Field(
                description=(
                    "Custom instructions for the AI extraction, "
                    "e.g. 'This is always an incoming invoice'"
                )
            ),
        ] = None,
        categories: Annotated[
            list[Category] | None,
            Field(description="Categories for automatic invoice classification"),
        ] = None,
    ) -> CallToolResult:
        """Extracts structured invoice data from a PDF or image file using AI.

        Returns the invoice as a JSON object. Optionally pass known parties for
        better accuracy, custom instructions for the AI, categories for
        classification, and enable QR code extraction.
        """
        return await extract_invoice_impl(
            client, file_path, qr, parties, instructions, categories
        )

    @server.tool(
        name="invapi_extract_qr",
        title="Extract QR Code from Image",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def extract_qr(
        file_path: Annotated[
            str, Field(description="Path to the image file (PNG, JPG, etc.)")
        ],
    ) -> CallToolResult:
        """Scans an image file for QR codes and returns the parsed data as JSON.

        Useful for extracting payment information from invoice QR codes.
        """
        return await extract_qr_impl(client, file_path)


__all__ = [
    "build_extraction_request",
    "extract_invoice_impl",
    "extract_qr_impl",
    "register",
]
