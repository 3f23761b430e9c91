"""MCP tools validating XML invoices against XRechnung 3.0.2 (EN 16931)."""
from __future__ import annotations

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from ..api.envelopes import text_result, tool_errors
from .conversion import resolve_xml_input
from .invapi_client import InvapiClient
from .invoice_models import ValidationReport

VALIDATE_UBL = "/api/v1/ubl/validate"
VALIDATE_CII = "/api/v1/cii/validate"
VALIDATE_XML = "/api/v1/xml/validate"

_READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)


def format_validation_result(result: ValidationReport) -> str:
    if result.valid:
        return "Validation passed: The invoice is valid."

    lines = ["Validation failed:"]
    if result.errors:
        for error in result.errors:
            lines.append(f"  - {error.message or 'Unknown validation error'}")
    else:
        lines.append("  - Unknown validation error")
    return "\n".join(lines)


async def _validate(
    client: InvapiClient, endpoint: str, xml: str | None, file_path: str | None
) -> CallToolResult:
    content = await resolve_xml_input(xml, file_path)
    payload: Any = await client.post_xml_get_json(endpoint, content)
    report = ValidationReport.model_validate(payload)
    return text_result(format_validation_result(report))


@tool_errors
async def validate_ubl_impl(
    client: InvapiClient, xml: str | None = None, file_path: str | None = None
) -> CallToolResult:
    return await _validate(client, VALIDATE_UBL, xml, file_path)


@tool_errors
async def validate_cii_impl(
    client: InvapiClient, xml: str | None = None, file_path: str | None = None
) -> CallToolResult:
    return await _validate(client, VALIDATE_CII, xml, file_path)


@tool_errors
async def validate_xml_impl(
    client: InvapiClient, xml: str | None = None, file_path: str | None = None
) -> CallToolResult:
    return await _validate(client, VALIDATE_XML, xml, file_path)


def register(server: FastMCP, client: InvapiClient) -> None:
    """Register validation tools."""

    @server.tool(
        name="invapi_validate_ubl",
        title="Validate UBL XML",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def validate_ubl(
        xml: Annotated[str | None, Field(description="UBL XML content as a string")] = None,
        file_path: Annotated[
            str | None, Field(description="Path to a UBL XML file on disk")
        ] = None,
    ) -> CallToolResult:
        """Validates a UBL XML invoice against XRechnung 3.0.2 (EN 16931) rules.

        Provide either the XML content as a string or a path to an XML file.
        """
        return await validate_ubl_impl(client, xml, file_path)

    @server.tool(
        name="invapi_validate_cii",
        title="Validate CII XML",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def validate_cii(
        xml: Annotated[str | None, Field(description="CII XML content as a string")] = None,
        file_path: Annotated[
            str | None, Field(description="Path to a CII XML file on disk")
        ] = None,
    ) -> CallToolResult:
        """Validates a CII XML invoice against XRechnung 3.0.2 (EN 16931) rules.

        Provide either the XML content as a string or a path to an XML file.
        """
        return await validate_cii_impl(client, xml, file_path)

    @server.tool(
        name="invapi_validate_xml",
        title="Validate XML Invoice",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def validate_xml(
        xml: Annotated[
            str | None, Field(description="XML invoice content as a string")
        ] = None,
        file_path: Annotated[
            str | None, Field(description="Path to an XML invoice file on disk")
        ] = None,
    ) -> CallToolResult:
        """Validates an XML invoice against XRechnung 3.0.2 (EN 16931) rules.

        The format (UBL or CII) is auto-detected. Provide either the XML content
        as a string or a path to an XML file.
        """
        return await validate_xml_impl(client, xml, file_path)


__all__ = [
    "format_validation_result",
    "register",
    "validate_cii_impl",
    "validate_ubl_impl",
    "validate_xml_impl",
]
