"""MCP tools converting invoices between JSON, UBL, CII, XLSX and ZUGFeRD."""
from __future__ import annotations

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from ..api.envelopes import json_text, text_result, tool_errors
from .invapi_client import InvapiClient
from .invapi_errors import MissingInput
from .invapi_files import encode_file, read_file_bytes, read_file_text, save_file
from .invoice_models import Invoice

JSON_TO_UBL = "/api/v1/json/ubl"
JSON_TO_CII = "/api/v1/json/cii"
UBL_TO_JSON = "/api/v1/ubl/json"
CII_TO_JSON = "/api/v1/cii/json"
JSON_TO_XLSX = "/api/v1/json/xlsx"
JSON_TO_ZUGFERD = "/api/v1/json/zugferd"
ZUGFERD_TO_JSON = "/api/v1/zugferd/json"

PDF_CONTENT_TYPE = "application/pdf"

_WRITES_FILES = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=True
)
_READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)


async def resolve_xml_input(xml: str | None, file_path: str | None) -> str:
    """Return inline XML, or the contents of ``file_path``."""

    if xml:
        return xml
    if file_path:
        return await read_file_text(file_path)
    raise MissingInput("Provide either 'xml' or 'file_path'.")


async def _json_to_xml(
    client: InvapiClient,
    endpoint: str,
    label: str,
    invoice: Invoice,
    output_path: str | None,
) -> CallToolResult:
    xml = await client.post_json_get_text(endpoint, invoice.to_payload())
    if output_path:
        await save_file(output_path, xml.encode("utf-8"))
        return text_result(f"{label} saved to {output_path}")
    return text_result(xml)


@tool_errors
async def convert_json_to_ubl_impl(
    client: InvapiClient, invoice: Invoice, output_path: str | None = None
) -> CallToolResult:
    return await _json_to_xml(client, JSON_TO_UBL, "UBL XML", invoice, output_path)


@tool_errors
async def convert_json_to_cii_impl(
    client: InvapiClient, invoice: Invoice, output_path: str | None = None
) -> CallToolResult:
    return await _json_to_xml(client, JSON_TO_CII, "CII XML", invoice, output_path)


@tool_errors
async def convert_ubl_to_json_impl(
    client: InvapiClient, xml: str | None = None, file_path: str | None = None
) -> CallToolResult:
    content = await resolve_xml_input(xml, file_path)
    result = await client.post_xml_get_json(UBL_TO_JSON, content)
    return text_result(json_text(result))


@tool_errors
async def convert_cii_to_json_impl(
    client: InvapiClient, xml: str | None = None, file_path: str | None = None
) -> CallToolResult:
    content = await resolve_xml_input(xml, file_path)
    result = await client.post_xml_get_json(CII_TO_JSON, content)
    return text_result(json_text(result))


@tool_errors
async def convert_json_to_xlsx_impl(
    client: InvapiClient, invoices: list[Invoice], output_path: str
) -> CallToolResult:
    payload = {"invoices": [invoice.to_payload() for invoice in invoices]}
    workbook = await client.post_json_get_binary(JSON_TO_XLSX, payload)
    await save_file(output_path, workbook)
    return text_result(f"Excel file saved to {output_path} ({len(invoices)} invoice(s))")


@tool_errors
async def create_zugferd_pdf_impl(
    client: InvapiClient, pdf_path: str, invoice: Invoice, output_path: str
) -> CallToolResult:
    payload = {
        "file": await encode_file(pdf_path, PDF_CONTENT_TYPE),
        "invoice": invoice.to_payload(),
    }
    pdf = await client.post_json_get_binary(JSON_TO_ZUGFERD, payload)
    await save_file(output_path, pdf)
    return text_result(f"ZUGFeRD PDF saved to {output_path}")


@tool_errors
async def convert_zugferd_to_json_impl(
    client: InvapiClient, file_path: str
) -> CallToolResult:
    pdf = await read_file_bytes(file_path)
    result = await client.post_binary_get_json(ZUGFERD_TO_JSON, pdf, PDF_CONTENT_TYPE)
    return text_result(json_text(result))


def register(server: FastMCP, client: InvapiClient) -> None:
    """Register conversion tools."""

    @server.tool(
        name="invapi_convert_json_to_ubl",
        title="Convert JSON to UBL XML",
        annotations=_WRITES_FILES,
        structured_output=False,
    )
    async def convert_json_to_ubl(
        invoice: Invoice,
        output_path: Annotated[
            str | None,
            Field(description="File path to save the UBL XML output. If omitted, XML is returned inline."),
        ] = None,
    ) -> CallToolResult:
        """Converts an Invoice JSON object to UBL (Universal Business Language) XML format.

        Optionally saves the XML to a file. Returns the UBL XML string.
        """
        return await convert_json_to_ubl_impl(client, invoice, output_path)

    @server.tool(
        name="invapi_convert_json_to_cii",
        title="Convert JSON to CII XML",
        annotations=_WRITES_FILES,
        structured_output=False,
    )
    async def convert_json_to_cii(
        invoice: Invoice,
        output_path: Annotated[
            str | None,
            Field(description="File path to save the CII XML output. If omitted, XML is returned inline."),
        ] = None,
    ) -> CallToolResult:
        """Converts an Invoice JSON object to CII (Cross-Industry Invoice) XML format.

        Optionally saves the XML to a file. Returns the CII XML string.
        """
        return await convert_json_to_cii_impl(client, invoice, output_path)

    @server.tool(
        name="invapi_convert_ubl_to_json",
        title="Convert UBL XML to JSON",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def convert_ubl_to_json(
        xml: Annotated[str | None, Field(description="UBL XML content as a string")] = None,
        file_path: Annotated[
            str | None, Field(description="Path to a UBL XML file on disk")
        ] = None,
    ) -> CallToolResult:
        """Converts a UBL XML invoice to the Invapi JSON Invoice format.

        Provide either the XML content as a string or a path to an XML file.
        """
        return await convert_ubl_to_json_impl(client, xml, file_path)

    @server.tool(
        name="invapi_convert_cii_to_json",
        title="Convert CII XML to JSON",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def convert_cii_to_json(
        xml: Annotated[str | None, Field(description="CII XML content as a string")] = None,
        file_path: Annotated[
            str | None, Field(description="Path to a CII XML file on disk")
        ] = None,
    ) -> CallToolResult:
        """Converts a CII XML invoice to the Invapi JSON Invoice format.

        Provide either the XML content as a string or a path to an XML file.
        """
        return await convert_cii_to_json_impl(client, xml, file_path)

    @server.tool(
        name="invapi_convert_json_to_xlsx",
        title="Convert Invoices to Excel",
        annotations=_WRITES_FILES,
        structured_output=False,
    )
    async def convert_json_to_xlsx(
        invoices: Annotated[
            list[Invoice],
            Field(min_length=1, description="Array of Invoice objects to export"),
        ],
        output_path: Annotated[str, Field(description="File path to save the .xlsx file")],
    ) -> CallToolResult:
        """Converts one or more Invoice JSON objects to an Excel (.xlsx) file.

        The output_path is required since Excel files are binary.
        """
        return await convert_json_to_xlsx_impl(client, invoices, output_path)

    @server.tool(
        name="invapi_create_zugferd_pdf",
        title="Create ZUGFeRD PDF",
        annotations=_WRITES_FILES,
        structured_output=False,
    )
    async def create_zugferd_pdf(
        pdf_path: Annotated[str, Field(description="Path to the source PDF file")],
        invoice: Invoice,
        output_path: Annotated[
            str, Field(description="Path to save the resulting ZUGFeRD PDF")
        ],
    ) -> CallToolResult:
        """Creates a ZUGFeRD/Factur-X PDF by embedding CII XML invoice data into an existing PDF.

        Requires both a source PDF file and an Invoice JSON object. The invoice is
        converted to CII XML, validated, and embedded into the PDF.
        """
        return await create_zugferd_pdf_impl(client, pdf_path, invoice, output_path)

    @server.tool(
        name="invapi_convert_zugferd_to_json",
        title="Convert ZUGFeRD PDF to JSON",
        annotations=_READ_ONLY,
        structured_output=False,
    )
    async def convert_zugferd_to_json(
        file_path: Annotated[str, Field(description="Path to the ZUGFeRD PDF file")],
    ) -> CallToolResult:
        """Extracts the embedded CII XML from a ZUGFeRD/Factur-X PDF and converts it to JSON.

        The PDF must contain embedded XML invoice data.
        """
        return await convert_zugferd_to_json_impl(client, file_path)


__all__ = [
    "convert_cii_to_json_impl",
    "convert_json_to_cii_impl",
    "convert_json_to_ubl_impl",
    "convert_json_to_xlsx_impl",
    "convert_ubl_to_json_impl",
    "convert_zugferd_to_json_impl",
    "create_zugferd_pdf_impl",
    "register",
    "resolve_xml_input",
]
