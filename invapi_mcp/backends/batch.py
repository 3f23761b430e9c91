"""MCP tool running many conversions in one request."""
from __future__ import annotations

import json
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from ..api.envelopes import text_result, tool_errors
from .invapi_client import InvapiClient
from .invoice_models import (
    MAX_BATCH_OPERATIONS,
    BatchItemResult,
    BatchOperation,
    BatchResponse,
)

BATCH_ENDPOINT = "/api/v1/batch/convert"
PREVIEW_LENGTH = 200


def _preview(output: Any) -> str:
    if isinstance(output, str):
        suffix = "…" if len(output) > PREVIEW_LENGTH else ""
        return output[:PREVIEW_LENGTH] + suffix
    return json.dumps(output, indent=2, ensure_ascii=False)[:PREVIEW_LENGTH]


def _result_line(result: BatchItemResult) -> str:
    if result.success:
        return f"[{result.id}] OK: {_preview(result.output)}"
    return f"[{result.id}] FAILED: {result.error or 'Unknown error'}"


def format_batch_result(response: BatchResponse) -> str:
    """Render the headline plus one line per operation, in response order."""

    summary = response.summary
    if summary is not None:
        successful, total = summary.successful, summary.total
    else:
        successful = sum(1 for result in response.results if result.success)
        total = len(response.results)

    headline = f"Batch complete: {successful}/{total} succeeded"
    if summary is not None and summary.processing_time_ms is not None:
        headline += f" ({summary.processing_time_ms}ms)"

    lines = [headline, ""]
    for result in response.results:
        lines.append(_result_line(result))
        lines.append("")
    return "\n".join(lines)


@tool_errors
async def batch_convert_impl(
    client: InvapiClient, operations: list[BatchOperation]
) -> CallToolResult:
    payload = {"operations": [operation.to_payload() for operation in operations]}
    raw = await client.post_json_get_json(BATCH_ENDPOINT, payload)
    return text_result(format_batch_result(BatchResponse.model_validate(raw)))


def register(server: FastMCP, client: InvapiClient) -> None:
    """Register the batch conversion tool."""

    @server.tool(
        name="invapi_batch_convert",
        title="Batch Convert Invoices",
        annotations=ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        structured_output=False,
    )
    async def batch_convert(
        operations: Annotated[
            list[BatchOperation],
            Field(
                min_length=1,
                max_length=MAX_BATCH_OPERATIONS,
                description="Array of conversion operations to perform",
            ),
        ],
    ) -> CallToolResult:
        """Process multiple invoice conversion operations in a single request (up to 100).

        Each operation is processed independently; failures in one do not affect others.

        Supported operations:
          - json_to_ubl: Invoice JSON -> UBL XML
          - json_to_cii: Invoice JSON -> CII XML
          - ubl_to_json: UBL XML string -> Invoice JSON
          - cii_to_json: CII XML string -> Invoice JSON
          - zugferd_to_json: ZUGFeRD data -> Invoice JSON

        Each operation needs an 'id' (returned in results), an 'operation' type,
        and 'input' data.
        """
        return await batch_convert_impl(client, operations)


__all__ = ["batch_convert_impl", "format_batch_result", "register"]
