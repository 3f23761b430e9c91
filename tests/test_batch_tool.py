import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx
from mcp.server.fastmcp.exceptions import ToolError

from invapi_mcp.app import build_server
from invapi_mcp.backends.batch import batch_convert_impl, format_batch_result
from invapi_mcp.backends.invoice_models import BatchRequest, BatchResponse
from tests.invoice_samples import FakeInvapi, result_text, sample_invoice


def _response(results, summary=None) -> BatchResponse:
    payload = {"results": results}
    if summary is not None:
        payload["summary"] = summary
    return BatchResponse.model_validate(payload)


class FormatBatchResultTests(unittest.TestCase):
    def test_success_and_failure_reported_independently(self):
        response = _response(
            [
                {"id": "a", "success": True, "output": "<Invoice/>"},
                {"id": "b", "success": False, "error": "Invalid XML"},
            ],
            {"total": 2, "successful": 1, "failed": 1, "processing_time_ms": 42},
        )

        text = format_batch_result(response)

        lines = text.split("\n")
        self.assertEqual(lines[0], "Batch complete: 1/2 succeeded (42ms)")
        self.assertIn("[a] OK: <Invoice/>", lines)
        self.assertIn("[b] FAILED: Invalid XML", lines)

    def test_failures_interleaved_with_successes(self):
        response = _response(
            [
                {"id": "1", "success": False},
                {"id": "2", "success": True, "output": "ok"},
                {"id": "3", "success": False, "error": "nope"},
                {"id": "4", "success": True, "output": "ok"},
            ],
            {"total": 4, "successful": 2, "failed": 2, "processing_time_ms": 7},
        )

        lines = format_batch_result(response).split("\n")

        self.assertEqual(lines[0], "Batch complete: 2/4 succeeded (7ms)")
        self.assertEqual(
            [line for line in lines[2:] if line],
            [
                "[1] FAILED: Unknown error",
                "[2] OK: ok",
                "[3] FAILED: nope",
                "[4] OK: ok",
            ],
        )

    def test_headline_uses_response_summary_verbatim(self):
        response = _response(
            [{"id": "a", "success": True, "output": "x"}],
            {"total": 5, "successful": 3, "failed": 2, "processing_time_ms": 1},
        )

        self.assertTrue(
            format_batch_result(response).startswith("Batch complete: 3/5 succeeded")
        )

    def test_headline_counts_results_without_summary(self):
        response = _response(
            [
                {"id": "a", "success": True, "output": "x"},
                {"id": "b", "success": False, "error": "y"},
            ]
        )

        self.assertEqual(
            format_batch_result(response).split("\n")[0], "Batch complete: 1/2 succeeded"
        )

    def test_long_string_output_is_truncated(self):
        response = _response([{"id": "a", "success": True, "output": "x" * 250}])

        line = format_batch_result(response).split("\n")[2]

        self.assertEqual(line, "[a] OK: " + "x" * 200 + "…")

    def test_structured_output_is_pretty_printed_and_cut(self):
        output = {"invoice_number": "N" * 300}
        response = _response([{"id": "a", "success": True, "output": output}])

        text = format_batch_result(response)

        expected = json.dumps(output, indent=2, ensure_ascii=False)[:200]
        self.assertIn("[a] OK: " + expected + "\n", text)
        self.assertNotIn("N" * 300, text)

    def test_structured_error_keeps_sibling_outcomes(self):
        response = _response(
            [
                {"id": "a", "success": True, "output": "<Invoice/>"},
                {"id": "b", "success": False, "error": {"code": "E1", "message": "bad xml"}},
                {"id": "c", "success": False, "error": {"code": "E2"}},
            ],
            {"total": 3, "successful": 1},
        )

        lines = format_batch_result(response).split("\n")

        self.assertEqual(lines[0], "Batch complete: 1/3 succeeded")
        self.assertIn("[a] OK: <Invoice/>", lines)
        self.assertIn("[b] FAILED: bad xml", lines)
        self.assertIn('[c] FAILED: {"code": "E2"}', lines)

    def test_unparseable_row_reported_as_failure(self):
        response = _response(
            [
                {"id": "a", "success": True, "output": "ok"},
                {"id": "b", "success": "sometimes", "error": "timeout"},
                "garbage",
            ]
        )

        lines = format_batch_result(response).split("\n")

        self.assertEqual(lines[0], "Batch complete: 1/3 succeeded")
        self.assertIn("[a] OK: ok", lines)
        self.assertIn("[b] FAILED: timeout", lines)
        self.assertIn("[None] FAILED: garbage", lines)


class BatchToolTests(unittest.IsolatedAsyncioTestCase):
    async def test_operations_forwarded_and_summarized(self):
        fake = FakeInvapi(
            lambda request: httpx.Response(
                200,
                json={
                    "results": [
                        {"id": "a", "success": True, "output": "<Invoice/>"},
                        {"id": "b", "success": False, "error": "Malformed"},
                    ],
                    "summary": {
                        "total": 2,
                        "successful": 1,
                        "failed": 1,
                        "processing_time_ms": 12,
                    },
                },
            )
        )
        request = BatchRequest.model_validate(
            {
                "operations": [
                    {"id": "a", "operation": "json_to_ubl", "input": sample_invoice()},
                    {"id": "b", "operation": "cii_to_json", "input": "<broken"},
                ]
            }
        )

        result = await batch_convert_impl(fake.client(), request.operations)

        self.assertFalse(result.isError)
        self.assertEqual(fake.last.url.path, "/api/v1/batch/convert")
        self.assertEqual(
            fake.last_json(),
            {
                "operations": [
                    {"id": "a", "operation": "json_to_ubl", "input": sample_invoice()},
                    {"id": "b", "operation": "cii_to_json", "input": "<broken"},
                ]
            },
        )
        text = result_text(result)
        self.assertTrue(text.startswith("Batch complete: 1/2 succeeded (12ms)"))
        self.assertIn("[a] OK: <Invoice/>", text)
        self.assertIn("[b] FAILED: Malformed", text)

    async def test_malformed_row_does_not_hide_other_results(self):
        fake = FakeInvapi(
            lambda request: httpx.Response(
                200,
                json={
                    "results": [
                        {"id": "a", "success": True, "output": "<Invoice/>"},
                        {
                            "id": "b",
                            "success": False,
                            "error": {"code": "E1", "message": "bad xml"},
                        },
                    ],
                    "summary": {"total": 2, "successful": 1, "failed": 1},
                },
            )
        )
        request = BatchRequest.model_validate(
            {
                "operations": [
                    {"id": "a", "operation": "ubl_to_json", "input": "<Invoice/>"},
                    {"id": "b", "operation": "ubl_to_json", "input": "<broken"},
                ]
            }
        )

        result = await batch_convert_impl(fake.client(), request.operations)

        self.assertFalse(result.isError)
        text = result_text(result)
        self.assertIn("[a] OK: <Invoice/>", text)
        self.assertIn("[b] FAILED: bad xml", text)

    async def test_malformed_response_is_an_error_result(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, json={"results": "nope"}))
        request = BatchRequest.model_validate(
            {"operations": [{"id": "a", "operation": "ubl_to_json", "input": "<x/>"}]}
        )

        result = await batch_convert_impl(fake.client(), request.operations)

        self.assertTrue(result.isError)
        self.assertTrue(result_text(result).startswith("Validation failed:\n  - results"))

    async def test_runtime_rejects_batch_size_before_network(self):
        fake = FakeInvapi()
        server = build_server(fake.settings(), transport=fake.transport())
        operation = {"id": "x", "operation": "ubl_to_json", "input": "<x/>"}

        for operations in ([], [operation] * 101):
            with self.subTest(count=len(operations)):
                with self.assertRaises(ToolError):
                    await server.call_tool("invapi_batch_convert", {"operations": operations})

        self.assertEqual(fake.requests, [])


if __name__ == "__main__":
    unittest.main()
