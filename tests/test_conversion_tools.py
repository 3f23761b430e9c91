import base64
import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx

from invapi_mcp.backends.conversion import (
    convert_cii_to_json_impl,
    convert_json_to_cii_impl,
    convert_json_to_ubl_impl,
    convert_json_to_xlsx_impl,
    convert_ubl_to_json_impl,
    convert_zugferd_to_json_impl,
    create_zugferd_pdf_impl,
)
from invapi_mcp.backends.invoice_models import Invoice
from tests.invoice_samples import FakeInvapi, result_text, sample_invoice

UBL_XML = '<?xml version="1.0"?><Invoice xmlns="urn:oasis:names:specification:ubl"/>'


class ConversionToolTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tempdir.cleanup)
        self.workdir = Path(self.tempdir.name)
        self.invoice = Invoice.model_validate(sample_invoice())

    async def test_json_to_ubl_returns_xml_inline(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, text=UBL_XML))

        result = await convert_json_to_ubl_impl(fake.client(), self.invoice)

        self.assertFalse(result.isError)
        self.assertEqual(result_text(result), UBL_XML)
        self.assertEqual(fake.last.url.path, "/api/v1/json/ubl")
        self.assertEqual(fake.last_json(), sample_invoice())

    async def test_json_to_ubl_saves_output_path(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, text=UBL_XML))
        output = self.workdir / "out" / "invoice.xml"

        result = await convert_json_to_ubl_impl(fake.client(), self.invoice, str(output))

        self.assertFalse(result.isError)
        self.assertEqual(result_text(result), f"UBL XML saved to {output}")
        self.assertNotIn(UBL_XML, result_text(result))
        self.assertEqual(output.read_text(encoding="utf-8"), UBL_XML)

    async def test_json_to_cii_uses_cii_endpoint(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, text="<rsm:CrossIndustryInvoice/>"))
        output = self.workdir / "invoice.cii.xml"

        result = await convert_json_to_cii_impl(fake.client(), self.invoice, str(output))

        self.assertEqual(fake.last.url.path, "/api/v1/json/cii")
        self.assertEqual(result_text(result), f"CII XML saved to {output}")

    async def test_ubl_to_json_inline_xml(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, json={"invoice_number": "X-1"}))

        result = await convert_ubl_to_json_impl(fake.client(), xml=UBL_XML)

        self.assertFalse(result.isError)
        self.assertEqual(json.loads(result_text(result)), {"invoice_number": "X-1"})
        self.assertEqual(fake.last.url.path, "/api/v1/ubl/json")
        self.assertEqual(fake.last.headers["content-type"], "application/xml")
        self.assertEqual(fake.last.content.decode("utf-8"), UBL_XML)

    async def test_cii_to_json_reads_file(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, json={"ok": True}))
        source = self.workdir / "invoice.xml"
        source.write_text("<rsm:CrossIndustryInvoice/>", encoding="utf-8")

        result = await convert_cii_to_json_impl(fake.client(), file_path=str(source))

        self.assertFalse(result.isError)
        self.assertEqual(fake.last.url.path, "/api/v1/cii/json")
        self.assertEqual(fake.last.content, b"<rsm:CrossIndustryInvoice/>")

    async def test_xml_to_json_requires_xml_or_file(self):
        fake = FakeInvapi()

        result = await convert_ubl_to_json_impl(fake.client())

        self.assertTrue(result.isError)
        self.assertEqual(result_text(result), "Error: Provide either 'xml' or 'file_path'.")
        self.assertEqual(fake.requests, [])

    async def test_missing_input_file_is_an_error_result(self):
        fake = FakeInvapi()

        result = await convert_cii_to_json_impl(
            fake.client(), file_path=str(self.workdir / "missing.xml")
        )

        self.assertTrue(result.isError)
        self.assertTrue(result_text(result).startswith("Error: "))
        self.assertEqual(fake.requests, [])

    async def test_json_to_xlsx_saves_workbook(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, content=b"PK\x03\x04xlsx"))
        output = self.workdir / "invoices.xlsx"

        result = await convert_json_to_xlsx_impl(
            fake.client(), [self.invoice, self.invoice], str(output)
        )

        self.assertEqual(
            result_text(result), f"Excel file saved to {output} (2 invoice(s))"
        )
        self.assertEqual(output.read_bytes(), b"PK\x03\x04xlsx")
        self.assertEqual(fake.last_json(), {"invoices": [sample_invoice(), sample_invoice()]})

    async def test_create_zugferd_pdf_wraps_source_pdf(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, content=b"%PDF-zugferd"))
        source = self.workdir / "plain.pdf"
        source.write_bytes(b"%PDF-plain")
        output = self.workdir / "zugferd.pdf"

        result = await create_zugferd_pdf_impl(
            fake.client(), str(source), self.invoice, str(output)
        )

        self.assertEqual(result_text(result), f"ZUGFeRD PDF saved to {output}")
        self.assertEqual(output.read_bytes(), b"%PDF-zugferd")
        body = fake.last_json()
        self.assertEqual(fake.last.url.path, "/api/v1/json/zugferd")
        self.assertEqual(
            body["file"],
            {
                "content": base64.b64encode(b"%PDF-plain").decode("ascii"),
                "contentType": "application/pdf",
                "fileName": "plain.pdf",
            },
        )
        self.assertEqual(body["invoice"], sample_invoice())

    async def test_zugferd_to_json_posts_raw_pdf(self):
        fake = FakeInvapi(lambda request: httpx.Response(200, json={"invoice_number": "Z-1"}))
        source = self.workdir / "zugferd.pdf"
        source.write_bytes(b"%PDF-1.7 embedded")

        result = await convert_zugferd_to_json_impl(fake.client(), str(source))

        self.assertFalse(result.isError)
        self.assertEqual(fake.last.headers["content-type"], "application/pdf")
        self.assertEqual(fake.last.content, b"%PDF-1.7 embedded")
        self.assertIn('"invoice_number": "Z-1"', result_text(result))

    async def test_remote_failure_becomes_error_result(self):
        fake = FakeInvapi(lambda request: httpx.Response(401, json={"message": "no"}))
        output = self.workdir / "never.xml"

        result = await convert_json_to_ubl_impl(fake.client(), self.invoice, str(output))

        self.assertTrue(result.isError)
        self.assertEqual(
            result_text(result),
            "Error: Authentication failed. Ensure INVAPI_API_KEY is set correctly.",
        )
        self.assertFalse(output.exists())


if __name__ == "__main__":
    unittest.main()
