import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx

from invapi_mcp.backends.invoice_models import UserInfo
from invapi_mcp.backends.user import format_user_info, get_user_impl
from tests.invoice_samples import FakeInvapi, result_text


class UserToolTests(unittest.IsolatedAsyncioTestCase):
    async def test_get_user_renders_credits(self):
        fake = FakeInvapi(
            lambda request: httpx.Response(
                200,
                json={
                    "email": "ops@example.com",
                    "role": "admin",
                    "credits": {"extraction": 10, "conversion": 250, "validation": 0, "qr": 5},
                },
            )
        )

        result = await get_user_impl(fake.client())

        self.assertFalse(result.isError)
        self.assertEqual(fake.last.method, "GET")
        self.assertEqual(fake.last.url.path, "/api/v1/user")
        self.assertEqual(
            result_text(result),
            "\n".join(
                [
                    "Email: ops@example.com",
                    "Role:  admin",
                    "",
                    "Credits remaining:",
                    "  Extraction: 10",
                    "  Conversion: 250",
                    "  Validation: 0",
                    "  QR:         5",
                ]
            ),
        )

    def test_missing_counters_show_not_available(self):
        text = format_user_info(
            UserInfo.model_validate({"email": "a@b.c", "role": "user", "credits": {"qr": 1}})
        )

        self.assertIn("  Extraction: N/A", text)
        self.assertIn("  QR:         1", text)

    def test_missing_credits_block(self):
        text = format_user_info(UserInfo.model_validate({"email": "a@b.c", "role": "user"}))

        self.assertIn("  Conversion: N/A", text)

    async def test_rate_limited(self):
        fake = FakeInvapi(lambda request: httpx.Response(429, text="slow down"))

        result = await get_user_impl(fake.client())

        self.assertTrue(result.isError)
        self.assertEqual(
            result_text(result), "Error: Rate limit exceeded. Wait a moment and retry."
        )


if __name__ == "__main__":
    unittest.main()
