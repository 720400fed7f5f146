"""HTTP upload processor adapter tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import base64
import json
import unittest

import httpx

from mediasync.adapters.processor import MuxUploadProcessor, UploadProcessorError


def _processor(handler) -> MuxUploadProcessor:
    return MuxUploadProcessor(
        base_url="https://processor.test/",
        token_id="token-id",
        token_secret="token-secret",
        timeout_seconds=2.0,
        cors_origin="https://app.test",
        upload_expiry_seconds=600,
        transport=httpx.MockTransport(handler),
    )


class MuxUploadProcessorTests(unittest.TestCase):
    def test_create_upload_sends_passthrough_and_public_policy(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(
                201,
                json={"data": {"id": "up-1", "url": "https://storage.test/up-1", "timeout": 600, "status": "waiting"}},
            )

        processor = _processor(handler)
        before = datetime.now(UTC)
        target = processor.create_upload(correlation_token="item-1", playback_policy="public")
        processor.close()

        self.assertEqual(target.upload_id, "up-1")
        self.assertEqual(target.upload_url, "https://storage.test/up-1")
        self.assertGreaterEqual(target.expires_at, before + timedelta(seconds=600))

        request = captured[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), "https://processor.test/video/v1/uploads")
        expected_auth = base64.b64encode(b"token-id:token-secret").decode("ascii")
        self.assertEqual(request.headers["Authorization"], f"Basic {expected_auth}")
        body = json.loads(request.content)
        self.assertEqual(
            body,
            {
                "cors_origin": "https://app.test",
                "timeout": 600,
                "new_asset_settings": {"passthrough": "item-1", "playback_policy": ["public"]},
            },
        )

    def test_error_status_raises_processor_error(self) -> None:
        processor = _processor(lambda request: httpx.Response(401, json={"error": {"type": "unauthorized"}}))
        with self.assertRaises(UploadProcessorError):
            processor.create_upload(correlation_token="item-1", playback_policy="public")

    def test_timeout_raises_processor_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with self.assertRaises(UploadProcessorError) as context:
            _processor(handler).create_upload(correlation_token="item-1", playback_policy="public")
        self.assertIn("timed out", str(context.exception))

    def test_connection_error_raises_processor_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(UploadProcessorError):
            _processor(handler).create_upload(correlation_token="item-1", playback_policy="public")

    def test_malformed_response_raises_processor_error(self) -> None:
        for response in (
            httpx.Response(201, content=b"not json"),
            httpx.Response(201, json={"data": {"id": "up-1"}}),
            httpx.Response(201, json={"unexpected": True}),
        ):
            with self.subTest(body=response.content):
                with self.assertRaises(UploadProcessorError):
                    _processor(lambda request, response=response: response).create_upload(
                        correlation_token="item-1",
                        playback_policy="public",
                    )
