"""Upload session broker tests."""

from __future__ import annotations

import unittest

from mediasync.adapters.processor import MockUploadProcessor
from mediasync.errors import ApiError
from mediasync.repositories.memory import InMemoryStore
from mediasync.schemas.media import MediaItemState
from mediasync.services.uploads import UploadSessionBroker


class UploadSessionBrokerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.processor = MockUploadProcessor()
        self.broker = UploadSessionBroker(self.store, self.processor)

    def test_begin_upload_threads_item_id_as_correlation_token(self) -> None:
        seen_ids: set[str] = set()
        for title in ("Demo", "  Padded title  ", "ünïcode"):
            with self.subTest(title=title):
                result = self.broker.begin_upload(title=title)

                self.assertEqual(result.media_item.state, MediaItemState.PENDING)
                self.assertEqual(result.media_item.title, title.strip())
                self.assertTrue(result.media_item.id)
                self.assertNotIn(result.media_item.id, seen_ids)
                seen_ids.add(result.media_item.id)
                self.assertEqual(result.credential.correlation_token, result.media_item.id)
                self.assertEqual(self.processor.requests[-1].correlation_token, result.media_item.id)
                self.assertEqual(self.processor.requests[-1].playback_policy, "public")
                self.assertGreater(result.credential.expires_at, result.media_item.created_at)

    def test_empty_title_is_rejected_before_persisting(self) -> None:
        for title in ("", "   "):
            with self.subTest(title=title):
                with self.assertRaises(ApiError) as context:
                    self.broker.begin_upload(title=title)
                self.assertEqual(context.exception.status_code, 422)
                self.assertEqual(context.exception.payload.code, "VALIDATION_ERROR")

        self.assertEqual(self.store.media_items, {})
        self.assertEqual(self.processor.requests, [])

    def test_upstream_failure_keeps_pending_item_for_retry(self) -> None:
        self.processor.failure_message = "quota exceeded"

        with self.assertRaises(ApiError) as context:
            self.broker.begin_upload(title="Demo")

        self.assertEqual(context.exception.status_code, 502)
        self.assertEqual(context.exception.payload.code, "UPSTREAM_UNAVAILABLE")
        item_id = context.exception.payload.details["media_item_id"]
        record = self.store.get_media_item(item_id)
        self.assertIsNotNone(record)
        self.assertEqual(record.state, MediaItemState.PENDING)

        credential = self.broker.request_upload(item_id=item_id)
        self.assertEqual(credential.correlation_token, item_id)
        self.assertEqual(len(self.store.media_items), 1)

    def test_request_upload_for_unknown_item_is_not_found(self) -> None:
        with self.assertRaises(ApiError) as context:
            self.broker.request_upload(item_id="missing")
        self.assertEqual(context.exception.status_code, 404)
        self.assertEqual(context.exception.payload.code, "RESOURCE_NOT_FOUND")

    def test_request_upload_requires_pending_item(self) -> None:
        result = self.broker.begin_upload(title="Demo")
        self.store.mark_ready_if_pending(
            item_id=result.media_item.id,
            external_asset_id="asset-1",
            playback_id="pb-1",
        )

        with self.assertRaises(ApiError) as context:
            self.broker.request_upload(item_id=result.media_item.id)

        self.assertEqual(context.exception.status_code, 409)
        self.assertEqual(context.exception.payload.code, "MEDIA_ITEM_NOT_PENDING")
        self.assertEqual(context.exception.payload.details["current_state"], MediaItemState.READY)
