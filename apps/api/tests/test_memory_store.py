"""Resource store tests."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC
from threading import Barrier
import unittest

from mediasync.repositories.memory import InMemoryStore
from mediasync.schemas.media import MediaItemState


class InMemoryStoreTests(unittest.TestCase):
    def test_create_assigns_unique_ids_and_pending_state(self) -> None:
        store = InMemoryStore()
        first = store.create_media_item(title="First")
        second = store.create_media_item(title="Second")

        self.assertTrue(first.id)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(first.state, MediaItemState.PENDING)
        self.assertIsNone(first.external_asset_id)
        self.assertIsNone(first.playback_id)
        self.assertEqual(first.created_at.tzinfo, UTC)
        self.assertEqual(first.created_at, first.updated_at)
        self.assertIs(store.get_media_item(first.id), first)
        self.assertEqual(store.media_item_write_count, 2)

    def test_get_unknown_item_returns_none(self) -> None:
        self.assertIsNone(InMemoryStore().get_media_item("missing"))

    def test_list_orders_by_creation_time(self) -> None:
        store = InMemoryStore()
        created = [store.create_media_item(title=f"Item {index}") for index in range(3)]
        self.assertEqual([item.id for item in store.list_media_items()], [item.id for item in created])

    def test_mark_ready_sets_both_ids_once(self) -> None:
        store = InMemoryStore()
        item = store.create_media_item(title="Demo")

        first = store.mark_ready_if_pending(item_id=item.id, external_asset_id="asset-1", playback_id="pb-1")
        self.assertIsNotNone(first)
        self.assertTrue(first.applied)
        self.assertEqual(item.state, MediaItemState.READY)
        self.assertEqual(item.external_asset_id, "asset-1")
        self.assertEqual(item.playback_id, "pb-1")
        writes_after_first = store.media_item_write_count

        second = store.mark_ready_if_pending(item_id=item.id, external_asset_id="asset-2", playback_id="pb-9")
        self.assertIsNotNone(second)
        self.assertFalse(second.applied)
        self.assertEqual(item.external_asset_id, "asset-1")
        self.assertEqual(item.playback_id, "pb-1")
        self.assertEqual(store.media_item_write_count, writes_after_first)

    def test_mark_ready_does_not_leave_failed_items(self) -> None:
        store = InMemoryStore()
        item = store.create_media_item(title="Broken")
        item.state = MediaItemState.FAILED

        result = store.mark_ready_if_pending(item_id=item.id, external_asset_id="asset-1", playback_id="pb-1")
        self.assertIsNotNone(result)
        self.assertFalse(result.applied)
        self.assertEqual(item.state, MediaItemState.FAILED)
        self.assertIsNone(item.playback_id)

    def test_mark_ready_for_unknown_item_creates_nothing(self) -> None:
        store = InMemoryStore()
        self.assertIsNone(
            store.mark_ready_if_pending(item_id="missing", external_asset_id="asset-1", playback_id="pb-1")
        )
        self.assertEqual(store.media_items, {})
        self.assertEqual(store.media_item_write_count, 0)

    def test_concurrent_ready_merges_apply_exactly_once(self) -> None:
        store = InMemoryStore()
        item = store.create_media_item(title="Race")
        workers = 8
        barrier = Barrier(workers)

        def merge(index: int) -> bool:
            barrier.wait()
            result = store.mark_ready_if_pending(
                item_id=item.id,
                external_asset_id=f"asset-{index}",
                playback_id=f"pb-{index}",
            )
            self.assertIsNotNone(result)
            return result.applied

        with ThreadPoolExecutor(max_workers=workers) as pool:
            applied = list(pool.map(merge, range(workers)))

        self.assertEqual(applied.count(True), 1)
        winner = applied.index(True)
        self.assertEqual(item.external_asset_id, f"asset-{winner}")
        self.assertEqual(item.playback_id, f"pb-{winner}")

    def test_record_webhook_appends_audit_entry(self) -> None:
        store = InMemoryStore()
        record = store.record_webhook(
            event_type="video.asset.ready",
            event_id="evt-1",
            disposition="rejected",
            reason="signature_mismatch",
        )
        self.assertEqual(list(store.webhook_audit_events), [record])
        self.assertEqual(record.received_at.tzinfo, UTC)

    def test_audit_trail_keeps_only_newest_entries(self) -> None:
        store = InMemoryStore(audit_limit=3)
        for index in range(10):
            store.record_webhook(
                event_type=None,
                event_id=f"evt-{index}",
                disposition="rejected",
                reason="missing_header",
            )

        self.assertEqual(len(store.webhook_audit_events), 3)
        self.assertEqual([event.event_id for event in store.webhook_audit_events], ["evt-7", "evt-8", "evt-9"])

    def test_unknown_item_merges_allocate_no_locks(self) -> None:
        store = InMemoryStore()
        item = store.create_media_item(title="Demo")

        for index in range(50):
            store.mark_ready_if_pending(item_id=f"unknown-{index}", external_asset_id="asset-1", playback_id="pb-1")

        self.assertEqual(set(store._item_locks), {item.id})
