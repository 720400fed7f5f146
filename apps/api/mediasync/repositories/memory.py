"""In-memory resource store used by the API and tests."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from threading import Lock
from typing import Literal
from uuid import uuid4

from mediasync.domain.media_state import can_transition
from mediasync.schemas.media import MediaItemState

WebhookDisposition = Literal["applied", "ignored", "not_found", "rejected"]

DEFAULT_AUDIT_LIMIT = 1000


@dataclass(slots=True)
class MediaItemRecord:
    id: str
    title: str
    state: MediaItemState
    created_at: datetime
    updated_at: datetime
    external_asset_id: str | None = None
    playback_id: str | None = None


@dataclass(slots=True)
class ReadyMergeResult:
    item: MediaItemRecord
    applied: bool


@dataclass(slots=True)
class WebhookAuditRecord:
    event_type: str | None
    event_id: str | None
    disposition: WebhookDisposition
    reason: str | None
    safe_correlation_token: str | None
    received_at: datetime


@dataclass(slots=True)
class InMemoryStore:
    """Single source of truth for media items.

    Creation and the ready merge are the only mutations. The merge runs under a
    lock keyed by item id so concurrent duplicate deliveries observe one
    transition. The webhook audit trail keeps only the newest
    ``audit_limit`` entries.
    """

    media_items: dict[str, MediaItemRecord] = field(default_factory=dict)
    audit_limit: int = DEFAULT_AUDIT_LIMIT
    webhook_audit_events: deque[WebhookAuditRecord] = field(init=False)
    media_item_write_count: int = 0
    _locks_guard: Lock = field(default_factory=Lock, repr=False)
    _item_locks: dict[str, Lock] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.webhook_audit_events = deque(maxlen=self.audit_limit)

    def create_media_item(self, *, title: str) -> MediaItemRecord:
        now = datetime.now(UTC)
        item = MediaItemRecord(
            id=str(uuid4()),
            title=title,
            state=MediaItemState.PENDING,
            created_at=now,
            updated_at=now,
        )
        with self._locks_guard:
            self.media_items[item.id] = item
            self._item_locks[item.id] = Lock()
            self.media_item_write_count += 1
        return item

    def get_media_item(self, item_id: str) -> MediaItemRecord | None:
        return self.media_items.get(item_id)

    def list_media_items(self) -> list[MediaItemRecord]:
        items = list(self.media_items.values())
        items.sort(key=lambda record: record.created_at)
        return items

    def _item_lock(self, item_id: str) -> Lock | None:
        # Locks exist only for created items; items are never removed.
        with self._locks_guard:
            return self._item_locks.get(item_id)

    def mark_ready_if_pending(
        self,
        *,
        item_id: str,
        external_asset_id: str,
        playback_id: str,
    ) -> ReadyMergeResult | None:
        """Checked Pending -> Ready write; both ids are set together or not at all."""
        lock = self._item_lock(item_id)
        if lock is None:
            return None
        with lock:
            item = self.media_items[item_id]
            if not can_transition(item.state, MediaItemState.READY):
                return ReadyMergeResult(item=item, applied=False)

            item.external_asset_id = external_asset_id
            item.playback_id = playback_id
            item.state = MediaItemState.READY
            item.updated_at = datetime.now(UTC)
            self.media_item_write_count += 1
            return ReadyMergeResult(item=item, applied=True)

    def record_webhook(
        self,
        *,
        event_type: str | None,
        event_id: str | None,
        disposition: WebhookDisposition,
        reason: str | None = None,
        safe_correlation_token: str | None = None,
    ) -> WebhookAuditRecord:
        record = WebhookAuditRecord(
            event_type=event_type,
            event_id=event_id,
            disposition=disposition,
            reason=reason,
            safe_correlation_token=safe_correlation_token,
            received_at=datetime.now(UTC),
        )
        with self._locks_guard:
            self.webhook_audit_events.append(record)
        return record
