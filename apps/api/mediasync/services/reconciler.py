"""Processor event reconciliation service layer."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
import logging
from typing import Any

from pydantic import ValidationError

from mediasync.core.logging import safe_log_identifier
from mediasync.repositories.memory import InMemoryStore
from mediasync.schemas.webhook import ReadyAssetData
from mediasync.services.notifier import ChangeNotifier

logger = logging.getLogger(__name__)

ASSET_READY_EVENT = "video.asset.ready"


class ReconcileOutcome(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    NOT_FOUND = "not_found"


EventHandler = Callable[[str | None, Mapping[str, Any]], ReconcileOutcome]


class EventReconciler:
    """Merges verified processor events into the store.

    Only the asset-ready event changes state. Any other event type is
    acknowledged as ignored so new processor event kinds never break delivery.
    """

    def __init__(self, store: InMemoryStore, notifier: ChangeNotifier) -> None:
        self._store = store
        self._notifier = notifier
        self._handlers: dict[str, EventHandler] = {
            ASSET_READY_EVENT: self._apply_asset_ready,
        }

    def reconcile(
        self,
        event_type: str,
        correlation_token: str | None,
        fields: Mapping[str, Any],
    ) -> ReconcileOutcome:
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(
                "reconcile.ignored event_type=%s correlation_token=%s reason=unhandled_event_type",
                event_type,
                safe_log_identifier(correlation_token, prefix="ctk"),
            )
            return ReconcileOutcome.IGNORED
        return handler(correlation_token, fields)

    def _apply_asset_ready(self, correlation_token: str | None, fields: Mapping[str, Any]) -> ReconcileOutcome:
        safe_token = safe_log_identifier(correlation_token, prefix="ctk")
        if not correlation_token:
            logger.warning("reconcile.not_found event_type=%s correlation_token=%s", ASSET_READY_EVENT, safe_token)
            return ReconcileOutcome.NOT_FOUND

        try:
            data = ReadyAssetData.model_validate(dict(fields))
        except ValidationError:
            logger.warning(
                "reconcile.ignored event_type=%s correlation_token=%s reason=invalid_asset_payload",
                ASSET_READY_EVENT,
                safe_token,
            )
            return ReconcileOutcome.IGNORED

        if not data.playback_ids:
            logger.warning(
                "reconcile.ignored event_type=%s correlation_token=%s reason=no_playback_ids",
                ASSET_READY_EVENT,
                safe_token,
            )
            return ReconcileOutcome.IGNORED
        # First listed playback id wins; the rest are dropped.
        playback_id = data.playback_ids[0].id

        result = self._store.mark_ready_if_pending(
            item_id=correlation_token,
            external_asset_id=data.id,
            playback_id=playback_id,
        )
        if result is None:
            logger.warning("reconcile.not_found event_type=%s correlation_token=%s", ASSET_READY_EVENT, safe_token)
            return ReconcileOutcome.NOT_FOUND

        if not result.applied:
            item = result.item
            if item.external_asset_id != data.id or item.playback_id != playback_id:
                logger.warning(
                    "reconcile.replayed correlation_token=%s state=%s reason=conflicting_duplicate",
                    safe_token,
                    item.state,
                )
            else:
                logger.info("reconcile.replayed correlation_token=%s state=%s", safe_token, item.state)
            return ReconcileOutcome.APPLIED

        logger.info(
            "reconcile.applied correlation_token=%s new_state=%s",
            safe_token,
            result.item.state,
        )
        self._notifier.notify(correlation_token)
        return ReconcileOutcome.APPLIED


__all__ = ["ASSET_READY_EVENT", "EventReconciler", "ReconcileOutcome"]
