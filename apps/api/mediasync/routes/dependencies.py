"""Dependency wiring for routes."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request
from fastapi.requests import HTTPConnection
from pydantic import ValidationError

from mediasync.adapters.processor import UploadProcessor
from mediasync.core.config import Settings
from mediasync.core.logging import safe_log_identifier
from mediasync.errors import ApiError
from mediasync.repositories.memory import InMemoryStore
from mediasync.schemas.webhook import WebhookEnvelope
from mediasync.services.media_items import MediaItemService
from mediasync.services.notifier import ChangeNotifier
from mediasync.services.reconciler import EventReconciler
from mediasync.services.uploads import UploadSessionBroker
from mediasync.services.webhook_verifier import SIGNATURE_HEADER, verify

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WebhookRequestContext:
    """A verified webhook: the untouched body alongside its parsed envelope."""

    raw_body: bytes
    signature_header: str
    envelope: WebhookEnvelope
    correlation_id: str


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_app_settings(connection: HTTPConnection) -> Settings:
    return connection.app.state.settings


def get_store(connection: HTTPConnection) -> InMemoryStore:
    return connection.app.state.store


def get_notifier(connection: HTTPConnection) -> ChangeNotifier:
    return connection.app.state.notifier


def get_upload_processor(connection: HTTPConnection) -> UploadProcessor:
    return connection.app.state.processor


def get_media_item_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> MediaItemService:
    return MediaItemService(store)


def get_upload_broker(
    store: Annotated[InMemoryStore, Depends(get_store)],
    processor: Annotated[UploadProcessor, Depends(get_upload_processor)],
) -> UploadSessionBroker:
    return UploadSessionBroker(store, processor)


def get_event_reconciler(
    store: Annotated[InMemoryStore, Depends(get_store)],
    notifier: Annotated[ChangeNotifier, Depends(get_notifier)],
) -> EventReconciler:
    return EventReconciler(store, notifier)


def _reject_webhook(
    *,
    store: InMemoryStore,
    safe_correlation_id: str,
    code: str,
    message: str,
    reason: str,
    event_type: str | None = None,
) -> ApiError:
    logger.warning(
        "webhook.rejected correlation_id=%s code=%s reason=%s",
        safe_correlation_id,
        code,
        reason,
    )
    store.record_webhook(event_type=event_type, event_id=None, disposition="rejected", reason=reason)
    return ApiError(status_code=400, code=code, message=message, details={"reason": reason})


async def get_verified_webhook(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> WebhookRequestContext:
    """Verify the signature over the raw body, then parse it."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    raw_body = await request.body()
    signature_header = request.headers.get(SIGNATURE_HEADER)

    result = verify(
        raw_body,
        signature_header,
        settings.webhook_secret,
        tolerance_seconds=settings.webhook_tolerance_seconds,
    )
    if not result:
        raise _reject_webhook(
            store=store,
            safe_correlation_id=safe_correlation_id,
            code="WEBHOOK_VERIFICATION_FAILED",
            message="Webhook signature verification failed",
            reason=result.reason or "signature_mismatch",
        )

    try:
        envelope = WebhookEnvelope.model_validate_json(raw_body)
    except ValidationError as exc:
        raise _reject_webhook(
            store=store,
            safe_correlation_id=safe_correlation_id,
            code="INVALID_WEBHOOK_PAYLOAD",
            message="Webhook payload is not a valid event",
            reason="invalid_envelope",
        ) from exc

    return WebhookRequestContext(
        raw_body=raw_body,
        signature_header=signature_header or "",
        envelope=envelope,
        correlation_id=correlation_id,
    )
