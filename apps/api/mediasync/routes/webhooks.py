"""Processor webhook routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from mediasync.core.logging import safe_log_identifier
from mediasync.repositories.memory import InMemoryStore
from mediasync.routes.dependencies import (
    WebhookRequestContext,
    get_event_reconciler,
    get_store,
    get_verified_webhook,
)
from mediasync.schemas.error import WebhookRejectedError
from mediasync.schemas.webhook import WebhookAck
from mediasync.services.reconciler import EventReconciler

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/processor",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": WebhookRejectedError}},
)
async def receive_processor_webhook(
    webhook: Annotated[WebhookRequestContext, Depends(get_verified_webhook)],
    reconciler: Annotated[EventReconciler, Depends(get_event_reconciler)],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> WebhookAck:
    envelope = webhook.envelope
    outcome = reconciler.reconcile(envelope.type, envelope.correlation_token, envelope.fields)
    store.record_webhook(
        event_type=envelope.type,
        event_id=envelope.id,
        disposition=outcome.value,
        safe_correlation_token=safe_log_identifier(envelope.correlation_token, prefix="ctk"),
    )
    return WebhookAck(outcome=outcome.value)
