"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel

from mediasync.schemas.media import MediaItemState


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class ValidationErrorResponse(BaseModel):
    code: Literal["VALIDATION_ERROR"]
    message: str
    details: dict[str, Any] | None = None


class UpstreamUnavailableErrorDetails(BaseModel):
    media_item_id: str


class UpstreamUnavailableError(BaseModel):
    code: Literal["UPSTREAM_UNAVAILABLE"]
    message: str
    details: UpstreamUnavailableErrorDetails


class NotPendingErrorDetails(BaseModel):
    current_state: MediaItemState


class NotPendingError(BaseModel):
    code: Literal["MEDIA_ITEM_NOT_PENDING"]
    message: str
    details: NotPendingErrorDetails


class WebhookRejectedErrorDetails(BaseModel):
    reason: str


class WebhookRejectedError(BaseModel):
    code: Literal["WEBHOOK_VERIFICATION_FAILED", "INVALID_WEBHOOK_PAYLOAD"]
    message: str
    details: WebhookRejectedErrorDetails | None = None
