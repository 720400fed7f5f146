"""Media item API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MediaItemState(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"


class CreateMediaItemRequest(BaseModel):
    title: str = Field(min_length=1)


class MediaItem(BaseModel):
    id: str
    title: str
    state: MediaItemState
    external_asset_id: str | None = None
    playback_id: str | None = None
    created_at: datetime
    updated_at: datetime


class UploadCredential(BaseModel):
    """Time-boxed direct-upload target minted by the external processor."""

    upload_id: str
    upload_url: str
    expires_at: datetime
    correlation_token: str


class BeginUploadResponse(BaseModel):
    media_item: MediaItem
    upload: UploadCredential
