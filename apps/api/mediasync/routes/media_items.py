"""Media item routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from mediasync.routes.dependencies import get_media_item_service, get_upload_broker
from mediasync.schemas.error import (
    NoLeakNotFoundError,
    NotPendingError,
    UpstreamUnavailableError,
    ValidationErrorResponse,
)
from mediasync.schemas.media import (
    BeginUploadResponse,
    CreateMediaItemRequest,
    MediaItem,
    UploadCredential,
)
from mediasync.services.media_items import MediaItemService
from mediasync.services.uploads import UploadSessionBroker

router = APIRouter(prefix="/media-items", tags=["Media items"])


# Upload routes are sync so the blocking processor call runs in the threadpool.
@router.post(
    "",
    response_model=BeginUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"model": ValidationErrorResponse},
        502: {"model": UpstreamUnavailableError},
    },
)
def create_media_item(
    payload: CreateMediaItemRequest,
    broker: Annotated[UploadSessionBroker, Depends(get_upload_broker)],
) -> BeginUploadResponse:
    result = broker.begin_upload(title=payload.title)
    return BeginUploadResponse(media_item=result.media_item, upload=result.credential)


@router.post(
    "/{itemId}/upload",
    response_model=UploadCredential,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": NoLeakNotFoundError},
        409: {"model": NotPendingError},
        502: {"model": UpstreamUnavailableError},
    },
)
def request_upload(
    item_id: Annotated[str, Path(alias="itemId")],
    broker: Annotated[UploadSessionBroker, Depends(get_upload_broker)],
) -> UploadCredential:
    return broker.request_upload(item_id=item_id)


@router.get("", response_model=list[MediaItem])
async def list_media_items(
    service: Annotated[MediaItemService, Depends(get_media_item_service)],
) -> list[MediaItem]:
    return service.list_media_items()


@router.get(
    "/{itemId}",
    response_model=MediaItem,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def get_media_item(
    item_id: Annotated[str, Path(alias="itemId")],
    service: Annotated[MediaItemService, Depends(get_media_item_service)],
) -> MediaItem:
    return service.get_media_item(item_id=item_id)
