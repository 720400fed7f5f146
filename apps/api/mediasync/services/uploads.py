"""Upload session broker service layer."""

from dataclasses import dataclass
import logging

from mediasync.adapters.processor import PUBLIC_PLAYBACK_POLICY, UploadProcessor, UploadProcessorError
from mediasync.core.logging import safe_log_identifier
from mediasync.domain.media_state import allowed_next_states
from mediasync.errors import ApiError, not_found_error
from mediasync.repositories.memory import InMemoryStore, MediaItemRecord
from mediasync.schemas.media import MediaItem, MediaItemState, UploadCredential
from mediasync.services.media_items import to_media_item

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BeginUploadResult:
    media_item: MediaItem
    credential: UploadCredential


class UploadSessionBroker:
    def __init__(self, store: InMemoryStore, processor: UploadProcessor) -> None:
        self._store = store
        self._processor = processor

    def begin_upload(self, *, title: str) -> BeginUploadResult:
        normalized_title = title.strip()
        if not normalized_title:
            raise ApiError(
                status_code=422,
                code="VALIDATION_ERROR",
                message="Title must not be empty.",
                details={"field": "title"},
            )

        # The id must exist before the processor ever hears about this item.
        record = self._store.create_media_item(title=normalized_title)
        logger.info("upload.created media_item_id=%s state=%s", record.id, record.state)

        credential = self._request_credential(record)
        return BeginUploadResult(media_item=to_media_item(record), credential=credential)

    def request_upload(self, *, item_id: str) -> UploadCredential:
        """Mint a fresh credential for an item whose earlier upload never completed."""
        record = self._store.get_media_item(item_id)
        if record is None:
            raise not_found_error()
        if record.state is not MediaItemState.PENDING:
            raise ApiError(
                status_code=409,
                code="MEDIA_ITEM_NOT_PENDING",
                message="Uploads can only be requested for pending media items.",
                details={
                    "current_state": record.state,
                    "allowed_next_states": allowed_next_states(record.state),
                },
            )
        return self._request_credential(record)

    def _request_credential(self, record: MediaItemRecord) -> UploadCredential:
        safe_token = safe_log_identifier(record.id, prefix="ctk")
        try:
            target = self._processor.create_upload(
                correlation_token=record.id,
                playback_policy=PUBLIC_PLAYBACK_POLICY,
            )
        except UploadProcessorError as exc:
            logger.warning(
                "upload.credential_failed correlation_token=%s code=UPSTREAM_UNAVAILABLE reason=%s",
                safe_token,
                exc,
            )
            raise ApiError(
                status_code=502,
                code="UPSTREAM_UNAVAILABLE",
                message="Upload processor is unavailable; retry the upload for this media item.",
                details={"media_item_id": record.id},
            ) from exc

        logger.info(
            "upload.credential_issued correlation_token=%s upload_id=%s expires_at=%s",
            safe_token,
            target.upload_id,
            target.expires_at.isoformat(),
        )
        return UploadCredential(
            upload_id=target.upload_id,
            upload_url=target.upload_url,
            expires_at=target.expires_at,
            correlation_token=record.id,
        )


__all__ = ["BeginUploadResult", "UploadSessionBroker"]
