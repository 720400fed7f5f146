"""Mock upload processor for local development and tests."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from mediasync.adapters.processor.base import UploadProcessor, UploadProcessorError, UploadTarget


@dataclass(slots=True)
class UploadRequestRecord:
    correlation_token: str
    playback_policy: str


class MockUploadProcessor(UploadProcessor):
    """Returns deterministic upload targets without network access.

    Set ``failure_message`` to make the next request fail once.
    """

    def __init__(self, *, base_url: str = "https://uploads.mock.local", expiry_seconds: int = 3600) -> None:
        self._base_url = base_url.rstrip("/")
        self._expiry_seconds = expiry_seconds
        self.requests: list[UploadRequestRecord] = []
        self.failure_message: str | None = None

    def create_upload(self, *, correlation_token: str, playback_policy: str) -> UploadTarget:
        if self.failure_message is not None:
            message = self.failure_message
            self.failure_message = None
            raise UploadProcessorError(message)

        self.requests.append(
            UploadRequestRecord(correlation_token=correlation_token, playback_policy=playback_policy)
        )
        upload_id = f"upload-{len(self.requests)}"
        return UploadTarget(
            upload_id=upload_id,
            upload_url=f"{self._base_url}/{upload_id}",
            expires_at=datetime.now(UTC) + timedelta(seconds=self._expiry_seconds),
        )


__all__ = ["MockUploadProcessor", "UploadRequestRecord"]
