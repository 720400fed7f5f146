"""External upload processor interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

PUBLIC_PLAYBACK_POLICY = "public"


class UploadProcessorError(Exception):
    """Raised when the processor cannot mint an upload target."""


@dataclass(frozen=True, slots=True)
class UploadTarget:
    upload_id: str
    upload_url: str
    expires_at: datetime


class UploadProcessor(ABC):
    """Provider-neutral direct-upload credential interface."""

    @abstractmethod
    def create_upload(self, *, correlation_token: str, playback_policy: str) -> UploadTarget:
        """Request a signed upload target that echoes ``correlation_token`` back in later events."""

    def close(self) -> None:
        """Release transport resources, if any."""


__all__ = ["PUBLIC_PLAYBACK_POLICY", "UploadProcessor", "UploadProcessorError", "UploadTarget"]
