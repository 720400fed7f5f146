"""Upload processor adapters."""

from .base import PUBLIC_PLAYBACK_POLICY, UploadProcessor, UploadProcessorError, UploadTarget
from .mock import MockUploadProcessor
from .mux import MuxUploadProcessor

__all__ = [
    "PUBLIC_PLAYBACK_POLICY",
    "UploadProcessor",
    "UploadProcessorError",
    "UploadTarget",
    "MockUploadProcessor",
    "MuxUploadProcessor",
]
