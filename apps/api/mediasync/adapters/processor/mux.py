"""HTTP adapter for a Mux-compatible direct upload API."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging

import httpx

from mediasync.adapters.processor.base import UploadProcessor, UploadProcessorError, UploadTarget
from mediasync.core.logging import safe_log_identifier

logger = logging.getLogger(__name__)

_UPLOADS_PATH = "/video/v1/uploads"


class MuxUploadProcessor(UploadProcessor):
    """Mints direct-upload URLs with the correlation token stored as asset passthrough."""

    def __init__(
        self,
        *,
        base_url: str,
        token_id: str,
        token_secret: str,
        timeout_seconds: float,
        cors_origin: str = "*",
        upload_expiry_seconds: int = 3600,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._cors_origin = cors_origin
        self._upload_expiry_seconds = upload_expiry_seconds
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            auth=(token_id, token_secret),
            timeout=timeout_seconds,
            transport=transport,
        )

    def create_upload(self, *, correlation_token: str, playback_policy: str) -> UploadTarget:
        body = {
            "cors_origin": self._cors_origin,
            "timeout": self._upload_expiry_seconds,
            "new_asset_settings": {
                "passthrough": correlation_token,
                "playback_policy": [playback_policy],
            },
        }
        safe_token = safe_log_identifier(correlation_token, prefix="ctk")
        try:
            response = self._client.post(_UPLOADS_PATH, json=body)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("processor.upload_failed correlation_token=%s reason=timeout", safe_token)
            raise UploadProcessorError("Upload processor request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "processor.upload_failed correlation_token=%s reason=http_status status_code=%s",
                safe_token,
                exc.response.status_code,
            )
            raise UploadProcessorError(f"Upload processor responded with {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "processor.upload_failed correlation_token=%s reason=%s",
                safe_token,
                type(exc).__name__,
            )
            raise UploadProcessorError("Upload processor is unreachable") from exc

        return self._parse_upload(response)

    def _parse_upload(self, response: httpx.Response) -> UploadTarget:
        try:
            data = response.json()["data"]
            upload_id = str(data["id"])
            upload_url = str(data["url"])
            expiry_seconds = int(data.get("timeout") or self._upload_expiry_seconds)
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadProcessorError("Upload processor returned a malformed upload") from exc

        return UploadTarget(
            upload_id=upload_id,
            upload_url=upload_url,
            expires_at=datetime.now(UTC) + timedelta(seconds=expiry_seconds),
        )

    def close(self) -> None:
        self._client.close()


__all__ = ["MuxUploadProcessor"]
