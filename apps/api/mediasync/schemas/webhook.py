"""Inbound processor webhook schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlaybackId(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    policy: str | None = None


class ReadyAssetData(BaseModel):
    """The part of an ``asset ready`` payload that reconciliation consumes."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    passthrough: str | None = None
    playback_ids: list[PlaybackId] = Field(default_factory=list)


class WebhookEnvelope(BaseModel):
    """Outer event shape; ``data`` stays untyped until a handler claims it."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    id: str | None = None
    data: Any = None

    @property
    def fields(self) -> dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}

    @property
    def correlation_token(self) -> str | None:
        passthrough = self.fields.get("passthrough")
        if isinstance(passthrough, str) and passthrough.strip():
            return passthrough
        return None


class WebhookAck(BaseModel):
    received: bool = True
    outcome: str


class ChangeNotification(BaseModel):
    topic: str
    id: str
