"""Media item read service layer."""

from mediasync.errors import not_found_error
from mediasync.repositories.memory import InMemoryStore, MediaItemRecord
from mediasync.schemas.media import MediaItem


def to_media_item(record: MediaItemRecord) -> MediaItem:
    return MediaItem(
        id=record.id,
        title=record.title,
        state=record.state,
        external_asset_id=record.external_asset_id,
        playback_id=record.playback_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class MediaItemService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def get_media_item(self, *, item_id: str) -> MediaItem:
        record = self._store.get_media_item(item_id)
        if record is None:
            raise not_found_error()
        return to_media_item(record)

    def list_media_items(self) -> list[MediaItem]:
        return [to_media_item(record) for record in self._store.list_media_items()]
