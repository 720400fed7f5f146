"""WebSocket subscription to media item changes."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from mediasync.routes.dependencies import get_notifier
from mediasync.schemas.webhook import ChangeNotification
from mediasync.services.notifier import MEDIA_ITEMS_TOPIC, ChangeNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["Subscriptions"])


async def _forward_changes(websocket: WebSocket, queue: "asyncio.Queue[str]") -> None:
    while True:
        token = await queue.get()
        message = ChangeNotification(topic=MEDIA_ITEMS_TOPIC, id=token)
        await websocket.send_json(message.model_dump(mode="json"))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        await websocket.receive_text()


@router.websocket("/media-items")
async def media_item_changes(
    websocket: WebSocket,
    notifier: Annotated[ChangeNotifier, Depends(get_notifier)],
) -> None:
    """Push the id of each media item that changed; clients re-fetch the item.

    Nothing published before the connection is replayed.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[str] = asyncio.Queue()
    # Reconciliation may publish from a worker thread.
    subscription_id = notifier.subscribe(
        MEDIA_ITEMS_TOPIC,
        lambda token: loop.call_soon_threadsafe(queue.put_nowait, token),
    )
    try:
        await websocket.accept()
        tasks = {
            asyncio.create_task(_forward_changes(websocket, queue)),
            asyncio.create_task(_wait_for_disconnect(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    finally:
        notifier.unsubscribe(subscription_id)
        logger.debug("subscription.closed subscription_id=%s", subscription_id)
