"""Route modules."""

from .media_items import router as media_items_router
from .subscriptions import router as subscriptions_router
from .webhooks import router as webhooks_router

__all__ = ["media_items_router", "subscriptions_router", "webhooks_router"]
