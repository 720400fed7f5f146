"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from mediasync.adapters.processor import MockUploadProcessor, MuxUploadProcessor, UploadProcessor
from mediasync.core.config import Settings, get_settings
from mediasync.core.logging import configure_logging
from mediasync.errors import ApiError
from mediasync.repositories.memory import InMemoryStore
from mediasync.routes import media_items_router, subscriptions_router, webhooks_router
from mediasync.schemas.error import ErrorResponse
from mediasync.services.notifier import ChangeNotifier

logger = logging.getLogger(__name__)

_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/v1/media-items": {"post": {"201", "422", "502"}, "get": {"200"}},
    "/api/v1/media-items/{itemId}": {"get": {"200", "404"}},
    "/api/v1/media-items/{itemId}/upload": {"post": {"201", "404", "409", "502"}},
    "/api/v1/webhooks/processor": {"post": {"200", "400"}},
}

_CREATE_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("POST", "/api/v1/media-items"),
}


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to the ones each operation can return."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})


def build_upload_processor(settings: Settings) -> UploadProcessor:
    """Resolve the processor adapter from configuration."""
    if settings.processor_provider == "mock":
        return MockUploadProcessor(expiry_seconds=settings.upload_expiry_seconds)
    return MuxUploadProcessor(
        base_url=settings.processor_base_url,
        token_id=settings.processor_token_id,
        token_secret=settings.processor_token_secret,
        timeout_seconds=settings.processor_timeout_seconds,
        cors_origin=settings.upload_cors_origin,
        upload_expiry_seconds=settings.upload_expiry_seconds,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        yield
    finally:
        app.state.processor.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    # Missing processor credentials or webhook secret fail here, before serving.
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Mediasync API", version="1.0.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.store = InMemoryStore(audit_limit=settings.webhook_audit_limit)
    app.state.notifier = ChangeNotifier()
    app.state.processor = build_upload_processor(settings)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        route = request.scope.get("route")
        route_path = getattr(route, "path", request.url.path)
        route_key = (request.method.upper(), route_path)
        if route_key in _CREATE_VALIDATION_PATHS:
            payload = ErrorResponse(
                code="VALIDATION_ERROR",
                message="Invalid media item payload",
                details={"fields": [".".join(str(part) for part in error["loc"]) for error in exc.errors()]},
            )
            return JSONResponse(status_code=422, content=payload.model_dump())

        return await request_validation_exception_handler(request, exc)

    api_prefix = "/api/v1"
    app.include_router(media_items_router, prefix=api_prefix)
    app.include_router(webhooks_router, prefix=api_prefix)
    app.include_router(subscriptions_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    logger.info("app.created processor_provider=%s", settings.processor_provider)
    return app
