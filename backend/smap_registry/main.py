"""FastAPI application entrypoint and configuration.

This module provides the application factory that builds the shared static
map registry and blob sink, installs CORS and the request body cap,
includes the static map router, renders registry errors as structured JSON
and exposes a health check endpoint.

Example:
    The application can be run with uvicorn:
        $ uvicorn smap_registry.main:app --reload

    Or started from the package:
        $ python -m smap_registry
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import fastapi
from fastapi import responses
from fastapi.middleware import cors

from smap_registry.api import smaps
from smap_registry.core import config, errors, limits
from smap_registry.db import registry as db_registry
from smap_registry.services import blob_sink as blob_sink_service

if TYPE_CHECKING:
    from smap_registry.services.blob_sink import BlobSinkProtocol

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

API_KEY_HEADER = "smap_apikey"

logger = logging.getLogger(__name__)


def _declare_api_key_scheme(app: fastapi.FastAPI) -> None:
    """Add the header api key security scheme to the OpenAPI document.

    The scheme is only declared for clients; requests are not checked.
    """
    base_openapi = app.openapi

    def openapi() -> dict[str, Any]:
        schema = base_openapi()
        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {})["api_key"] = {
            "type": "apiKey",
            "in": "header",
            "name": API_KEY_HEADER,
        }
        return schema

    app.openapi = openapi  # type: ignore[method-assign]


async def _smap_error_handler(
    request: fastapi.Request,
    exc: errors.SMapError,
) -> responses.JSONResponse:
    """Render an SMapError as ``{"error": kind, "detail": detail}``."""
    level = logging.WARNING if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        exc.kind,
        exc.detail,
    )
    return responses.JSONResponse(exc.to_dict(), status_code=exc.status_code)


def create_app(
    settings: config.Settings | None = None,
    registry: db_registry.StaticMapRegistryProtocol | None = None,
    blob_sink: BlobSinkProtocol | None = None,
) -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    The registry and blob sink are built once here and shared by every
    request through ``app.state``. Both can be passed in to substitute
    other implementations.

    Args:
        settings: Application settings, defaults to get_settings().
        registry: Static map registry, defaults to a new in-memory one.
        blob_sink: Blob sink, defaults to a LocalBlobSink over
            ``settings.storage_dir``.

    Returns:
        Configured FastAPI application instance ready for ASGI server.

    Example:
        Build an isolated app for tests:
            >>> app = create_app(settings=Settings(storage_dir=tmp_path))
    """
    if settings is None:
        settings = config.get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    app = fastapi.FastAPI(
        title="Static Map Registry",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/api-docs/openapi.json",
        openapi_tags=[
            {
                "name": "static map",
                "description": "Static Map items management API",
            },
        ],
    )

    if registry is None:
        registry = db_registry.InMemoryStaticMapRegistry()
    if blob_sink is None:
        blob_sink = blob_sink_service.LocalBlobSink(
            settings.storage_dir,
            chunk_size=settings.upload_chunk_size_bytes,
        )
    app.state.registry = registry
    app.state.blob_sink = blob_sink

    app.include_router(smaps.router)
    app.add_exception_handler(
        errors.SMapError,
        _smap_error_handler,  # type: ignore[arg-type]
    )

    app.add_middleware(
        limits.BodySizeLimitMiddleware,  # type: ignore[arg-type]
        max_body_size=settings.max_upload_size_bytes,
    )
    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _declare_api_key_scheme(app)

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()
