"""Static map listing and upload API endpoints.

This module provides the REST endpoints for registering static maps from
multipart uploads and for listing everything registered so far. The
registry and blob sink are created once by the application factory and
resolved per request from ``app.state``.

Example:
    Upload a static map:
        >>> response = client.post(
        ...     "/upload",
        ...     data={"title": "Flood Risk Map"},
        ...     files={"file": ("map.tif", open("map.tif", "rb"))},
        ... )
        >>> record = response.json()
        >>> # Returns (201): {"id": "uuid-here", "title": "Flood Risk Map",
        >>> #                 "location": "/tmp/smap/uploads/..._map.tif"}

    List registered static maps:
        >>> response = client.get("/smap")
        >>> # Returns: [{"id": "...", "title": "Flood Risk Map", ...}]
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

import fastapi
import typing_extensions
from starlette import exceptions as starlette_exceptions

from smap_registry.core import errors
from smap_registry.db import registry as db_registry
from smap_registry.services import blob_sink
from smap_registry.services import ingest as ingest_service

if TYPE_CHECKING:
    from smap_registry.db import models as db_models

router = fastapi.APIRouter(tags=["static map"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": errors.ErrorResponse, "description": "Malformed upload"},
    413: {"model": errors.ErrorResponse, "description": "Upload too large"},
    500: {"model": errors.ErrorResponse, "description": "File not stored"},
}

_UPLOAD_REQUEST_BODY: dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "required": ["title", "file"],
                    "properties": {
                        "title": {
                            "type": "string",
                            "example": "Tropical Cyclone exposed population",
                        },
                        "file": {"type": "string", "format": "binary"},
                    },
                },
            },
        },
    },
}


class StaticMapResponse(typing_extensions.TypedDict):
    id: str
    title: str
    location: str


def _get_registry(
    request: fastapi.Request,
) -> db_registry.StaticMapRegistryProtocol:
    """Resolve the registry shared by all requests of this application."""
    return request.app.state.registry  # type: ignore[no-any-return]


def _get_blob_sink(request: fastapi.Request) -> blob_sink.BlobSinkProtocol:
    """Resolve the blob sink shared by all requests of this application."""
    return request.app.state.blob_sink  # type: ignore[no-any-return]


def _to_response(record: db_models.StaticMapRecord) -> StaticMapResponse:
    return StaticMapResponse(**dataclasses.asdict(record))


@router.get("/smap")
async def list_smaps(
    registry: db_registry.StaticMapRegistryProtocol = fastapi.Depends(_get_registry),  # noqa: B008
) -> list[StaticMapResponse]:
    """List all static maps.

    Returns every registered static map in registration order, as of a
    single point in time. Uploads still being written are not included.

    Args:
        registry: Static map registry (injected via FastAPI Depends).

    Returns:
        List of ``{id, title, location}`` dictionaries.
    """
    return [_to_response(record) for record in registry.snapshot()]


@router.post(
    "/upload",
    status_code=201,
    responses=_ERROR_RESPONSES,
    openapi_extra=_UPLOAD_REQUEST_BODY,
)
async def upload_smap_multipart(
    request: fastapi.Request,
    sink: blob_sink.BlobSinkProtocol = fastapi.Depends(_get_blob_sink),  # noqa: B008
    registry: db_registry.StaticMapRegistryProtocol = fastapi.Depends(_get_registry),  # noqa: B008
) -> StaticMapResponse:
    """Upload a static map.

    Accepts a multipart body with a ``title`` text field and one file
    field, in either order. The file is stored first and the static map
    is registered only when both fields were present.

    Args:
        request: Incoming request carrying the multipart body.
        sink: Blob sink the file is written to (injected via FastAPI Depends).
        registry: Static map registry (injected via FastAPI Depends).

    Returns:
        The registered static map.

    Raises:
        MalformedUpload: If the body cannot be parsed or a field is missing.
        PayloadTooLarge: If the body exceeds the configured cap.
        WriteFailed: If the file could not be stored.
    """
    try:
        form = await request.form()
    except starlette_exceptions.HTTPException as exc:
        raise errors.MalformedUpload(
            f"unreadable multipart body: {exc.detail}",
        ) from exc

    try:
        record = await ingest_service.ingest(form.multi_items(), sink, registry)
    finally:
        await form.close()

    return _to_response(record)
