"""Upload ingestion pipeline for static maps.

This module turns the fields of one multipart upload into a registered
static map. Fields are consumed in arrival order and the title and the
file may come in either order. The file is streamed to the blob sink on a
worker thread as soon as it is seen; the record is only appended to the
registry once both a title and a stored location are known.

A request that is rejected after its file was stored leaves that file
behind. No compensating delete is attempted; the orphaned location is
logged.

Example:
    Ingest a parsed form:
        >>> form = await request.form()
        >>> record = await ingest(form.multi_items(), sink, registry)
        >>> # Returns: StaticMapRecord(id="6f1d...", title="Flood Risk Map",
        >>> #          location="/tmp/smap/uploads/..._map.tif")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import concurrency
from starlette import datastructures

from smap_registry.core import errors
from smap_registry.db import models as db_models

if TYPE_CHECKING:
    from collections.abc import Iterable

    from smap_registry.db import registry as db_registry
    from smap_registry.services import blob_sink

logger = logging.getLogger(__name__)

TITLE_FIELD = "title"

FormValue = str | datastructures.UploadFile


async def _read_title(value: FormValue) -> str:
    """Decode a title field sent either as plain text or as a file part.

    Raises:
        MalformedUpload: If a file-part title is not valid UTF-8.
    """
    if isinstance(value, str):
        return value
    raw = await value.read()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise errors.MalformedUpload("title is not valid UTF-8 text") from exc


async def ingest(
    fields: Iterable[tuple[str, FormValue]],
    sink: blob_sink.BlobSinkProtocol,
    registry: db_registry.StaticMapRegistryProtocol,
) -> db_models.StaticMapRecord:
    """Register one uploaded static map.

    Args:
        fields: Multipart fields as ``(name, value)`` pairs in arrival order.
        sink: Blob sink the file payload is written to.
        registry: Registry the finished record is appended to.

    Returns:
        The record that was appended to the registry.

    Raises:
        MalformedUpload: If the title or the file is missing, the title is
            empty or undecodable, or more than one file is sent.
        WriteFailed: If the blob sink could not store the file.
    """
    record_id = db_models.new_record_id()
    title: str | None = None
    location: str | None = None

    for name, value in fields:
        if name == TITLE_FIELD:
            # Repeated titles: the last one wins.
            try:
                title = await _read_title(value)
            except errors.MalformedUpload:
                if location is not None:
                    _log_orphan(location)
                raise
            continue

        if not isinstance(value, datastructures.UploadFile) or not value.filename:
            continue

        if location is not None:
            _log_orphan(location)
            raise errors.MalformedUpload("only one file may be uploaded")

        await value.seek(0)
        location = await concurrency.run_in_threadpool(
            sink.store,
            value.filename,
            value.file,
        )

    if title is None or not title.strip() or location is None:
        missing = [
            field
            for field, present in (
                (TITLE_FIELD, bool(title and title.strip())),
                ("file", location is not None),
            )
            if not present
        ]
        if location is not None:
            _log_orphan(location)
        raise errors.MalformedUpload(
            f"missing required field(s): {', '.join(missing)}",
        )

    record = db_models.StaticMapRecord(
        id=record_id,
        title=title,
        location=location,
    )
    registry.append(record)
    logger.info("Registered static map %s (%r) at %s", record.id, title, location)
    return record


def _log_orphan(location: str) -> None:
    logger.warning("Upload rejected after storing %s; file left orphaned", location)
