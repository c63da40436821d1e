"""Data models for registered static maps.

This module defines the record stored by the registry for every accepted
upload. A record ties the client-supplied title to the location the blob
sink wrote the file to, under a server-generated identifier.

Example:
    Creating a record for an already stored file:
        >>> from smap_registry.db.models import StaticMapRecord, new_record_id
        >>> record = StaticMapRecord(
        ...     id=new_record_id(),
        ...     title="Tropical Cyclone exposed population",
        ...     location="/tmp/smap/uploads/3f2a..._cyclone.tif",
        ... )
"""

from __future__ import annotations

import dataclasses
import uuid


def new_record_id() -> str:
    """Generate a fresh record identifier.

    Returns:
        Random UUID4 rendered as its canonical 36-character string.
    """
    return str(uuid.uuid4())


@dataclasses.dataclass(frozen=True)
class StaticMapRecord:
    """A static map the registry knows about.

    Records are immutable once built and are only constructed after the
    file they point to has been written completely.

    Attributes:
        id: Unique identifier generated by the server (UUID string).
        title: Human-readable, non-empty title supplied by the client.
        location: Filesystem path of the stored file.
    """

    id: str
    title: str
    location: str
