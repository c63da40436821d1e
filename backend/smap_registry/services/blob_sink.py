"""Durable storage for uploaded static map files.

The blob sink consumes a byte stream and returns a stable reference to
where it was written. A successful return means the whole stream is on
disk under its final name; a failed write raises WriteFailed and leaves no
file at any final name.

Example:
    Store an uploaded file:
        >>> sink = LocalBlobSink(pathlib.Path("/tmp/smap/uploads"))
        >>> location = sink.store("flood_risk.tif", upload.file)
        >>> # Returns: "/tmp/smap/uploads/9b1c..._flood_risk.tif"
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import uuid
from typing import TYPE_CHECKING, BinaryIO, Protocol

from werkzeug import utils as werkzeug_utils

from smap_registry.core import errors

if TYPE_CHECKING:
    import pathlib

logger = logging.getLogger(__name__)

_FALLBACK_NAME = "upload"


class BlobSinkProtocol(Protocol):
    """Protocol interface for write-once blob storage."""

    def store(self, name_hint: str, stream: BinaryIO) -> str: ...


def _safe_name(name_hint: str) -> str:
    """Derive a collision-free file name from a client-supplied name.

    Directory components and unsafe characters are stripped, and a random
    token is prepended so two uploads with the same name never share a
    file.

    Args:
        name_hint: File name as sent by the client.

    Returns:
        File name safe to join onto the storage directory.
    """
    cleaned = werkzeug_utils.secure_filename(name_hint) or _FALLBACK_NAME
    return f"{uuid.uuid4().hex}_{cleaned}"


class LocalBlobSink(BlobSinkProtocol):
    """Blob sink writing into a local directory.

    Bytes are streamed into a temporary file in the storage directory,
    fsynced, then renamed onto the final name. The rename is atomic on the
    same filesystem, so readers never see a partially written file under a
    returned location.
    """

    def __init__(
        self,
        storage_dir: pathlib.Path,
        chunk_size: int = 64 * 1024,
    ) -> None:
        """Initialize the sink.

        Args:
            storage_dir: Directory files are written to.
            chunk_size: Number of bytes read from the stream per write.
        """
        self.storage_dir = storage_dir
        self.chunk_size = chunk_size

    def store(self, name_hint: str, stream: BinaryIO) -> str:
        """Persist a byte stream and return its location.

        Args:
            name_hint: Client-supplied file name used to name the blob.
            stream: Readable binary stream, consumed to the end.

        Returns:
            Absolute path of the stored file.

        Raises:
            WriteFailed: If the stream could not be written completely.
        """
        target_path = (self.storage_dir / _safe_name(name_hint)).resolve()
        tmp_name: str | None = None
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                delete=False,
                dir=self.storage_dir,
                prefix=".partial-",
            ) as tmp:
                tmp_name = tmp.name
                for chunk in iter(lambda: stream.read(self.chunk_size), b""):
                    tmp.write(chunk)

                tmp.flush()
                os.fsync(tmp.fileno())

            os.replace(tmp_name, target_path)
            _fsync_directory(self.storage_dir)
        except OSError as exc:
            logger.exception("Failed to store upload %r", name_hint)
            if tmp_name is not None:
                _discard(tmp_name)
            raise errors.WriteFailed(
                f"could not store file {name_hint!r}: {exc.strerror or exc}",
            ) from exc

        logger.debug("Stored %r at %s", name_hint, target_path)
        return str(target_path)


def _fsync_directory(directory: pathlib.Path) -> None:
    """Flush a directory entry so a completed rename survives a crash."""
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def _discard(path: str) -> None:
    """Remove a partially written temporary file if it is still there."""
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)
