"""Tests for the local blob sink.

This module verifies that LocalBlobSink:
    - writes the full stream and returns a location inside storage_dir,
    - never lets the client file name escape or overwrite storage,
    - gives two uploads with the same name distinct locations,
    - raises WriteFailed and leaves no file behind when a write fails.
"""

from __future__ import annotations

import io
import os
import pathlib
import stat

import pytest

from smap_registry.core import errors
from smap_registry.services import blob_sink


def test_store_writes_stream(tmp_path: pathlib.Path) -> None:
    sink = blob_sink.LocalBlobSink(tmp_path, chunk_size=2)
    location = sink.store("map.tif", io.BytesIO(b"\x01\x02\x03"))

    stored = pathlib.Path(location)
    assert stored.read_bytes() == b"\x01\x02\x03"
    assert stored.parent == tmp_path.resolve()
    assert stored.name.endswith("_map.tif")


def test_store_creates_missing_directory(tmp_path: pathlib.Path) -> None:
    storage_dir = tmp_path / "nested" / "uploads"
    sink = blob_sink.LocalBlobSink(storage_dir)
    location = sink.store("map.tif", io.BytesIO(b"data"))
    assert pathlib.Path(location).parent == storage_dir.resolve()


def test_store_same_name_does_not_collide(tmp_path: pathlib.Path) -> None:
    sink = blob_sink.LocalBlobSink(tmp_path)
    first = sink.store("map.tif", io.BytesIO(b"first"))
    second = sink.store("map.tif", io.BytesIO(b"second"))

    assert first != second
    assert pathlib.Path(first).read_bytes() == b"first"
    assert pathlib.Path(second).read_bytes() == b"second"


@pytest.mark.parametrize(
    "name_hint",
    ["../../etc/passwd", "/etc/passwd", "..\\..\\boot.ini", "sub/dir/map.tif"],
)
def test_store_keeps_files_inside_storage(
    tmp_path: pathlib.Path,
    name_hint: str,
) -> None:
    storage_dir = tmp_path / "uploads"
    sink = blob_sink.LocalBlobSink(storage_dir)
    location = pathlib.Path(sink.store(name_hint, io.BytesIO(b"x")))
    assert location.parent == storage_dir.resolve()


def test_store_falls_back_for_unusable_name(tmp_path: pathlib.Path) -> None:
    sink = blob_sink.LocalBlobSink(tmp_path)
    location = sink.store("...", io.BytesIO(b"x"))
    assert pathlib.Path(location).name.endswith("_upload")


class _BrokenStream(io.RawIOBase):
    """Stream yielding one chunk and then failing like a dropped client."""

    def __init__(self) -> None:
        self._reads = 0

    def read(self, size: int = -1) -> bytes:
        self._reads += 1
        if self._reads > 1:
            raise OSError("connection reset")
        return b"partial"


def test_store_failure_leaves_no_file(tmp_path: pathlib.Path) -> None:
    sink = blob_sink.LocalBlobSink(tmp_path)
    with pytest.raises(errors.WriteFailed):
        sink.store("map.tif", _BrokenStream())  # type: ignore[arg-type]
    assert list(tmp_path.iterdir()) == []


def test_store_into_unwritable_location_fails(tmp_path: pathlib.Path) -> None:
    not_a_dir = tmp_path / "occupied"
    not_a_dir.write_text("file, not a directory")
    sink = blob_sink.LocalBlobSink(not_a_dir)
    with pytest.raises(errors.WriteFailed) as excinfo:
        sink.store("map.tif", io.BytesIO(b"x"))
    assert excinfo.value.status_code == 500


def test_store_flushes_storage_directory(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: pathlib.Path,
) -> None:
    synced_dirs: list[bool] = []
    real_fsync = os.fsync

    def recording_fsync(fd: int) -> None:
        synced_dirs.append(stat.S_ISDIR(os.fstat(fd).st_mode))
        real_fsync(fd)

    monkeypatch.setattr(blob_sink.os, "fsync", recording_fsync)
    sink = blob_sink.LocalBlobSink(tmp_path)
    sink.store("map.tif", io.BytesIO(b"data"))

    assert synced_dirs == [False, True]
