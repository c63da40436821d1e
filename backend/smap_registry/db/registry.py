"""Shared in-memory registry of static map records."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from smap_registry.db import models as db_models


class StaticMapRegistryProtocol(Protocol):
    """Protocol interface for the ordered, append-only record store.

    Implementations must make append and snapshot linearizable: every
    snapshot reflects exactly the appends that completed before it.
    """

    def append(self, record: db_models.StaticMapRecord) -> None: ...

    def snapshot(self) -> list[db_models.StaticMapRecord]: ...

    def __len__(self) -> int: ...


class InMemoryStaticMapRegistry(StaticMapRegistryProtocol):
    """Process-local registry guarded by a single lock.

    Records live in a list in insertion order. The lock is only held to
    append one record or to copy the list, never across I/O, so it is safe
    to call from the event loop as well as from worker threads. Data is
    lost when the process exits.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._records: list[db_models.StaticMapRecord] = []
        self._lock = threading.Lock()

    def append(self, record: db_models.StaticMapRecord) -> None:
        """Add a record to the end of the registry.

        Args:
            record: Fully constructed record to register.
        """
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> list[db_models.StaticMapRecord]:
        """Copy all registered records.

        Returns:
            Records in insertion order as of a single point in time.
        """
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
