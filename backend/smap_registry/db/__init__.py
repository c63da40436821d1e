"""Record model and registry abstractions.

This module re-exports the static map record and registry types from
their submodules to give request handlers and services a single import
location.

Example:
    Build a registry and register a record:
        >>> from smap_registry.db import InMemoryStaticMapRegistry
        >>> registry = InMemoryStaticMapRegistry()
        >>> registry.append(record)
"""

from smap_registry.db.models import StaticMapRecord, new_record_id
from smap_registry.db.registry import (
    InMemoryStaticMapRegistry,
    StaticMapRegistryProtocol,
)

__all__ = [
    "InMemoryStaticMapRegistry",
    "StaticMapRecord",
    "StaticMapRegistryProtocol",
    "new_record_id",
]
