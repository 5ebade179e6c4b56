"""
In-memory data store populated once by the startup loader.

The store is writable only while loading.  ``seal()`` flips it read-only for
the rest of the process; later writes are ignored with a warning.  Reads never
take the lock.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from idr_finance.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class InMemoryDataStore:
    """Resource type → dataset table with a one-way loading → sealed switch."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._sealed = threading.Event()

    def write(self, resource_type: str, data: Any) -> None:
        """Store ``data`` for ``resource_type`` while loading; no-op once sealed."""
        with self._lock:
            if self._sealed.is_set():
                logger.warning("Ignoring write after data store was sealed. Resource: %s", resource_type)
                return
            if data is None:
                raise InvalidArgumentError(f"Data cannot be null for resource: {resource_type}")
            # Single dict assignment: readers see the entry fully or not at all.
            self._data[resource_type] = data
        logger.debug("Stored data for resource type: %s", resource_type)

    def read(self, resource_type: str) -> Optional[Any]:
        data = self._data.get(resource_type)
        if data is None:
            logger.debug("No data found for resource type: %s", resource_type)
        return data

    def seal(self) -> bool:
        """Make the store read-only.  Returns True only for the call that sealed it."""
        with self._lock:
            if self._sealed.is_set():
                return False
            self._sealed.set()
        logger.info("Data loading completed. Store is now read-only with %d entries.", len(self._data))
        return True

    def is_ready(self) -> bool:
        return self._sealed.is_set()

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view of a point-in-time copy of every entry."""
        with self._lock:
            return MappingProxyType(dict(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, resource_type: object) -> bool:
        return resource_type in self._data


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_store_singleton: Optional[InMemoryDataStore] = None
_store_lock = threading.Lock()


def get_data_store() -> InMemoryDataStore:
    global _store_singleton
    if _store_singleton is not None:
        return _store_singleton

    with _store_lock:
        if _store_singleton is None:
            _store_singleton = InMemoryDataStore()
        return _store_singleton


def reset_data_store_for_tests() -> None:
    """Test helper to drop the singleton data store."""
    global _store_singleton
    with _store_lock:
        _store_singleton = None
