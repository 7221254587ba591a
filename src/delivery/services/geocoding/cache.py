"""In-process memo of geocoding results keyed by normalized address."""

from __future__ import annotations

import enum
import threading
from typing import Union

from ...models.domain import Coordinates


class _Unresolved(enum.Enum):
    UNRESOLVED = "unresolved"

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved.UNRESOLVED

CacheEntry = Union[Coordinates, _Unresolved]


def normalize_address(address: str | None) -> str:
    return (address or "").strip().lower()


class GeocodeCache:
    """Thread-safe address -> coordinates map.

    An entry, resolved or ``UNRESOLVED``, is final for the lifetime of the cache.
    Two workers writing the same key is harmless: both wrote the outcome of the
    same lookup.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
