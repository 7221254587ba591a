"""Caching, concurrency-bounded address resolution."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from ...config import settings
from ...models.domain import Coordinates
from ..geospatial import coordinates_from
from .cache import UNRESOLVED, GeocodeCache, normalize_address
from .client import GeocodingError, NominatimClient

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def search(self, address: str) -> list[dict]:
        ...


class Geocodable(Protocol):
    coordinates: Optional[Coordinates]


T = TypeVar("T", bound=Geocodable)


class AddressResolver:
    """Resolve free-text addresses to coordinates, one external lookup per distinct address."""

    def __init__(
        self,
        geocoder: Geocoder | None = None,
        cache: GeocodeCache | None = None,
        *,
        concurrency: int | None = None,
        throttle_seconds: float | None = None,
    ) -> None:
        self.geocoder = geocoder if geocoder is not None else NominatimClient()
        self.cache = cache if cache is not None else GeocodeCache()
        self.concurrency = concurrency if concurrency is not None else settings.geocode_concurrency
        self.throttle_seconds = (
            throttle_seconds if throttle_seconds is not None else settings.geocode_throttle_seconds
        )

    def resolve(self, address: str | None) -> Coordinates | None:
        key = normalize_address(address)
        if not key:
            return None

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Geocode cache hit for '{key}'")
            return None if cached is UNRESOLVED else cached

        coordinates = self._lookup(address or "")
        self.cache.put(key, coordinates if coordinates is not None else UNRESOLVED)
        return coordinates

    def _lookup(self, address: str) -> Coordinates | None:
        try:
            candidates = self.geocoder.search(address)
        except GeocodingError as exc:
            logger.warning(f"Geocoding failed for '{address}': {exc}")
            return None

        if not candidates:
            logger.debug(f"No geocoding results for '{address}'")
            return None

        first = candidates[0]
        if not isinstance(first, dict):
            logger.warning(f"Ignoring malformed geocoding candidate for '{address}': {first!r}")
            return None
        coordinates = coordinates_from(first.get("lat"), first.get("lon"))
        if coordinates is None:
            logger.warning(f"First geocoding candidate for '{address}' has no usable lat/lon")
        return coordinates

    def batch_resolve(
        self,
        items: Sequence[T],
        address_of: Callable[[T], str],
        concurrency: int | None = None,
    ) -> list[T]:
        """Resolve every item with a fixed pool of workers sharing one queue.

        Each item's ``coordinates`` is set in place. The returned list is in
        completion order, not input order; correlate by identifier.
        """
        workers = concurrency if concurrency is not None else self.concurrency
        if workers < 1:
            raise ValueError("concurrency must be >= 1")
        if not items:
            return []

        pending: queue.Queue[T] = queue.Queue()
        for item in items:
            pending.put(item)

        done: list[T] = []
        done_lock = threading.Lock()

        def worker() -> None:
            while True:
                try:
                    item = pending.get_nowait()
                except queue.Empty:
                    return
                item.coordinates = self.resolve(address_of(item))
                with done_lock:
                    done.append(item)
                if self.throttle_seconds:
                    time.sleep(self.throttle_seconds)

        started = time.time()
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(worker) for _ in range(workers)]
            for future in futures:
                future.result()

        resolved = sum(1 for item in done if item.coordinates is not None)
        logger.info(
            f"Geocoded {resolved}/{len(done)} items with {workers} workers in {time.time() - started:.2f}s"
        )
        return done
