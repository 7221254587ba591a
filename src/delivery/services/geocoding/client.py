"""HTTP client for Nominatim-style free-text geocoding."""

from __future__ import annotations

import logging

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Raised when a lookup fails (transport error, non-success status, bad payload)."""


class NominatimClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        # One client per call; workers on different threads never share a connection pool.
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    def search(self, address: str) -> list[dict]:
        """Return the candidate list for ``address`` (possibly empty).

        Each candidate carries at least ``lat`` and ``lon`` as returned by the service.
        """
        params = {"format": "json", "q": address}
        url = f"{self.base_url}/search"

        client = self._get_client()
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeocodingError(
                f"Geocoder returned status {exc.response.status_code} for '{address}'"
            ) from exc
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoder request failed for '{address}': {exc}") from exc
        except ValueError as exc:
            raise GeocodingError(f"Geocoder returned invalid JSON for '{address}'") from exc
        finally:
            client.close()

        if not isinstance(data, list):
            raise GeocodingError(f"Unexpected geocoder payload for '{address}': {type(data).__name__}")
        return data


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check the geocoder answers a trivial search.

    Public Nominatim has a /status endpoint but self-hosted mirrors may not,
    so a one-word search is used instead.
    """
    try:
        NominatimClient(base_url=base_url, timeout=5.0, transport=transport).search("London")
        return True
    except GeocodingError as exc:
        logger.debug(f"Geocoder health check failed: {exc}")
        return False
