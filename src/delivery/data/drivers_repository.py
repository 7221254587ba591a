"""Driver loader: dedicated drivers table first, generic profiles table as fallback."""

from __future__ import annotations

import logging
from typing import Any

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Driver
from ..services.geospatial import coordinates_from
from .contracts import RepositoryError, clean_text

logger = logging.getLogger(__name__)


def driver_from_row(row: dict[str, Any]) -> Driver | None:
    driver_id = clean_text(row.get("id"))
    if driver_id is None:
        return None
    return Driver(
        driver_id=driver_id,
        name=clean_text(row.get("full_name")) or clean_text(row.get("name")) or "",
        phone=clean_text(row.get("phone")),
        city=clean_text(row.get("city")),
        address=clean_text(row.get("address")),
        coordinates=coordinates_from(row.get("latitude"), row.get("longitude")),
        raw=row,
    )


class SupabaseDriverRepository:
    def __init__(
        self,
        client: Any | None = None,
        table: str | None = None,
        fallback_table: str | None = None,
    ) -> None:
        self._client = client
        self.table = table or settings.drivers_table
        self.fallback_table = fallback_table or settings.driver_profiles_table

    def _require_client(self) -> Any:
        client = self._client if self._client is not None else get_supabase_client()
        if client is None:
            raise RepositoryError("Supabase is not configured; cannot list drivers.")
        return client

    def _select_all(self, client: Any, table: str) -> list[dict[str, Any]]:
        try:
            response = client.table(table).select("*").execute()
        except Exception as exc:
            raise RepositoryError(f"Failed to list rows from '{table}': {exc}") from exc
        return list(response.data or [])

    def list_drivers(self) -> list[Driver]:
        client = self._require_client()
        rows = self._select_all(client, self.table)
        if not rows:
            logger.info(f"No rows in '{self.table}', falling back to '{self.fallback_table}'")
            rows = self._select_all(client, self.fallback_table)

        drivers: list[Driver] = []
        for row in rows:
            driver = driver_from_row(row)
            if driver is None:
                logger.warning(f"Skipping driver row without id: {row!r}")
                continue
            drivers.append(driver)
        return drivers
