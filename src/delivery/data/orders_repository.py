"""Open order loader."""

from __future__ import annotations

import logging
from typing import Any

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Order
from ..services.geospatial import coordinates_from
from .contracts import RepositoryError, clean_text

logger = logging.getLogger(__name__)


def order_from_row(row: dict[str, Any]) -> Order | None:
    order_id = clean_text(row.get("id"))
    if order_id is None:
        return None
    return Order(
        order_id=order_id,
        order_number=clean_text(row.get("order_number")),
        delivery_address=clean_text(row.get("delivery_address")),
        delivery_city=clean_text(row.get("delivery_city")),
        delivery_state=clean_text(row.get("delivery_state")),
        status=clean_text(row.get("status")),
        created_at=clean_text(row.get("created_at")),
        coordinates=coordinates_from(row.get("latitude"), row.get("longitude")),
        raw=row,
    )


class SupabaseOrderRepository:
    """Lists every order whose status is not the terminal one, newest first."""

    def __init__(self, client: Any | None = None, table: str | None = None, completed_status: str | None = None) -> None:
        self._client = client
        self.table = table or settings.orders_table
        self.completed_status = completed_status or settings.completed_status

    def list_open_orders(self) -> list[Order]:
        client = self._client if self._client is not None else get_supabase_client()
        if client is None:
            raise RepositoryError("Supabase is not configured; cannot list orders.")

        try:
            response = (
                client.table(self.table)
                .select("*")
                .neq("status", self.completed_status)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise RepositoryError(f"Failed to list open orders from '{self.table}': {exc}") from exc

        orders: list[Order] = []
        for row in response.data or []:
            order = order_from_row(row)
            if order is None:
                logger.warning(f"Skipping order row without id: {row!r}")
                continue
            orders.append(order)
        return orders
