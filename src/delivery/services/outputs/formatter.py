"""Utilities to serialize assignment runs into CSV text, JSON and per-driver summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ...models.domain import Driver, Order

if TYPE_CHECKING:
    from ..assignment.models import AssignmentRun

CSV_HEADER = ("order_id", "order_number", "driver_id", "driver_name", "driver_city")


def assignments_to_csv(
    assignments: Mapping[str, str],
    orders: Sequence[Order],
    drivers: Sequence[Driver],
) -> str:
    """Render one row per order, assigned or not.

    Values are joined with a bare comma and are not quoted or escaped; a value
    containing a comma will shift the columns of its row.
    """
    by_id = {driver.driver_id: driver for driver in drivers}
    lines = [",".join(CSV_HEADER)]
    for order in orders:
        driver_id = assignments.get(order.order_id, "")
        driver = by_id.get(driver_id)
        lines.append(
            ",".join(
                (
                    order.order_id or "",
                    order.order_number or "",
                    driver_id,
                    driver.name if driver else "",
                    (driver.city or "") if driver else "",
                )
            )
        )
    return "\n".join(lines)


def order_title(order: Order) -> str:
    if order.order_number:
        return f"Order #{order.order_number}"
    return f"Order {order.order_id[:8]}"


def _order_summary(order: Order) -> dict[str, Any]:
    address_parts = [part for part in (order.delivery_address, order.delivery_city, order.delivery_state) if part]
    profile = order.raw.get("profiles") or {}
    customer = order.raw.get("customer_name") or profile.get("name") or order.raw.get("customer_phone") or ""
    return {
        "order_id": order.order_id,
        "title": order_title(order),
        "customer": customer,
        "address": " • ".join(address_parts),
        "status": order.status or "",
    }


def driver_summaries(
    assignments: Mapping[str, str],
    orders: Sequence[Order],
    drivers: Sequence[Driver],
) -> dict[str, Any]:
    """Group orders under their drivers, keeping order input order, plus the unassigned ones."""

    grouped: dict[str, list[dict[str, Any]]] = {driver.driver_id: [] for driver in drivers}
    unassigned: list[dict[str, Any]] = []
    for order in orders:
        driver_id = assignments.get(order.order_id)
        if driver_id is None or driver_id not in grouped:
            unassigned.append(_order_summary(order))
            continue
        grouped[driver_id].append(_order_summary(order))

    return {
        "drivers": [
            {
                "driver_id": driver.driver_id,
                "name": driver.name or "Unnamed Driver",
                "phone": driver.phone,
                "city": driver.city,
                "address": driver.address,
                "order_count": len(grouped[driver.driver_id]),
                "orders": grouped[driver.driver_id],
            }
            for driver in drivers
        ],
        "unassigned": unassigned,
    }


def _coordinates_to_json(record: Driver | Order) -> dict[str, float] | None:
    if record.coordinates is None:
        return None
    return {"latitude": record.coordinates.latitude, "longitude": record.coordinates.longitude}


def assignment_run_to_json(run: AssignmentRun) -> dict:
    result = run.result
    return {
        "run_id": run.run_id,
        "started_at": run.started_at.isoformat(),
        "completed_at": run.completed_at.isoformat(),
        "geocoded": run.geocoded,
        "errors": list(run.errors),
        "assignments": dict(result.assignments),
        "loads": dict(result.loads),
        "unassigned": list(result.unassigned),
        "matches": [
            {
                "order_id": order.order_id,
                "driver_id": result.assignments.get(order.order_id),
                "tier": result.tiers[order.order_id].value if order.order_id in result.tiers else None,
                "distance_km": result.distances_km.get(order.order_id),
                "order_coordinates": _coordinates_to_json(order),
            }
            for order in run.orders
        ],
    }
