"""High-level orchestration for assignment runs."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence, TypeVar

from ...data.contracts import DriverRepository, OrderRepository, RepositoryError
from ...data.drivers_repository import SupabaseDriverRepository
from ...data.orders_repository import SupabaseOrderRepository
from ...models.domain import Driver, Order
from ...persistence.filesystem import OutputSink
from ..geocoding.resolver import AddressResolver
from ..outputs.formatter import assignments_to_csv
from .engine import MatchingWeights, assign_orders
from .models import AssignmentRun, ExportOutcome

logger = logging.getLogger(__name__)

R = TypeVar("R", Driver, Order)


class RunSupersededError(Exception):
    """A newer run (or a clear) started before this run finished; its results were dropped."""


class AssignmentService:
    """Loads inputs, geocodes them, runs the engine and holds the latest published run.

    Each run gets a token from a monotonic counter. Starting another run or
    clearing bumps the counter, and a run only publishes if its token is still
    the latest once all geocoding has finished.
    """

    def __init__(
        self,
        driver_repository: DriverRepository | None = None,
        order_repository: OrderRepository | None = None,
        resolver: AddressResolver | None = None,
        weights: MatchingWeights | None = None,
    ) -> None:
        self.driver_repository = driver_repository or SupabaseDriverRepository()
        self.order_repository = order_repository or SupabaseOrderRepository()
        self.resolver = resolver or AddressResolver()
        self.weights = weights
        self._lock = threading.Lock()
        self._latest_token = 0
        self._current: AssignmentRun | None = None

    def _begin(self) -> int:
        with self._lock:
            self._latest_token += 1
            return self._latest_token

    def _is_latest(self, token: int) -> bool:
        with self._lock:
            return token == self._latest_token

    def load_inputs(self) -> tuple[list[Driver], list[Order], list[str]]:
        """Read drivers and open orders; a failing source counts as empty and is reported."""

        errors: list[str] = []
        try:
            drivers = list(self.driver_repository.list_drivers())
        except RepositoryError as exc:
            logger.error(f"Error fetching drivers: {exc}")
            errors.append(f"drivers: {exc}")
            drivers = []
        try:
            orders = list(self.order_repository.list_open_orders())
        except RepositoryError as exc:
            logger.error(f"Error fetching orders: {exc}")
            errors.append(f"orders: {exc}")
            orders = []
        return drivers, orders, errors

    def _geocode(self, records: Sequence[R]) -> None:
        pending = [record for record in records if record.coordinates is None and record.full_address]
        if pending:
            self.resolver.batch_resolve(pending, lambda record: record.full_address)

    def run(self, *, geocode: bool = True) -> AssignmentRun:
        token = self._begin()
        started_at = datetime.now(timezone.utc)

        loaded_drivers, loaded_orders, errors = self.load_inputs()
        # Work on copies so coordinates from an abandoned run never leak into shared records.
        drivers = [replace(driver) for driver in loaded_drivers]
        orders = [replace(order) for order in loaded_orders]

        if geocode and drivers and orders:
            logger.info(f"Run {token}: geocoding {len(drivers)} drivers and {len(orders)} orders")
            self._geocode(drivers)
            self._geocode(orders)

        if not self._is_latest(token):
            logger.info(f"Run {token} superseded during geocoding; discarding results")
            raise RunSupersededError(f"Run {token} was superseded.")

        result = assign_orders(orders, drivers, weights=self.weights)
        run = AssignmentRun(
            run_id=token,
            orders=tuple(orders),
            drivers=tuple(drivers),
            result=result,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            geocoded=geocode,
            errors=errors,
        )

        with self._lock:
            if token != self._latest_token:
                raise RunSupersededError(f"Run {token} was superseded.")
            self._current = run
        logger.info(
            f"Run {token} published: {len(result.assignments)} assigned, {len(result.unassigned)} unassigned"
        )
        return run

    def current(self) -> AssignmentRun | None:
        with self._lock:
            return self._current

    def clear(self) -> None:
        """Drop the published run and invalidate any run still in flight."""

        with self._lock:
            self._latest_token += 1
            self._current = None

    def invalidate_cache(self) -> None:
        self.resolver.cache.clear()

    def export_csv(self) -> str:
        run = self.current()
        if run is None:
            return assignments_to_csv({}, (), ())
        return assignments_to_csv(run.assignments, run.orders, run.drivers)

    def deliver(self, sink: OutputSink) -> ExportOutcome:
        """Hand the CSV export to ``sink``; a failing sink is reported, never raised."""

        content = self.export_csv()
        try:
            location = sink.deliver(content)
        except Exception as exc:
            logger.error(f"Failed to deliver assignments export: {exc}")
            return ExportOutcome(delivered=False, content=content, error=str(exc))
        return ExportOutcome(delivered=True, content=content, location=location)
