"""Greedy, load-balanced order-to-driver matching."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ...config import settings
from ...models.domain import Driver, Order
from ..geospatial import distance_between
from ..similarity import normalize_text, similarity

logger = logging.getLogger(__name__)


class MatchTier(str, enum.Enum):
    PROXIMITY = "proximity"
    CITY = "city"
    ADDRESS = "address"
    FUZZY = "fuzzy"
    LEAST_LOADED = "least_loaded"


@dataclass(slots=True, frozen=True)
class MatchingWeights:
    load_penalty_km: float = field(default_factory=lambda: settings.proximity_load_penalty_km)
    city_weight: float = field(default_factory=lambda: settings.fuzzy_city_weight)
    address_weight: float = field(default_factory=lambda: settings.fuzzy_address_weight)
    fuzzy_threshold: float = field(default_factory=lambda: settings.fuzzy_threshold)


@dataclass(slots=True)
class AssignmentResult:
    assignments: Dict[str, str]
    loads: Dict[str, int]
    tiers: Dict[str, MatchTier]
    distances_km: Dict[str, float]
    unassigned: List[str]

    def orders_for_driver(self, driver_id: str) -> list[str]:
        return [oid for oid, did in self.assignments.items() if did == driver_id]


@dataclass(slots=True)
class _Match:
    driver: Driver
    tier: MatchTier
    distance_km: Optional[float] = None


def _least_loaded(candidates: Sequence[Driver], loads: Dict[str, int]) -> Driver:
    # min() keeps the first of equal keys, so input order breaks ties.
    return min(candidates, key=lambda driver: loads[driver.driver_id])


def _match_proximity(
    order: Order, drivers: Sequence[Driver], loads: Dict[str, int], weights: MatchingWeights
) -> _Match | None:
    if order.coordinates is None:
        return None
    located = [driver for driver in drivers if driver.coordinates is not None]
    if not located:
        return None

    best: _Match | None = None
    best_adjusted = float("inf")
    for driver in located:
        distance = distance_between(order.coordinates, driver.coordinates)
        adjusted = distance + weights.load_penalty_km * loads[driver.driver_id]
        if adjusted < best_adjusted:
            best_adjusted = adjusted
            best = _Match(driver=driver, tier=MatchTier.PROXIMITY, distance_km=distance)
    return best


def _match_city(order: Order, drivers: Sequence[Driver], loads: Dict[str, int]) -> _Match | None:
    # A blank order city matches drivers whose city is also blank.
    order_city = normalize_text(order.delivery_city)
    candidates = [driver for driver in drivers if normalize_text(driver.city) == order_city]
    if not candidates:
        return None
    return _Match(driver=_least_loaded(candidates, loads), tier=MatchTier.CITY)


def _match_address(order: Order, drivers: Sequence[Driver], loads: Dict[str, int]) -> _Match | None:
    order_address = normalize_text(order.delivery_address)
    if not order_address:
        return None

    def contains(driver: Driver) -> bool:
        driver_address = normalize_text(driver.address)
        return bool(driver_address) and (driver_address in order_address or order_address in driver_address)

    candidates = [driver for driver in drivers if contains(driver)]
    if not candidates:
        return None
    return _Match(driver=_least_loaded(candidates, loads), tier=MatchTier.ADDRESS)


def fuzzy_score(order: Order, driver: Driver, weights: MatchingWeights) -> float:
    order_city = normalize_text(order.delivery_city)
    order_address = normalize_text(order.delivery_address)
    city_score = similarity(driver.city, order_city) if order_city else 0.0
    address_score = similarity(driver.address, order_address) if order_address else 0.0
    return max(weights.city_weight * city_score, weights.address_weight * address_score)


def _match_fuzzy(order: Order, drivers: Sequence[Driver], weights: MatchingWeights) -> _Match | None:
    best: Driver | None = None
    best_score = 0.0
    for driver in drivers:
        score = fuzzy_score(order, driver, weights)
        if score > best_score:
            best_score = score
            best = driver
    if best is None or best_score < weights.fuzzy_threshold:
        return None
    logger.debug(f"Fuzzy match for order {order.order_id}: driver {best.driver_id} score={best_score:.3f}")
    return _Match(driver=best, tier=MatchTier.FUZZY)


def match_order(
    order: Order, drivers: Sequence[Driver], loads: Dict[str, int], weights: MatchingWeights
) -> _Match | None:
    """Pick a driver for one order, trying each tier in priority order."""

    if not drivers:
        return None
    proximity = _match_proximity(order, drivers, loads, weights)
    if proximity is not None:
        return proximity
    return (
        _match_city(order, drivers, loads)
        or _match_address(order, drivers, loads)
        or _match_fuzzy(order, drivers, weights)
        or _Match(driver=_least_loaded(drivers, loads), tier=MatchTier.LEAST_LOADED)
    )


def assign_orders(
    orders: Sequence[Order],
    drivers: Sequence[Driver],
    *,
    weights: MatchingWeights | None = None,
    loads: Dict[str, int] | None = None,
) -> AssignmentResult:
    """Assign every order to a driver in one pass over ``orders``.

    Loads start at zero for every driver unless ``loads`` seeds them; the
    given map is copied, never updated. Each assignment adds one, so later
    orders see the effect of earlier ones. The pass is greedy: there is
    no reordering and no rebalancing afterwards.
    """
    weights = weights or MatchingWeights()
    seed = loads or {}
    loads = {driver.driver_id: seed.get(driver.driver_id, 0) for driver in drivers}
    assignments: Dict[str, str] = {}
    tiers: Dict[str, MatchTier] = {}
    distances: Dict[str, float] = {}
    unassigned: list[str] = []

    for order in orders:
        if order.order_id in assignments:
            logger.warning(f"Skipping duplicate order id {order.order_id}")
            continue
        match = match_order(order, drivers, loads, weights)
        if match is None:
            unassigned.append(order.order_id)
            continue

        driver_id = match.driver.driver_id
        assignments[order.order_id] = driver_id
        tiers[order.order_id] = match.tier
        if match.distance_km is not None:
            distances[order.order_id] = match.distance_km
        loads[driver_id] += 1
        logger.debug(f"Order {order.order_id} -> driver {driver_id} via {match.tier.value}")

    logger.info(
        f"Assigned {len(assignments)}/{len(orders)} orders across {len(drivers)} drivers"
    )
    return AssignmentResult(
        assignments=assignments,
        loads=loads,
        tiers=tiers,
        distances_km=distances,
        unassigned=unassigned,
    )
