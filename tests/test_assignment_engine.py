import random

import pytest

from src.delivery.models.domain import Coordinates, Driver, Order
from src.delivery.services.assignment.engine import (
    MatchingWeights,
    MatchTier,
    assign_orders,
    fuzzy_score,
)


def _driver(did: str, city: str | None = None, address: str | None = None, coords: tuple | None = None) -> Driver:
    return Driver(
        driver_id=did,
        name=f"Driver {did}",
        city=city,
        address=address,
        coordinates=Coordinates(*coords) if coords else None,
    )


def _order(oid: str, city: str | None = None, address: str | None = None, coords: tuple | None = None) -> Order:
    return Order(
        order_id=oid,
        order_number=oid.lstrip("O"),
        delivery_city=city,
        delivery_address=address,
        status="pending",
        coordinates=Coordinates(*coords) if coords else None,
    )


def test_city_scenario_assigns_both_orders_to_only_city_match():
    drivers = [_driver("D1", city="Mumbai"), _driver("D2", city="Pune")]
    orders = [_order("O1", city="Mumbai"), _order("O2", city="Mumbai")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D1", "O2": "D1"}
    assert result.loads == {"D1": 2, "D2": 0}
    assert result.tiers == {"O1": MatchTier.CITY, "O2": MatchTier.CITY}


@pytest.mark.parametrize(
    "orders, drivers",
    [
        ([], []),
        ([], [_driver("D1", city="Pune")]),
        ([_order("O1", city="Pune")], []),
    ],
)
def test_empty_inputs_yield_empty_assignment(orders, drivers):
    result = assign_orders(orders, drivers)

    assert result.assignments == {}
    assert result.unassigned == [order.order_id for order in orders]


def test_proximity_picks_nearest_driver():
    drivers = [
        _driver("D1", coords=(19.0, 73.0)),
        _driver("D2", coords=(18.52, 73.85)),
    ]
    orders = [_order("O1", coords=(18.5, 73.8))]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.PROXIMITY
    assert result.distances_km["O1"] < 10


def test_load_penalty_splits_equidistant_orders():
    drivers = [_driver("A", coords=(0.0, 1.0)), _driver("B", coords=(0.0, -1.0))]
    orders = [_order("O1", coords=(0.0, 0.0)), _order("O2", coords=(0.0, 0.0))]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "A", "O2": "B"}
    assert result.loads == {"A": 1, "B": 1}


def test_load_penalty_is_soft():
    # D1 is 10 km closer, so it keeps winning until its penalty outweighs the gap.
    drivers = [_driver("D1", coords=(0.0, 0.0)), _driver("D2", coords=(0.0, 0.09))]
    orders = [_order(f"O{i}", coords=(0.0, 0.0)) for i in range(25)]

    result = assign_orders(orders, drivers)

    assert result.loads["D1"] > result.loads["D2"] > 0
    assert sum(result.loads.values()) == 25


def test_proximity_ignores_drivers_without_coordinates():
    drivers = [_driver("D1", city="Pune"), _driver("D2", city="Mumbai", coords=(19.07, 72.87))]
    orders = [_order("O1", city="Pune", coords=(18.52, 73.85))]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.PROXIMITY


def test_order_with_coordinates_falls_back_when_no_driver_is_located():
    drivers = [_driver("D1", city="Mumbai"), _driver("D2", city="Pune")]
    orders = [_order("O1", city="Pune", coords=(18.52, 73.85))]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.CITY


def test_city_match_beats_fuzzy_match():
    drivers = [
        _driver("D1", city="Pune", address="Far Away Lane"),
        _driver("D2", city="Mumbai", address="12 MG Road"),
    ]
    order = _order("O1", city="pune ", address="12 MG Road")
    weights = MatchingWeights()

    # Fuzzy alone would prefer D2 (exact address) over D1 (exact city).
    assert fuzzy_score(order, drivers[1], weights) > fuzzy_score(order, drivers[0], weights)

    result = assign_orders([order], drivers, weights=weights)

    assert result.assignments == {"O1": "D1"}
    assert result.tiers["O1"] is MatchTier.CITY


def test_city_match_prefers_least_loaded_then_input_order():
    drivers = [_driver("D1", city="Pune"), _driver("D2", city="Pune"), _driver("D3", city="Pune")]
    orders = [_order(f"O{i}", city="Pune") for i in range(1, 5)]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D1", "O2": "D2", "O3": "D3", "O4": "D1"}


def test_blank_city_matches_drivers_without_city():
    drivers = [_driver("D1", city="Pune", address="Kothrud"), _driver("D2")]
    orders = [_order("O1", address="Kothrud")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.CITY


def test_seeded_loads_steer_first_order_and_are_not_mutated():
    drivers = [_driver("D1", city="Pune"), _driver("D2", city="Pune")]
    orders = [_order("O1", city="Pune"), _order("O2", city="Pune")]
    seed = {"D1": 2, "unknown": 5}

    result = assign_orders(orders, drivers, loads=seed)

    assert result.assignments == {"O1": "D2", "O2": "D2"}
    assert result.loads == {"D1": 2, "D2": 2}
    assert seed == {"D1": 2, "unknown": 5}


def test_address_containment_tier():
    drivers = [
        _driver("D1", city="Thane", address="Andheri East"),
        _driver("D2", city="Thane", address="221B Baker Street"),
    ]
    orders = [_order("O1", city="London", address="Flat 4, 221b baker street")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.ADDRESS


def test_address_containment_works_both_ways():
    drivers = [_driver("D1", city="Kolkata", address="Sector 5, Salt Lake, Kolkata")]
    orders = [_order("O1", address="salt lake")]

    result = assign_orders(orders, drivers)

    assert result.tiers["O1"] is MatchTier.ADDRESS


def test_fuzzy_tier_accepts_score_at_threshold():
    drivers = [_driver("D1", city="zzzz"), _driver("D2", city="axyz")]
    orders = [_order("O1", city="abcd")]
    weights = MatchingWeights(load_penalty_km=0.5, city_weight=1.0, address_weight=1.0, fuzzy_threshold=0.25)

    assert fuzzy_score(orders[0], drivers[1], weights) == pytest.approx(0.25)
    result = assign_orders(orders, drivers, weights=weights)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.FUZZY


def test_fuzzy_tier_rejects_score_below_threshold():
    drivers = [_driver("D1", city="zzzz"), _driver("D2", city="axyz")]
    orders = [_order("O1", city="abcd")]
    weights = MatchingWeights(load_penalty_km=0.5, city_weight=0.96, address_weight=1.0, fuzzy_threshold=0.25)

    assert fuzzy_score(orders[0], drivers[1], weights) == pytest.approx(0.24)
    result = assign_orders(orders, drivers, weights=weights)

    assert result.assignments == {"O1": "D1"}
    assert result.tiers["O1"] is MatchTier.LEAST_LOADED


def test_fuzzy_tier_with_default_weights():
    drivers = [_driver("D1", city="Bangalore"), _driver("D2", city="Bengaluru")]
    orders = [_order("O1", city="Bengaluru Urban")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D2"}
    assert result.tiers["O1"] is MatchTier.FUZZY


def test_least_loaded_fallback_rotates_through_drivers():
    drivers = [_driver("D1", city="Pune"), _driver("D2", city="Mumbai")]
    orders = [_order("O1"), _order("O2"), _order("O3")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D1", "O2": "D2", "O3": "D1"}
    assert all(tier is MatchTier.LEAST_LOADED for tier in result.tiers.values())


def test_rerun_starts_from_zero_load():
    drivers = [_driver("D1", city="Pune"), _driver("D2", city="Pune")]
    orders = [_order("O1", city="Pune"), _order("O2", city="Pune")]

    first = assign_orders(orders, drivers)
    second = assign_orders(orders, drivers)

    assert first.assignments == second.assignments
    assert second.loads == {"D1": 1, "D2": 1}


def test_duplicate_order_ids_are_assigned_once():
    drivers = [_driver("D1"), _driver("D2")]
    orders = [_order("O1"), _order("O1")]

    result = assign_orders(orders, drivers)

    assert result.assignments == {"O1": "D1"}
    assert sum(result.loads.values()) == 1


@pytest.mark.parametrize("seed", range(5))
def test_every_order_maps_to_at_most_one_known_driver(seed):
    rng = random.Random(seed)
    cities = ["Mumbai", "Pune", "Nashik", "Thane", None]
    drivers = [
        _driver(
            f"D{i}",
            city=rng.choice(cities),
            coords=(rng.uniform(18, 20), rng.uniform(72, 74)) if rng.random() < 0.5 else None,
        )
        for i in range(rng.randint(1, 6))
    ]
    orders = [
        _order(
            f"O{i}",
            city=rng.choice(cities),
            coords=(rng.uniform(18, 20), rng.uniform(72, 74)) if rng.random() < 0.5 else None,
        )
        for i in range(rng.randint(0, 30))
    ]

    result = assign_orders(orders, drivers)

    order_ids = {order.order_id for order in orders}
    driver_ids = {driver.driver_id for driver in drivers}
    assert set(result.assignments) <= order_ids
    assert set(result.assignments.values()) <= driver_ids
    assert len(result.assignments) == len(orders)
    assert sum(result.loads.values()) == len(orders)
