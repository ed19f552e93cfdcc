import itertools
import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from courier.config import settings
from courier.data import generate_orders
from courier.geo import Location, travel_minutes_between
from courier.models import Order, StepAction
from courier.solver import TooManyOrdersError, plan_route

BASE = Location(12.9352, 77.6245)


def brute_force_minutes(start, orders):
    """Enumerate every precedence-feasible visiting order and return the best finish time."""
    n = len(orders)
    locations = [o.restaurant for o in orders] + [o.customer for o in orders]
    best = math.inf
    for perm in itertools.permutations(range(2 * n)):
        position = {node: i for i, node in enumerate(perm)}
        if any(position[i] > position[n + i] for i in range(n)):
            continue
        clock = 0.0
        current = start
        for node in perm:
            clock += travel_minutes_between(current, locations[node])
            if node < n:
                clock = max(clock, orders[node].effective_prep_minutes)
            current = locations[node]
        best = min(best, clock)
    return best


@pytest.mark.parametrize("seed,n", [(11, 1), (12, 2), (13, 3), (14, 3), (15, 4)])
def test_matches_brute_force_optimum(seed, n):
    orders = generate_orders(seed=seed, n=n, base=BASE)
    result = plan_route(BASE, orders)
    assert math.isclose(result.total_minutes, brute_force_minutes(BASE, orders), rel_tol=1e-9)


@pytest.mark.parametrize("seed,n", [(21, 2), (22, 4), (23, 5)])
def test_route_invariants_on_generated_orders(seed, n):
    orders = generate_orders(seed=seed, n=n, base=BASE)
    result = plan_route(BASE, orders)
    steps = result.steps

    assert len(steps) == 2 * n
    by_id = {o.order_id: o for o in orders}
    for oid, order in by_id.items():
        pickup = next(i for i, s in enumerate(steps) if s.action == StepAction.PICKUP and s.order_id == oid)
        deliver = next(i for i, s in enumerate(steps) if s.action == StepAction.DELIVER and s.order_id == oid)
        assert pickup < deliver
        assert steps[pickup].eta_minutes >= order.effective_prep_minutes
    etas = [s.eta_minutes for s in steps]
    assert etas == sorted(etas)
    assert result.total_minutes == steps[-1].eta_minutes
    assert result.total_minutes > 0


def test_late_arrival_does_not_add_prep_wait():
    # Preparation runs from plan time 0, so a courier arriving after it is done
    # picks up on arrival rather than waiting another prep period.
    start = Location(0, 0)
    restaurant = Location(0, 1)
    order = Order("O1", restaurant=restaurant, customer=Location(0, 2), prep_minutes=10.0, trust_buffer_minutes=5.0)
    result = plan_route(start, [order])

    travel = travel_minutes_between(start, restaurant)
    assert travel > 15.0
    assert result.steps[0].eta_minutes == travel


def test_slow_kitchen_is_visited_after_ready_one():
    start = Location(0, 0)
    slow = Order("SLOW", restaurant=Location(0, 0.01), customer=Location(0, 0.011), prep_minutes=30.0)
    fast = Order("FAST", restaurant=Location(0, 0.01), customer=Location(0, 0.009), prep_minutes=0.0)
    result = plan_route(start, [slow, fast])

    # Everything is close together, so the route is bounded by the slow kitchen.
    assert result.steps[0].order_id == "FAST"
    assert result.total_minutes < 31.0
    assert next(s for s in result.steps if s.order_id == "SLOW").eta_minutes == 30.0


def test_exact_ties_resolve_deterministically():
    # Two interchangeable orders produce several tours with identical times.
    start = Location(0, 0)
    o1 = Order("O1", restaurant=Location(0, 0.01), customer=Location(0, 0.02), prep_minutes=0.0)
    o2 = Order("O2", restaurant=Location(0, 0.01), customer=Location(0, 0.02), prep_minutes=0.0)
    result = plan_route(start, [o1, o2])

    assert [(s.action, s.order_id) for s in result.steps] == [
        (StepAction.PICKUP, "O2"),
        (StepAction.PICKUP, "O1"),
        (StepAction.DELIVER, "O2"),
        (StepAction.DELIVER, "O1"),
    ]
    assert [s.target for s in result.steps] == ["Restaurant R2", "Restaurant R1", "Customer C2", "Customer C1"]
    assert result.steps[0].eta_minutes == result.steps[1].eta_minutes
    assert result.steps[2].eta_minutes == result.steps[3].eta_minutes == result.total_minutes


def test_duplicate_order_ids_are_accepted():
    start = Location(0, 0)
    o1 = Order("DUP", restaurant=Location(0, 0.01), customer=Location(0, 0.02), prep_minutes=0.0)
    o2 = Order("DUP", restaurant=Location(0.01, 0), customer=Location(0.02, 0), prep_minutes=0.0)
    result = plan_route(start, [o1, o2])

    assert len(result.steps) == 4
    assert {s.target for s in result.steps} == {"Restaurant R1", "Restaurant R2", "Customer C1", "Customer C2"}


def test_repeated_and_concurrent_calls_agree():
    orders = generate_orders(seed=31, n=4, base=BASE)
    first = plan_route(BASE, orders)
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: plan_route(BASE, orders), range(4)))
    assert all(r == first for r in results)


def test_doubling_speed_halves_total_without_prep():
    orders = generate_orders(seed=41, n=3, base=BASE, prep_minutes_range=(0, 0), trust_buffer_range=(0, 0))
    slow = plan_route(BASE, orders, speed_kmph=20.0)
    fast = plan_route(BASE, orders, speed_kmph=40.0)
    assert math.isclose(fast.total_minutes, slow.total_minutes / 2)


def test_invalid_speed_rejected():
    orders = generate_orders(seed=1, n=1, base=BASE)
    with pytest.raises(ValueError):
        plan_route(BASE, orders, speed_kmph=0.0)


def test_too_many_orders_rejected_before_planning():
    orders = generate_orders(seed=1, n=3, base=BASE)
    with pytest.raises(TooManyOrdersError) as excinfo:
        plan_route(BASE, orders, max_orders=2)
    assert excinfo.value.count == 3
    assert excinfo.value.limit == 2
    assert isinstance(excinfo.value, ValueError)


def test_order_limit_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "max_orders", 1)
    orders = generate_orders(seed=1, n=2, base=BASE)
    with pytest.raises(TooManyOrdersError):
        plan_route(BASE, orders)
    assert len(plan_route(BASE, orders[:1]).steps) == 2


def test_speed_defaults_to_settings(monkeypatch):
    orders = generate_orders(seed=51, n=2, base=BASE, prep_minutes_range=(0, 0), trust_buffer_range=(0, 0))
    monkeypatch.setattr(settings, "average_speed_kmph", 40.0)
    assert plan_route(BASE, orders) == plan_route(BASE, orders, speed_kmph=40.0)
    assert plan_route(BASE, orders) != plan_route(BASE, orders, speed_kmph=20.0)
