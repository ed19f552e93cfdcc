"""
Exact pickup-and-delivery route planner using bitmask dynamic programming.

Nodes 0..n-1 are the restaurants of orders 0..n-1 and node n+i is the customer
of order i. dp[mask][pos] is the earliest plan time (minutes from departure)
at which the courier can stand on `pos` having visited exactly `mask`.

Restaurants start cooking at plan time 0, so arriving at restaurant r at time
t gives a pickup time of max(t, effective prep of r). Deliveries never wait.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from courier.config import settings
from courier.geo import Location, travel_minutes_between
from courier.models import Order, RouteResult, RouteStep, StepAction

logger = logging.getLogger(__name__)

START = -1


class TooManyOrdersError(ValueError):
    """Raised when the order count exceeds what the exact planner is allowed to solve."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"{count} orders exceed the planner limit of {limit}")
        self.count = count
        self.limit = limit


def _node_locations(orders: Sequence[Order]) -> List[Location]:
    return [o.restaurant for o in orders] + [o.customer for o in orders]


def _build_time_matrix(points: Sequence[Location], speed_kmph: float) -> List[List[float]]:
    """
    Build travel time matrix (in minutes) between every pair of nodes.
    """
    n = len(points)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            matrix[i][j] = travel_minutes_between(points[i], points[j], speed_kmph)
    return matrix


def _fill_table(
    start_times: Sequence[float],
    matrix: Sequence[Sequence[float]],
    prep: Sequence[float],
) -> Tuple[List[float], List[int], List[int]]:
    """
    Populate the flat dp / parent tables, indexed by mask * total_nodes + pos.

    Enumeration is ascending mask, then ascending pos, then ascending nxt, and a
    state is only replaced on a strictly smaller time. On exact ties the first
    discovered parent therefore wins, which keeps reconstruction deterministic.
    """
    n = len(prep)
    total_nodes = 2 * n
    size = (1 << total_nodes) * total_nodes

    dp = [math.inf] * size
    parent_mask = [-1] * size
    parent_pos = [-1] * size

    # Every tour starts with a pickup.
    for r in range(n):
        idx = (1 << r) * total_nodes + r
        arrival = max(start_times[r], prep[r])
        if arrival < dp[idx]:
            dp[idx] = arrival
            parent_mask[idx] = 0
            parent_pos[idx] = START

    for mask in range(1 << total_nodes):
        base = mask * total_nodes
        for pos in range(total_nodes):
            current = dp[base + pos]
            if current == math.inf:
                continue
            row = matrix[pos]
            for nxt in range(total_nodes):
                bit = 1 << nxt
                if mask & bit:
                    continue
                # Customer j is only reachable once restaurant j is picked up.
                if nxt >= n and not mask & (1 << (nxt - n)):
                    continue
                arrival = current + row[nxt]
                if nxt < n:
                    arrival = max(arrival, prep[nxt])
                idx = (mask | bit) * total_nodes + nxt
                if arrival < dp[idx]:
                    dp[idx] = arrival
                    parent_mask[idx] = mask
                    parent_pos[idx] = pos
    return dp, parent_mask, parent_pos


def _best_terminal(dp: Sequence[float], total_nodes: int) -> Tuple[int, float]:
    # Restaurant nodes are scanned too; they are never optimal at the full mask.
    full_mask = (1 << total_nodes) - 1
    base = full_mask * total_nodes
    best_pos = -1
    best_time = math.inf
    for pos in range(total_nodes):
        if dp[base + pos] < best_time:
            best_time = dp[base + pos]
            best_pos = pos
    return best_pos, best_time


def _reconstruct(
    parent_mask: Sequence[int],
    parent_pos: Sequence[int],
    total_nodes: int,
    end_pos: int,
) -> List[int]:
    order: List[int] = []
    mask = (1 << total_nodes) - 1
    pos = end_pos
    while pos != START:
        order.append(pos)
        idx = mask * total_nodes + pos
        mask, pos = parent_mask[idx], parent_pos[idx]
    order.reverse()
    return order


def _materialize_steps(
    start: Location,
    orders: Sequence[Order],
    node_order: Sequence[int],
    speed_kmph: float,
) -> List[RouteStep]:
    """
    Replay the node order from the start with a fresh clock and emit one step per node.
    """
    n = len(orders)
    locations = _node_locations(orders)
    steps: List[RouteStep] = []
    current = start
    clock = 0.0
    for node in node_order:
        idx = node if node < n else node - n
        order = orders[idx]
        arrival = clock + travel_minutes_between(current, locations[node], speed_kmph)
        if node < n:
            eta = max(arrival, order.effective_prep_minutes)
            steps.append(RouteStep(StepAction.PICKUP, f"Restaurant R{idx + 1}", order.order_id, eta, locations[node]))
        else:
            eta = arrival
            steps.append(RouteStep(StepAction.DELIVER, f"Customer C{idx + 1}", order.order_id, eta, locations[node]))
        clock = eta
        current = locations[node]
    return steps


def plan_route(
    start: Location,
    orders: Sequence[Order],
    speed_kmph: Optional[float] = None,
    max_orders: Optional[int] = None,
) -> RouteResult:
    """
    Find the minimum-time tour from `start` that picks up and delivers every order.

    Every delivery follows its pickup and no pickup happens before the order's
    effective preparation time. `speed_kmph` and `max_orders` default to
    settings.average_speed_kmph and settings.max_orders. Raises TooManyOrdersError
    when `orders` is longer than `max_orders`; the tables hold 4^n * 2n entries,
    so the limit is checked before anything is allocated.
    """
    n = len(orders)
    if n == 0:
        return RouteResult(steps=(), total_minutes=0.0)

    limit = settings.max_orders if max_orders is None else max_orders
    if n > limit:
        raise TooManyOrdersError(n, limit)
    if speed_kmph is None:
        speed_kmph = settings.average_speed_kmph

    total_nodes = 2 * n
    start = Location(*start)
    locations = _node_locations(orders)
    prep = [o.effective_prep_minutes for o in orders]
    start_times = [travel_minutes_between(start, locations[r], speed_kmph) for r in range(n)]
    matrix = _build_time_matrix(locations, speed_kmph)
    logger.debug("Planning %d orders over %d states", n, (1 << total_nodes) * total_nodes)

    dp, parent_mask, parent_pos = _fill_table(start_times, matrix, prep)
    end_pos, best_time = _best_terminal(dp, total_nodes)
    node_order = _reconstruct(parent_mask, parent_pos, total_nodes, end_pos)
    steps = _materialize_steps(start, orders, node_order, speed_kmph)

    logger.info("Planned %d orders: %d steps, %.2f minutes", n, len(steps), best_time)
    return RouteResult(steps=tuple(steps), total_minutes=best_time)
