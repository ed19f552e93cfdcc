"""
Synthetic order generation around a base location.
"""

import random
from typing import List, Optional, Tuple

from courier.geo import Location
from courier.models import Order


def _jitter(rng: random.Random, base: Location, spread_deg: float) -> Location:
    # Uniform offset within +/- spread/2 degrees on each axis.
    lat = base.lat + (rng.random() - 0.5) * spread_deg
    lon = base.lon + (rng.random() - 0.5) * spread_deg
    return Location(round(lat, 6), round(lon, 6))


def generate_orders(
    seed: Optional[int],
    n: int,
    base: Location,
    restaurant_spread_deg: float = 0.02,
    customer_spread_deg: float = 0.04,
    prep_minutes_range: Tuple[int, int] = (3, 10),
    trust_buffer_range: Tuple[int, int] = (0, 3),
) -> List[Order]:
    """
    Generate n orders with ids O1..On near `base`.

    Restaurants fall within roughly 1 km of the base and customers within
    roughly 2 km (default spreads). Preparation time and trust buffer are whole
    minutes drawn from the inclusive ranges. The same seed yields the same orders.
    """
    if n < 0:
        raise ValueError("n must be non-negative")
    rng = random.Random(seed)
    base = Location(*base)
    orders: List[Order] = []
    for i in range(n):
        restaurant = _jitter(rng, base, restaurant_spread_deg)
        customer = _jitter(rng, base, customer_spread_deg)
        prep = rng.randint(prep_minutes_range[0], prep_minutes_range[1])
        buffer = rng.randint(trust_buffer_range[0], trust_buffer_range[1])
        orders.append(
            Order(
                order_id=f"O{i + 1}",
                restaurant=restaurant,
                customer=customer,
                prep_minutes=float(prep),
                trust_buffer_minutes=float(buffer),
            )
        )
    return orders
