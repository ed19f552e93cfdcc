import pytest

from courier.data import generate_orders
from courier.geo import Location

BASE = Location(12.9352, 77.6245)


def test_generate_orders_reproducible_with_seed():
    orders1 = generate_orders(seed=99, n=5, base=BASE)
    orders2 = generate_orders(seed=99, n=5, base=BASE)
    assert orders1 == orders2


def test_generate_orders_count_ids_and_bounds():
    orders = generate_orders(seed=1, n=50, base=BASE)
    assert len(orders) == 50
    assert [o.order_id for o in orders] == [f"O{i}" for i in range(1, 51)]
    for o in orders:
        assert abs(o.restaurant.lat - BASE.lat) <= 0.01
        assert abs(o.restaurant.lon - BASE.lon) <= 0.01
        assert abs(o.customer.lat - BASE.lat) <= 0.02
        assert abs(o.customer.lon - BASE.lon) <= 0.02
        assert 3 <= o.prep_minutes <= 10
        assert 0 <= o.trust_buffer_minutes <= 3
        assert o.prep_minutes == int(o.prep_minutes)


def test_effective_prep_includes_buffer():
    for o in generate_orders(seed=5, n=10, base=BASE):
        assert o.effective_prep_minutes == o.prep_minutes + o.trust_buffer_minutes


def test_custom_ranges_are_respected():
    orders = generate_orders(seed=3, n=20, base=BASE, prep_minutes_range=(0, 0), trust_buffer_range=(2, 2))
    assert all(o.prep_minutes == 0.0 and o.trust_buffer_minutes == 2.0 for o in orders)


def test_zero_orders():
    assert generate_orders(seed=1, n=0, base=BASE) == []


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        generate_orders(seed=1, n=-1, base=BASE)
