"""
Reporting utilities for planned routes and order previews.
"""

from typing import Any, Dict, List, Sequence

from courier.geo import Location
from courier.models import Order, RouteResult


def format_route(result: RouteResult) -> str:
    """
    Render a human-readable route summary.
    """
    lines = ["Best Route:"]
    for idx, step in enumerate(result.steps, start=1):
        lines.append(f"{idx}. {step}")
    lines.append(f"Total Time: {result.total_minutes:.2f} minutes")
    return "\n".join(lines)


def format_orders(start: Location, orders: Sequence[Order], limit: int = 10) -> str:
    """
    Format a table of the start location and orders (preview limited to `limit` rows).
    """
    lines = []
    lines.append("Start:")
    lines.append(f"  lat: {start[0]}, lon: {start[1]}")
    lines.append("")
    lines.append("Orders (preview):")
    lines.append("ID\tRestaurant\tCustomer\tPrep(min)\tBuffer(min)")
    for o in orders[:limit]:
        lines.append(
            f"{o.order_id}\t{o.restaurant.lat},{o.restaurant.lon}\t{o.customer.lat},{o.customer.lon}"
            f"\t{o.prep_minutes:g}\t{o.trust_buffer_minutes:g}"
        )
    if len(orders) > limit:
        lines.append(f"... ({len(orders) - limit} more)")
    return "\n".join(lines)


def order_to_json(order: Order) -> Dict[str, Any]:
    return {
        "id": order.order_id,
        "restaurant": {"lat": order.restaurant.lat, "lon": order.restaurant.lon},
        "customer": {"lat": order.customer.lat, "lon": order.customer.lon},
        "prep_minutes": order.prep_minutes,
        "trust_buffer_minutes": order.trust_buffer_minutes,
    }


def route_result_to_json(result: RouteResult) -> Dict[str, Any]:
    steps: List[Dict[str, Any]] = [
        {
            "action": step.action.value,
            "target": step.target,
            "order_id": step.order_id,
            "eta_minutes": step.eta_minutes,
            "lat": step.lat,
            "lon": step.lon,
        }
        for step in result.steps
    ]
    return {"total_minutes": result.total_minutes, "steps": steps}
