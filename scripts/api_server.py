import logging
import os
import sys
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

# Ensure src/ is on path when running as a script
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from courier.config import settings
from courier.data import generate_orders
from courier.export import route_to_feature_collection
from courier.geo import Location
from courier.models import Order
from courier.report import order_to_json, route_result_to_json
from courier.solver import TooManyOrdersError, plan_route

app = Flask(__name__)
CORS(app)


def default_start() -> Location:
    return Location(settings.base_latitude, settings.base_longitude)


def _location(raw: Dict[str, Any]) -> Location:
    return Location(float(raw["lat"]), float(raw["lon"]))


def orders_from_body(body: List[Dict[str, Any]]) -> List[Order]:
    orders = []
    for idx, raw in enumerate(body, start=1):
        orders.append(
            Order(
                order_id=str(raw.get("id", f"O{idx}")),
                restaurant=_location(raw["restaurant"]),
                customer=_location(raw["customer"]),
                prep_minutes=float(raw.get("prep_minutes", 0.0)),
                trust_buffer_minutes=float(raw.get("trust_buffer_minutes", 0.0)),
            )
        )
    return orders


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@app.route("/api/plan", methods=["POST"])
def api_plan():
    body = request.get_json(force=True, silent=True) or {}
    try:
        speed_kmph = float(body.get("speed_kmph", settings.average_speed_kmph))
        start = _location(body["start"]) if body.get("start") else default_start()
        if body.get("orders") is not None:
            orders = orders_from_body(body["orders"])
        else:
            orders = generate_orders(
                seed=_optional_int(body.get("seed", settings.seed)),
                n=int(body.get("order_count", settings.order_count)),
                base=start,
            )
    except (KeyError, TypeError, ValueError) as exc:
        return jsonify({"error": f"invalid request: {exc}"}), 400

    try:
        route = plan_route(start, orders, speed_kmph=speed_kmph)
    except TooManyOrdersError as exc:
        return jsonify({"error": str(exc), "max_orders": exc.limit}), 400
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify(
        {
            "start": {"lat": start.lat, "lon": start.lon},
            "orders": [order_to_json(o) for o in orders],
            "route": route_result_to_json(route),
            "geojson": route_to_feature_collection(route),
        }
    )


@app.route("/api/orders", methods=["GET"])
def api_orders():
    start = default_start()
    try:
        count = int(request.args.get("count", settings.order_count))
        orders = generate_orders(seed=_optional_int(request.args.get("seed")), n=count, base=start)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": f"invalid request: {exc}"}), 400
    return jsonify({"start": {"lat": start.lat, "lon": start.lon}, "orders": [order_to_json(o) for o in orders]})


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
