"""
Command-line entry point: generate orders, plan the route, export GeoJSON.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from courier.config import settings
from courier.data import generate_orders
from courier.export import save_geojson
from courier.geo import Location
from courier.report import format_orders, format_route
from courier.solver import TooManyOrdersError, plan_route


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="courier-route",
        description="Plan the fastest pickup-and-delivery route for a batch of synthetic orders.",
    )
    parser.add_argument("--orders", type=int, default=settings.order_count, help="number of orders to generate")
    parser.add_argument("--seed", type=int, default=settings.seed, help="random seed for order generation")
    parser.add_argument("--lat", type=float, default=settings.base_latitude, help="start latitude")
    parser.add_argument("--lon", type=float, default=settings.base_longitude, help="start longitude")
    parser.add_argument("--speed", type=float, default=settings.average_speed_kmph, help="courier speed in km/h")
    parser.add_argument("--max-orders", type=int, default=settings.max_orders, help="planner order limit")
    parser.add_argument("--output", type=Path, default=settings.output_path, help="GeoJSON output path")
    parser.add_argument("--log-level", default=settings.log_level, help="logging level (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    start = Location(args.lat, args.lon)
    orders = generate_orders(seed=args.seed, n=args.orders, base=start)
    print("Generated Orders:")
    print(format_orders(start, orders))

    try:
        route = plan_route(start, orders, speed_kmph=args.speed, max_orders=args.max_orders)
    except TooManyOrdersError as exc:
        print(f"Cannot plan route: {exc}", file=sys.stderr)
        return 2
    print()
    print(format_route(route))

    try:
        written = save_geojson(route, args.output)
    except OSError as exc:
        print(f"Failed to export GeoJSON: {exc}", file=sys.stderr)
        return 1
    print(f"GeoJSON exported to {written.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
