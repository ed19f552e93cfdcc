"""GeoJSON export of planned routes."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from courier.models import RouteResult, RouteStep, StepAction

logger = logging.getLogger(__name__)

MARKER_COLORS = {
    StepAction.PICKUP: "red",
    StepAction.DELIVER: "green",
}


def _coordinates(step: RouteStep) -> List[float]:
    # GeoJSON positions are [lon, lat].
    return [step.lon, step.lat]


def _line_feature(coordinates: List[List[float]], properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": coordinates},
        "properties": properties,
    }


def _point_feature(step: RouteStep) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": _coordinates(step)},
        "properties": {
            "action": step.action.value,
            "target": step.target,
            "orderId": step.order_id,
            "marker-color": MARKER_COLORS.get(step.action, "gray"),
            "eta": round(step.eta_minutes, 2),
        },
    }


def route_to_feature_collection(result: RouteResult) -> Dict[str, Any]:
    """Convert a planned route to a GeoJSON FeatureCollection.

    The collection holds the full path as one LineString, a two-point
    LineString per consecutive pair of steps (flagged ``arrow``) and one Point
    marker per step. An empty route yields an empty collection.
    """
    features: List[Dict[str, Any]] = []
    steps = result.steps
    if steps:
        features.append(_line_feature([_coordinates(s) for s in steps], {"name": "Delivery Route"}))
        for origin, destination in zip(steps, steps[1:]):
            features.append(_line_feature([_coordinates(origin), _coordinates(destination)], {"arrow": True}))
        features.extend(_point_feature(s) for s in steps)
    return {"type": "FeatureCollection", "features": features}


def save_geojson(result: RouteResult, output_path: Path) -> Path:
    """Write the route as GeoJSON, replacing ``output_path`` atomically.

    Args:
        result: Planned route
        output_path: Destination file

    Returns:
        The path written

    Raises:
        OSError: if the directory or file cannot be written. A previous file at
            ``output_path`` is left untouched in that case.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = route_to_feature_collection(result)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote %d features to %s", len(payload["features"]), output_path)
    return output_path
