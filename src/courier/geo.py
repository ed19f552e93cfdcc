"""
Geospatial utilities for courier routing.
"""

import math
from typing import NamedTuple

EARTH_RADIUS_KM = 6371.0
AVERAGE_SPEED_KMPH = 20.0


class Location(NamedTuple):
    """A (lat, lon) point in decimal degrees."""

    lat: float
    lon: float


def haversine_km(origin: Location, destination: Location) -> float:
    """
    Compute great-circle distance between two (lat, lon) points in kilometers.
    """
    lat1, lon1 = origin
    lat2, lon2 = destination
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def travel_time_minutes(distance_km: float, speed_kmph: float = AVERAGE_SPEED_KMPH) -> float:
    """
    Convert distance (km) to travel time in minutes given speed (km/h).
    """
    if speed_kmph <= 0:
        raise ValueError("speed_kmph must be positive")
    if distance_km <= 0:
        return 0.0
    hours = distance_km / speed_kmph
    return hours * 60.0


def travel_minutes_between(
    origin: Location, destination: Location, speed_kmph: float = AVERAGE_SPEED_KMPH
) -> float:
    return travel_time_minutes(haversine_km(origin, destination), speed_kmph)
