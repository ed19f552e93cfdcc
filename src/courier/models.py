"""
Order and route structures exchanged between generation, planning and export.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from courier.geo import Location


class StepAction(str, Enum):
    PICKUP = "Pickup"
    DELIVER = "Deliver"


@dataclass(frozen=True, slots=True)
class Order:
    """One pickup at a restaurant paired with one delivery to its customer."""

    order_id: str
    restaurant: Location
    customer: Location
    prep_minutes: float
    trust_buffer_minutes: float = 0.0

    @property
    def effective_prep_minutes(self) -> float:
        """Minutes after plan start before the food can be picked up."""
        return self.prep_minutes + self.trust_buffer_minutes


@dataclass(frozen=True, slots=True)
class RouteStep:
    action: StepAction
    target: str
    order_id: str
    eta_minutes: float
    location: Location

    @property
    def lat(self) -> float:
        return self.location.lat

    @property
    def lon(self) -> float:
        return self.location.lon

    def __str__(self) -> str:
        return f"{self.action.value} Order {self.order_id} at {self.target} (ETA: {self.eta_minutes:.2f} min)"


@dataclass(frozen=True, slots=True)
class RouteResult:
    """
    Planned visit order with ETAs in minutes from plan start.
    `total_minutes` equals the ETA of the last step (0.0 for an empty route).
    """

    steps: Tuple[RouteStep, ...]
    total_minutes: float
