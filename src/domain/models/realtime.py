from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Vehicle:
    """A vehicle as reported by the realtime position feed.

    Read-only from our side; the feed may omit the position or the trip.
    """

    entity_id: str
    vehicle_id: str | None = None
    label: str | None = None
    trip_id: str | None = None
    route_id: str | None = None
    gtfs_id: str | None = None
    position: GeoPoint | None = None
    timestamp: datetime | None = None

    @property
    def display_id(self) -> str:
        return self.vehicle_id or self.label or self.entity_id

    @property
    def has_position(self) -> bool:
        return self.position is not None
