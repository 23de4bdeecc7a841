from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class ViewSchema(BaseModel):
    center: GeoPointSchema
    zoom: int
    tile_url: str
    gtfs_id: str
    notification_mode: Literal["live", "stub"]


class VehicleSchema(BaseModel):
    id: str
    vehicle_id: str | None = None
    label: str | None = None
    trip_id: str | None = None
    route_id: str | None = None
    gtfs_id: str | None = None
    position: GeoPointSchema
    timestamp: datetime | None = None


class VehiclesResponseSchema(BaseModel):
    fetched_at: datetime
    vehicles: list[VehicleSchema]


class ResolvedStopSchema(BaseModel):
    stop_id: str
    name: str | None = None
    location: GeoPointSchema | None = None
    arrival_time: str
    departure_time: str


class UpcomingStopsSchema(BaseModel):
    vehicle_id: str
    trip_id: str | None = None
    status: Literal[
        "ok", "missing_trip_id", "no_schedule_for_trip", "no_upcoming_stops"
    ]
    stops: list[ResolvedStopSchema] = []
