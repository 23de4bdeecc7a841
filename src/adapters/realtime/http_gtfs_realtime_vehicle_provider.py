from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from src.app.ports.output import IRealtimeVehicleProvider
from src.domain.algorithms.geo_utils import is_within_radius_m
from src.domain.exceptions import VehicleFeedError
from src.domain.models import GeoPoint, Vehicle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpGtfsRealtimeVehicleProvider(IRealtimeVehicleProvider):
    """Fetches a GTFS-Realtime VehiclePositions feed over HTTP.

    Env vars:
      - GTFS_RT_VEHICLE_POSITIONS_URL: URL to a GTFS-RT VehiclePositions feed
      - GTFS_RT_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - GTFS_RT_TIMEOUT_S: request timeout (default 10)
      - GTFS_RT_CACHE_TTL_S: in-process cache TTL seconds (default 25)
      - GTFS_RT_RADIUS_M: keep vehicles within this distance (default 30000, 0 = all)

    Notes:
      - If URL is not configured, returns an empty tuple.
      - Vehicles without a position cannot be placed, so the radius filter
        passes them through; the view drops them.
      - Every vehicle is stamped with `gtfs_id`, the dataset its trip ids refer to.
    """

    gtfs_id: str | None = None
    url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    cache_ttl_s: float = 25.0
    radius_m: float = 30000.0
    transport: httpx.AsyncBaseTransport | None = None

    # In-process cache
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _cached_at_monotonic: float = field(default=0.0, init=False, repr=False)
    _cached_vehicles: tuple[Vehicle, ...] = field(
        default=(), init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("GTFS_RT_VEHICLE_POSITIONS_URL")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("GTFS_RT_HEADERS")
        if os.getenv("GTFS_RT_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_RT_TIMEOUT_S"])
        if os.getenv("GTFS_RT_CACHE_TTL_S"):
            self.cache_ttl_s = float(os.environ["GTFS_RT_CACHE_TTL_S"])
        if os.getenv("GTFS_RT_RADIUS_M"):
            self.radius_m = float(os.environ["GTFS_RT_RADIUS_M"])

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        for part in (self.headers_raw or "").split(";"):
            key, sep, value = part.partition(":")
            if sep and key.strip():
                headers[key.strip()] = value.strip()
        return headers

    async def get_positions_near(self, lat: float, lon: float) -> tuple[Vehicle, ...]:
        center = GeoPoint(lat=lat, lon=lon)
        vehicles = await self._feed_vehicles()
        return tuple(
            v
            for v in vehicles
            if v.position is None
            or is_within_radius_m(center, v.position, self.radius_m)
        )

    async def _feed_vehicles(self) -> tuple[Vehicle, ...]:
        if not self.url:
            return ()

        async with self._lock:
            now_mono = time.monotonic()
            if (
                self._cached_vehicles
                and (now_mono - self._cached_at_monotonic) < self.cache_ttl_s
            ):
                return self._cached_vehicles

            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout_s, transport=self.transport
                ) as client:
                    resp = await client.get(self.url, headers=self._headers())
                    resp.raise_for_status()
                    content = resp.content
                vehicles = parse_vehicle_positions(content, gtfs_id=self.gtfs_id)
            except (httpx.HTTPError, DecodeError) as exc:
                logger.exception("Failed to fetch vehicle positions")
                raise VehicleFeedError(f"Vehicle feed unavailable: {exc}") from exc

            self._cached_at_monotonic = time.monotonic()
            self._cached_vehicles = vehicles
            return vehicles


def parse_vehicle_positions(
    content: bytes, *, gtfs_id: str | None = None
) -> tuple[Vehicle, ...]:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(content)

    out: list[Vehicle] = []

    for ent in feed.entity:
        if not ent.HasField("vehicle"):
            continue

        v = ent.vehicle

        position = None
        if v.HasField("position"):
            position = GeoPoint.maybe(v.position.latitude, v.position.longitude)
            if position is None:
                logger.warning(
                    "Dropping out-of-range position", extra={"entity_id": ent.id}
                )

        trip_id = None
        route_id = None
        if v.HasField("trip"):
            trip_id = v.trip.trip_id or None
            route_id = v.trip.route_id or None

        vehicle_id = None
        label = None
        if v.HasField("vehicle"):
            vehicle_id = v.vehicle.id or None
            label = v.vehicle.label or None

        timestamp = None
        if v.HasField("timestamp") and int(v.timestamp) > 0:
            timestamp = datetime.fromtimestamp(int(v.timestamp), tz=timezone.utc)

        out.append(
            Vehicle(
                entity_id=ent.id,
                vehicle_id=vehicle_id,
                label=label,
                trip_id=trip_id,
                route_id=route_id,
                gtfs_id=gtfs_id,
                position=position,
                timestamp=timestamp,
            )
        )

    return tuple(out)
