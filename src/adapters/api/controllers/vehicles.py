from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request

from src.adapters.api.dependencies import get_bus_view_service, get_view_config
from src.adapters.api.schemas.vehicles import (
    GeoPointSchema,
    ResolvedStopSchema,
    UpcomingStopsSchema,
    VehicleSchema,
    VehiclesResponseSchema,
    ViewSchema,
)
from src.adapters.config import ViewConfig
from src.app.services.bus_view_service import BusViewService
from src.domain.exceptions import (
    ScheduleFetchError,
    SelectionSuperseded,
    VehicleFeedError,
    VehicleNotFound,
)
from src.domain.models import GeoPoint

router = APIRouter(tags=["vehicles"])


def _point(p: GeoPoint) -> GeoPointSchema:
    return GeoPointSchema(lat=p.lat, lon=p.lon)


def _client_key(request: Request) -> str:
    explicit = request.headers.get("x-client-id")
    if explicit:
        return explicit
    return request.client.host if request.client else "default"


@router.get("/view", response_model=ViewSchema)
def get_view(config: ViewConfig = Depends(get_view_config)) -> ViewSchema:
    return ViewSchema(
        center=GeoPointSchema(lat=config.map_center_lat, lon=config.map_center_lon),
        zoom=config.map_zoom,
        tile_url=config.tile_url,
        gtfs_id=config.gtfs_id,
        notification_mode=config.notification_mode,
    )


@router.get("/vehicles", response_model=VehiclesResponseSchema)
async def list_vehicles(
    service: BusViewService = Depends(get_bus_view_service),
) -> VehiclesResponseSchema:
    try:
        vehicles = await service.list_vehicles()
    except VehicleFeedError as exc:
        raise HTTPException(
            status_code=502, detail="Failed to fetch vehicle positions"
        ) from exc

    return VehiclesResponseSchema(
        fetched_at=datetime.now(timezone.utc),
        vehicles=[
            VehicleSchema(
                id=v.display_id,
                vehicle_id=v.vehicle_id,
                label=v.label,
                trip_id=v.trip_id,
                route_id=v.route_id,
                gtfs_id=v.gtfs_id,
                position=_point(v.position),
                timestamp=v.timestamp,
            )
            for v in vehicles
            if v.position is not None
        ],
    )


@router.get(
    "/vehicles/{vehicle_id}/upcoming-stops", response_model=UpcomingStopsSchema
)
async def get_upcoming_stops(
    vehicle_id: str,
    request: Request,
    service: BusViewService = Depends(get_bus_view_service),
) -> UpcomingStopsSchema:
    try:
        schedule = await service.select_vehicle(
            vehicle_id, client_key=_client_key(request)
        )
    except VehicleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SelectionSuperseded as exc:
        raise HTTPException(
            status_code=409, detail="Superseded by a newer selection"
        ) from exc
    except ScheduleFetchError as exc:
        raise HTTPException(
            status_code=502, detail="Failed to fetch schedule data"
        ) from exc

    return UpcomingStopsSchema(
        vehicle_id=vehicle_id,
        trip_id=schedule.trip_id,
        status=schedule.status.value,
        stops=[
            ResolvedStopSchema(
                stop_id=s.stop_id,
                name=s.name,
                location=_point(s.location) if s.location else None,
                arrival_time=s.arrival_time,
                departure_time=s.departure_time,
            )
            for s in schedule.stops
        ],
    )
