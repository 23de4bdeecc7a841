from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import time

from src.app.ports.output import IRealtimeVehicleProvider
from src.app.services.selection_guard import LatestSelectionGuard
from src.app.services.trip_schedule_service import TripScheduleService
from src.domain.exceptions import VehicleNotFound
from src.domain.models import GeoPoint, TripSchedule, Vehicle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BusViewService:
    """Backs the bus map view.

    - Lists positioned vehicles around the configured point.
    - Resolves the upcoming stops of a selected vehicle; per client, the most
      recent selection wins.
    """

    vehicle_provider: IRealtimeVehicleProvider
    trip_schedules: TripScheduleService
    positions_at: GeoPoint
    selection_guard: LatestSelectionGuard = field(default_factory=LatestSelectionGuard)

    _vehicles_by_id: dict[str, Vehicle] = field(
        default_factory=dict, init=False, repr=False
    )

    async def list_vehicles(self) -> tuple[Vehicle, ...]:
        # A feed failure propagates and leaves the previous vehicles in place.
        vehicles = await self.vehicle_provider.get_positions_near(
            self.positions_at.lat, self.positions_at.lon
        )
        positioned = tuple(v for v in vehicles if v.has_position)
        logger.info(
            "Fetched vehicles",
            extra={"total": len(vehicles), "positioned": len(positioned)},
        )
        self._vehicles_by_id = {v.display_id: v for v in positioned}
        return positioned

    def find_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = self._vehicles_by_id.get(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(f"Unknown vehicle: {vehicle_id}")
        return vehicle

    async def select_vehicle(
        self, vehicle_id: str, *, client_key: str = "default", now: time | None = None
    ) -> TripSchedule:
        vehicle = self.find_vehicle(vehicle_id)
        return await self.selection_guard.run(
            client_key,
            lambda: self.trip_schedules.upcoming_stops(vehicle, now=now),
        )
