from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import Vehicle


class IRealtimeVehicleProvider(ABC):
    """Port for obtaining realtime vehicle positions (e.g., via GTFS-Realtime)."""

    @abstractmethod
    async def get_positions_near(self, lat: float, lon: float) -> tuple[Vehicle, ...]:
        """Return vehicles reported around a point.

        Vehicles may lack a position; callers filter before rendering.
        """
        raise NotImplementedError
