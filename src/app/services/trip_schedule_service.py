from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Callable, TypeVar

from src.app.ports.output import IGtfsScheduleProvider
from src.domain.algorithms.schedule_resolver import (
    entries_for_trip,
    merge_with_stops,
    upcoming_entries,
)
from src.domain.exceptions import ScheduleFetchError
from src.domain.models import ResolutionStatus, TripSchedule, Vehicle

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class TripScheduleService:
    """Resolves the upcoming stops of a selected vehicle's trip.

    - Dataset version, stop times and stops come from the schedule provider.
    - Stops are only fetched once the trip has upcoming stop times.
    - Provider calls run off the event loop, bounded by `timeout_s`.
    """

    schedule_provider: IGtfsScheduleProvider
    default_gtfs_id: str
    timeout_s: float = 10.0

    async def upcoming_stops(
        self, vehicle: Vehicle, *, now: time | None = None
    ) -> TripSchedule:
        trip_id = vehicle.trip_id
        if not trip_id:
            logger.warning(
                "Selected vehicle has no trip id",
                extra={"vehicle_id": vehicle.display_id},
            )
            return TripSchedule(trip_id=None, status=ResolutionStatus.MISSING_TRIP_ID)

        gtfs_id = vehicle.gtfs_id or self.default_gtfs_id
        now = now or datetime.now().time()

        provider = self.schedule_provider
        version_id = await self._fetch(
            "dataset version", provider.get_dataset_version, gtfs_id
        )
        entries = await self._fetch(
            "stop times", provider.get_schedule_entries, gtfs_id, version_id
        )

        trip_entries = entries_for_trip(trip_id, entries)
        if not trip_entries:
            logger.warning(
                "No stop times for trip",
                extra={"trip_id": trip_id, "gtfs_id": gtfs_id, "version": version_id},
            )
            return TripSchedule(
                trip_id=trip_id, status=ResolutionStatus.NO_SCHEDULE_FOR_TRIP
            )

        upcoming = upcoming_entries(trip_entries, now)
        if not upcoming:
            logger.warning(
                "No upcoming stops for trip",
                extra={"trip_id": trip_id, "now": now.isoformat()},
            )
            return TripSchedule(
                trip_id=trip_id, status=ResolutionStatus.NO_UPCOMING_STOPS
            )

        stops = await self._fetch("stops", provider.get_stops, gtfs_id, version_id)
        return TripSchedule(
            trip_id=trip_id,
            status=ResolutionStatus.OK,
            stops=merge_with_stops(upcoming, stops),
        )

    async def _fetch(self, what: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, *args), timeout=self.timeout_s
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Timed out fetching %s", what, extra={"fetch_args": args})
            raise ScheduleFetchError(f"Timed out fetching {what}") from exc
        except ScheduleFetchError:
            raise
        except Exception as exc:
            logger.exception("Failed to fetch %s", what, extra={"fetch_args": args})
            raise ScheduleFetchError(f"Failed to fetch {what}: {exc}") from exc
