from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    """One row of GTFS stop_times.txt.

    Times are kept as the raw GTFS `HH:MM:SS` strings (local wall clock, no date;
    hours may exceed 23 for trips running past midnight).
    """

    trip_id: str
    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int = 0


@dataclass(frozen=True, slots=True)
class ResolvedStop:
    """A stop of the selected trip merged with its scheduled times."""

    stop_id: str
    arrival_time: str
    departure_time: str
    name: str | None = None
    location: GeoPoint | None = None


class ResolutionStatus(str, Enum):
    OK = "ok"
    MISSING_TRIP_ID = "missing_trip_id"
    NO_SCHEDULE_FOR_TRIP = "no_schedule_for_trip"
    NO_UPCOMING_STOPS = "no_upcoming_stops"


@dataclass(frozen=True, slots=True)
class TripSchedule:
    trip_id: str | None
    status: ResolutionStatus
    stops: tuple[ResolvedStop, ...] = field(default_factory=tuple)
