from __future__ import annotations

import logging
from datetime import time
from typing import Iterable

from src.domain.exceptions import InvalidTimeOfDay
from src.domain.models import (
    ResolutionStatus,
    ResolvedStop,
    ScheduleEntry,
    Stop,
    TripSchedule,
)

logger = logging.getLogger(__name__)


def time_of_day_seconds(value: str | time) -> int:
    """Seconds since local midnight for a GTFS time string or a `time`.

    GTFS hours may exceed 23 for trips that run past midnight; such values are
    kept as-is (e.g. "25:10:00" -> 90600).
    """

    if isinstance(value, time):
        return value.hour * 3600 + value.minute * 60 + value.second

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise InvalidTimeOfDay(f"Invalid time of day: {value!r}")
    try:
        hh, mm = int(parts[0]), int(parts[1])
        ss = int(parts[2]) if len(parts) == 3 else 0
    except ValueError as exc:
        raise InvalidTimeOfDay(f"Invalid time of day: {value!r}") from exc
    if hh < 0 or not (0 <= mm < 60) or not (0 <= ss < 60):
        raise InvalidTimeOfDay(f"Invalid time of day: {value!r}")
    return hh * 3600 + mm * 60 + ss


def entries_for_trip(
    trip_id: str, entries: Iterable[ScheduleEntry]
) -> tuple[ScheduleEntry, ...]:
    return tuple(e for e in entries if e.trip_id == trip_id)


def upcoming_entries(
    entries: Iterable[ScheduleEntry], now: time
) -> tuple[ScheduleEntry, ...]:
    """Keep entries arriving at or after `now`, in their given order.

    Comparison is by time of day only: a stop at 00:10 counts as passed once the
    clock is past 00:10, even if the trip began the previous evening.
    """

    now_s = time_of_day_seconds(now)
    out: list[ScheduleEntry] = []
    for entry in entries:
        try:
            arrival_s = time_of_day_seconds(entry.arrival_time)
        except InvalidTimeOfDay:
            logger.warning(
                "Skipping stop time with unparseable arrival",
                extra={"trip_id": entry.trip_id, "stop_id": entry.stop_id},
            )
            continue
        if arrival_s >= now_s:
            out.append(entry)
    return tuple(out)


def merge_with_stops(
    entries: Iterable[ScheduleEntry], stops: Iterable[Stop]
) -> tuple[ResolvedStop, ...]:
    stops_by_id: dict[str, Stop] = {}
    for stop in stops:
        # First match wins.
        stops_by_id.setdefault(stop.id, stop)

    resolved: list[ResolvedStop] = []
    for entry in entries:
        stop = stops_by_id.get(entry.stop_id)
        resolved.append(
            ResolvedStop(
                stop_id=entry.stop_id,
                arrival_time=entry.arrival_time,
                departure_time=entry.departure_time,
                name=stop.name if stop is not None else None,
                location=stop.location if stop is not None else None,
            )
        )
    return tuple(resolved)


def resolve_trip_schedule(
    trip_id: str | None,
    schedule_entries: Iterable[ScheduleEntry],
    stops: Iterable[Stop],
    now: time,
) -> TripSchedule:
    """Resolve the not-yet-passed stops of a trip and report why none are left."""

    if not trip_id:
        return TripSchedule(trip_id=None, status=ResolutionStatus.MISSING_TRIP_ID)

    trip_entries = entries_for_trip(trip_id, schedule_entries)
    if not trip_entries:
        return TripSchedule(
            trip_id=trip_id, status=ResolutionStatus.NO_SCHEDULE_FOR_TRIP
        )

    upcoming = upcoming_entries(trip_entries, now)
    if not upcoming:
        return TripSchedule(trip_id=trip_id, status=ResolutionStatus.NO_UPCOMING_STOPS)

    return TripSchedule(
        trip_id=trip_id,
        status=ResolutionStatus.OK,
        stops=merge_with_stops(upcoming, stops),
    )


def resolve_upcoming_stops(
    trip_id: str,
    schedule_entries: Iterable[ScheduleEntry],
    stops: Iterable[Stop],
    now: time,
) -> tuple[ResolvedStop, ...]:
    return resolve_trip_schedule(trip_id, schedule_entries, stops, now).stops
