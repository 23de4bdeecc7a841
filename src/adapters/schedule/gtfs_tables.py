from __future__ import annotations

import csv
import logging
from typing import Iterable

from src.domain.models import GeoPoint, ScheduleEntry, Stop

logger = logging.getLogger(__name__)


def _cell(row: dict[str, str | None], name: str) -> str:
    return (row.get(name) or "").strip()


def parse_stop_times(lines: Iterable[str]) -> tuple[ScheduleEntry, ...]:
    """Parse stop_times.txt into entries grouped by trip, ordered by stop_sequence.

    Trips keep the order in which they first appear in the file.
    """

    by_trip: dict[str, list[ScheduleEntry]] = {}
    for row in csv.DictReader(lines):
        trip_id = _cell(row, "trip_id")
        stop_id = _cell(row, "stop_id")
        if not trip_id or not stop_id:
            continue

        arrival = _cell(row, "arrival_time")
        departure = _cell(row, "departure_time")
        # GTFS allows one of the two to be left empty at timepoints.
        arrival = arrival or departure
        departure = departure or arrival
        if not arrival:
            continue

        trip_entries = by_trip.setdefault(trip_id, [])
        try:
            seq = int(_cell(row, "stop_sequence") or 0)
        except ValueError:
            # Reuse the previous row's sequence; the stable sort keeps file order.
            seq = trip_entries[-1].stop_sequence if trip_entries else 0
            logger.warning(
                "Bad stop_sequence", extra={"trip_id": trip_id, "stop_id": stop_id}
            )

        trip_entries.append(
            ScheduleEntry(
                trip_id=trip_id,
                stop_id=stop_id,
                arrival_time=arrival,
                departure_time=departure,
                stop_sequence=seq,
            )
        )

    out: list[ScheduleEntry] = []
    for entries in by_trip.values():
        entries.sort(key=lambda e: e.stop_sequence)
        out.extend(entries)
    return tuple(out)


def parse_stops(lines: Iterable[str]) -> tuple[Stop, ...]:
    stops: list[Stop] = []
    for row in csv.DictReader(lines):
        stop_id = _cell(row, "stop_id")
        if not stop_id:
            continue
        name = _cell(row, "stop_name") or stop_id

        # Stops without usable coordinates are still listed.
        location = GeoPoint.maybe(_cell(row, "stop_lat"), _cell(row, "stop_lon"))
        stops.append(Stop(id=stop_id, name=name, location=location))
    return tuple(stops)
