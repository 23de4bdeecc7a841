from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from src.adapters.schedule.gtfs_tables import parse_stop_times, parse_stops
from src.app.ports.output import IGtfsScheduleProvider
from src.domain.models import ScheduleEntry, Stop


@dataclass(slots=True)
class LocalGtfsScheduleProvider(IGtfsScheduleProvider):
    """Reads versioned GTFS datasets from a directory tree.

    Layout: `<base>/<gtfs_id>/<version_id>/{stop_times,stops}.txt`. The current
    version is named by `<base>/<gtfs_id>/current` if present, otherwise it is
    the greatest version directory name (date-stamped names sort naturally).

    Env vars:
      - GTFS_PATH: base directory (default: data/gtfs)
    """

    base_path: str | Path | None = None

    _entries: dict[tuple[str, str], tuple[ScheduleEntry, ...]] = field(
        default_factory=dict, init=False, repr=False
    )
    _stops: dict[tuple[str, str], tuple[Stop, ...]] = field(
        default_factory=dict, init=False, repr=False
    )

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def get_dataset_version(self, gtfs_id: str) -> str:
        dataset = self._base() / gtfs_id
        if not dataset.is_dir():
            raise FileNotFoundError(f"Unknown GTFS dataset: {gtfs_id}")

        pointer = dataset / "current"
        if pointer.is_file():
            version = pointer.read_text(encoding="utf-8").strip()
            if version:
                return version

        versions = sorted(p.name for p in dataset.iterdir() if p.is_dir())
        if not versions:
            raise FileNotFoundError(f"No versions for GTFS dataset: {gtfs_id}")
        return versions[-1]

    def get_schedule_entries(
        self, gtfs_id: str, version_id: str
    ) -> tuple[ScheduleEntry, ...]:
        key = (gtfs_id, version_id)
        if key not in self._entries:
            path = self._base() / gtfs_id / version_id / "stop_times.txt"
            with path.open("r", encoding="utf-8-sig", newline="") as fp:
                self._entries[key] = parse_stop_times(fp)
        return self._entries[key]

    def get_stops(self, gtfs_id: str, version_id: str) -> tuple[Stop, ...]:
        key = (gtfs_id, version_id)
        if key not in self._stops:
            path = self._base() / gtfs_id / version_id / "stops.txt"
            with path.open("r", encoding="utf-8-sig", newline="") as fp:
                self._stops[key] = parse_stops(fp)
        return self._stops[key]
