from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import ScheduleEntry, Stop


class IGtfsScheduleProvider(ABC):
    """Port for versioned GTFS schedule data, keyed by dataset id."""

    @abstractmethod
    def get_dataset_version(self, gtfs_id: str) -> str:
        """Return the id of the current version of a dataset."""
        raise NotImplementedError

    @abstractmethod
    def get_schedule_entries(
        self, gtfs_id: str, version_id: str
    ) -> tuple[ScheduleEntry, ...]:
        """Return stop times in feed order (by trip, then stop_sequence)."""
        raise NotImplementedError

    @abstractmethod
    def get_stops(self, gtfs_id: str, version_id: str) -> tuple[Stop, ...]:
        raise NotImplementedError
