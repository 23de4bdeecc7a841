from __future__ import annotations

import io
import os
from dataclasses import dataclass, field

from botocore.exceptions import ClientError

from src.adapters.aws import s3_client
from src.adapters.schedule.gtfs_tables import parse_stop_times, parse_stops
from src.app.ports.output import IGtfsScheduleProvider
from src.domain.models import ScheduleEntry, Stop


@dataclass(slots=True)
class S3GtfsScheduleProvider(IGtfsScheduleProvider):
    """Reads versioned GTFS datasets from S3.

    Same layout as the local provider, under a key prefix:
    `<prefix>/<gtfs_id>/<version_id>/stop_times.txt`, and an optional
    `<prefix>/<gtfs_id>/current` object naming the current version.

    Env vars:
      - GTFS_S3_BUCKET (required)
      - GTFS_S3_PREFIX (default: gtfs)
      - ENDPOINT_URL (preferred for LocalStack)
    """

    bucket: str | None = None
    prefix: str | None = None

    _entries: dict[tuple[str, str], tuple[ScheduleEntry, ...]] = field(
        default_factory=dict, init=False, repr=False
    )
    _stops: dict[tuple[str, str], tuple[Stop, ...]] = field(
        default_factory=dict, init=False, repr=False
    )

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("GTFS_S3_BUCKET")
        if not value:
            raise RuntimeError("Missing GTFS_S3_BUCKET")
        return value

    def _prefix(self) -> str:
        return (self.prefix or os.getenv("GTFS_S3_PREFIX") or "gtfs").strip("/")

    def _read_text(self, key: str) -> str:
        s3 = s3_client()
        obj = s3.get_object(Bucket=self._bucket(), Key=key)
        return obj["Body"].read().decode("utf-8-sig")

    def get_dataset_version(self, gtfs_id: str) -> str:
        dataset_prefix = f"{self._prefix()}/{gtfs_id}"

        try:
            version = self._read_text(f"{dataset_prefix}/current").strip()
            if version:
                return version
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in {"NoSuchKey", "404"}:
                raise

        s3 = s3_client()
        versions: list[str] = []
        paginator = s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(
            Bucket=self._bucket(), Prefix=f"{dataset_prefix}/", Delimiter="/"
        ):
            for common in page.get("CommonPrefixes", []) or []:
                name = common["Prefix"].rstrip("/").rsplit("/", 1)[-1]
                if name:
                    versions.append(name)

        if not versions:
            raise FileNotFoundError(f"No versions for GTFS dataset: {gtfs_id}")
        return sorted(versions)[-1]

    def get_schedule_entries(
        self, gtfs_id: str, version_id: str
    ) -> tuple[ScheduleEntry, ...]:
        key = (gtfs_id, version_id)
        if key not in self._entries:
            text = self._read_text(
                f"{self._prefix()}/{gtfs_id}/{version_id}/stop_times.txt"
            )
            self._entries[key] = parse_stop_times(io.StringIO(text, newline=""))
        return self._entries[key]

    def get_stops(self, gtfs_id: str, version_id: str) -> tuple[Stop, ...]:
        key = (gtfs_id, version_id)
        if key not in self._stops:
            text = self._read_text(f"{self._prefix()}/{gtfs_id}/{version_id}/stops.txt")
            self._stops[key] = parse_stops(io.StringIO(text, newline=""))
        return self._stops[key]
