from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from src.app.ports.output import INotificationBackend
from src.domain.models import NotificationTrigger, RegistrationResult, Session, Vehicle
from src.domain.models.notification import (
    FAILED_MESSAGE,
    TRIGGER_TYPE_ARRIVING_AT_STOP,
)

logger = logging.getLogger(__name__)


def iso_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a `Z` suffix."""

    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_trigger(
    *,
    email: str,
    gtfs_id: str,
    trip_id: str,
    stop_id: str,
    readable: str,
    created: datetime | None = None,
) -> NotificationTrigger:
    data = {
        "type": TRIGGER_TYPE_ARRIVING_AT_STOP,
        "triggerDetail": {
            "gtfs_id": gtfs_id,
            "trip_id": trip_id,
            "stop_id": stop_id,
        },
    }
    return NotificationTrigger(
        key=f"trigger@{email}",
        created=iso_timestamp(created or datetime.now(timezone.utc)),
        data=json.dumps(data, separators=(",", ":"), ensure_ascii=False),
        readable=readable,
    )


@dataclass(slots=True)
class NotificationService:
    """Registers "notify me when this bus reaches this stop" triggers."""

    backend: INotificationBackend
    default_gtfs_id: str
    readable: str

    async def register(
        self,
        *,
        session: Session,
        vehicle: Vehicle,
        stop_id: str,
        created: datetime | None = None,
    ) -> RegistrationResult:
        if not vehicle.trip_id:
            logger.warning(
                "Cannot register trigger for vehicle without trip id",
                extra={"vehicle_id": vehicle.display_id},
            )
            return RegistrationResult(registered=False, message=FAILED_MESSAGE)

        trigger = build_trigger(
            email=session.email,
            gtfs_id=vehicle.gtfs_id or self.default_gtfs_id,
            trip_id=vehicle.trip_id,
            stop_id=stop_id,
            readable=self.readable,
            created=created,
        )
        result = await self.backend.submit(trigger, token=session.token)
        if result.registered:
            logger.info(
                "Trigger registered",
                extra={"trip_id": vehicle.trip_id, "stop_id": stop_id},
            )
        else:
            logger.warning(
                "Trigger registration failed",
                extra={
                    "trip_id": vehicle.trip_id,
                    "stop_id": stop_id,
                    "status_code": result.status_code,
                },
            )
        return result
