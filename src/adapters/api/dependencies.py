from __future__ import annotations

from functools import lru_cache

from src.adapters.config import ViewConfig
from src.adapters.notifications import HttpNotificationBackend, StubNotificationBackend
from src.adapters.persistence import DynamoDbCredentialStore, FileCredentialStore
from src.adapters.realtime.http_gtfs_realtime_vehicle_provider import (
    HttpGtfsRealtimeVehicleProvider,
)
from src.adapters.schedule import LocalGtfsScheduleProvider, S3GtfsScheduleProvider
from src.app.ports.output import (
    ICredentialStore,
    IGtfsScheduleProvider,
    INotificationBackend,
)
from src.app.services.bus_view_service import BusViewService
from src.app.services.notification_service import NotificationService
from src.app.services.session_service import SessionContext, SessionService
from src.app.services.trip_schedule_service import TripScheduleService
from src.domain.models import GeoPoint

# Services that hold per-process state (vehicle cache, in-flight selections,
# the active session of each client) are built once.


@lru_cache(maxsize=1)
def get_view_config() -> ViewConfig:
    return ViewConfig.from_env()


@lru_cache(maxsize=1)
def get_session_context() -> SessionContext:
    return SessionContext()


def _credential_store(config: ViewConfig) -> ICredentialStore:
    if config.credential_store == "dynamodb":
        return DynamoDbCredentialStore()
    return FileCredentialStore()


def _schedule_provider(config: ViewConfig) -> IGtfsScheduleProvider:
    if config.schedule_source == "s3":
        return S3GtfsScheduleProvider()
    return LocalGtfsScheduleProvider()


def _notification_backend(config: ViewConfig) -> INotificationBackend:
    if config.notification_mode == "stub":
        return StubNotificationBackend()
    return HttpNotificationBackend(url=config.notification_url)


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    config = get_view_config()
    return SessionService(
        store=_credential_store(config),
        context=get_session_context(),
        login_url=config.login_url,
        credential_param=config.credential_param,
    )


@lru_cache(maxsize=1)
def get_bus_view_service() -> BusViewService:
    config = get_view_config()
    trip_schedules = TripScheduleService(
        schedule_provider=_schedule_provider(config),
        default_gtfs_id=config.gtfs_id,
        timeout_s=config.fetch_timeout_s,
    )
    return BusViewService(
        vehicle_provider=HttpGtfsRealtimeVehicleProvider(gtfs_id=config.gtfs_id),
        trip_schedules=trip_schedules,
        positions_at=GeoPoint(lat=config.positions_lat, lon=config.positions_lon),
    )


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    config = get_view_config()
    return NotificationService(
        backend=_notification_backend(config),
        default_gtfs_id=config.gtfs_id,
        readable=config.notification_readable,
    )
