from .credential_store import ICredentialStore
from .gtfs_schedule_provider import IGtfsScheduleProvider
from .notification_backend import INotificationBackend
from .realtime_vehicle_provider import IRealtimeVehicleProvider

__all__ = [
    "ICredentialStore",
    "IGtfsScheduleProvider",
    "INotificationBackend",
    "IRealtimeVehicleProvider",
]
