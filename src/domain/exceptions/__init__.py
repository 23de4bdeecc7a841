from .errors import (
    BusNotifyError,
    InvalidTimeOfDay,
    ScheduleFetchError,
    SelectionSuperseded,
    SessionRequired,
    VehicleFeedError,
    VehicleNotFound,
)

__all__ = [
    "BusNotifyError",
    "InvalidTimeOfDay",
    "ScheduleFetchError",
    "SelectionSuperseded",
    "SessionRequired",
    "VehicleFeedError",
    "VehicleNotFound",
]
