from .geo import GeoPoint
from .notification import NotificationTrigger, RegistrationResult
from .realtime import Vehicle
from .schedule import ResolutionStatus, ResolvedStop, ScheduleEntry, TripSchedule
from .session import RedirectReason, RedirectRequired, Session
from .stop import Stop

__all__ = [
    "GeoPoint",
    "NotificationTrigger",
    "RedirectReason",
    "RedirectRequired",
    "RegistrationResult",
    "ResolutionStatus",
    "ResolvedStop",
    "ScheduleEntry",
    "Session",
    "Stop",
    "TripSchedule",
    "Vehicle",
]
