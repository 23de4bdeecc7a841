class BusNotifyError(Exception):
    """Base exception for BusNotify failures."""


class ScheduleFetchError(BusNotifyError):
    """Raised when schedule, stop or dataset-version data cannot be fetched."""


class VehicleFeedError(BusNotifyError):
    """Raised when the realtime vehicle position feed cannot be fetched."""


class VehicleNotFound(BusNotifyError):
    """Raised when a selection refers to a vehicle absent from the latest fetch."""


class SelectionSuperseded(BusNotifyError):
    """Raised when a newer selection cancelled an in-flight resolution."""


class SessionRequired(BusNotifyError):
    """Raised when an operation needs a session and none is active."""


class InvalidTimeOfDay(ValueError):
    """Raised when a time-of-day string is not HH:MM[:SS]."""
