from .http_notification_backend import HttpNotificationBackend
from .stub_notification_backend import StubNotificationBackend

__all__ = [
    "HttpNotificationBackend",
    "StubNotificationBackend",
]
