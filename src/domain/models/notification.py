from __future__ import annotations

from dataclasses import dataclass

TRIGGER_TYPE_ARRIVING_AT_STOP = "arrivingAtTheStop"


@dataclass(frozen=True, slots=True)
class NotificationTrigger:
    key: str
    created: str
    data: str  # JSON-encoded trigger detail
    readable: str

    def as_payload(self) -> dict[str, str]:
        return {
            "key": self.key,
            "created": self.created,
            "data": self.data,
            "readable": self.readable,
        }


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    registered: bool
    message: str
    status_code: int | None = None


REGISTERED_MESSAGE = "registration completed"
FAILED_MESSAGE = "registration failed"
