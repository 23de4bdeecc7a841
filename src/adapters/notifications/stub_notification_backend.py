from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from src.app.ports.output import INotificationBackend
from src.domain.models import NotificationTrigger, RegistrationResult
from src.domain.models.notification import REGISTERED_MESSAGE

logger = logging.getLogger(__name__)

SUBMITTED_HISTORY = 100


def _history() -> deque[NotificationTrigger]:
    return deque(maxlen=SUBMITTED_HISTORY)


@dataclass(slots=True)
class StubNotificationBackend(INotificationBackend):
    """Accepts every trigger without calling out.

    The most recent triggers are kept in `submitted` for inspection.
    """

    submitted: deque[NotificationTrigger] = field(default_factory=_history)

    async def submit(
        self, trigger: NotificationTrigger, *, token: str
    ) -> RegistrationResult:
        self.submitted.append(trigger)
        logger.info(
            "Stub notification backend accepted trigger", extra={"key": trigger.key}
        )
        return RegistrationResult(registered=True, message=REGISTERED_MESSAGE)
