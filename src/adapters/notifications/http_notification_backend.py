from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx

from src.adapters.config import DEFAULT_NOTIFICATION_URL
from src.app.ports.output import INotificationBackend
from src.domain.models import NotificationTrigger, RegistrationResult
from src.domain.models.notification import FAILED_MESSAGE, REGISTERED_MESSAGE

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpNotificationBackend(INotificationBackend):
    """POSTs triggers to the notification endpoint with a bearer token.

    Only a 200 counts as registered. Any other status, a timeout or a
    transport error yields a failed result instead of an exception.

    Env vars:
      - BUSNOTIFY_NOTIFICATION_URL
      - BUSNOTIFY_NOTIFICATION_TIMEOUT_S (default 10)
    """

    url: str = ""
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if not self.url:
            self.url = (
                os.getenv("BUSNOTIFY_NOTIFICATION_URL") or DEFAULT_NOTIFICATION_URL
            )
        if os.getenv("BUSNOTIFY_NOTIFICATION_TIMEOUT_S"):
            self.timeout_s = float(os.environ["BUSNOTIFY_NOTIFICATION_TIMEOUT_S"])

    async def submit(
        self, trigger: NotificationTrigger, *, token: str
    ) -> RegistrationResult:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.post(
                    self.url,
                    json=trigger.as_payload(),
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "Notification request failed",
                extra={"error": f"{type(exc).__name__}: {exc}"},
            )
            return RegistrationResult(registered=False, message=FAILED_MESSAGE)

        if resp.status_code == 200:
            return RegistrationResult(
                registered=True, message=REGISTERED_MESSAGE, status_code=200
            )
        return RegistrationResult(
            registered=False, message=FAILED_MESSAGE, status_code=resp.status_code
        )
