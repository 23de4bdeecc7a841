from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import NotificationTrigger, RegistrationResult


class INotificationBackend(ABC):
    """Port for submitting arrival triggers to the notification backend."""

    @abstractmethod
    async def submit(
        self, trigger: NotificationTrigger, *, token: str
    ) -> RegistrationResult:
        """Submit a trigger. Must not raise on HTTP or network failures."""
        raise NotImplementedError
