from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class Session:
    token: str
    email: str
    expires_at: datetime | None = None

    def __repr__(self) -> str:
        # Keep the bearer token out of logs and tracebacks.
        return f"Session(email={self.email!r}, expires_at={self.expires_at!r})"


class RedirectReason(str, Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class RedirectRequired:
    """No usable credential; the caller must send the user to the login flow."""

    login_url: str
    reason: RedirectReason
