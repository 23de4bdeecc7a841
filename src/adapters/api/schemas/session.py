from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SessionSchema(BaseModel):
    email: str
    expires_at: datetime | None = None
