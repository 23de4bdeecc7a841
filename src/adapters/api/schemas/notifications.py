from __future__ import annotations

from pydantic import BaseModel, Field


class NotificationRequestSchema(BaseModel):
    vehicle_id: str = Field(..., min_length=1)
    stop_id: str = Field(..., min_length=1)


class NotificationResponseSchema(BaseModel):
    registered: bool
    message: str
