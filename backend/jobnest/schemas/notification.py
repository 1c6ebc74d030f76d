from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    user_id: int
    message: str = Field(min_length=1)
    is_read: bool = False


class NotificationTarget(BaseModel):
    notification_id: int


class NotificationOut(BaseModel):
    id: int
    user_id: int
    message: str
    is_read: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True
