"""
Notification Schemas
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.shared.schemas import ORMModel


class NotificationResponse(ORMModel):
    id: str
    title: str
    content: str
    type: NotificationType
    data: dict[str, Any] | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class MarkReadRequest(BaseModel):
    notification_ids: list[str] = Field(..., min_length=1, max_length=100)


class MarkReadResponse(BaseModel):
    message: str
    updated: int


class NotificationStats(BaseModel):
    total: int
    unread: int
    by_type: dict[str, int]
