"""
Notification Models
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel


class NotificationType(str, Enum):
    GENERAL = "GENERAL"
    APPROVAL = "APPROVAL"
    ATTENDANCE = "ATTENDANCE"
    EVENT = "EVENT"
    PAYMENT = "PAYMENT"
    REPORT_CARD = "REPORT_CARD"
    ORDER = "ORDER"
    ENROLLMENT = "ENROLLMENT"


class Notification(BaseModel):
    """In-app notification addressed to a single user."""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        ENUM(NotificationType, name="notification_type", create_type=True),
        nullable=False,
        default=NotificationType.GENERAL,
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
