"""
Teacher Models

The teacher profile shares its primary key with the user account.
"""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel, TenantMixin
from edutrack.modules.users.models import Sex

if TYPE_CHECKING:
    from edutrack.modules.users.models import User


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Teacher(TenantMixin, BaseModel):
    __tablename__ = "teachers"

    # Same value as users.id; deleting the user removes the profile
    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    blood_type: Mapped[str | None] = mapped_column(String(5), nullable=True)
    sex: Mapped[Sex | None] = mapped_column(
        ENUM(Sex, name="sex", create_type=True),
        nullable=True,
    )
    birthday: Mapped[date | None] = mapped_column(Date, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    qualifications: Mapped[str | None] = mapped_column(Text, nullable=True)

    approval_status: Mapped[ApprovalStatus] = mapped_column(
        ENUM(ApprovalStatus, name="approval_status", create_type=True),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, status={self.approval_status.value})>"
