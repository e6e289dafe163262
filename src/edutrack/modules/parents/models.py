"""
Parent Models

A parent profile shares its primary key with a PARENT user. Parents are not
tied to a single school: their schools are those of their children.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel

if TYPE_CHECKING:
    from edutrack.modules.users.models import User


class Parent(BaseModel):
    __tablename__ = "parents"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Parent(id={self.id})>"
