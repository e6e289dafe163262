"""
School Models

Database models for school (tenant) management.
Each school is a tenant in the multi-tenant architecture.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel

if TYPE_CHECKING:
    from edutrack.modules.users.models import User


class SchoolType(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    MONTESSORI = "MONTESSORI"
    INTERNATIONAL = "INTERNATIONAL"
    TECHNICAL = "TECHNICAL"
    UNIVERSITY = "UNIVERSITY"
    OTHER = "OTHER"


class RegistrationStatus(str, Enum):
    """Verification state of a registered school."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class School(BaseModel):
    """
    School tenant model.

    All school-scoped data (classes, students, teachers, timetables, ...)
    references this model via school_id.

    Created by registration in PENDING state; a super admin approves or
    rejects it.
    """

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
    )
    school_type: Mapped[SchoolType] = mapped_column(
        ENUM(SchoolType, name="school_type", create_type=True),
        nullable=False,
        default=SchoolType.OTHER,
    )

    # Location
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Contact information
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    mission_statement: Mapped[str | None] = mapped_column(Text, nullable=True)
    virtual_tour_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Verification
    registration_status: Mapped[RegistrationStatus] = mapped_column(
        ENUM(RegistrationStatus, name="registration_status", create_type=True),
        nullable=False,
        default=RegistrationStatus.PENDING,
        index=True,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    verification_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="school",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name={self.name}, status={self.registration_status.value})>"
