"""
Student Models
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel, TenantMixin
from edutrack.modules.users.models import Sex


class Student(TenantMixin, BaseModel):
    """
    A student enrolled at one school, with exactly one parent.

    The registration number is unique within the school.
    """

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint(
            "school_id", "registration_number", name="uq_students_school_registration_number"
        ),
    )

    registration_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    blood_type: Mapped[str | None] = mapped_column(String(5), nullable=True)
    sex: Mapped[Sex | None] = mapped_column(
        ENUM(Sex, name="sex", create_type=False),
        nullable=True,
    )
    birthday: Mapped[date | None] = mapped_column(Date, nullable=True)

    # ON DELETE RESTRICT: parents with students cannot be removed
    parent_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("parents.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    grade_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("grades.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, registration_number={self.registration_number})>"
