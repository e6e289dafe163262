"""
Class Models
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel, TenantMixin


class SchoolClass(TenantMixin, BaseModel):
    """
    A class (homeroom) of students within a grade.

    ``capacity`` bounds enrolment; the student service enforces it under a
    row lock on the class.
    """

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_classes_school_name"),
        CheckConstraint("capacity >= 1", name="ck_classes_capacity_positive"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    grade_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("grades.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # ON DELETE SET NULL: the class outlives its supervisor
    supervisor_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name}, capacity={self.capacity})>"
