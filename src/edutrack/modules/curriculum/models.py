"""
Curriculum Models

A curriculum groups subjects per grade; each curriculum subject carries
learning objectives, and student progress is tracked per objective.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel, TenantMixin


class ObjectiveType(str, Enum):
    KNOWLEDGE = "KNOWLEDGE"
    SKILL = "SKILL"
    ATTITUDE = "ATTITUDE"
    COMPETENCY = "COMPETENCY"


class BloomsLevel(str, Enum):
    REMEMBER = "REMEMBER"
    UNDERSTAND = "UNDERSTAND"
    APPLY = "APPLY"
    ANALYZE = "ANALYZE"
    EVALUATE = "EVALUATE"
    CREATE = "CREATE"


class ProgressStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    MASTERED = "MASTERED"


class MasteryLevel(str, Enum):
    BEGINNER = "BEGINNER"
    DEVELOPING = "DEVELOPING"
    PROFICIENT = "PROFICIENT"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class Curriculum(TenantMixin, BaseModel):
    __tablename__ = "curricula"
    __table_args__ = (
        UniqueConstraint("school_id", "name", "version", name="uq_curricula_school_name_version"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class CurriculumSubject(BaseModel):
    """A subject taught at a grade under a curriculum."""

    __tablename__ = "curriculum_subjects"
    __table_args__ = (
        UniqueConstraint(
            "curriculum_id", "subject_id", "grade_id", name="uq_curriculum_subjects_entry"
        ),
    )

    curriculum_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("curricula.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
    )
    grade_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("grades.id", ondelete="RESTRICT"),
        nullable=False,
    )
    hours_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_core: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Subject ids
    prerequisites: Mapped[list[str]] = mapped_column(
        ARRAY(String(36)),
        nullable=False,
        default=list,
    )


class LearningObjective(BaseModel):
    __tablename__ = "learning_objectives"

    curriculum_subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("curriculum_subjects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    objective_type: Mapped[ObjectiveType] = mapped_column(
        ENUM(ObjectiveType, name="objective_type", create_type=True),
        nullable=False,
    )
    blooms_level: Mapped[BloomsLevel] = mapped_column(
        ENUM(BloomsLevel, name="blooms_level", create_type=True),
        nullable=False,
    )


class StudentProgress(BaseModel):
    """One row per (student, objective); written by upsert."""

    __tablename__ = "student_progress"
    __table_args__ = (
        UniqueConstraint("student_id", "objective_id", name="uq_student_progress_objective"),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    objective_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("learning_objectives.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[ProgressStatus] = mapped_column(
        ENUM(ProgressStatus, name="progress_status", create_type=True),
        nullable=False,
        default=ProgressStatus.NOT_STARTED,
    )
    mastery_level: Mapped[MasteryLevel | None] = mapped_column(
        ENUM(MasteryLevel, name="mastery_level", create_type=True),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessment_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    assessment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
