"""
Report Card Models

Lifecycle: DRAFT or GENERATED -> APPROVED -> PUBLISHED. Only published cards
are visible to parents.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel, TenantMixin


class ReportCardStatus(str, Enum):
    DRAFT = "DRAFT"
    GENERATED = "GENERATED"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ReportCard(TenantMixin, BaseModel):
    __tablename__ = "report_cards"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    academic_year_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    term_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("terms.id", ondelete="RESTRICT"),
        nullable=True,
    )
    status: Mapped[ReportCardStatus] = mapped_column(
        ENUM(ReportCardStatus, name="report_card_status", create_type=True),
        nullable=False,
        default=ReportCardStatus.DRAFT,
        index=True,
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    teacher_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    principal_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    overall_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overall_grade: Mapped[str | None] = mapped_column(String(2), nullable=True)
    gpa: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)

    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    subject_reports: Mapped[list["SubjectReport"]] = relationship(
        "SubjectReport",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class SubjectReport(BaseModel):
    __tablename__ = "subject_reports"
    __table_args__ = (
        UniqueConstraint("report_card_id", "subject_id", name="uq_subject_reports_card_subject"),
    )

    report_card_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("report_cards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
    )
    total_marks: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    obtained_marks: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    grade: Mapped[str] = mapped_column(String(2), nullable=False)
    grade_point: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
