"""
Report Card Schemas
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from edutrack.modules.report_cards.models import ReportCardStatus
from edutrack.modules.shared.schemas import ORMModel, reject_null

# Approve and publish have their own endpoints
EDITABLE_STATUSES = frozenset(
    {ReportCardStatus.DRAFT, ReportCardStatus.GENERATED, ReportCardStatus.ARCHIVED}
)


class ReportCardCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    student_id: str
    academic_year_id: str
    term_id: str | None = None
    comments: str | None = Field(None, max_length=5000)


class ReportCardUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    comments: str | None = Field(None, max_length=5000)
    teacher_comments: str | None = Field(None, max_length=5000)
    principal_comments: str | None = Field(None, max_length=5000)
    status: ReportCardStatus | None = None

    @field_validator("title", "status")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

    @field_validator("status")
    @classmethod
    def editable_status(cls, v: ReportCardStatus | None) -> ReportCardStatus | None:
        if v is not None and v not in EDITABLE_STATUSES:
            raise ValueError("Use the approve or publish endpoint to change to this status")
        return v


class SubjectReportCreate(BaseModel):
    subject_id: str
    total_marks: Decimal = Field(..., ge=1, max_digits=6, decimal_places=2)
    obtained_marks: Decimal = Field(..., ge=0, max_digits=6, decimal_places=2)
    remarks: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def obtained_within_total(self) -> "SubjectReportCreate":
        if self.obtained_marks > self.total_marks:
            raise ValueError("obtained_marks must not exceed total_marks")
        return self


class SubjectReportUpdate(BaseModel):
    total_marks: Decimal | None = Field(None, ge=1, max_digits=6, decimal_places=2)
    obtained_marks: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    remarks: str | None = Field(None, max_length=2000)

    @field_validator("total_marks", "obtained_marks")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class GenerateReportCards(BaseModel):
    class_id: str
    academic_year_id: str
    term_id: str | None = None
    title: str | None = Field(None, min_length=1, max_length=200)


class SubjectReportResponse(ORMModel):
    id: str
    report_card_id: str
    subject_id: str
    total_marks: Decimal
    obtained_marks: Decimal
    percentage: Decimal
    grade: str
    grade_point: Decimal
    remarks: str | None


class ReportCardResponse(ORMModel):
    id: str
    school_id: str
    title: str
    student_id: str
    academic_year_id: str
    term_id: str | None
    status: ReportCardStatus
    comments: str | None
    teacher_comments: str | None
    principal_comments: str | None
    overall_percentage: Decimal | None
    overall_grade: str | None
    gpa: Decimal | None
    approved_at: datetime | None
    approved_by_id: str | None
    published_at: datetime | None
    created_at: datetime
    subject_reports: list[SubjectReportResponse] = []


class GenerationResult(BaseModel):
    created: int
    skipped: int
    report_card_ids: list[str]


class GenerationResponse(BaseModel):
    message: str
    item: GenerationResult
