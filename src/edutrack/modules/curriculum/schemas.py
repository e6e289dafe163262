"""
Curriculum Schemas
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from edutrack.modules.curriculum.models import (
    BloomsLevel,
    MasteryLevel,
    ObjectiveType,
    ProgressStatus,
)
from edutrack.modules.shared.schemas import ORMModel, reject_null


class CurriculumCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    version: str = Field("1.0", min_length=1, max_length=20)
    is_active: bool = True
    school_id: str | None = None


class CurriculumUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    version: str | None = Field(None, min_length=1, max_length=20)
    is_active: bool | None = None

    @field_validator("name", "version", "is_active")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class CurriculumResponse(ORMModel):
    id: str
    school_id: str
    name: str
    description: str | None
    version: str
    is_active: bool
    created_at: datetime


class CurriculumSubjectCreate(BaseModel):
    curriculum_id: str
    subject_id: str
    grade_id: str
    hours_per_week: int | None = Field(None, ge=0)
    is_core: bool = True
    prerequisites: list[str] = Field(default_factory=list)


class CurriculumSubjectResponse(ORMModel):
    id: str
    curriculum_id: str
    subject_id: str
    grade_id: str
    hours_per_week: int | None
    is_core: bool
    prerequisites: list[str]
    created_at: datetime


class ObjectiveCreate(BaseModel):
    curriculum_subject_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    objective_type: ObjectiveType
    blooms_level: BloomsLevel


class ObjectiveResponse(ORMModel):
    id: str
    curriculum_subject_id: str
    title: str
    description: str
    objective_type: ObjectiveType
    blooms_level: BloomsLevel
    created_at: datetime


class ProgressUpdate(BaseModel):
    student_id: str
    objective_id: str
    status: ProgressStatus
    mastery_level: MasteryLevel | None = None
    notes: str | None = None
    assessment_score: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)


class ProgressResponse(ORMModel):
    id: str
    student_id: str
    objective_id: str
    status: ProgressStatus
    mastery_level: MasteryLevel | None
    notes: str | None
    assessment_score: Decimal | None
    assessment_date: datetime | None
    completed_at: datetime | None
    updated_at: datetime


class ProgressStatistics(BaseModel):
    total: int
    not_started: int
    in_progress: int
    completed: int
    mastered: int
    average_score: float


class StudentProgressReport(BaseModel):
    student_id: str
    progress: list[ProgressResponse]
    statistics: ProgressStatistics


class StudentProgressResponse(BaseModel):
    message: str
    item: StudentProgressReport
