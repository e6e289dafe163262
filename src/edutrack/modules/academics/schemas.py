"""
Academics Schemas
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null


class DateRangeMixin(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicYearCreate(DateRangeMixin):
    name: str = Field(..., min_length=1, max_length=100)
    is_current: bool = False
    # Only used by super admins; others always write into their own school
    school_id: str | None = None


class AcademicYearUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool | None = None

    @field_validator("name", "start_date", "end_date", "is_current")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class AcademicYearResponse(ORMModel):
    id: str
    school_id: str
    name: str
    start_date: date
    end_date: date
    is_current: bool
    created_at: datetime


class TermCreate(DateRangeMixin):
    academic_year_id: str
    name: str = Field(..., min_length=1, max_length=100)


class TermUpdate(BaseModel):
    academic_year_id: str | None = None
    name: str | None = Field(None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("academic_year_id", "name", "start_date", "end_date")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class TermResponse(ORMModel):
    id: str
    school_id: str
    academic_year_id: str
    name: str
    start_date: date
    end_date: date
    created_at: datetime


class GradeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    level: int = Field(..., ge=0, le=20)
    school_id: str | None = None


class GradeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    level: int | None = Field(None, ge=0, le=20)

    @field_validator("name", "level")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class GradeResponse(ORMModel):
    id: str
    school_id: str
    name: str
    level: int
    created_at: datetime


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)
    school_id: str | None = None


class SubjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class SubjectResponse(ORMModel):
    id: str
    school_id: str
    name: str
    code: str | None
    created_at: datetime


class LessonCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    subject_id: str
    class_id: str
    teacher_id: str


class LessonUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    subject_id: str | None = None
    class_id: str | None = None
    teacher_id: str | None = None

    @field_validator("name", "subject_id", "class_id", "teacher_id")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class LessonResponse(ORMModel):
    id: str
    school_id: str
    name: str
    subject_id: str
    class_id: str
    teacher_id: str
    created_at: datetime
