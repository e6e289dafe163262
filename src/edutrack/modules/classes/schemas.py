"""
Class Schemas
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(..., ge=1, le=1000)
    grade_id: str
    supervisor_id: str | None = None
    school_id: str | None = None


class ClassUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    capacity: int | None = Field(None, ge=1, le=1000)
    grade_id: str | None = None
    supervisor_id: str | None = None

    @field_validator("name", "capacity", "grade_id")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ClassResponse(ORMModel):
    id: str
    school_id: str
    name: str
    capacity: int
    grade_id: str
    supervisor_id: str | None
    student_count: int = 0
    created_at: datetime
    updated_at: datetime
