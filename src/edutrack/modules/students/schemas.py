"""
Student Schemas
"""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null
from edutrack.modules.users.models import Sex


class ExistingParent(BaseModel):
    type: Literal["existing"]
    parent_id: str


class NewParent(BaseModel):
    """Create a PARENT account and profile together with the student."""

    type: Literal["new"]
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=500)
    occupation: str | None = Field(None, max_length=100)


StudentParentInput = Annotated[ExistingParent | NewParent, Field(discriminator="type")]


class StudentProfile(BaseModel):
    address: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=500)
    blood_type: str | None = Field(None, max_length=5)
    sex: Sex | None = None
    birthday: date | None = None


class StudentCreate(StudentProfile):
    registration_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    parent: StudentParentInput
    class_id: str | None = None
    grade_id: str | None = None
    school_id: str | None = None


class StudentUpdate(StudentProfile):
    registration_number: str | None = Field(None, min_length=1, max_length=50)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    class_id: str | None = None
    grade_id: str | None = None

    @field_validator("registration_number", "first_name", "last_name")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class AssignClassRequest(BaseModel):
    class_id: str


class StudentResponse(ORMModel):
    id: str
    school_id: str
    registration_number: str
    first_name: str
    last_name: str
    address: str | None
    image_url: str | None
    blood_type: str | None
    sex: Sex | None
    birthday: date | None
    parent_id: str
    class_id: str | None
    grade_id: str | None
    created_at: datetime
    updated_at: datetime
