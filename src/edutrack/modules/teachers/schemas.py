"""
Teacher Schemas
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null
from edutrack.modules.teachers.models import ApprovalStatus
from edutrack.modules.users.models import Sex


class TeacherProfile(BaseModel):
    blood_type: str | None = Field(None, max_length=5)
    sex: Sex | None = None
    birthday: date | None = None
    bio: str | None = Field(None, max_length=5000)
    qualifications: str | None = Field(None, max_length=5000)


class TeacherCreate(TeacherProfile):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    password: str | None = Field(None, min_length=8, max_length=128)
    school_id: str | None = None


class TeacherUpdate(TeacherProfile):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)

    @field_validator("first_name", "last_name")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class TeacherVerifyRequest(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
    comments: str | None = Field(None, max_length=2000)


class TeacherUser(ORMModel):
    email: str
    first_name: str
    last_name: str
    phone: str | None
    is_active: bool


class TeacherResponse(ORMModel):
    id: str
    school_id: str
    blood_type: str | None
    sex: Sex | None
    birthday: date | None
    bio: str | None
    qualifications: str | None
    approval_status: ApprovalStatus
    approval_comments: str | None
    approved_at: datetime | None
    user: TeacherUser
    created_at: datetime
