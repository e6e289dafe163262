"""
Parent Schemas
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field

from edutrack.modules.shared.schemas import ORMModel
from edutrack.modules.students.schemas import StudentResponse


class ParentFromUser(BaseModel):
    """Attach a parent profile to an existing PARENT user."""

    type: Literal["existing"]
    user_id: str
    address: str | None = Field(None, max_length=500)
    occupation: str | None = Field(None, max_length=100)


class ParentFromDetails(BaseModel):
    type: Literal["new"]
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    password: str | None = Field(None, min_length=8, max_length=128)
    address: str | None = Field(None, max_length=500)
    occupation: str | None = Field(None, max_length=100)


ParentCreate = Annotated[ParentFromUser | ParentFromDetails, Field(discriminator="type")]


class ParentUpdate(BaseModel):
    address: str | None = Field(None, max_length=500)
    occupation: str | None = Field(None, max_length=100)


class ParentUser(ORMModel):
    email: str
    first_name: str
    last_name: str
    phone: str | None


class ParentResponse(ORMModel):
    id: str
    address: str | None
    occupation: str | None
    user: ParentUser
    created_at: datetime


class SchoolChildren(BaseModel):
    school_id: str
    school_name: str
    students: list[StudentResponse]


class ChildrenResponse(BaseModel):
    message: str
    schools: list[SchoolChildren]
