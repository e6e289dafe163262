"""
School Schemas

Pydantic schemas for school registration, verification and management.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from edutrack.modules.schools.models import RegistrationStatus, SchoolType
from edutrack.modules.shared.schemas import ORMModel, reject_null


class ExistingAdmin(BaseModel):
    """Make an existing user the school admin."""

    type: Literal["existing"]
    user_id: str


class NewAdmin(BaseModel):
    """Create a new user account as the school admin."""

    type: Literal["new"]
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    password: str | None = Field(None, min_length=8, max_length=128)


SchoolAdminInput = Annotated[ExistingAdmin | NewAdmin, Field(discriminator="type")]


class SchoolBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    website: str | None = Field(None, max_length=500)
    school_type: SchoolType = SchoolType.OTHER
    mission_statement: str | None = Field(None, max_length=5000)
    virtual_tour_url: str | None = Field(None, max_length=500)


class SchoolCreate(SchoolBase):
    """
    Request body for POST /schools.

    ``admin`` is optional: when omitted, the caller becomes the school admin.
    """

    admin: SchoolAdminInput | None = None


class SchoolUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""

    name: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = Field(None, min_length=1, max_length=500)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    country: str | None = Field(None, min_length=1, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    website: str | None = Field(None, max_length=500)
    school_type: SchoolType | None = None
    mission_statement: str | None = Field(None, max_length=5000)
    virtual_tour_url: str | None = Field(None, max_length=500)

    @field_validator("name", "address", "city", "state", "country", "school_type")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class SchoolVerifyRequest(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
    comments: str | None = Field(None, max_length=2000)


class SchoolResponse(ORMModel):
    id: str
    name: str
    address: str
    city: str
    state: str
    country: str
    postal_code: str | None
    phone: str | None
    email: str | None
    website: str | None
    school_type: SchoolType
    mission_statement: str | None
    virtual_tour_url: str | None
    registration_status: RegistrationStatus
    is_verified: bool
    verified_at: datetime | None
    verification_comments: str | None
    created_at: datetime
    updated_at: datetime


class SchoolRegistrationResponse(BaseModel):
    message: str
    item: SchoolResponse
    admin_user_id: str


class SchoolStats(BaseModel):
    students: int
    teachers: int
    classes: int
    parents: int
    revenue: Decimal
    pending_orders: int
