"""
User Schemas
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from edutrack.modules.shared.schemas import ORMModel
from edutrack.modules.users.models import UserRole


class UserResponse(ORMModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    role: UserRole
    school_id: str | None
    is_active: bool
    is_verified: bool
    must_change_password: bool
    created_at: datetime


class StaffUserCreate(BaseModel):
    """
    Request body for POST /users/staff.

    ``school_id`` is only honoured for super admins; school admins always
    create staff in their own school.
    """

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    role: Literal["principal", "school_admin"]
    password: str | None = Field(None, min_length=8, max_length=128)
    school_id: str | None = None
