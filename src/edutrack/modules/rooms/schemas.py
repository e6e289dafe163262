"""
Room Schemas
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from edutrack.modules.rooms.models import RoomType
from edutrack.modules.shared.schemas import ORMModel, reject_null


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)
    room_type: RoomType = RoomType.CLASSROOM
    capacity: int = Field(..., ge=1, le=10000)
    floor: int | None = None
    building: str | None = Field(None, max_length=100)
    facilities: list[str] = Field(default_factory=list)
    is_active: bool = True
    school_id: str | None = None


class RoomUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)
    room_type: RoomType | None = None
    capacity: int | None = Field(None, ge=1, le=10000)
    floor: int | None = None
    building: str | None = Field(None, max_length=100)
    facilities: list[str] | None = None
    is_active: bool | None = None

    @field_validator("name", "room_type", "capacity", "facilities", "is_active")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class RoomResponse(ORMModel):
    id: str
    school_id: str
    name: str
    code: str | None
    room_type: RoomType
    capacity: int
    floor: int | None
    building: str | None
    facilities: list[str]
    is_active: bool
    created_at: datetime


class RoomAvailability(RoomResponse):
    is_available: bool


class RoomUtilization(BaseModel):
    room_id: str
    name: str
    code: str | None
    room_type: RoomType
    slot_count: int
    scheduled_minutes: int
    scheduled_hours: float
