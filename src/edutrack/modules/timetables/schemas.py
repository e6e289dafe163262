"""
Timetable Schemas
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null
from edutrack.modules.timetables.conflicts import parse_time
from edutrack.modules.timetables.models import DayOfWeek


def _check_time(value: str | None) -> str | None:
    if value is not None:
        parse_time(value)
    return value


class TimetableCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    academic_year_id: str
    term_id: str | None = None
    effective_from: date
    effective_to: date | None = None
    is_active: bool = True

    @model_validator(mode="after")
    def _check_range(self):
        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise ValueError("effective_to must not be before effective_from")
        return self


class TimetableUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    term_id: str | None = None
    effective_from: date | None = None
    effective_to: date | None = None
    is_active: bool | None = None

    @field_validator("name", "effective_from", "is_active")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class TimetableResponse(ORMModel):
    id: str
    school_id: str
    name: str
    academic_year_id: str
    term_id: str | None
    effective_from: date
    effective_to: date | None
    is_active: bool
    created_at: datetime


class SlotCreate(BaseModel):
    """
    A weekly slot. ``teacher_id`` defaults to the lesson's teacher.

    Times must be zero-padded 24-hour "HH:MM".
    """

    timetable_id: str
    day: DayOfWeek
    start_time: str
    end_time: str
    period: int = Field(..., ge=1, le=20)
    lesson_id: str
    room_id: str | None = None
    teacher_id: str | None = None
    notes: str | None = Field(None, max_length=1000)

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_time(cls, value):
        return _check_time(value)

    @model_validator(mode="after")
    def _check_order(self):
        if parse_time(self.end_time) <= parse_time(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class SlotUpdate(BaseModel):
    day: DayOfWeek | None = None
    start_time: str | None = None
    end_time: str | None = None
    period: int | None = Field(None, ge=1, le=20)
    lesson_id: str | None = None
    room_id: str | None = None
    teacher_id: str | None = None
    is_active: bool | None = None
    notes: str | None = Field(None, max_length=1000)

    @field_validator(
        "day", "start_time", "end_time", "period", "lesson_id", "teacher_id", "is_active"
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_time(cls, value):
        return _check_time(value)


class SlotResponse(ORMModel):
    id: str
    timetable_id: str
    day: DayOfWeek
    start_time: str
    end_time: str
    period: int
    lesson_id: str
    room_id: str | None
    teacher_id: str
    is_active: bool
    notes: str | None
