"""
Attendance Schemas
"""

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from edutrack.modules.attendance.models import AttendanceStatus
from edutrack.modules.shared.schemas import ORMModel


class AttendanceRecord(BaseModel):
    student_id: str
    lesson_id: str
    date: dt.date
    status: AttendanceStatus
    notes: str | None = Field(None, max_length=1000)


class BulkAttendanceEntry(BaseModel):
    student_id: str
    status: AttendanceStatus
    notes: str | None = Field(None, max_length=1000)


class BulkAttendanceRecord(BaseModel):
    lesson_id: str
    date: dt.date
    records: list[BulkAttendanceEntry] = Field(..., min_length=1, max_length=200)

    @field_validator("records")
    @classmethod
    def unique_students(cls, v: list[BulkAttendanceEntry]) -> list[BulkAttendanceEntry]:
        student_ids = [entry.student_id for entry in v]
        if len(student_ids) != len(set(student_ids)):
            raise ValueError("Each student may appear only once")
        return v


class AttendanceResponse(ORMModel):
    id: str
    student_id: str
    lesson_id: str
    school_id: str
    date: dt.date
    status: AttendanceStatus
    notes: str | None
    recorded_by_id: str | None
    updated_at: dt.datetime


class AttendanceSummary(BaseModel):
    total: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: float


class StudentAttendance(BaseModel):
    student_id: str
    records: list[AttendanceResponse]
    summary: AttendanceSummary


class StudentAttendanceResponse(BaseModel):
    message: str
    item: StudentAttendance


class BulkAttendanceResult(BaseModel):
    recorded: int
    absent: int
    items: list[AttendanceResponse]


class BulkAttendanceResponse(BaseModel):
    message: str
    item: BulkAttendanceResult
