"""
Attendance Router

Endpoints:
- POST /attendance - Record one student's attendance (teachers)
- POST /attendance/bulk - Record a whole lesson at once (teachers)
- GET /attendance/students/{student_id} - A student's records and summary
- GET /attendance/classes/{class_id} - A class's records for one day
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import single_page_meta
from edutrack.modules.attendance import service
from edutrack.modules.attendance.schemas import (
    AttendanceRecord,
    AttendanceResponse,
    BulkAttendanceRecord,
    BulkAttendanceResponse,
    StudentAttendanceResponse,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse

router = APIRouter()


@router.post(
    "", response_model=ItemResponse[AttendanceResponse], status_code=status.HTTP_201_CREATED
)
async def record_attendance(
    body: AttendanceRecord,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    record = await service.record_attendance(db, actor, body)
    return {"message": "Attendance recorded successfully", "item": record}


@router.post("/bulk", response_model=BulkAttendanceResponse, status_code=status.HTTP_201_CREATED)
async def record_bulk_attendance(
    body: BulkAttendanceRecord,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    result = await service.record_bulk_attendance(db, actor, body)
    return {"message": f"Attendance recorded for {result['recorded']} students", "item": result}


@router.get("/students/{student_id}", response_model=StudentAttendanceResponse)
async def get_student_attendance(
    student_id: str,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    result = await service.get_student_attendance(db, actor, student_id, start_date, end_date)
    return {"message": "Attendance retrieved successfully", "item": result}


@router.get("/classes/{class_id}", response_model=ListResponse[AttendanceResponse])
async def get_class_attendance(
    class_id: str,
    on_date: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    records = await service.get_class_attendance(db, actor, class_id, on_date)
    return {
        "message": "Attendance retrieved successfully",
        "items": records,
        "pagination": single_page_meta(len(records)),
    }
