"""
Teachers Router

Endpoints:
- POST /teachers - Create a teacher account and profile (people managers)
- GET /teachers - List teachers visible to the caller
- GET /teachers/{id} - Get a teacher
- PUT /teachers/{id} - Update a teacher (people managers or the teacher)
- DELETE /teachers/{id} - Delete a teacher without assignments
- POST /teachers/{id}/verify - Approve or reject a teacher
- GET /teachers/{id}/timetable - The teacher's active weekly schedule
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse
from edutrack.modules.teachers import service
from edutrack.modules.teachers.models import ApprovalStatus
from edutrack.modules.teachers.schemas import (
    TeacherCreate,
    TeacherResponse,
    TeacherUpdate,
    TeacherVerifyRequest,
)
from edutrack.modules.timetables import service as timetable_service
from edutrack.modules.timetables.router import slot_list
from edutrack.modules.timetables.schemas import SlotResponse

router = APIRouter()


@router.post(
    "",
    response_model=ItemResponse[TeacherResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
async def create_teacher(
    body: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    teacher = await service.create_teacher(db, actor, body)
    return {"message": "Teacher created successfully", "item": teacher}


@router.get("", response_model=ListResponse[TeacherResponse])
async def list_teachers(
    approval_status: ApprovalStatus | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_teachers(
        db, actor, params, approval_status=approval_status, search=search
    )
    return {
        "message": "Teachers retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{teacher_id}", response_model=ItemResponse[TeacherResponse])
async def get_teacher(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    teacher = await service.get_teacher(db, actor, teacher_id)
    return {"message": "Teacher retrieved successfully", "item": teacher}


@router.put("/{teacher_id}", response_model=ItemResponse[TeacherResponse])
async def update_teacher(
    teacher_id: str,
    body: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    teacher = await service.update_teacher(db, actor, teacher_id, body)
    return {"message": "Teacher updated successfully", "item": teacher}


@router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_teacher(db, actor, teacher_id)
    return {"message": "Teacher deleted successfully"}


@router.post("/{teacher_id}/verify", response_model=ItemResponse[TeacherResponse])
async def verify_teacher(
    teacher_id: str,
    body: TeacherVerifyRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    teacher = await service.verify_teacher(db, actor, teacher_id, body)
    return {"message": f"Teacher {body.status.lower()} successfully", "item": teacher}


@router.get("/{teacher_id}/timetable", response_model=ListResponse[SlotResponse])
async def get_teacher_timetable(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    slots = await timetable_service.get_teacher_timetable(db, actor, teacher_id)
    return slot_list("Teacher timetable retrieved successfully", slots)
