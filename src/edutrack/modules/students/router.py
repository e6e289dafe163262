"""
Students Router

Endpoints:
- POST /students - Enroll a student (people managers)
- GET /students - List students visible to the caller
- GET /students/{id} - Get a student
- PUT /students/{id} - Update a student
- POST /students/{id}/assign-class - Move a student into a class
- DELETE /students/{id} - Delete a student without history
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse
from edutrack.modules.students import service
from edutrack.modules.students.schemas import (
    AssignClassRequest,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)

router = APIRouter()


@router.post(
    "",
    response_model=ItemResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
    description="""
Enroll a student.

**Parent (`parent`):**
- `{"type": "existing", "parent_id": ...}` uses an existing parent profile
- `{"type": "new", "email": ..., "first_name": ..., "last_name": ...}` creates
  the parent account in the same transaction
""",
    responses={
        400: {"description": "Class at full capacity"},
        409: {"description": "Duplicate registration number or parent email"},
    },
)
async def create_student(
    body: StudentCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    student = await service.create_student(db, actor, body)
    return {"message": "Student created successfully", "item": student}


@router.get("", response_model=ListResponse[StudentResponse])
async def list_students(
    class_id: str | None = Query(None),
    grade_id: str | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_students(
        db, actor, params, class_id=class_id, grade_id=grade_id, search=search
    )
    return {
        "message": "Students retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{student_id}", response_model=ItemResponse[StudentResponse])
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    student = await service.get_student(db, actor, student_id)
    return {"message": "Student retrieved successfully", "item": student}


@router.put("/{student_id}", response_model=ItemResponse[StudentResponse])
async def update_student(
    student_id: str,
    body: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    student = await service.update_student(db, actor, student_id, body)
    return {"message": "Student updated successfully", "item": student}


@router.post("/{student_id}/assign-class", response_model=ItemResponse[StudentResponse])
async def assign_to_class(
    student_id: str,
    body: AssignClassRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    student = await service.assign_to_class(db, actor, student_id, body.class_id)
    return {"message": "Student assigned to class successfully", "item": student}


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_student(db, actor, student_id)
    return {"message": "Student deleted successfully"}
