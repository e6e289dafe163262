"""
Curriculum Router

Endpoints:
- POST/GET /curricula - Create or list curricula
- GET/PUT/DELETE /curricula/{id} - Read, update or delete a curriculum
- GET /curricula/{id}/subjects - Subjects of a curriculum
- POST /curricula/subjects - Attach a subject for a grade
- DELETE /curricula/subjects/{id} - Detach a subject
- POST /curricula/objectives - Create a learning objective
- GET /curricula/subjects/{id}/objectives - Objectives of a curriculum subject
- PUT /curricula/progress - Upsert a student's progress on an objective
- GET /curricula/progress/students/{student_id} - A student's progress
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta, single_page_meta
from edutrack.modules.curriculum import service
from edutrack.modules.curriculum.schemas import (
    CurriculumCreate,
    CurriculumResponse,
    CurriculumSubjectCreate,
    CurriculumSubjectResponse,
    CurriculumUpdate,
    ObjectiveCreate,
    ObjectiveResponse,
    ProgressResponse,
    ProgressUpdate,
    StudentProgressResponse,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post(
    "", response_model=ItemResponse[CurriculumResponse], status_code=status.HTTP_201_CREATED
)
async def create_curriculum(
    body: CurriculumCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    curriculum = await service.create_curriculum(db, actor, body)
    return {"message": "Curriculum created successfully", "item": curriculum}


@router.get("", response_model=ListResponse[CurriculumResponse])
async def list_curricula(
    is_active: bool | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_curricula(db, actor, params, is_active=is_active, search=search)
    return {
        "message": "Curriculums retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


# Fixed paths are registered before /{curriculum_id}


@router.post(
    "/subjects",
    response_model=ItemResponse[CurriculumSubjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_subject(
    body: CurriculumSubjectCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    entry = await service.add_subject(db, actor, body)
    return {"message": "Curriculum subject created successfully", "item": entry}


@router.delete("/subjects/{curriculum_subject_id}", response_model=MessageResponse)
async def remove_subject(
    curriculum_subject_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.remove_subject(db, actor, curriculum_subject_id)
    return {"message": "Curriculum subject removed successfully"}


@router.get(
    "/subjects/{curriculum_subject_id}/objectives",
    response_model=ListResponse[ObjectiveResponse],
)
async def list_objectives(
    curriculum_subject_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    objectives = await service.list_objectives(db, actor, curriculum_subject_id)
    return {
        "message": "Learning objectives retrieved successfully",
        "items": objectives,
        "pagination": single_page_meta(len(objectives)),
    }


@router.post(
    "/objectives",
    response_model=ItemResponse[ObjectiveResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_objective(
    body: ObjectiveCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    objective = await service.create_objective(db, actor, body)
    return {"message": "Learning objective created successfully", "item": objective}


@router.put("/progress", response_model=ItemResponse[ProgressResponse])
async def update_progress(
    body: ProgressUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    progress = await service.update_progress(db, actor, body)
    return {"message": "Student progress updated successfully", "item": progress}


@router.get("/progress/students/{student_id}", response_model=StudentProgressResponse)
async def get_student_progress(
    student_id: str,
    curriculum_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    report = await service.get_student_progress(db, actor, student_id, curriculum_id)
    return {"message": "Student progress retrieved successfully", "item": report}


@router.get("/{curriculum_id}", response_model=ItemResponse[CurriculumResponse])
async def get_curriculum(
    curriculum_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    curriculum = await service.get_curriculum(db, actor, curriculum_id)
    return {"message": "Curriculum retrieved successfully", "item": curriculum}


@router.put("/{curriculum_id}", response_model=ItemResponse[CurriculumResponse])
async def update_curriculum(
    curriculum_id: str,
    body: CurriculumUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    curriculum = await service.update_curriculum(db, actor, curriculum_id, body)
    return {"message": "Curriculum updated successfully", "item": curriculum}


@router.delete("/{curriculum_id}", response_model=MessageResponse)
async def delete_curriculum(
    curriculum_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_curriculum(db, actor, curriculum_id)
    return {"message": "Curriculum deleted successfully"}


@router.get("/{curriculum_id}/subjects", response_model=ListResponse[CurriculumSubjectResponse])
async def list_subjects(
    curriculum_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    entries = await service.list_subjects(db, actor, curriculum_id)
    return {
        "message": "Curriculum subjects retrieved successfully",
        "items": entries,
        "pagination": single_page_meta(len(entries)),
    }
