"""
Classes Router

Endpoints:
- POST /classes - Create a class (class managers)
- GET /classes - List classes visible to the caller
- GET /classes/{id} - Get a class with its enrolment count
- PUT /classes/{id} - Update a class
- DELETE /classes/{id} - Delete a class without students or lessons
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.classes import service
from edutrack.modules.classes.schemas import ClassCreate, ClassResponse, ClassUpdate
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post(
    "",
    response_model=ItemResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Class name already used in the school"}},
)
async def create_class(
    body: ClassCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    item = await service.create_class(db, actor, body)
    return {"message": "Class created successfully", "item": item}


@router.get("", response_model=ListResponse[ClassResponse])
async def list_classes(
    grade_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    items, total = await service.list_classes(db, actor, params, grade_id=grade_id)
    return {
        "message": "Classes retrieved successfully",
        "items": items,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{class_id}", response_model=ItemResponse[ClassResponse])
async def get_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    item = await service.get_class(db, actor, class_id)
    return {"message": "Class retrieved successfully", "item": item}


@router.put("/{class_id}", response_model=ItemResponse[ClassResponse])
async def update_class(
    class_id: str,
    body: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    item = await service.update_class(db, actor, class_id, body)
    return {"message": "Class updated successfully", "item": item}


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_class(db, actor, class_id)
    return {"message": "Class deleted successfully"}
