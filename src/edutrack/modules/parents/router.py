"""
Parents Router

Endpoints:
- POST /parents - Create a parent profile (people managers)
- GET /parents - List parents visible to the caller
- GET /parents/{id} - Get a parent
- PUT /parents/{id} - Update a parent (the parent or people managers)
- DELETE /parents/{id} - Delete a parent without students
- GET /parents/{id}/children - Children grouped by school
"""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.parents import service
from edutrack.modules.parents.schemas import (
    ChildrenResponse,
    ParentCreate,
    ParentResponse,
    ParentUpdate,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post(
    "",
    response_model=ItemResponse[ParentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Existing user is not a parent"},
        409: {"description": "Email already registered or profile exists"},
    },
)
async def create_parent(
    body: ParentCreate = Body(...),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    parent = await service.create_parent(db, actor, body)
    return {"message": "Parent created successfully", "item": parent}


@router.get("", response_model=ListResponse[ParentResponse])
async def list_parents(
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_parents(db, actor, params, search=search)
    return {
        "message": "Parents retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{parent_id}", response_model=ItemResponse[ParentResponse])
async def get_parent(
    parent_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    parent = await service.get_parent(db, actor, parent_id)
    return {"message": "Parent retrieved successfully", "item": parent}


@router.put("/{parent_id}", response_model=ItemResponse[ParentResponse])
async def update_parent(
    parent_id: str,
    body: ParentUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    parent = await service.update_parent(db, actor, parent_id, body)
    return {"message": "Parent updated successfully", "item": parent}


@router.delete("/{parent_id}", response_model=MessageResponse)
async def delete_parent(
    parent_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_parent(db, actor, parent_id)
    return {"message": "Parent deleted successfully"}


@router.get("/{parent_id}/children", response_model=ChildrenResponse)
async def get_children(
    parent_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    schools = await service.get_children(db, actor, parent_id)
    return {"message": "Children retrieved successfully", "schools": schools}
