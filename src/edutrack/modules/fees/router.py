"""
Fees Router

Fee structures and their breakdown items are managed by school staff.
Parents read what their children owe through the student breakdown.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.fees import service
from edutrack.modules.fees.models import FeeType
from edutrack.modules.fees.schemas import (
    FeeItemCreate,
    FeeItemResponse,
    FeeItemUpdate,
    FeeOverrideResponse,
    FeeOverrideSet,
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
    StudentFeeBreakdown,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


# Fee structures


@router.post(
    "/structures",
    response_model=ItemResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    body: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    structure = await service.create_fee_structure(db, actor, body)
    return {"message": "Fee structure created successfully", "item": structure}


@router.get("/structures", response_model=ListResponse[FeeStructureResponse])
async def list_fee_structures(
    academic_year_id: str | None = Query(None),
    fee_type: FeeType | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_fee_structures(
        db, actor, params, academic_year_id=academic_year_id, fee_type=fee_type
    )
    return {
        "message": "Fee structures retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/structures/{structure_id}", response_model=ItemResponse[FeeStructureResponse])
async def get_fee_structure(
    structure_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    structure = await service.get_fee_structure(db, actor, structure_id)
    return {"message": "Fee structure retrieved successfully", "item": structure}


@router.patch("/structures/{structure_id}", response_model=ItemResponse[FeeStructureResponse])
async def update_fee_structure(
    structure_id: str,
    body: FeeStructureUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    structure = await service.update_fee_structure(db, actor, structure_id, body)
    return {"message": "Fee structure updated successfully", "item": structure}


@router.delete("/structures/{structure_id}", response_model=MessageResponse)
async def delete_fee_structure(
    structure_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_fee_structure(db, actor, structure_id)
    return {"message": "Fee structure deleted successfully"}


# Breakdown items


@router.post(
    "/structures/{structure_id}/items",
    response_model=ItemResponse[FeeItemResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_fee_item(
    structure_id: str,
    body: FeeItemCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    item = await service.add_fee_item(db, actor, structure_id, body)
    return {"message": "Fee item added successfully", "item": item}


@router.patch("/items/{item_id}", response_model=ItemResponse[FeeItemResponse])
async def update_fee_item(
    item_id: str,
    body: FeeItemUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    item = await service.update_fee_item(db, actor, item_id, body)
    return {"message": "Fee item updated successfully", "item": item}


@router.delete("/items/{item_id}", response_model=MessageResponse)
async def delete_fee_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_fee_item(db, actor, item_id)
    return {"message": "Fee item deleted successfully"}


# Student overrides


@router.put(
    "/items/{item_id}/students/{student_id}/override",
    response_model=ItemResponse[FeeOverrideResponse],
)
async def set_student_override(
    item_id: str,
    student_id: str,
    body: FeeOverrideSet,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    override = await service.set_student_override(db, actor, item_id, student_id, body)
    return {"message": "Student override set successfully", "item": override}


@router.delete("/items/{item_id}/students/{student_id}/override", response_model=MessageResponse)
async def clear_student_override(
    item_id: str,
    student_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.clear_student_override(db, actor, item_id, student_id)
    return {"message": "Student override removed successfully"}


# Student breakdown


@router.get("/students/{student_id}/breakdown", response_model=ItemResponse[StudentFeeBreakdown])
async def get_student_fee_breakdown(
    student_id: str,
    academic_year_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    breakdown = await service.get_student_fee_breakdown(
        db, actor, student_id, academic_year_id=academic_year_id
    )
    return {"message": "Student fee breakdown retrieved successfully", "item": breakdown}
