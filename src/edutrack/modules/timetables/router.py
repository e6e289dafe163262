"""
Timetables Router

Endpoints:
- POST/GET /timetables, GET/PUT/DELETE /timetables/{id}
- GET /timetables/{id}/slots - All slots of a timetable
- POST /timetables/slots, PUT/DELETE /timetables/slots/{id}
- GET /timetables/classes/{class_id} - Active weekly schedule of a class
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta, single_page_meta
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse
from edutrack.modules.timetables import service
from edutrack.modules.timetables.schemas import (
    SlotCreate,
    SlotResponse,
    SlotUpdate,
    TimetableCreate,
    TimetableResponse,
    TimetableUpdate,
)

router = APIRouter()


def slot_list(message: str, slots: list) -> dict:
    return {"message": message, "items": slots, "pagination": single_page_meta(len(slots))}


@router.post(
    "",
    response_model=ItemResponse[TimetableResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Overlapping active timetable"}},
)
async def create_timetable(
    body: TimetableCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    timetable = await service.create_timetable(db, actor, body)
    return {"message": "Timetable created successfully", "item": timetable}


@router.get("", response_model=ListResponse[TimetableResponse])
async def list_timetables(
    academic_year_id: str | None = Query(None),
    is_active: bool | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_timetables(
        db, actor, params, academic_year_id=academic_year_id, is_active=is_active
    )
    return {
        "message": "Timetables retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.post(
    "/slots",
    response_model=ItemResponse[SlotResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Period, teacher or room conflict"}},
)
async def create_slot(
    body: SlotCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    slot = await service.create_slot(db, actor, body)
    return {"message": "Timetable slot created successfully", "item": slot}


@router.put("/slots/{slot_id}", response_model=ItemResponse[SlotResponse])
async def update_slot(
    slot_id: str,
    body: SlotUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    slot = await service.update_slot(db, actor, slot_id, body)
    return {"message": "Timetable slot updated successfully", "item": slot}


@router.delete("/slots/{slot_id}", response_model=MessageResponse)
async def delete_slot(
    slot_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_slot(db, actor, slot_id)
    return {"message": "Timetable slot deleted successfully"}


@router.get("/classes/{class_id}", response_model=ListResponse[SlotResponse])
async def get_class_timetable(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    slots = await service.get_class_timetable(db, actor, class_id)
    return slot_list("Class timetable retrieved successfully", slots)


@router.get("/{timetable_id}", response_model=ItemResponse[TimetableResponse])
async def get_timetable(
    timetable_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    timetable = await service.get_timetable(db, actor, timetable_id)
    return {"message": "Timetable retrieved successfully", "item": timetable}


@router.get("/{timetable_id}/slots", response_model=ListResponse[SlotResponse])
async def get_timetable_slots(
    timetable_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    slots = await service.get_timetable_slots(db, actor, timetable_id)
    return slot_list("Timetable slots retrieved successfully", slots)


@router.put("/{timetable_id}", response_model=ItemResponse[TimetableResponse])
async def update_timetable(
    timetable_id: str,
    body: TimetableUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    timetable = await service.update_timetable(db, actor, timetable_id, body)
    return {"message": "Timetable updated successfully", "item": timetable}


@router.delete("/{timetable_id}", response_model=MessageResponse)
async def delete_timetable(
    timetable_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_timetable(db, actor, timetable_id)
    return {"message": "Timetable deleted successfully"}
