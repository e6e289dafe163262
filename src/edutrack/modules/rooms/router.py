"""
Rooms Router

Endpoints:
- POST/GET /rooms, GET/PUT/DELETE /rooms/{id}
- GET /rooms/availability - Rooms free in a date and time window
- GET /rooms/utilization - Weekly scheduled time per room
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta, single_page_meta
from edutrack.modules.rooms import service
from edutrack.modules.rooms.models import RoomType
from edutrack.modules.rooms.schemas import (
    RoomAvailability,
    RoomCreate,
    RoomResponse,
    RoomUpdate,
    RoomUtilization,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse
from edutrack.modules.timetables.conflicts import TIME_PATTERN

router = APIRouter()


@router.post(
    "",
    response_model=ItemResponse[RoomResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Room code already used in the school"}},
)
async def create_room(
    body: RoomCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    room = await service.create_room(db, actor, body)
    return {"message": "Room created successfully", "item": room}


@router.get("", response_model=ListResponse[RoomResponse])
async def list_rooms(
    room_type: RoomType | None = Query(None),
    is_active: bool | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_rooms(
        db, actor, params, room_type=room_type, is_active=is_active, search=search
    )
    return {
        "message": "Rooms retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/availability", response_model=ListResponse[RoomAvailability])
async def check_availability(
    on_date: date = Query(..., alias="date"),
    start_time: str = Query(..., pattern=TIME_PATTERN.pattern),
    end_time: str = Query(..., pattern=TIME_PATTERN.pattern),
    min_capacity: int | None = Query(None, ge=1),
    room_type: RoomType | None = Query(None),
    school_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rooms = await service.check_availability(
        db,
        actor,
        on_date,
        start_time,
        end_time,
        min_capacity=min_capacity,
        room_type=room_type,
        school_id=school_id,
    )
    return {
        "message": "Room availability retrieved successfully",
        "items": rooms,
        "pagination": single_page_meta(len(rooms)),
    }


@router.get("/utilization", response_model=ListResponse[RoomUtilization])
async def get_utilization(
    school_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rooms = await service.get_utilization(db, actor, school_id=school_id)
    return {
        "message": "Room utilization retrieved successfully",
        "items": rooms,
        "pagination": single_page_meta(len(rooms)),
    }


@router.get("/{room_id}", response_model=ItemResponse[RoomResponse])
async def get_room(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    room = await service.get_room(db, actor, room_id)
    return {"message": "Room retrieved successfully", "item": room}


@router.put("/{room_id}", response_model=ItemResponse[RoomResponse])
async def update_room(
    room_id: str,
    body: RoomUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    room = await service.update_room(db, actor, room_id, body)
    return {"message": "Room updated successfully", "item": room}


@router.delete("/{room_id}", response_model=MessageResponse)
async def delete_room(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_room(db, actor, room_id)
    return {"message": "Room deleted successfully"}
