"""
Rooms Service Layer

Room CRUD plus two read models built on the schedule conflict checker:
availability for a date and time window, and weekly utilization.
"""

import logging
from datetime import UTC, date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import ROOM_MANAGERS, ensure_role
from edutrack.core.tenancy import parent_school_ids, resolve_school_id, resolve_scope, tenant_clause
from edutrack.modules.events.models import Event
from edutrack.modules.rooms import repository
from edutrack.modules.rooms.models import Room, RoomType
from edutrack.modules.rooms.schemas import RoomCreate, RoomUpdate
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.timetables import repository as timetable_repository
from edutrack.modules.timetables.conflicts import (
    MINUTES_PER_DAY,
    Assignment,
    TimeWindow,
    has_conflict,
)
from edutrack.modules.timetables.models import DayOfWeek

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=Room.school_id,
        parent=lambda parent_id: Room.school_id.in_(parent_school_ids(parent_id)),
    )


async def _get_room(db: AsyncSession, actor: Actor, room_id: str) -> Room:
    room = await shared_repository.get_scoped(db, Room, room_id, _scope_clause(actor))
    if room is None:
        logger.warning(f"Room {room_id} not found for {actor}")
        raise NotFoundError("Room")
    return room


async def create_room(db: AsyncSession, actor: Actor, data: RoomCreate) -> Room:
    ensure_role(actor, ROOM_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if data.code and await repository.code_taken(db, school_id, data.code):
        raise ConflictError("Room with this code already exists in the school")

    room = await shared_repository.add(
        db, Room(school_id=school_id, **data.model_dump(exclude={"school_id"}))
    )
    logger.info(f"{actor} created room {room.id} in school {school_id}")
    return room


async def list_rooms(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    room_type: RoomType | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> tuple[list[Room], int]:
    query = repository.list_query(
        _scope_clause(actor), room_type=room_type, is_active=is_active, search=search
    )
    return await paginate(db, query, params)


async def get_room(db: AsyncSession, actor: Actor, room_id: str) -> Room:
    return await _get_room(db, actor, room_id)


async def update_room(db: AsyncSession, actor: Actor, room_id: str, data: RoomUpdate) -> Room:
    ensure_role(actor, ROOM_MANAGERS)
    room = await _get_room(db, actor, room_id)
    changes = data.model_dump(exclude_unset=True)

    new_code = changes.get("code")
    if new_code and await repository.code_taken(db, room.school_id, new_code, exclude_id=room.id):
        raise ConflictError("Room with this code already exists in the school")

    fields = shared_repository.apply_changes(room, changes)
    await db.flush()

    logger.info(f"{actor} updated room {room.id}: {fields}")
    return room


async def delete_room(db: AsyncSession, actor: Actor, room_id: str) -> None:
    ensure_role(actor, ROOM_MANAGERS)
    room = await _get_room(db, actor, room_id)

    if await repository.is_in_use(db, room.id):
        raise DependentRecordsError(
            "Cannot delete room that is being used in timetables, exam sessions, or events"
        )

    await shared_repository.remove(db, room)
    logger.info(f"{actor} deleted room {room_id}")


def _event_window(event: Event, day: date) -> TimeWindow:
    """The part of an event falling on ``day``, in minutes since midnight (UTC)."""
    start = event.start_time.astimezone(UTC)
    end = event.end_time.astimezone(UTC)
    start_minutes = start.hour * 60 + start.minute if start.date() == day else 0
    end_minutes = end.hour * 60 + end.minute if end.date() == day else MINUTES_PER_DAY
    return TimeWindow(start_minutes, end_minutes)


async def check_availability(
    db: AsyncSession,
    actor: Actor,
    on_date: date,
    start_time: str,
    end_time: str,
    min_capacity: int | None = None,
    room_type: RoomType | None = None,
    school_id: str | None = None,
) -> list[dict[str, Any]]:
    """
    Every active room of the school, flagged with whether it is free.

    A room is busy when an active slot on that weekday or an event on that
    date overlaps the requested window.
    """
    school_id = resolve_school_id(actor, school_id)
    try:
        window = TimeWindow.from_strings(start_time, end_time)
    except ValueError as e:
        raise BusinessRuleError(str(e), error_code="INVALID_TIME") from e
    if window.end <= window.start:
        raise BusinessRuleError(
            "End time must be after start time", error_code="INVALID_TIME_RANGE"
        )

    day = DayOfWeek.from_date(on_date)
    rooms = await repository.candidate_rooms(db, school_id, min_capacity, room_type)
    room_ids = [room.id for room in rooms]

    bookings = [
        Assignment(slot.room_id, day, TimeWindow.from_strings(slot.start_time, slot.end_time))
        for slot in await timetable_repository.active_slots_for_rooms(db, room_ids, day)
    ]
    bookings += [
        Assignment(event.room_id, day, _event_window(event, on_date))
        for event in await repository.events_on(db, room_ids, on_date)
    ]

    result = []
    for room in rooms:
        busy = has_conflict(Assignment(room.id, day, window), bookings)
        result.append({**_room_fields(room), "is_available": not busy})
    return result


def _room_fields(room: Room) -> dict[str, Any]:
    return {
        "id": room.id,
        "school_id": room.school_id,
        "name": room.name,
        "code": room.code,
        "room_type": room.room_type,
        "capacity": room.capacity,
        "floor": room.floor,
        "building": room.building,
        "facilities": room.facilities or [],
        "is_active": room.is_active,
        "created_at": room.created_at,
    }


async def get_utilization(
    db: AsyncSession,
    actor: Actor,
    school_id: str | None = None,
) -> list[dict[str, Any]]:
    """Active weekly slot count and scheduled time per room."""
    ensure_role(actor, ROOM_MANAGERS)
    school_id = resolve_school_id(actor, school_id)

    rooms = await repository.school_rooms(db, school_id)
    slots = await timetable_repository.active_slots_for_rooms(db, [room.id for room in rooms])

    usage: dict[str, list[int]] = {room.id: [0, 0] for room in rooms}
    for slot in slots:
        minutes = TimeWindow.from_strings(slot.start_time, slot.end_time).minutes
        usage[slot.room_id][0] += 1
        usage[slot.room_id][1] += minutes

    logger.debug(f"Computed utilization for {len(rooms)} rooms in school {school_id}")
    return [
        {
            "room_id": room.id,
            "name": room.name,
            "code": room.code,
            "room_type": room.room_type,
            "slot_count": usage[room.id][0],
            "scheduled_minutes": usage[room.id][1],
            "scheduled_hours": round(usage[room.id][1] / 60, 2),
        }
        for room in rooms
    ]
