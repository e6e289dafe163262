"""
Room Repository
"""

from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.events.models import Event
from edutrack.modules.rooms.models import Room, RoomType
from edutrack.modules.timetables.models import TimetableSlot


def list_query(
    scope_clause: ColumnElement[bool],
    room_type: RoomType | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> Select:
    query = select(Room).where(scope_clause)
    if room_type:
        query = query.where(Room.room_type == room_type)
    if is_active is not None:
        query = query.where(Room.is_active.is_(is_active))
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Room.name.ilike(pattern), Room.code.ilike(pattern)))
    return query.order_by(Room.name)


async def code_taken(
    db: AsyncSession,
    school_id: str,
    code: str,
    exclude_id: str | None = None,
) -> bool:
    query = select(func.count(Room.id)).where(
        Room.school_id == school_id,
        func.lower(Room.code) == code.lower(),
    )
    if exclude_id:
        query = query.where(Room.id != exclude_id)
    return bool(await db.scalar(query))


async def is_in_use(db: AsyncSession, room_id: str) -> bool:
    slots = await db.scalar(
        select(func.count(TimetableSlot.id)).where(TimetableSlot.room_id == room_id)
    )
    events = await db.scalar(select(func.count(Event.id)).where(Event.room_id == room_id))
    return bool(slots) or bool(events)


async def candidate_rooms(
    db: AsyncSession,
    school_id: str,
    min_capacity: int | None = None,
    room_type: RoomType | None = None,
) -> list[Room]:
    query = select(Room).where(Room.school_id == school_id, Room.is_active.is_(True))
    if min_capacity:
        query = query.where(Room.capacity >= min_capacity)
    if room_type:
        query = query.where(Room.room_type == room_type)
    result = await db.execute(query.order_by(Room.name))
    return list(result.scalars().all())


async def events_on(db: AsyncSession, room_ids: list[str], day: date) -> list[Event]:
    """Events in any of the rooms that touch the given calendar day."""
    if not room_ids:
        return []
    day_start = datetime.combine(day, time.min, tzinfo=UTC)
    day_end = day_start + timedelta(days=1)
    result = await db.execute(
        select(Event).where(
            Event.room_id.in_(room_ids),
            Event.start_time < day_end,
            Event.end_time > day_start,
        )
    )
    return list(result.scalars().all())


async def school_rooms(db: AsyncSession, school_id: str) -> list[Room]:
    result = await db.execute(select(Room).where(Room.school_id == school_id).order_by(Room.name))
    return list(result.scalars().all())
