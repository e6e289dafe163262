"""
Event Repository
"""

from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.events.models import Event, EventRSVP, EventType
from edutrack.modules.students.models import Student


def list_query(
    scope_clause: ColumnElement[bool],
    event_type: EventType | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Select:
    query = select(Event).where(scope_clause)
    if event_type:
        query = query.where(Event.event_type == event_type)
    if start_date:
        query = query.where(Event.start_time >= datetime.combine(start_date, time.min, tzinfo=UTC))
    if end_date:
        day_after = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
        query = query.where(Event.start_time < day_after)
    return query.order_by(Event.start_time)


async def upcoming(
    db: AsyncSession,
    scope_clause: ColumnElement[bool],
    now: datetime,
    limit: int,
) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(scope_clause, Event.start_time >= now)
        .order_by(Event.start_time)
        .limit(limit)
    )
    return list(result.scalars().all())


async def parent_ids_for_class(db: AsyncSession, class_id: str) -> list[str]:
    result = await db.execute(
        select(Student.parent_id).where(Student.class_id == class_id).distinct()
    )
    return list(result.scalars().all())


async def parent_ids_for_school(db: AsyncSession, school_id: str) -> list[str]:
    result = await db.execute(
        select(Student.parent_id).where(Student.school_id == school_id).distinct()
    )
    return list(result.scalars().all())


async def get_rsvp(db: AsyncSession, event_id: str, user_id: str) -> EventRSVP | None:
    result = await db.execute(
        select(EventRSVP).where(EventRSVP.event_id == event_id, EventRSVP.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_rsvps(db: AsyncSession, event_id: str) -> list[EventRSVP]:
    result = await db.execute(
        select(EventRSVP).where(EventRSVP.event_id == event_id).order_by(EventRSVP.created_at)
    )
    return list(result.scalars().all())
