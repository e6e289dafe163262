"""
Timetable Repository
"""

from datetime import date

from sqlalchemy import ColumnElement, Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.academics.models import Lesson
from edutrack.modules.timetables.models import DayOfWeek, Timetable, TimetableSlot

_SLOT_ORDER = (TimetableSlot.day, TimetableSlot.period, TimetableSlot.start_time)


def list_query(
    scope_clause: ColumnElement[bool],
    academic_year_id: str | None = None,
    is_active: bool | None = None,
) -> Select:
    query = select(Timetable).where(scope_clause)
    if academic_year_id:
        query = query.where(Timetable.academic_year_id == academic_year_id)
    if is_active is not None:
        query = query.where(Timetable.is_active.is_(is_active))
    return query.order_by(Timetable.effective_from.desc())


async def overlapping_timetable_exists(
    db: AsyncSession,
    school_id: str,
    academic_year_id: str,
    term_id: str | None,
    effective_from: date,
    effective_to: date | None,
    exclude_id: str | None = None,
) -> bool:
    """An active timetable for the same year and term whose dates intersect."""
    query = select(Timetable.id).where(
        Timetable.school_id == school_id,
        Timetable.academic_year_id == academic_year_id,
        Timetable.term_id.is_(None) if term_id is None else Timetable.term_id == term_id,
        Timetable.is_active.is_(True),
        or_(Timetable.effective_to.is_(None), Timetable.effective_to >= effective_from),
    )
    if effective_to is not None:
        query = query.where(Timetable.effective_from <= effective_to)
    if exclude_id:
        query = query.where(Timetable.id != exclude_id)
    return (await db.execute(query.limit(1))).first() is not None


async def get_slot(
    db: AsyncSession,
    slot_id: str,
    scope_clause: ColumnElement[bool],
) -> TimetableSlot | None:
    """Slots carry no school column; scope through the owning timetable."""
    result = await db.execute(
        select(TimetableSlot)
        .join(Timetable, Timetable.id == TimetableSlot.timetable_id)
        .where(TimetableSlot.id == slot_id, scope_clause)
    )
    return result.scalar_one_or_none()


async def period_taken(
    db: AsyncSession,
    timetable_id: str,
    day: DayOfWeek,
    period: int,
    exclude_id: str | None = None,
) -> bool:
    query = select(TimetableSlot.id).where(
        TimetableSlot.timetable_id == timetable_id,
        TimetableSlot.day == day,
        TimetableSlot.period == period,
        TimetableSlot.is_active.is_(True),
    )
    if exclude_id:
        query = query.where(TimetableSlot.id != exclude_id)
    return (await db.execute(query.limit(1))).first() is not None


def _active_slots() -> Select:
    return (
        select(TimetableSlot)
        .join(Timetable, Timetable.id == TimetableSlot.timetable_id)
        .where(TimetableSlot.is_active.is_(True), Timetable.is_active.is_(True))
    )


async def active_slots_for_teacher(
    db: AsyncSession,
    school_id: str,
    teacher_id: str,
    day: DayOfWeek | None = None,
) -> list[TimetableSlot]:
    query = _active_slots().where(
        Timetable.school_id == school_id,
        TimetableSlot.teacher_id == teacher_id,
    )
    if day is not None:
        query = query.where(TimetableSlot.day == day)
    result = await db.execute(query)
    return list(result.scalars().all())


async def active_slots_for_rooms(
    db: AsyncSession,
    room_ids: list[str],
    day: DayOfWeek | None = None,
) -> list[TimetableSlot]:
    if not room_ids:
        return []
    query = _active_slots().where(TimetableSlot.room_id.in_(room_ids))
    if day is not None:
        query = query.where(TimetableSlot.day == day)
    result = await db.execute(query)
    return list(result.scalars().all())


async def teacher_timetable(db: AsyncSession, teacher_id: str) -> list[TimetableSlot]:
    result = await db.execute(
        _active_slots().where(TimetableSlot.teacher_id == teacher_id).order_by(*_SLOT_ORDER)
    )
    return list(result.scalars().all())


async def class_timetable(db: AsyncSession, class_id: str) -> list[TimetableSlot]:
    result = await db.execute(
        _active_slots()
        .join(Lesson, Lesson.id == TimetableSlot.lesson_id)
        .where(Lesson.class_id == class_id)
        .order_by(*_SLOT_ORDER)
    )
    return list(result.scalars().all())


async def timetable_slots(db: AsyncSession, timetable_id: str) -> list[TimetableSlot]:
    result = await db.execute(
        select(TimetableSlot)
        .where(TimetableSlot.timetable_id == timetable_id)
        .order_by(*_SLOT_ORDER)
    )
    return list(result.scalars().all())
