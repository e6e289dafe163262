"""
Timetables Service Layer

Before a slot is created or changed, three independent checks run:

1. Period occupancy: one active slot per day and period in a timetable
2. Teacher availability: no overlapping active slot of the same teacher in
   any active timetable of the school
3. Room availability: the same, for the room, when one is given

Any failure is a ScheduleConflictError (409). A slot never conflicts with
itself, and deactivating a slot skips the checks.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
    ScheduleConflictError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import TIMETABLE_MANAGERS, TIMETABLE_SLOT_EDITORS, ensure_role
from edutrack.core.tenancy import parent_school_ids, resolve_scope, tenant_clause
from edutrack.modules.academics.models import AcademicYear, Lesson, Term
from edutrack.modules.rooms.models import Room
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.teachers.models import Teacher
from edutrack.modules.timetables import repository
from edutrack.modules.timetables.conflicts import Assignment, TimeWindow, has_conflict
from edutrack.modules.timetables.models import DayOfWeek, Timetable, TimetableSlot
from edutrack.modules.timetables.schemas import (
    SlotCreate,
    SlotUpdate,
    TimetableCreate,
    TimetableUpdate,
)

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=Timetable.school_id,
        parent=lambda parent_id: Timetable.school_id.in_(parent_school_ids(parent_id)),
    )


async def _get_timetable(db: AsyncSession, actor: Actor, timetable_id: str) -> Timetable:
    timetable = await shared_repository.get_scoped(
        db, Timetable, timetable_id, _scope_clause(actor)
    )
    if timetable is None:
        logger.warning(f"Timetable {timetable_id} not found for {actor}")
        raise NotFoundError("Timetable")
    return timetable


async def _get_slot(db: AsyncSession, actor: Actor, slot_id: str) -> TimetableSlot:
    slot = await repository.get_slot(db, slot_id, _scope_clause(actor))
    if slot is None:
        logger.warning(f"Timetable slot {slot_id} not found for {actor}")
        raise NotFoundError("Timetable slot")
    return slot


async def _require(db: AsyncSession, model, entity_id: str, school_id: str, name: str):
    entity = await shared_repository.get_in_school(db, model, entity_id, school_id)
    if entity is None:
        raise NotFoundError(name)
    return entity


def _assignment(slot: TimetableSlot, resource_id: str) -> Assignment:
    return Assignment(
        resource_id=resource_id,
        day=slot.day,
        window=TimeWindow.from_strings(slot.start_time, slot.end_time),
        slot_id=slot.id,
    )


async def check_slot_conflicts(
    db: AsyncSession,
    timetable: Timetable,
    *,
    day: DayOfWeek,
    start_time: str,
    end_time: str,
    period: int,
    teacher_id: str,
    room_id: str | None,
    slot_id: str | None = None,
) -> None:
    """
    Run the three availability checks for a proposed slot.

    Raises:
        ScheduleConflictError: Period, teacher or room already taken
    """
    if await repository.period_taken(db, timetable.id, day, period, exclude_id=slot_id):
        raise ScheduleConflictError("Time slot already occupied")

    window = TimeWindow.from_strings(start_time, end_time)

    teacher_slots = await repository.active_slots_for_teacher(
        db, timetable.school_id, teacher_id, day
    )
    candidate = Assignment(teacher_id, day, window, slot_id)
    if has_conflict(candidate, [_assignment(slot, slot.teacher_id) for slot in teacher_slots]):
        raise ScheduleConflictError("Teacher is not available at this time")

    if room_id:
        room_slots = await repository.active_slots_for_rooms(db, [room_id], day)
        candidate = Assignment(room_id, day, window, slot_id)
        if has_conflict(candidate, [_assignment(slot, slot.room_id) for slot in room_slots]):
            raise ScheduleConflictError("Room is not available at this time")


# ============================================
# Timetables
# ============================================


async def create_timetable(db: AsyncSession, actor: Actor, data: TimetableCreate) -> Timetable:
    ensure_role(actor, TIMETABLE_MANAGERS)
    year = await shared_repository.get_scoped(
        db,
        AcademicYear,
        data.academic_year_id,
        tenant_clause(resolve_scope(actor), school_column=AcademicYear.school_id),
    )
    if year is None:
        raise NotFoundError("Academic year")
    school_id = year.school_id

    if data.term_id:
        term = await _require(db, Term, data.term_id, school_id, "Term")
        if term.academic_year_id != year.id:
            raise NotFoundError("Term")

    if data.is_active and await repository.overlapping_timetable_exists(
        db, school_id, year.id, data.term_id, data.effective_from, data.effective_to
    ):
        raise ConflictError("A timetable already exists for this period")

    timetable = await shared_repository.add(
        db, Timetable(school_id=school_id, **data.model_dump())
    )
    logger.info(f"{actor} created timetable {timetable.id} in school {school_id}")
    return timetable


async def list_timetables(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    academic_year_id: str | None = None,
    is_active: bool | None = None,
) -> tuple[list[Timetable], int]:
    query = repository.list_query(
        _scope_clause(actor), academic_year_id=academic_year_id, is_active=is_active
    )
    return await paginate(db, query, params)


async def get_timetable(db: AsyncSession, actor: Actor, timetable_id: str) -> Timetable:
    return await _get_timetable(db, actor, timetable_id)


async def get_timetable_slots(
    db: AsyncSession, actor: Actor, timetable_id: str
) -> list[TimetableSlot]:
    timetable = await _get_timetable(db, actor, timetable_id)
    return await repository.timetable_slots(db, timetable.id)


async def update_timetable(
    db: AsyncSession,
    actor: Actor,
    timetable_id: str,
    data: TimetableUpdate,
) -> Timetable:
    ensure_role(actor, TIMETABLE_MANAGERS)
    timetable = await _get_timetable(db, actor, timetable_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("term_id"):
        term = await _require(db, Term, changes["term_id"], timetable.school_id, "Term")
        if term.academic_year_id != timetable.academic_year_id:
            raise NotFoundError("Term")

    effective_from = changes.get("effective_from", timetable.effective_from)
    effective_to = changes.get("effective_to", timetable.effective_to)
    if effective_to is not None and effective_to < effective_from:
        raise BusinessRuleError(
            "effective_to must not be before effective_from", error_code="INVALID_DATE_RANGE"
        )

    is_active = changes.get("is_active", timetable.is_active)
    if is_active and await repository.overlapping_timetable_exists(
        db,
        timetable.school_id,
        timetable.academic_year_id,
        changes.get("term_id", timetable.term_id),
        effective_from,
        effective_to,
        exclude_id=timetable.id,
    ):
        raise ConflictError("A timetable already exists for this period")

    fields = shared_repository.apply_changes(timetable, changes)
    await db.flush()

    logger.info(f"{actor} updated timetable {timetable.id}: {fields}")
    return timetable


async def delete_timetable(db: AsyncSession, actor: Actor, timetable_id: str) -> None:
    ensure_role(actor, TIMETABLE_MANAGERS)
    timetable = await _get_timetable(db, actor, timetable_id)

    if await shared_repository.exists_where(
        db, TimetableSlot, TimetableSlot.timetable_id == timetable.id
    ):
        raise DependentRecordsError(
            "Cannot delete timetable with existing slots. Please remove all slots first."
        )

    await shared_repository.remove(db, timetable)
    logger.info(f"{actor} deleted timetable {timetable_id}")


# ============================================
# Slots
# ============================================


async def create_slot(db: AsyncSession, actor: Actor, data: SlotCreate) -> TimetableSlot:
    ensure_role(actor, TIMETABLE_SLOT_EDITORS)
    timetable = await _get_timetable(db, actor, data.timetable_id)
    school_id = timetable.school_id

    lesson = await _require(db, Lesson, data.lesson_id, school_id, "Lesson")
    teacher_id = data.teacher_id or lesson.teacher_id
    await _require(db, Teacher, teacher_id, school_id, "Teacher")
    if data.room_id:
        await _require(db, Room, data.room_id, school_id, "Room")

    await check_slot_conflicts(
        db,
        timetable,
        day=data.day,
        start_time=data.start_time,
        end_time=data.end_time,
        period=data.period,
        teacher_id=teacher_id,
        room_id=data.room_id,
    )

    slot = await shared_repository.add(
        db,
        TimetableSlot(
            timetable_id=timetable.id,
            day=data.day,
            start_time=data.start_time,
            end_time=data.end_time,
            period=data.period,
            lesson_id=lesson.id,
            room_id=data.room_id,
            teacher_id=teacher_id,
            notes=data.notes,
        ),
    )
    logger.info(f"{actor} created slot {slot.id} in timetable {timetable.id}")
    return slot


async def update_slot(
    db: AsyncSession,
    actor: Actor,
    slot_id: str,
    data: SlotUpdate,
) -> TimetableSlot:
    """
    Partially update a slot, re-running the conflict checks on the merged
    values unless the slot ends up inactive.
    """
    ensure_role(actor, TIMETABLE_SLOT_EDITORS)
    slot = await _get_slot(db, actor, slot_id)
    timetable = await _get_timetable(db, actor, slot.timetable_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("lesson_id"):
        await _require(db, Lesson, changes["lesson_id"], timetable.school_id, "Lesson")
    if changes.get("teacher_id"):
        await _require(db, Teacher, changes["teacher_id"], timetable.school_id, "Teacher")
    if changes.get("room_id"):
        await _require(db, Room, changes["room_id"], timetable.school_id, "Room")

    merged = {
        field: changes.get(field, getattr(slot, field))
        for field in ("day", "start_time", "end_time", "period", "teacher_id", "room_id", "is_active")
    }
    window = TimeWindow.from_strings(merged["start_time"], merged["end_time"])
    if window.end <= window.start:
        raise BusinessRuleError(
            "End time must be after start time", error_code="INVALID_TIME_RANGE"
        )

    if merged["is_active"]:
        await check_slot_conflicts(
            db,
            timetable,
            day=merged["day"],
            start_time=merged["start_time"],
            end_time=merged["end_time"],
            period=merged["period"],
            teacher_id=merged["teacher_id"],
            room_id=merged["room_id"],
            slot_id=slot.id,
        )

    fields = shared_repository.apply_changes(slot, changes)
    await db.flush()

    logger.info(f"{actor} updated slot {slot.id}: {fields}")
    return slot


async def delete_slot(db: AsyncSession, actor: Actor, slot_id: str) -> None:
    ensure_role(actor, TIMETABLE_SLOT_EDITORS)
    slot = await _get_slot(db, actor, slot_id)
    await shared_repository.remove(db, slot)
    logger.info(f"{actor} deleted slot {slot_id}")


# ============================================
# Views
# ============================================


async def get_teacher_timetable(
    db: AsyncSession, actor: Actor, teacher_id: str
) -> list[TimetableSlot]:
    from edutrack.modules.teachers.service import get_scoped_teacher

    teacher = await get_scoped_teacher(db, actor, teacher_id)
    return await repository.teacher_timetable(db, teacher.id)


async def get_class_timetable(
    db: AsyncSession, actor: Actor, class_id: str
) -> list[TimetableSlot]:
    from edutrack.modules.classes.models import SchoolClass
    from edutrack.modules.classes.service import scope_clause

    school_class = await shared_repository.get_scoped(db, SchoolClass, class_id, scope_clause(actor))
    if school_class is None:
        raise NotFoundError("Class")
    return await repository.class_timetable(db, school_class.id)
