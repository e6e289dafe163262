"""
Attendance Service Layer

Teachers record attendance for the lessons they teach, one record per student
per lesson per day. Recording again for the same day overwrites the earlier
record. Parents are alerted whenever their child is marked absent.
"""

import logging
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import BusinessRuleError, NotFoundError
from edutrack.core.permissions import ATTENDANCE_RECORDERS, ensure_role
from edutrack.core.tenancy import resolve_scope, teacher_class_ids, tenant_clause
from edutrack.modules.academics.models import Lesson
from edutrack.modules.attendance import repository
from edutrack.modules.attendance.models import Attendance, AttendanceStatus
from edutrack.modules.attendance.schemas import AttendanceRecord, BulkAttendanceRecord
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.models import Student
from edutrack.modules.students.service import get_scoped_student

logger = logging.getLogger(__name__)

RECORDER_ONLY = "Only teachers can record attendance"


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=Attendance.school_id,
        teacher=lambda teacher_id: Attendance.lesson_id.in_(
            select(Lesson.id).where(Lesson.class_id.in_(teacher_class_ids(teacher_id)))
        ),
    )


async def _get_own_lesson(db: AsyncSession, actor: Actor, lesson_id: str) -> Lesson:
    lesson = await repository.get_teacher_lesson(db, lesson_id, actor.id, actor.school_id)
    if lesson is None:
        logger.warning(f"Lesson {lesson_id} not found for {actor}")
        raise NotFoundError("Lesson")
    return lesson


def _check_enrolled(student: Student | None, lesson: Lesson) -> Student:
    if student is None:
        raise NotFoundError("Student")
    if student.class_id != lesson.class_id:
        raise BusinessRuleError(
            "Student is not enrolled in this lesson's class", error_code="NOT_ENROLLED"
        )
    return student


async def _upsert(
    db: AsyncSession,
    actor: Actor,
    lesson: Lesson,
    student: Student,
    on_date: date,
    status: AttendanceStatus,
    notes: str | None,
) -> Attendance:
    record = await repository.get_record(db, student.id, lesson.id, on_date)
    if record is None:
        return await shared_repository.add(
            db,
            Attendance(
                school_id=lesson.school_id,
                student_id=student.id,
                lesson_id=lesson.id,
                date=on_date,
                status=status,
                notes=notes,
                recorded_by_id=actor.id,
            ),
        )

    record.status = status
    record.notes = notes
    record.recorded_by_id = actor.id
    await db.flush()
    return record


async def _alert_parent(db: AsyncSession, student: Student, lesson: Lesson, record: Attendance) -> None:
    await notify(
        db,
        student.parent_id,
        "Attendance Alert",
        f"{student.first_name} {student.last_name} was marked absent from "
        f"{lesson.name} on {record.date:%Y-%m-%d}",
        NotificationType.ATTENDANCE,
        {"student_id": student.id, "lesson_id": lesson.id, "attendance_id": record.id},
    )


async def record_attendance(db: AsyncSession, actor: Actor, data: AttendanceRecord) -> Attendance:
    """
    Record one student's attendance for a lesson the caller teaches.

    Raises:
        PermissionDeniedError: Caller is not a teacher
        NotFoundError: Lesson not taught by the caller, or unknown student
        BusinessRuleError: Student is not in the lesson's class
    """
    ensure_role(actor, ATTENDANCE_RECORDERS, RECORDER_ONLY)
    lesson = await _get_own_lesson(db, actor, data.lesson_id)

    students = await repository.students_in_school(db, [data.student_id], lesson.school_id)
    student = _check_enrolled(students.get(data.student_id), lesson)

    record = await _upsert(db, actor, lesson, student, data.date, data.status, data.notes)
    if record.status == AttendanceStatus.ABSENT:
        await _alert_parent(db, student, lesson, record)

    logger.info(
        f"{actor} recorded {data.status.value} for student {student.id} in lesson {lesson.id}"
    )
    return record


async def record_bulk_attendance(
    db: AsyncSession, actor: Actor, data: BulkAttendanceRecord
) -> dict[str, Any]:
    """
    Record attendance for several students of one lesson.

    Every entry is validated before anything is written, so one bad student
    rejects the whole batch.
    """
    ensure_role(actor, ATTENDANCE_RECORDERS, RECORDER_ONLY)
    lesson = await _get_own_lesson(db, actor, data.lesson_id)

    students = await repository.students_in_school(
        db, [entry.student_id for entry in data.records], lesson.school_id
    )
    checked = [
        (_check_enrolled(students.get(entry.student_id), lesson), entry) for entry in data.records
    ]

    records = []
    absent = 0
    for student, entry in checked:
        record = await _upsert(db, actor, lesson, student, data.date, entry.status, entry.notes)
        records.append(record)
        if record.status == AttendanceStatus.ABSENT:
            absent += 1
            await _alert_parent(db, student, lesson, record)

    logger.info(f"{actor} recorded attendance for {len(records)} students in lesson {lesson.id}")
    return {"recorded": len(records), "absent": absent, "items": records}


def attendance_summary(records: list[Attendance]) -> dict[str, Any]:
    """Counts per status; LATE counts as attended."""

    def count(status: AttendanceStatus) -> int:
        return sum(1 for record in records if record.status == status)

    total = len(records)
    present = count(AttendanceStatus.PRESENT)
    late = count(AttendanceStatus.LATE)
    return {
        "total": total,
        "present": present,
        "absent": count(AttendanceStatus.ABSENT),
        "late": late,
        "excused": count(AttendanceStatus.EXCUSED),
        "attendance_rate": round((present + late) / total * 100, 2) if total else 0.0,
    }


async def get_student_attendance(
    db: AsyncSession,
    actor: Actor,
    student_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict[str, Any]:
    if start_date and end_date and end_date < start_date:
        raise BusinessRuleError(
            "end_date must not be before start_date", error_code="INVALID_DATE_RANGE"
        )

    student = await get_scoped_student(db, actor, student_id)
    records = await repository.student_records(db, student.id, start_date, end_date)
    return {
        "student_id": student.id,
        "records": records,
        "summary": attendance_summary(records),
    }


async def get_class_attendance(
    db: AsyncSession, actor: Actor, class_id: str, on_date: date
) -> list[Attendance]:
    return await repository.class_records(db, class_id, on_date, _scope_clause(actor))
