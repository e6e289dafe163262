"""
Attendance Repository
"""

from datetime import date

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.academics.models import Lesson
from edutrack.modules.attendance.models import Attendance
from edutrack.modules.students.models import Student


async def get_teacher_lesson(
    db: AsyncSession, lesson_id: str, teacher_id: str, school_id: str
) -> Lesson | None:
    result = await db.execute(
        select(Lesson).where(
            Lesson.id == lesson_id,
            Lesson.teacher_id == teacher_id,
            Lesson.school_id == school_id,
        )
    )
    return result.scalar_one_or_none()


async def students_in_school(
    db: AsyncSession, student_ids: list[str], school_id: str
) -> dict[str, Student]:
    result = await db.execute(
        select(Student).where(Student.id.in_(student_ids), Student.school_id == school_id)
    )
    return {student.id: student for student in result.scalars().all()}


async def get_record(
    db: AsyncSession, student_id: str, lesson_id: str, on_date: date
) -> Attendance | None:
    result = await db.execute(
        select(Attendance).where(
            Attendance.student_id == student_id,
            Attendance.lesson_id == lesson_id,
            Attendance.date == on_date,
        )
    )
    return result.scalar_one_or_none()


async def student_records(
    db: AsyncSession,
    student_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Attendance]:
    query = select(Attendance).where(Attendance.student_id == student_id)
    if start_date:
        query = query.where(Attendance.date >= start_date)
    if end_date:
        query = query.where(Attendance.date <= end_date)
    result = await db.execute(query.order_by(Attendance.date.desc()))
    return list(result.scalars().all())


async def class_records(
    db: AsyncSession,
    class_id: str,
    on_date: date,
    scope_clause: ColumnElement[bool],
) -> list[Attendance]:
    result = await db.execute(
        select(Attendance)
        .join(Lesson, Lesson.id == Attendance.lesson_id)
        .where(Lesson.class_id == class_id, Attendance.date == on_date, scope_clause)
        .order_by(Attendance.lesson_id, Attendance.student_id)
    )
    return list(result.scalars().all())
