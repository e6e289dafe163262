"""
Student Repository
"""

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.students.models import Student


def list_query(
    scope_clause: ColumnElement[bool],
    class_id: str | None = None,
    grade_id: str | None = None,
    search: str | None = None,
) -> Select:
    query = select(Student).where(scope_clause)

    if class_id:
        query = query.where(Student.class_id == class_id)
    if grade_id:
        query = query.where(Student.grade_id == grade_id)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.registration_number.ilike(pattern),
            )
        )

    return query.order_by(Student.last_name, Student.first_name)


async def registration_number_taken(
    db: AsyncSession,
    school_id: str,
    registration_number: str,
    exclude_id: str | None = None,
) -> bool:
    query = select(func.count(Student.id)).where(
        Student.school_id == school_id,
        Student.registration_number == registration_number,
    )
    if exclude_id:
        query = query.where(Student.id != exclude_id)
    return bool(await db.scalar(query))


async def has_history(db: AsyncSession, student_id: str) -> bool:
    """Attendance, report cards or curriculum progress reference the student."""
    from edutrack.modules.attendance.models import Attendance
    from edutrack.modules.curriculum.models import StudentProgress
    from edutrack.modules.report_cards.models import ReportCard

    for model in (Attendance, ReportCard, StudentProgress):
        count = await db.scalar(select(func.count(model.id)).where(model.student_id == student_id))
        if count:
            return True
    return False
