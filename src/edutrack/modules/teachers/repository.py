"""
Teacher Repository
"""

from sqlalchemy import ColumnElement, Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.teachers.models import ApprovalStatus, Teacher
from edutrack.modules.users.models import User


def list_query(
    scope_clause: ColumnElement[bool],
    approval_status: ApprovalStatus | None = None,
    search: str | None = None,
) -> Select:
    query = select(Teacher).join(User, User.id == Teacher.id).where(scope_clause)

    if approval_status:
        query = query.where(Teacher.approval_status == approval_status)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )

    return query.order_by(User.last_name, User.first_name)


async def has_assignments(db: AsyncSession, teacher_id: str) -> bool:
    """Supervised classes, lessons or timetable slots reference the teacher."""
    from edutrack.modules.academics.models import Lesson
    from edutrack.modules.classes.models import SchoolClass
    from edutrack.modules.timetables.models import TimetableSlot

    checks = (
        select(SchoolClass.id).where(SchoolClass.supervisor_id == teacher_id),
        select(Lesson.id).where(Lesson.teacher_id == teacher_id),
        select(TimetableSlot.id).where(TimetableSlot.teacher_id == teacher_id),
    )
    for query in checks:
        if (await db.execute(query.limit(1))).first() is not None:
            return True
    return False
