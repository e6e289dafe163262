"""
Class Repository
"""

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.students.models import Student


def list_query(scope_clause: ColumnElement[bool], grade_id: str | None = None) -> Select:
    query = select(SchoolClass).where(scope_clause)
    if grade_id:
        query = query.where(SchoolClass.grade_id == grade_id)
    return query.order_by(SchoolClass.name)


async def name_taken(
    db: AsyncSession,
    school_id: str,
    name: str,
    exclude_id: str | None = None,
) -> bool:
    query = select(func.count(SchoolClass.id)).where(
        SchoolClass.school_id == school_id,
        func.lower(SchoolClass.name) == name.lower(),
    )
    if exclude_id:
        query = query.where(SchoolClass.id != exclude_id)
    return bool(await db.scalar(query))


async def student_count(db: AsyncSession, class_id: str) -> int:
    result = await db.scalar(select(func.count(Student.id)).where(Student.class_id == class_id))
    return result or 0


async def student_counts(db: AsyncSession, class_ids: list[str]) -> dict[str, int]:
    """Enrolment per class for a page of classes."""
    if not class_ids:
        return {}
    result = await db.execute(
        select(Student.class_id, func.count(Student.id))
        .where(Student.class_id.in_(class_ids))
        .group_by(Student.class_id)
    )
    return {class_id: count for class_id, count in result.all()}


async def lock_class(db: AsyncSession, class_id: str, school_id: str) -> SchoolClass | None:
    """Fetch the class with a row lock held until the transaction ends."""
    result = await db.execute(
        select(SchoolClass)
        .where(SchoolClass.id == class_id, SchoolClass.school_id == school_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()
