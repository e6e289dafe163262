"""
Parent Repository
"""

from sqlalchemy import ColumnElement, Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.parents.models import Parent
from edutrack.modules.schools.models import School
from edutrack.modules.students.models import Student
from edutrack.modules.users.models import User


async def get_by_id(db: AsyncSession, parent_id: str) -> Parent | None:
    result = await db.execute(select(Parent).where(Parent.id == str(parent_id)))
    return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    *,
    user: User,
    address: str | None = None,
    occupation: str | None = None,
) -> Parent:
    parent = Parent(id=user.id, user=user, address=address, occupation=occupation)
    db.add(parent)
    await db.flush()
    await db.refresh(parent)
    return parent


def school_parent_ids(school_id: str) -> Select:
    """Parents with at least one child in the school."""
    return select(Student.parent_id).where(Student.school_id == school_id).distinct()


def list_query(scope_clause: ColumnElement[bool], search: str | None = None) -> Select:
    query = select(Parent).join(User, User.id == Parent.id).where(scope_clause)
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


async def children_with_schools(db: AsyncSession, parent_id: str) -> list[tuple[Student, School]]:
    result = await db.execute(
        select(Student, School)
        .join(School, School.id == Student.school_id)
        .where(Student.parent_id == parent_id)
        .order_by(School.name, School.id, Student.first_name)
    )
    return list(result.tuples().all())
