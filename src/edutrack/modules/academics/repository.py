"""
Academics Repository

Queries for academic years, terms, grades, subjects and lessons.
"""

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.academics.models import AcademicYear, Grade, Subject, Term
from edutrack.modules.shared.models import BaseModel


def list_query(model: type[BaseModel], scope_clause: ColumnElement[bool], *criteria) -> Select:
    query = select(model).where(scope_clause, *criteria)
    if model is Grade:
        return query.order_by(Grade.level)
    if model in (AcademicYear, Term):
        return query.order_by(model.start_date.desc())
    return query.order_by(model.name)


async def clear_current_year(db: AsyncSession, school_id: str) -> None:
    """Unset ``is_current`` on every academic year of the school."""
    await db.execute(
        update(AcademicYear)
        .where(AcademicYear.school_id == school_id, AcademicYear.is_current.is_(True))
        .values(is_current=False)
    )


async def grade_level_taken(
    db: AsyncSession, school_id: str, level: int, exclude_id: str | None = None
) -> bool:
    query = select(func.count(Grade.id)).where(Grade.school_id == school_id, Grade.level == level)
    if exclude_id:
        query = query.where(Grade.id != exclude_id)
    return bool(await db.scalar(query))


async def subject_name_taken(
    db: AsyncSession, school_id: str, name: str, exclude_id: str | None = None
) -> bool:
    query = select(func.count(Subject.id)).where(
        Subject.school_id == school_id,
        func.lower(Subject.name) == name.lower(),
    )
    if exclude_id:
        query = query.where(Subject.id != exclude_id)
    return bool(await db.scalar(query))


async def year_name_taken(
    db: AsyncSession, school_id: str, name: str, exclude_id: str | None = None
) -> bool:
    query = select(func.count(AcademicYear.id)).where(
        AcademicYear.school_id == school_id,
        func.lower(AcademicYear.name) == name.lower(),
    )
    if exclude_id:
        query = query.where(AcademicYear.id != exclude_id)
    return bool(await db.scalar(query))
