"""
Fees Repository
"""

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.academics.models import AcademicYear
from edutrack.modules.fees.models import FeeOverride, FeeStructure, FeeType


def list_query(
    scope_clause: ColumnElement[bool],
    academic_year_id: str | None = None,
    fee_type: FeeType | None = None,
) -> Select:
    query = select(FeeStructure).where(scope_clause)
    if academic_year_id:
        query = query.where(FeeStructure.academic_year_id == academic_year_id)
    if fee_type:
        query = query.where(FeeStructure.fee_type == fee_type)
    return query.order_by(FeeStructure.created_at.desc())


async def current_year(db: AsyncSession, school_id: str) -> AcademicYear | None:
    result = await db.execute(
        select(AcademicYear).where(
            AcademicYear.school_id == school_id, AcademicYear.is_current.is_(True)
        )
    )
    return result.scalars().first()


async def structures_for_year(
    db: AsyncSession, school_id: str, academic_year_id: str
) -> list[FeeStructure]:
    result = await db.execute(
        select(FeeStructure)
        .where(
            FeeStructure.school_id == school_id,
            FeeStructure.academic_year_id == academic_year_id,
        )
        .order_by(FeeStructure.created_at)
    )
    return list(result.scalars().all())


async def get_override(db: AsyncSession, item_id: str, student_id: str) -> FeeOverride | None:
    result = await db.execute(
        select(FeeOverride).where(
            FeeOverride.fee_item_id == item_id, FeeOverride.student_id == student_id
        )
    )
    return result.scalar_one_or_none()


async def overrides_for_student(
    db: AsyncSession, student_id: str, item_ids: list[str]
) -> dict[str, FeeOverride]:
    """The student's overrides keyed by breakdown item id."""
    if not item_ids:
        return {}
    result = await db.execute(
        select(FeeOverride).where(
            FeeOverride.student_id == student_id, FeeOverride.fee_item_id.in_(item_ids)
        )
    )
    return {override.fee_item_id: override for override in result.scalars().all()}
