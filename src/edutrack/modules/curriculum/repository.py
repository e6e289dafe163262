"""
Curriculum Repository
"""

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.curriculum.models import (
    Curriculum,
    CurriculumSubject,
    LearningObjective,
    StudentProgress,
)


def list_query(
    scope_clause: ColumnElement[bool],
    is_active: bool | None = None,
    search: str | None = None,
) -> Select:
    query = select(Curriculum).where(scope_clause)
    if is_active is not None:
        query = query.where(Curriculum.is_active == is_active)
    if search:
        query = query.where(Curriculum.name.ilike(f"%{search}%"))
    return query.order_by(Curriculum.name, Curriculum.version)


async def name_version_taken(
    db: AsyncSession,
    school_id: str,
    name: str,
    version: str,
    exclude_id: str | None = None,
) -> bool:
    query = select(func.count(Curriculum.id)).where(
        Curriculum.school_id == school_id,
        Curriculum.name == name,
        Curriculum.version == version,
    )
    if exclude_id:
        query = query.where(Curriculum.id != exclude_id)
    return bool(await db.scalar(query))


async def subject_entry_exists(
    db: AsyncSession, curriculum_id: str, subject_id: str, grade_id: str
) -> bool:
    result = await db.scalar(
        select(func.count(CurriculumSubject.id)).where(
            CurriculumSubject.curriculum_id == curriculum_id,
            CurriculumSubject.subject_id == subject_id,
            CurriculumSubject.grade_id == grade_id,
        )
    )
    return bool(result)


async def curriculum_subjects(db: AsyncSession, curriculum_id: str) -> list[CurriculumSubject]:
    result = await db.execute(
        select(CurriculumSubject)
        .where(CurriculumSubject.curriculum_id == curriculum_id)
        .order_by(CurriculumSubject.created_at)
    )
    return list(result.scalars().all())


async def get_curriculum_subject(
    db: AsyncSession,
    curriculum_subject_id: str,
    curriculum_clause: ColumnElement[bool],
) -> CurriculumSubject | None:
    """A curriculum subject whose curriculum satisfies ``curriculum_clause``."""
    result = await db.execute(
        select(CurriculumSubject)
        .join(Curriculum, Curriculum.id == CurriculumSubject.curriculum_id)
        .where(CurriculumSubject.id == curriculum_subject_id, curriculum_clause)
    )
    return result.scalar_one_or_none()


async def objectives_for(db: AsyncSession, curriculum_subject_id: str) -> list[LearningObjective]:
    result = await db.execute(
        select(LearningObjective)
        .where(LearningObjective.curriculum_subject_id == curriculum_subject_id)
        .order_by(LearningObjective.created_at)
    )
    return list(result.scalars().all())


async def get_objective_in_school(
    db: AsyncSession, objective_id: str, school_id: str
) -> LearningObjective | None:
    result = await db.execute(
        select(LearningObjective)
        .join(CurriculumSubject, CurriculumSubject.id == LearningObjective.curriculum_subject_id)
        .join(Curriculum, Curriculum.id == CurriculumSubject.curriculum_id)
        .where(LearningObjective.id == objective_id, Curriculum.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def get_progress(
    db: AsyncSession, student_id: str, objective_id: str
) -> StudentProgress | None:
    result = await db.execute(
        select(StudentProgress).where(
            StudentProgress.student_id == student_id,
            StudentProgress.objective_id == objective_id,
        )
    )
    return result.scalar_one_or_none()


async def student_progress(
    db: AsyncSession,
    student_id: str,
    curriculum_id: str | None = None,
) -> list[StudentProgress]:
    query = (
        select(StudentProgress)
        .join(LearningObjective, LearningObjective.id == StudentProgress.objective_id)
        .join(CurriculumSubject, CurriculumSubject.id == LearningObjective.curriculum_subject_id)
        .where(StudentProgress.student_id == student_id)
    )
    if curriculum_id:
        query = query.where(CurriculumSubject.curriculum_id == curriculum_id)
    query = query.order_by(CurriculumSubject.subject_id, LearningObjective.created_at)
    result = await db.execute(query)
    return list(result.scalars().all())
