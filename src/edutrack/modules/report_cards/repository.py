"""
Report Card Repository
"""

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.report_cards.models import ReportCard, ReportCardStatus, SubjectReport
from edutrack.modules.students.models import Student


def list_query(
    scope_clause: ColumnElement[bool],
    student_id: str | None = None,
    status: ReportCardStatus | None = None,
    academic_year_id: str | None = None,
) -> Select:
    query = select(ReportCard).where(scope_clause)
    if student_id:
        query = query.where(ReportCard.student_id == student_id)
    if status:
        query = query.where(ReportCard.status == status)
    if academic_year_id:
        query = query.where(ReportCard.academic_year_id == academic_year_id)
    return query.order_by(ReportCard.created_at.desc())


def _period_clause(academic_year_id: str, term_id: str | None) -> list[ColumnElement[bool]]:
    term_clause = ReportCard.term_id.is_(None) if term_id is None else ReportCard.term_id == term_id
    return [ReportCard.academic_year_id == academic_year_id, term_clause]


async def exists_for_period(
    db: AsyncSession, student_id: str, academic_year_id: str, term_id: str | None
) -> bool:
    result = await db.execute(
        select(ReportCard.id)
        .where(ReportCard.student_id == student_id, *_period_clause(academic_year_id, term_id))
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def students_with_cards(
    db: AsyncSession, student_ids: list[str], academic_year_id: str, term_id: str | None
) -> set[str]:
    result = await db.execute(
        select(ReportCard.student_id).where(
            ReportCard.student_id.in_(student_ids), *_period_clause(academic_year_id, term_id)
        )
    )
    return set(result.scalars().all())


async def class_students(db: AsyncSession, class_id: str) -> list[Student]:
    result = await db.execute(
        select(Student).where(Student.class_id == class_id).order_by(Student.last_name)
    )
    return list(result.scalars().all())


async def get_subject_report(
    db: AsyncSession, subject_report_id: str, scope_clause: ColumnElement[bool]
) -> SubjectReport | None:
    result = await db.execute(
        select(SubjectReport)
        .join(ReportCard, ReportCard.id == SubjectReport.report_card_id)
        .where(SubjectReport.id == subject_report_id, scope_clause)
    )
    return result.scalar_one_or_none()
