"""
Report Card Service Layer

Report cards move DRAFT or GENERATED -> APPROVED -> PUBLISHED. Editors
(principals, school admins, teachers) fill in comments and subject marks;
approvers (principals, school admins) approve, publish and generate in bulk.
Every change to a card's subject reports recomputes its overall result.

Parents only ever see their children's published cards.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import REPORT_CARD_APPROVERS, REPORT_CARD_EDITORS, ensure_role
from edutrack.core.tenancy import resolve_school_id, resolve_scope, teacher_class_ids, tenant_clause
from edutrack.modules.academics.models import AcademicYear, Subject, Term
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify
from edutrack.modules.report_cards import repository
from edutrack.modules.report_cards.grading import grade_for_percentage, overall_result, percentage_of
from edutrack.modules.report_cards.models import ReportCard, ReportCardStatus, SubjectReport
from edutrack.modules.report_cards.schemas import (
    GenerateReportCards,
    ReportCardCreate,
    ReportCardUpdate,
    SubjectReportCreate,
    SubjectReportUpdate,
)
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.models import Student
from edutrack.modules.students.service import get_scoped_student
from edutrack.modules.users.models import UserRole

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=ReportCard.school_id,
        teacher=lambda teacher_id: ReportCard.student_id.in_(
            select(Student.id).where(Student.class_id.in_(teacher_class_ids(teacher_id)))
        ),
        parent=lambda parent_id: and_(
            ReportCard.student_id.in_(select(Student.id).where(Student.parent_id == parent_id)),
            ReportCard.status == ReportCardStatus.PUBLISHED,
        ),
    )


async def _get_card(
    db: AsyncSession, actor: Actor, report_card_id: str, for_update: bool = False
) -> ReportCard:
    card = await shared_repository.get_scoped(
        db, ReportCard, report_card_id, _scope_clause(actor), for_update=for_update
    )
    if card is None:
        logger.warning(f"Report card {report_card_id} not found for {actor}")
        raise NotFoundError("Report card")
    return card


def _ensure_modifiable(actor: Actor, card: ReportCard) -> None:
    if card.status == ReportCardStatus.PUBLISHED:
        raise BusinessRuleError(
            "Cannot modify published report card", error_code="REPORT_CARD_PUBLISHED"
        )
    if card.status == ReportCardStatus.APPROVED and actor.role != UserRole.PRINCIPAL:
        raise PermissionDeniedError("Cannot modify approved report card")


def _recompute(card: ReportCard) -> None:
    result = overall_result(card.subject_reports)
    card.overall_percentage = result.percentage
    card.overall_grade = result.grade
    card.gpa = result.gpa


async def _check_period(
    db: AsyncSession, school_id: str, academic_year_id: str, term_id: str | None
) -> AcademicYear:
    year = await shared_repository.get_in_school(db, AcademicYear, academic_year_id, school_id)
    if year is None:
        raise NotFoundError("Academic year")
    if term_id is not None:
        term = await shared_repository.get_in_school(db, Term, term_id, school_id)
        if term is None or term.academic_year_id != year.id:
            raise NotFoundError("Term")
    return year


# ============================================
# Report cards
# ============================================


async def create_report_card(db: AsyncSession, actor: Actor, data: ReportCardCreate) -> ReportCard:
    """
    Create a DRAFT report card for a student in the caller's scope.

    Raises:
        NotFoundError: Student, academic year or term not found
        BusinessRuleError: A card already exists for the same period
    """
    ensure_role(actor, REPORT_CARD_EDITORS)
    student = await get_scoped_student(db, actor, data.student_id)
    await _check_period(db, student.school_id, data.academic_year_id, data.term_id)

    if await repository.exists_for_period(db, student.id, data.academic_year_id, data.term_id):
        raise BusinessRuleError(
            "Report card already exists for this period", error_code="REPORT_CARD_EXISTS"
        )

    card = await shared_repository.add(
        db,
        ReportCard(
            school_id=student.school_id,
            status=ReportCardStatus.DRAFT,
            subject_reports=[],
            **data.model_dump(),
        ),
    )
    logger.info(f"{actor} created report card {card.id} for student {student.id}")
    return card


async def list_report_cards(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    student_id: str | None = None,
    status: ReportCardStatus | None = None,
    academic_year_id: str | None = None,
) -> tuple[list[ReportCard], int]:
    query = repository.list_query(
        _scope_clause(actor),
        student_id=student_id,
        status=status,
        academic_year_id=academic_year_id,
    )
    return await paginate(db, query, params)


async def get_report_card(db: AsyncSession, actor: Actor, report_card_id: str) -> ReportCard:
    return await _get_card(db, actor, report_card_id)


async def update_report_card(
    db: AsyncSession, actor: Actor, report_card_id: str, data: ReportCardUpdate
) -> ReportCard:
    ensure_role(actor, REPORT_CARD_EDITORS)
    card = await _get_card(db, actor, report_card_id)
    _ensure_modifiable(actor, card)

    fields = shared_repository.apply_changes(card, data.model_dump(exclude_unset=True))
    await db.flush()

    logger.info(f"{actor} updated report card {card.id}: {fields}")
    return card


async def delete_report_card(db: AsyncSession, actor: Actor, report_card_id: str) -> None:
    ensure_role(actor, REPORT_CARD_APPROVERS)
    card = await _get_card(db, actor, report_card_id)

    if card.status == ReportCardStatus.PUBLISHED:
        raise BusinessRuleError(
            "Cannot delete published report card", error_code="REPORT_CARD_PUBLISHED"
        )

    await shared_repository.remove(db, card)
    logger.info(f"{actor} deleted report card {report_card_id}")


async def approve_report_card(db: AsyncSession, actor: Actor, report_card_id: str) -> ReportCard:
    ensure_role(actor, REPORT_CARD_APPROVERS)
    card = await _get_card(db, actor, report_card_id, for_update=True)

    if card.status != ReportCardStatus.GENERATED:
        raise BusinessRuleError(
            "Only generated report cards can be approved", error_code="INVALID_STATUS"
        )

    card.status = ReportCardStatus.APPROVED
    card.approved_at = datetime.now(UTC)
    card.approved_by_id = actor.id
    await db.flush()

    logger.info(f"{actor} approved report card {card.id}")
    return card


async def publish_report_card(db: AsyncSession, actor: Actor, report_card_id: str) -> ReportCard:
    """Publish an approved card and tell the student's parent."""
    ensure_role(actor, REPORT_CARD_APPROVERS)
    card = await _get_card(db, actor, report_card_id, for_update=True)

    if card.status != ReportCardStatus.APPROVED:
        raise BusinessRuleError(
            "Only approved report cards can be published", error_code="INVALID_STATUS"
        )

    card.status = ReportCardStatus.PUBLISHED
    card.published_at = datetime.now(UTC)
    await db.flush()

    student = await db.get(Student, card.student_id)
    if student is not None:
        await notify(
            db,
            student.parent_id,
            "Report Card Published",
            f"Report card for {student.first_name} {student.last_name} has been published",
            NotificationType.REPORT_CARD,
            {"report_card_id": card.id, "student_id": student.id},
        )

    logger.info(f"{actor} published report card {card.id}")
    return card


async def generate_report_cards(
    db: AsyncSession, actor: Actor, data: GenerateReportCards
) -> dict[str, Any]:
    """
    Create GENERATED cards for every student of a class who has none for the
    period. Students that already have a card are skipped.
    """
    ensure_role(actor, REPORT_CARD_APPROVERS)
    school_id = resolve_school_id(actor)

    school_class = await shared_repository.get_in_school(db, SchoolClass, data.class_id, school_id)
    if school_class is None:
        raise NotFoundError("Class")
    year = await _check_period(db, school_id, data.academic_year_id, data.term_id)

    students = await repository.class_students(db, school_class.id)
    already = await repository.students_with_cards(
        db, [student.id for student in students], year.id, data.term_id
    )
    title = data.title or f"{year.name} Report Card"

    created = []
    for student in students:
        if student.id in already:
            continue
        card = ReportCard(
            school_id=school_id,
            title=title,
            student_id=student.id,
            academic_year_id=year.id,
            term_id=data.term_id,
            status=ReportCardStatus.GENERATED,
            subject_reports=[],
        )
        db.add(card)
        created.append(card)
    await db.flush()

    logger.info(
        f"{actor} generated {len(created)} report cards for class {school_class.id} "
        f"({len(already)} skipped)"
    )
    return {
        "created": len(created),
        "skipped": len(already),
        "report_card_ids": [card.id for card in created],
    }


# ============================================
# Subject reports
# ============================================


async def add_subject_report(
    db: AsyncSession, actor: Actor, report_card_id: str, data: SubjectReportCreate
) -> ReportCard:
    """
    Add one subject's marks to a card and recompute the card's overall result.

    Raises:
        NotFoundError: Card or subject not found
        BusinessRuleError: The subject already has a report on this card
    """
    ensure_role(actor, REPORT_CARD_EDITORS)
    card = await _get_card(db, actor, report_card_id, for_update=True)
    _ensure_modifiable(actor, card)

    if await shared_repository.get_in_school(db, Subject, data.subject_id, card.school_id) is None:
        raise NotFoundError("Subject")
    if any(report.subject_id == data.subject_id for report in card.subject_reports):
        raise BusinessRuleError("Subject report already exists", error_code="SUBJECT_REPORT_EXISTS")

    percentage = percentage_of(data.obtained_marks, data.total_marks)
    grade = grade_for_percentage(percentage)
    card.subject_reports.append(
        SubjectReport(
            subject_id=data.subject_id,
            total_marks=data.total_marks,
            obtained_marks=data.obtained_marks,
            percentage=percentage,
            grade=grade.grade,
            grade_point=grade.grade_point,
            remarks=data.remarks,
        )
    )
    _recompute(card)
    await db.flush()

    logger.info(f"{actor} added subject {data.subject_id} to report card {card.id}")
    return card


async def _get_subject_report(
    db: AsyncSession, actor: Actor, subject_report_id: str
) -> tuple[ReportCard, SubjectReport]:
    report = await repository.get_subject_report(db, subject_report_id, _scope_clause(actor))
    if report is None:
        raise NotFoundError("Subject report")
    card = await _get_card(db, actor, report.report_card_id, for_update=True)
    _ensure_modifiable(actor, card)
    return card, report


async def update_subject_report(
    db: AsyncSession, actor: Actor, subject_report_id: str, data: SubjectReportUpdate
) -> ReportCard:
    ensure_role(actor, REPORT_CARD_EDITORS)
    card, report = await _get_subject_report(db, actor, subject_report_id)
    changes = data.model_dump(exclude_unset=True)

    total = changes.get("total_marks", report.total_marks)
    obtained = changes.get("obtained_marks", report.obtained_marks)
    if obtained > total:
        raise BusinessRuleError(
            "obtained_marks must not exceed total_marks", error_code="INVALID_MARKS"
        )

    percentage = percentage_of(obtained, total)
    grade = grade_for_percentage(percentage)
    changes.update(
        percentage=percentage, grade=grade.grade, grade_point=grade.grade_point
    )
    shared_repository.apply_changes(report, changes)
    _recompute(card)
    await db.flush()

    logger.info(f"{actor} updated subject report {report.id} on report card {card.id}")
    return card


async def delete_subject_report(
    db: AsyncSession, actor: Actor, subject_report_id: str
) -> ReportCard:
    ensure_role(actor, REPORT_CARD_EDITORS)
    card, report = await _get_subject_report(db, actor, subject_report_id)

    card.subject_reports.remove(report)
    _recompute(card)
    await db.flush()

    logger.info(f"{actor} removed subject report {subject_report_id} from report card {card.id}")
    return card
