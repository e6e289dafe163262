"""
Curriculum Service Layer

Curricula belong to a school. Subjects are attached per grade, objectives hang
off a curriculum subject, and each student has at most one progress row per
objective, written by upsert.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import ConflictError, DependentRecordsError, NotFoundError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import (
    CURRICULUM_MANAGERS,
    OBJECTIVE_CREATORS,
    PROGRESS_EDITORS,
    ensure_role,
)
from edutrack.core.tenancy import resolve_school_id, resolve_scope, tenant_clause
from edutrack.modules.academics.models import Grade, Subject
from edutrack.modules.curriculum import repository
from edutrack.modules.curriculum.models import (
    Curriculum,
    CurriculumSubject,
    LearningObjective,
    ProgressStatus,
    StudentProgress,
)
from edutrack.modules.curriculum.schemas import (
    CurriculumCreate,
    CurriculumSubjectCreate,
    CurriculumUpdate,
    ObjectiveCreate,
    ProgressUpdate,
)
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.service import get_scoped_student

logger = logging.getLogger(__name__)

FINISHED_STATUSES = frozenset({ProgressStatus.COMPLETED, ProgressStatus.MASTERED})


def _scope_clause(actor: Actor):
    return tenant_clause(resolve_scope(actor), school_column=Curriculum.school_id)


async def _get_curriculum(db: AsyncSession, actor: Actor, curriculum_id: str) -> Curriculum:
    curriculum = await shared_repository.get_scoped(
        db, Curriculum, curriculum_id, _scope_clause(actor)
    )
    if curriculum is None:
        logger.warning(f"Curriculum {curriculum_id} not found for {actor}")
        raise NotFoundError("Curriculum")
    return curriculum


async def _get_curriculum_subject(
    db: AsyncSession, actor: Actor, curriculum_subject_id: str
) -> CurriculumSubject:
    entry = await repository.get_curriculum_subject(
        db, curriculum_subject_id, _scope_clause(actor)
    )
    if entry is None:
        logger.warning(f"Curriculum subject {curriculum_subject_id} not found for {actor}")
        raise NotFoundError("Curriculum subject")
    return entry


# ============================================
# Curricula
# ============================================


async def create_curriculum(db: AsyncSession, actor: Actor, data: CurriculumCreate) -> Curriculum:
    ensure_role(actor, CURRICULUM_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.name_version_taken(db, school_id, data.name, data.version):
        raise ConflictError("Curriculum with this name and version already exists")

    curriculum = await shared_repository.add(
        db, Curriculum(school_id=school_id, **data.model_dump(exclude={"school_id"}))
    )
    logger.info(f"{actor} created curriculum {curriculum.id} in school {school_id}")
    return curriculum


async def list_curricula(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    is_active: bool | None = None,
    search: str | None = None,
) -> tuple[list[Curriculum], int]:
    query = repository.list_query(_scope_clause(actor), is_active=is_active, search=search)
    return await paginate(db, query, params)


async def get_curriculum(db: AsyncSession, actor: Actor, curriculum_id: str) -> Curriculum:
    return await _get_curriculum(db, actor, curriculum_id)


async def update_curriculum(
    db: AsyncSession,
    actor: Actor,
    curriculum_id: str,
    data: CurriculumUpdate,
) -> Curriculum:
    ensure_role(actor, CURRICULUM_MANAGERS)
    curriculum = await _get_curriculum(db, actor, curriculum_id)
    changes = data.model_dump(exclude_unset=True)

    name = changes.get("name", curriculum.name)
    version = changes.get("version", curriculum.version)
    if (name, version) != (curriculum.name, curriculum.version) and (
        await repository.name_version_taken(
            db, curriculum.school_id, name, version, exclude_id=curriculum.id
        )
    ):
        raise ConflictError("Curriculum with this name and version already exists")

    fields = shared_repository.apply_changes(curriculum, changes)
    await db.flush()

    logger.info(f"{actor} updated curriculum {curriculum.id}: {fields}")
    return curriculum


async def delete_curriculum(db: AsyncSession, actor: Actor, curriculum_id: str) -> None:
    ensure_role(actor, CURRICULUM_MANAGERS)
    curriculum = await _get_curriculum(db, actor, curriculum_id)

    if await shared_repository.exists_where(
        db, CurriculumSubject, CurriculumSubject.curriculum_id == curriculum.id
    ):
        raise DependentRecordsError(
            "Cannot delete curriculum with existing subjects. Please remove all subjects first."
        )

    await shared_repository.remove(db, curriculum)
    logger.info(f"{actor} deleted curriculum {curriculum_id}")


# ============================================
# Curriculum subjects
# ============================================


async def add_subject(
    db: AsyncSession, actor: Actor, data: CurriculumSubjectCreate
) -> CurriculumSubject:
    """
    Attach a subject to a curriculum for one grade.

    Raises:
        NotFoundError: Curriculum, subject or grade outside the caller's school
        ConflictError: The subject is already in the curriculum for that grade
    """
    ensure_role(actor, CURRICULUM_MANAGERS)
    curriculum = await _get_curriculum(db, actor, data.curriculum_id)
    school_id = curriculum.school_id

    if await shared_repository.get_in_school(db, Subject, data.subject_id, school_id) is None:
        raise NotFoundError("Subject")
    if await shared_repository.get_in_school(db, Grade, data.grade_id, school_id) is None:
        raise NotFoundError("Grade")

    if await repository.subject_entry_exists(db, curriculum.id, data.subject_id, data.grade_id):
        raise ConflictError("Subject already exists in this curriculum for this grade")

    entry = await shared_repository.add(db, CurriculumSubject(**data.model_dump()))
    logger.info(f"{actor} added subject {data.subject_id} to curriculum {curriculum.id}")
    return entry


async def list_subjects(
    db: AsyncSession, actor: Actor, curriculum_id: str
) -> list[CurriculumSubject]:
    curriculum = await _get_curriculum(db, actor, curriculum_id)
    return await repository.curriculum_subjects(db, curriculum.id)


async def remove_subject(db: AsyncSession, actor: Actor, curriculum_subject_id: str) -> None:
    ensure_role(actor, CURRICULUM_MANAGERS)
    entry = await _get_curriculum_subject(db, actor, curriculum_subject_id)

    if await shared_repository.exists_where(
        db, LearningObjective, LearningObjective.curriculum_subject_id == entry.id
    ):
        raise DependentRecordsError(
            "Cannot remove curriculum subject with existing learning objectives"
        )

    await shared_repository.remove(db, entry)
    logger.info(f"{actor} removed curriculum subject {curriculum_subject_id}")


# ============================================
# Learning objectives
# ============================================


async def create_objective(db: AsyncSession, actor: Actor, data: ObjectiveCreate) -> LearningObjective:
    ensure_role(actor, OBJECTIVE_CREATORS)
    entry = await _get_curriculum_subject(db, actor, data.curriculum_subject_id)

    objective = await shared_repository.add(db, LearningObjective(**data.model_dump()))
    logger.info(f"{actor} created learning objective {objective.id} for {entry.id}")
    return objective


async def list_objectives(
    db: AsyncSession, actor: Actor, curriculum_subject_id: str
) -> list[LearningObjective]:
    entry = await _get_curriculum_subject(db, actor, curriculum_subject_id)
    return await repository.objectives_for(db, entry.id)


# ============================================
# Student progress
# ============================================


async def update_progress(db: AsyncSession, actor: Actor, data: ProgressUpdate) -> StudentProgress:
    """
    Create or replace a student's progress on one objective.

    ``assessment_date`` is stamped whenever a score is given, ``completed_at``
    whenever the status is COMPLETED or MASTERED.
    """
    ensure_role(actor, PROGRESS_EDITORS)
    student = await get_scoped_student(db, actor, data.student_id)

    objective = await repository.get_objective_in_school(db, data.objective_id, student.school_id)
    if objective is None:
        raise NotFoundError("Learning objective")

    now = datetime.now(UTC)
    values: dict[str, Any] = {
        "status": data.status,
        "mastery_level": data.mastery_level,
        "notes": data.notes,
        "assessment_score": data.assessment_score,
    }
    if data.assessment_score is not None:
        values["assessment_date"] = now
    if data.status in FINISHED_STATUSES:
        values["completed_at"] = now

    progress = await repository.get_progress(db, student.id, objective.id)
    if progress is None:
        progress = await shared_repository.add(
            db, StudentProgress(student_id=student.id, objective_id=objective.id, **values)
        )
    else:
        shared_repository.apply_changes(progress, values)
        await db.flush()

    logger.info(
        f"{actor} set progress of student {student.id} on objective {objective.id} "
        f"to {data.status.value}"
    )
    return progress


def progress_statistics(rows: list[StudentProgress]) -> dict[str, Any]:
    scores = [float(row.assessment_score) for row in rows if row.assessment_score is not None]

    def count(status: ProgressStatus) -> int:
        return sum(1 for row in rows if row.status == status)

    return {
        "total": len(rows),
        "not_started": count(ProgressStatus.NOT_STARTED),
        "in_progress": count(ProgressStatus.IN_PROGRESS),
        "completed": count(ProgressStatus.COMPLETED),
        "mastered": count(ProgressStatus.MASTERED),
        "average_score": round(sum(scores) / len(scores), 2) if scores else 0.0,
    }


async def get_student_progress(
    db: AsyncSession,
    actor: Actor,
    student_id: str,
    curriculum_id: str | None = None,
) -> dict[str, Any]:
    """Progress rows for a student in scope (parents: own children only)."""
    student = await get_scoped_student(db, actor, student_id)
    rows = await repository.student_progress(db, student.id, curriculum_id)
    return {
        "student_id": student.id,
        "progress": rows,
        "statistics": progress_statistics(rows),
    }
