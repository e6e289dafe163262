"""
Classes Service Layer

Classes belong to one school and one grade. Enrolment never exceeds capacity:
the student service counts enrolment under a row lock taken through
``repository.lock_class``.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import CLASS_MANAGERS, ensure_role
from edutrack.core.tenancy import (
    parent_class_ids,
    resolve_school_id,
    resolve_scope,
    teacher_class_ids,
    tenant_clause,
)
from edutrack.modules.academics.models import Grade, Lesson
from edutrack.modules.classes import repository
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.classes.schemas import ClassCreate, ClassResponse, ClassUpdate
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.models import Student
from edutrack.modules.teachers.models import Teacher

logger = logging.getLogger(__name__)


def scope_clause(actor: Actor):
    """Teachers see classes they supervise or teach; parents their children's classes."""
    return tenant_clause(
        resolve_scope(actor),
        school_column=SchoolClass.school_id,
        teacher=lambda teacher_id: SchoolClass.id.in_(teacher_class_ids(teacher_id)),
        parent=lambda parent_id: SchoolClass.id.in_(parent_class_ids(parent_id)),
    )


def _to_response(school_class: SchoolClass, student_count: int) -> ClassResponse:
    item = ClassResponse.model_validate(school_class)
    return item.model_copy(update={"student_count": student_count})


async def _get_class(db: AsyncSession, actor: Actor, class_id: str) -> SchoolClass:
    school_class = await shared_repository.get_scoped(db, SchoolClass, class_id, scope_clause(actor))
    if school_class is None:
        logger.warning(f"Class {class_id} not found for {actor}")
        raise NotFoundError("Class")
    return school_class


async def _check_references(
    db: AsyncSession,
    school_id: str,
    grade_id: str | None,
    supervisor_id: str | None,
) -> None:
    if grade_id and await shared_repository.get_in_school(db, Grade, grade_id, school_id) is None:
        raise NotFoundError("Grade")
    if (
        supervisor_id
        and await shared_repository.get_in_school(db, Teacher, supervisor_id, school_id) is None
    ):
        raise NotFoundError("Teacher")


async def create_class(db: AsyncSession, actor: Actor, data: ClassCreate) -> ClassResponse:
    ensure_role(actor, CLASS_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    await _check_references(db, school_id, data.grade_id, data.supervisor_id)

    if await repository.name_taken(db, school_id, data.name):
        raise ConflictError("Class with this name already exists in this school")

    school_class = await shared_repository.add(
        db,
        SchoolClass(
            school_id=school_id,
            name=data.name,
            capacity=data.capacity,
            grade_id=data.grade_id,
            supervisor_id=data.supervisor_id,
        ),
    )
    logger.info(f"{actor} created class {school_class.id} in school {school_id}")
    return _to_response(school_class, 0)


async def list_classes(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    grade_id: str | None = None,
) -> tuple[list[ClassResponse], int]:
    query = repository.list_query(scope_clause(actor), grade_id=grade_id)
    rows, total = await paginate(db, query, params)
    counts = await repository.student_counts(db, [row.id for row in rows])
    return [_to_response(row, counts.get(row.id, 0)) for row in rows], total


async def get_class(db: AsyncSession, actor: Actor, class_id: str) -> ClassResponse:
    school_class = await _get_class(db, actor, class_id)
    return _to_response(school_class, await repository.student_count(db, school_class.id))


async def update_class(
    db: AsyncSession,
    actor: Actor,
    class_id: str,
    data: ClassUpdate,
) -> ClassResponse:
    """
    Partially update a class.

    Raises:
        NotFoundError: Class, grade or supervisor outside the school
        ConflictError: New name already used in the school
        BusinessRuleError: Capacity below current enrolment
    """
    ensure_role(actor, CLASS_MANAGERS)
    school_class = await _get_class(db, actor, class_id)
    changes = data.model_dump(exclude_unset=True)

    await _check_references(
        db, school_class.school_id, changes.get("grade_id"), changes.get("supervisor_id")
    )

    if "name" in changes and await repository.name_taken(
        db, school_class.school_id, changes["name"], exclude_id=school_class.id
    ):
        raise ConflictError("Class with this name already exists in this school")

    if "capacity" in changes:
        # Same lock as enrolment, so no seat is taken between count and change
        school_class = await repository.lock_class(db, school_class.id, school_class.school_id)
        if school_class is None:
            raise NotFoundError("Class")

    enrolled = await repository.student_count(db, school_class.id)
    if "capacity" in changes and changes["capacity"] < enrolled:
        raise BusinessRuleError(
            "Capacity cannot be less than the current number of students",
            error_code="CAPACITY_BELOW_ENROLMENT",
        )

    fields = shared_repository.apply_changes(school_class, changes)
    await db.flush()

    logger.info(f"{actor} updated class {school_class.id}: {fields}")
    return _to_response(school_class, enrolled)


async def delete_class(db: AsyncSession, actor: Actor, class_id: str) -> None:
    ensure_role(actor, CLASS_MANAGERS)
    school_class = await _get_class(db, actor, class_id)

    if await shared_repository.exists_where(db, Student, Student.class_id == school_class.id):
        raise DependentRecordsError("Cannot delete class with enrolled students")
    if await shared_repository.exists_where(db, Lesson, Lesson.class_id == school_class.id):
        raise DependentRecordsError("Cannot delete class with existing lessons")

    await shared_repository.remove(db, school_class)
    logger.info(f"{actor} deleted class {class_id}")
