"""
Students Service Layer

Enrolment rules:
- The registration number is unique within the school
- Class and grade must belong to the student's school
- A class never holds more students than its capacity. The class row is
  locked (SELECT ... FOR UPDATE) before its enrolment is counted, so two
  concurrent enrolments cannot both take the last seat.
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
from edutrack.core.permissions import PEOPLE_MANAGERS, ensure_role
from edutrack.core.tenancy import resolve_school_id, resolve_scope, teacher_class_ids, tenant_clause
from edutrack.modules.academics.models import Grade
from edutrack.modules.classes import repository as class_repository
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify
from edutrack.modules.parents import repository as parent_repository
from edutrack.modules.parents.models import Parent
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students import repository
from edutrack.modules.students.models import Student
from edutrack.modules.students.schemas import (
    NewParent,
    StudentCreate,
    StudentParentInput,
    StudentUpdate,
)
from edutrack.modules.users import service as user_service
from edutrack.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


def scope_clause(actor: Actor):
    """Parents see exactly their children; teachers the students of their classes."""
    return tenant_clause(
        resolve_scope(actor),
        school_column=Student.school_id,
        teacher=lambda teacher_id: Student.class_id.in_(teacher_class_ids(teacher_id)),
        parent=lambda parent_id: Student.parent_id == parent_id,
    )


async def get_scoped_student(db: AsyncSession, actor: Actor, student_id: str) -> Student:
    """Look up a student inside the caller's scope (404 otherwise)."""
    student = await shared_repository.get_scoped(db, Student, student_id, scope_clause(actor))
    if student is None:
        logger.warning(f"Student {student_id} not found for {actor}")
        raise NotFoundError("Student")
    return student


async def reserve_seat(db: AsyncSession, class_id: str, school_id: str) -> None:
    """
    Lock the class and make sure one more student fits.

    Raises:
        NotFoundError: Class not in the school
        BusinessRuleError: Class already at capacity
    """
    school_class = await class_repository.lock_class(db, class_id, school_id)
    if school_class is None:
        raise NotFoundError("Class")

    enrolled = await class_repository.student_count(db, school_class.id)
    if enrolled >= school_class.capacity:
        logger.warning(f"Class {school_class.id} is full ({enrolled}/{school_class.capacity})")
        raise BusinessRuleError("Class is at full capacity", error_code="CLASS_FULL")


async def _resolve_parent(
    db: AsyncSession,
    parent_input: StudentParentInput,
) -> tuple[Parent, tuple[User, str] | None]:
    """Returns the parent and, for a new account, the user and password to email."""
    if not isinstance(parent_input, NewParent):
        parent = await parent_repository.get_by_id(db, parent_input.parent_id)
        if parent is None:
            raise NotFoundError("Parent")
        return parent, None

    user, password = await user_service.create_account(
        db,
        email_address=parent_input.email,
        first_name=parent_input.first_name,
        last_name=parent_input.last_name,
        role=UserRole.PARENT,
        phone=parent_input.phone,
    )
    parent = await parent_repository.create(
        db,
        user=user,
        address=parent_input.address,
        occupation=parent_input.occupation,
    )
    return parent, (user, password)


async def _check_grade(db: AsyncSession, grade_id: str | None, school_id: str) -> None:
    if grade_id and await shared_repository.get_in_school(db, Grade, grade_id, school_id) is None:
        raise NotFoundError("Grade")


async def create_student(db: AsyncSession, actor: Actor, data: StudentCreate) -> Student:
    """
    Enroll a student, creating the parent account when asked to.

    Raises:
        ConflictError: Registration number or new parent email already taken
        NotFoundError: Parent, class or grade not found
        BusinessRuleError: Class at full capacity
    """
    ensure_role(actor, PEOPLE_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.registration_number_taken(db, school_id, data.registration_number):
        raise ConflictError("Student with this registration number already exists in this school")

    await _check_grade(db, data.grade_id, school_id)
    if data.class_id:
        await reserve_seat(db, data.class_id, school_id)

    parent, credentials = await _resolve_parent(db, data.parent)

    fields = data.model_dump(exclude={"parent", "school_id"})
    student = await shared_repository.add(
        db,
        Student(**fields, school_id=school_id, parent_id=parent.id),
    )
    logger.info(f"{actor} enrolled student {student.id} in school {school_id}")

    await notify(
        db,
        parent.id,
        "New Student Registration",
        f"{student.full_name} has been registered with registration number "
        f"{student.registration_number}.",
        NotificationType.ENROLLMENT,
        {"student_id": student.id, "school_id": school_id},
    )

    if credentials is not None:
        await user_service.send_welcome_email(db, *credentials, school_id)

    return student


async def list_students(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    class_id: str | None = None,
    grade_id: str | None = None,
    search: str | None = None,
) -> tuple[list[Student], int]:
    query = repository.list_query(
        scope_clause(actor), class_id=class_id, grade_id=grade_id, search=search
    )
    return await paginate(db, query, params)


async def get_student(db: AsyncSession, actor: Actor, student_id: str) -> Student:
    return await get_scoped_student(db, actor, student_id)


async def update_student(
    db: AsyncSession,
    actor: Actor,
    student_id: str,
    data: StudentUpdate,
) -> Student:
    ensure_role(actor, PEOPLE_MANAGERS)
    student = await get_scoped_student(db, actor, student_id)
    changes = data.model_dump(exclude_unset=True)

    new_number = changes.get("registration_number")
    if (
        new_number
        and new_number != student.registration_number
        and await repository.registration_number_taken(
            db, student.school_id, new_number, exclude_id=student.id
        )
    ):
        raise ConflictError("Student with this registration number already exists in this school")

    await _check_grade(db, changes.get("grade_id"), student.school_id)

    new_class = changes.get("class_id")
    if new_class and new_class != student.class_id:
        await reserve_seat(db, new_class, student.school_id)

    fields = shared_repository.apply_changes(student, changes)
    await db.flush()

    logger.info(f"{actor} updated student {student.id}: {fields}")
    return student


async def assign_to_class(
    db: AsyncSession,
    actor: Actor,
    student_id: str,
    class_id: str,
) -> Student:
    ensure_role(actor, PEOPLE_MANAGERS)
    student = await get_scoped_student(db, actor, student_id)

    if student.class_id != class_id:
        await reserve_seat(db, class_id, student.school_id)
        student.class_id = class_id
        await db.flush()

    logger.info(f"{actor} assigned student {student.id} to class {class_id}")
    return student


async def delete_student(db: AsyncSession, actor: Actor, student_id: str) -> None:
    ensure_role(actor, PEOPLE_MANAGERS)
    student = await get_scoped_student(db, actor, student_id)

    if await repository.has_history(db, student.id):
        raise DependentRecordsError(
            "Cannot delete student with existing attendance records or results"
        )

    await shared_repository.remove(db, student)
    logger.info(f"{actor} deleted student {student_id}")
