"""
Teachers Service Layer

A teacher is a TEACHER user plus a profile sharing the user's id. Both are
created in one transaction; the welcome email goes out after the writes.
New teachers start PENDING until a school manager verifies them.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import DependentRecordsError, NotFoundError, PermissionDeniedError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import PEOPLE_MANAGERS, TEACHER_VERIFIERS, ensure_role, has_role
from edutrack.core.tenancy import parent_school_ids, resolve_school_id, resolve_scope, tenant_clause
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify
from edutrack.modules.schools.repository import SchoolRepository
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.teachers import repository
from edutrack.modules.teachers.models import ApprovalStatus, Teacher
from edutrack.modules.teachers.schemas import (
    TeacherCreate,
    TeacherProfile,
    TeacherUpdate,
    TeacherVerifyRequest,
)
from edutrack.modules.users import service as user_service
from edutrack.modules.users.models import UserRole
from edutrack.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

_USER_FIELDS = ("first_name", "last_name", "phone")


def scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=Teacher.school_id,
        parent=lambda parent_id: Teacher.school_id.in_(parent_school_ids(parent_id)),
    )


async def get_scoped_teacher(db: AsyncSession, actor: Actor, teacher_id: str) -> Teacher:
    teacher = await shared_repository.get_scoped(db, Teacher, teacher_id, scope_clause(actor))
    if teacher is None:
        logger.warning(f"Teacher {teacher_id} not found for {actor}")
        raise NotFoundError("Teacher")
    return teacher


async def create_teacher(db: AsyncSession, actor: Actor, data: TeacherCreate) -> Teacher:
    """
    Create the TEACHER user and profile.

    Raises:
        ConflictError: Email already registered
        NotFoundError: School does not exist
    """
    ensure_role(actor, PEOPLE_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await SchoolRepository.get_by_id(db, school_id) is None:
        raise NotFoundError("School")

    user, password = await user_service.create_account(
        db,
        email_address=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=UserRole.TEACHER,
        school_id=school_id,
        phone=data.phone,
        password=data.password,
    )

    profile = data.model_dump(include=set(TeacherProfile.model_fields))
    teacher = await shared_repository.add(
        db,
        Teacher(
            id=user.id,
            user=user,
            school_id=school_id,
            approval_status=ApprovalStatus.PENDING,
            **profile,
        ),
    )
    logger.info(f"{actor} created teacher {teacher.id} in school {school_id}")

    await user_service.send_welcome_email(db, user, password, school_id)
    return teacher


async def list_teachers(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    approval_status: ApprovalStatus | None = None,
    search: str | None = None,
) -> tuple[list[Teacher], int]:
    query = repository.list_query(
        scope_clause(actor), approval_status=approval_status, search=search
    )
    return await paginate(db, query, params)


async def get_teacher(db: AsyncSession, actor: Actor, teacher_id: str) -> Teacher:
    return await get_scoped_teacher(db, actor, teacher_id)


async def update_teacher(
    db: AsyncSession,
    actor: Actor,
    teacher_id: str,
    data: TeacherUpdate,
) -> Teacher:
    """People managers, or the teacher editing their own profile."""
    is_self = actor.role == UserRole.TEACHER and actor.id == teacher_id
    if not is_self and not has_role(actor, PEOPLE_MANAGERS):
        raise PermissionDeniedError()

    teacher = await get_scoped_teacher(db, actor, teacher_id)
    changes = data.model_dump(exclude_unset=True)

    user_changes = {field: changes.pop(field) for field in _USER_FIELDS if field in changes}
    fields = shared_repository.apply_changes(teacher, changes)
    fields += shared_repository.apply_changes(teacher.user, user_changes)
    await db.flush()

    logger.info(f"{actor} updated teacher {teacher.id}: {sorted(fields)}")
    return teacher


async def delete_teacher(db: AsyncSession, actor: Actor, teacher_id: str) -> None:
    """Delete the teacher's user account; the profile cascades with it."""
    ensure_role(actor, PEOPLE_MANAGERS)
    teacher = await get_scoped_teacher(db, actor, teacher_id)

    if await repository.has_assignments(db, teacher.id):
        raise DependentRecordsError("Cannot delete teacher with assigned classes or lessons")

    user = await UserRepository.get_by_id(db, teacher.id)
    await shared_repository.remove(db, teacher)
    if user is not None:
        await UserRepository.delete(db, user)

    logger.info(f"{actor} deleted teacher {teacher_id}")


async def verify_teacher(
    db: AsyncSession,
    actor: Actor,
    teacher_id: str,
    data: TeacherVerifyRequest,
) -> Teacher:
    ensure_role(actor, TEACHER_VERIFIERS, "Only school administrators can verify teachers")
    teacher = await get_scoped_teacher(db, actor, teacher_id)

    status = ApprovalStatus(data.status)
    approved = status == ApprovalStatus.APPROVED

    teacher.approval_status = status
    teacher.approval_comments = data.comments
    teacher.approved_at = datetime.now(UTC) if approved else None
    await db.flush()

    if approved:
        title = "Teacher Verification Approved"
        content = "Congratulations! Your teacher account has been verified and is now active."
    else:
        title = "Teacher Verification Rejected"
        content = (
            "Your teacher verification was rejected. "
            f"{data.comments or 'Please contact your school administration for more information.'}"
        )

    await notify(
        db,
        teacher.id,
        title,
        content,
        NotificationType.APPROVAL,
        {"teacher_id": teacher.id, "status": status.value},
    )

    logger.info(f"{actor} set teacher {teacher.id} approval status to {status.value}")
    return teacher
