"""
Schools Service Layer

Business logic for school registration, verification and management.

1. Registration:
   - Reject duplicates (same name in the same city and state)
   - Create the school in PENDING state
   - Create or link the school admin in the same transaction
   - Send the welcome email after the writes (failure is logged only)

2. Verification (super admin):
   - Approve or reject, record comments and verification time
   - Notify the school's admins

3. Management:
   - Tenant-scoped list/get, partial update, guarded delete, statistics
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core import email
from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import SCHOOL_DELETERS, SCHOOL_MANAGERS, SCHOOL_VERIFIERS, ensure_role
from edutrack.core.security import generate_password, hash_password
from edutrack.core.tenancy import parent_school_ids, resolve_scope, tenant_clause
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify_many
from edutrack.modules.schools.models import RegistrationStatus, School, SchoolType
from edutrack.modules.schools.repository import SchoolRepository
from edutrack.modules.schools.schemas import (
    ExistingAdmin,
    NewAdmin,
    SchoolCreate,
    SchoolUpdate,
    SchoolVerifyRequest,
)
from edutrack.modules.users.models import User, UserRole
from edutrack.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=School.id,
        parent=lambda parent_id: School.id.in_(parent_school_ids(parent_id)),
    )


async def _get_school(db: AsyncSession, actor: Actor, school_id: str) -> School:
    school = await SchoolRepository.get_scoped(db, school_id, _scope_clause(actor))
    if school is None:
        logger.warning(f"School {school_id} not found for {actor}")
        raise NotFoundError("School")
    return school


async def _link_existing_admin(db: AsyncSession, school: School, user_id: str) -> User:
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User")

    if user.school_id and user.school_id != school.id:
        raise ConflictError("User is already associated with another school")

    if user.role != UserRole.SUPER_ADMIN:
        user.role = UserRole.SCHOOL_ADMIN
    user.school_id = school.id
    await db.flush()

    logger.info(f"Linked existing user {user.id} as admin of school {school.id}")
    return user


async def _create_new_admin(db: AsyncSession, school: School, admin: NewAdmin) -> tuple[User, str]:
    if await UserRepository.email_exists(db, admin.email):
        raise ConflictError("User with this email already exists")

    password = admin.password or generate_password()
    user = await UserRepository.create(
        db,
        email=admin.email,
        password_hash=hash_password(password),
        first_name=admin.first_name,
        last_name=admin.last_name,
        phone=admin.phone,
        role=UserRole.SCHOOL_ADMIN,
        school_id=school.id,
        is_verified=True,
        must_change_password=admin.password is None,
    )
    return user, password


async def register_school(
    db: AsyncSession,
    actor: Actor,
    data: SchoolCreate,
) -> tuple[School, User]:
    """
    Register a school and attach its admin.

    The school and admin writes share the request transaction: if the admin
    cannot be created or linked, no school is left behind.

    Raises:
        BusinessRuleError: Super admin registered a school without naming an admin
        ConflictError: Duplicate school, duplicate admin email, or admin in another school
        NotFoundError: Existing admin user does not exist
    """
    admin_input = data.admin
    if admin_input is None:
        if actor.role == UserRole.SUPER_ADMIN:
            raise BusinessRuleError(
                "Super admins must specify the school admin", error_code="ADMIN_REQUIRED"
            )
        admin_input = ExistingAdmin(type="existing", user_id=actor.id)

    if await SchoolRepository.find_by_location(db, data.name, data.city, data.state):
        raise ConflictError("A school with this name already exists in this location")

    fields = data.model_dump(exclude={"admin"})
    school = await SchoolRepository.create(db, **fields)

    password: str | None = None
    if isinstance(admin_input, NewAdmin):
        admin, password = await _create_new_admin(db, school, admin_input)
    else:
        admin = await _link_existing_admin(db, school, admin_input.user_id)

    logger.info(f"{actor} registered school {school.id} with admin {admin.id}")

    try:
        if password is not None:
            await email.send_account_credentials(
                to_email=admin.email,
                full_name=admin.full_name,
                role=UserRole.SCHOOL_ADMIN.value,
                password=password,
                school_name=school.name,
            )
        else:
            await email.send_school_registration_received(
                to_email=admin.email,
                admin_name=admin.full_name,
                school_name=school.name,
            )
    except Exception as e:
        logger.error(f"Failed to send registration email for school {school.id}: {e}", exc_info=True)

    return school, admin


async def verify_school(
    db: AsyncSession,
    actor: Actor,
    school_id: str,
    data: SchoolVerifyRequest,
) -> School:
    """Approve or reject a registered school and notify its admins."""
    ensure_role(actor, SCHOOL_VERIFIERS, "Only super administrators can verify schools")

    school = await _get_school(db, actor, school_id)
    status = RegistrationStatus(data.status)
    approved = status == RegistrationStatus.APPROVED

    school.registration_status = status
    school.is_verified = approved
    school.verified_at = datetime.now(UTC) if approved else None
    school.verification_comments = data.comments
    await db.flush()

    if approved:
        title = "School Verification Approved"
        content = "Congratulations! Your school has been verified and is now active on EduTrack."
    else:
        title = "School Verification Rejected"
        content = (
            "Your school verification was rejected. "
            f"{data.comments or 'Please contact support for more information.'}"
        )

    admins = await UserRepository.list_by_school_and_role(db, school.id, UserRole.SCHOOL_ADMIN)
    await notify_many(
        db,
        [admin.id for admin in admins],
        title,
        content,
        NotificationType.APPROVAL,
        {"school_id": school.id, "status": status.value},
    )

    logger.info(f"{actor} set school {school.id} registration status to {status.value}")
    return school


async def list_schools(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    registration_status: RegistrationStatus | None = None,
    school_type: SchoolType | None = None,
    search: str | None = None,
) -> tuple[list[School], int]:
    query = SchoolRepository.list_query(
        _scope_clause(actor),
        registration_status=registration_status,
        school_type=school_type,
        search=search,
    )
    return await paginate(db, query, params)


async def get_school(db: AsyncSession, actor: Actor, school_id: str) -> School:
    return await _get_school(db, actor, school_id)


async def update_school(
    db: AsyncSession,
    actor: Actor,
    school_id: str,
    data: SchoolUpdate,
) -> School:
    ensure_role(actor, SCHOOL_MANAGERS)
    school = await _get_school(db, actor, school_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(school, field, value)
    await db.flush()

    logger.info(f"{actor} updated school {school.id}: {sorted(changes)}")
    return school


async def delete_school(db: AsyncSession, actor: Actor, school_id: str) -> None:
    ensure_role(actor, SCHOOL_DELETERS, "Only super administrators can delete schools")
    school = await _get_school(db, actor, school_id)

    if await SchoolRepository.has_classes_or_students(db, school.id):
        raise DependentRecordsError("Cannot delete school with existing classes or students")

    await SchoolRepository.delete(db, school)
    logger.info(f"{actor} deleted school {school_id}")


async def get_school_stats(db: AsyncSession, actor: Actor, school_id: str) -> dict[str, Any]:
    ensure_role(actor, SCHOOL_MANAGERS)
    school = await _get_school(db, actor, school_id)
    return await SchoolRepository.stats(db, school.id)
