"""
User Service Layer

Account creation shared by every module that onboards people (staff,
teachers, parents). Credentials are emailed after the database writes and a
failed email never fails the request.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core import email
from edutrack.core.auth import Actor
from edutrack.core.errors import ConflictError, NotFoundError
from edutrack.core.permissions import STAFF_ACCOUNT_CREATORS, ensure_role
from edutrack.core.security import generate_password, hash_password
from edutrack.core.tenancy import resolve_school_id
from edutrack.modules.schools.repository import SchoolRepository
from edutrack.modules.users.models import User, UserRole
from edutrack.modules.users.repository import UserRepository
from edutrack.modules.users.schemas import StaffUserCreate

logger = logging.getLogger(__name__)


async def create_account(
    db: AsyncSession,
    *,
    email_address: str,
    first_name: str,
    last_name: str,
    role: UserRole,
    school_id: str | None = None,
    phone: str | None = None,
    password: str | None = None,
) -> tuple[User, str]:
    """
    Create a user account, generating a password when none is given.

    Returns:
        Tuple of (user, plain password to email)

    Raises:
        ConflictError: Email already registered
    """
    if await UserRepository.email_exists(db, email_address):
        raise ConflictError("User with this email already exists")

    plain_password = password or generate_password()
    user = await UserRepository.create(
        db,
        email=email_address,
        password_hash=hash_password(plain_password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        school_id=school_id,
        phone=phone,
        must_change_password=password is None,
    )
    return user, plain_password


async def send_welcome_email(
    db: AsyncSession,
    user: User,
    password: str,
    school_id: str | None = None,
) -> None:
    """Email login credentials; failures are logged and swallowed."""
    try:
        school_name = None
        if school_id:
            school = await SchoolRepository.get_by_id(db, school_id)
            school_name = school.name if school else None
        await email.send_account_credentials(
            to_email=user.email,
            full_name=user.full_name,
            role=user.role.value,
            password=password,
            school_name=school_name,
        )
    except Exception as e:
        logger.error(f"Failed to send welcome email to user {user.id}: {e}", exc_info=True)


async def create_staff_user(db: AsyncSession, actor: Actor, data: StaffUserCreate) -> User:
    """Create a principal or school admin account in a school."""
    ensure_role(actor, STAFF_ACCOUNT_CREATORS)
    school_id = resolve_school_id(actor, data.school_id)

    if await SchoolRepository.get_by_id(db, school_id) is None:
        raise NotFoundError("School")

    user, password = await create_account(
        db,
        email_address=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=UserRole(data.role),
        school_id=school_id,
        phone=data.phone,
        password=data.password,
    )
    logger.info(f"{actor} created {user.role.value} account {user.id} in school {school_id}")

    await send_welcome_email(db, user, password, school_id)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User")
    return user
