"""
User Repository

Emails are stored lowercase and matched case-insensitively.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        school_id: str | None = None,
        phone: str | None = None,
        is_verified: bool = False,
        must_change_password: bool = False,
    ) -> User:
        """
        Insert an active account.

        Callers check ``email_exists`` first; the unique index on ``email``
        still rejects a concurrent duplicate at flush.
        """
        user = User(
            email=email.lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            school_id=school_id,
            phone=phone,
            is_active=True,
            is_verified=is_verified,
            must_change_password=must_change_password,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created {role.value} account {user.id} for school {school_id}")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        return await db.get(User, str(user_id))

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        result = await db.execute(
            select(func.count()).select_from(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one() > 0

    @staticmethod
    async def list_by_school_and_role(
        db: AsyncSession, school_id: str, role: UserRole
    ) -> list[User]:
        """Active accounts holding ``role`` in the school."""
        result = await db.execute(
            select(User).where(
                User.school_id == school_id,
                User.role == role,
                User.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, user: User) -> None:
        await db.delete(user)
        await db.flush()
