"""
Seed Super Admin User

Creates the platform super admin for EduTrack. Safe to run more than once:
an existing account with the same email is left untouched.

Credentials come from the environment:
    SUPER_ADMIN_EMAIL       (required)
    SUPER_ADMIN_PASSWORD    (required)
    SUPER_ADMIN_FIRST_NAME  (default: "Platform")
    SUPER_ADMIN_LAST_NAME   (default: "Admin")

Usage:
    SUPER_ADMIN_EMAIL=... SUPER_ADMIN_PASSWORD=... python scripts/seed_super_admin.py
"""

import asyncio
import os
import sys

from sqlalchemy import select

import edutrack.modules.models  # noqa: F401 - needed for relationship resolution
from edutrack.core.database import close_db, get_session_maker, init_db
from edutrack.core.security import hash_password
from edutrack.modules.users.models import User, UserRole


async def seed_super_admin() -> int:
    """Create the super admin if it doesn't exist. Returns the exit code."""
    email = os.getenv("SUPER_ADMIN_EMAIL", "").strip().lower()
    password = os.getenv("SUPER_ADMIN_PASSWORD", "")
    if not email or not password:
        print("SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set")
        return 1

    await init_db()
    try:
        async with get_session_maker()() as db:
            result = await db.execute(select(User).where(User.email == email))
            existing = result.scalar_one_or_none()
            if existing:
                print(f"Super admin already exists: {email}")
                print(f"  ID: {existing.id}")
                print(f"  Role: {existing.role.value}")
                return 0

            admin = User(
                email=email,
                password_hash=hash_password(password),
                first_name=os.getenv("SUPER_ADMIN_FIRST_NAME", "Platform"),
                last_name=os.getenv("SUPER_ADMIN_LAST_NAME", "Admin"),
                role=UserRole.SUPER_ADMIN,
                school_id=None,
                is_active=True,
                is_verified=True,
                must_change_password=False,
            )
            db.add(admin)
            await db.commit()

            print("Super admin created successfully!")
            print(f"  Email: {email}")
            print(f"  ID: {admin.id}")
            return 0
    finally:
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(seed_super_admin()))
