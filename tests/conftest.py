"""
Shared fixtures: a mocked AsyncSession and one actor per role.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

import edutrack.modules.models  # noqa: F401  (registers every mapper)
from edutrack.core.auth import Actor
from edutrack.modules.users.models import UserRole

SCHOOL_ID = "11111111-1111-1111-1111-111111111111"
OTHER_SCHOOL_ID = "22222222-2222-2222-2222-222222222222"


def make_actor(role: UserRole, school_id: str | None = SCHOOL_ID, actor_id: str | None = None) -> Actor:
    """Build an Actor the way get_current_actor would from JWT claims."""
    return Actor(
        id=actor_id or str(uuid4()),
        email=f"{role.value}@example.com",
        role=role,
        school_id=school_id,
        name=role.value.replace("_", " ").title(),
    )


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    db.delete = AsyncMock()
    # notify() opens a savepoint with ``async with db.begin_nested()``
    db.begin_nested = MagicMock()
    return db


@pytest.fixture
def super_admin():
    return make_actor(UserRole.SUPER_ADMIN, school_id=None)


@pytest.fixture
def principal():
    return make_actor(UserRole.PRINCIPAL)


@pytest.fixture
def school_admin():
    return make_actor(UserRole.SCHOOL_ADMIN)


@pytest.fixture
def teacher():
    return make_actor(UserRole.TEACHER)


@pytest.fixture
def parent():
    return make_actor(UserRole.PARENT, school_id=None)


@pytest.fixture
def actor_factory():
    """Return the actor builder for tests that need a custom role or school."""
    return make_actor
