"""
Tests for class management rules.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.classes.schemas import ClassCreate, ClassUpdate
from edutrack.modules.classes.service import create_class, delete_class, update_class

SERVICE = "edutrack.modules.classes.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


def _class(capacity=30):
    school_class = MagicMock(spec=SchoolClass)
    school_class.id = "class-1"
    school_class.school_id = SCHOOL_ID
    school_class.name = "JHS 1A"
    school_class.capacity = capacity
    school_class.grade_id = "grade-1"
    school_class.supervisor_id = None
    school_class.created_at = datetime(2026, 1, 5, tzinfo=UTC)
    school_class.updated_at = datetime(2026, 1, 5, tzinfo=UTC)
    return school_class


# ============================================
# Create
# ============================================


@pytest.mark.asyncio
async def test_create_requires_grade_in_school(mock_db, principal):
    """Reject a class whose grade belongs to another school."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_in_school = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await create_class(
                mock_db, principal, ClassCreate(name="JHS 1A", capacity=30, grade_id="g-x")
            )


@pytest.mark.asyncio
async def test_class_name_unique_in_school(mock_db, principal):
    """Reject a class name already used in the same school."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_in_school = AsyncMock(return_value=MagicMock())
        mock_repo.name_taken = AsyncMock(return_value=True)

        with pytest.raises(ConflictError):
            await create_class(
                mock_db, principal, ClassCreate(name="JHS 1A", capacity=30, grade_id="grade-1")
            )


@pytest.mark.asyncio
async def test_create_returns_empty_enrolment(mock_db, school_admin):
    """A new class reports zero students in the admin's school."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_in_school = AsyncMock(return_value=MagicMock())
        mock_shared.add = AsyncMock(return_value=_class())
        mock_repo.name_taken = AsyncMock(return_value=False)

        result = await create_class(
            mock_db, school_admin, ClassCreate(name="JHS 1A", capacity=30, grade_id="grade-1")
        )

        assert result.student_count == 0
        assert result.school_id == SCHOOL_ID


# ============================================
# Update
# ============================================


class TestUpdateCapacity:
    """Capacity may never drop below current enrolment."""

    @pytest.mark.asyncio
    async def test_capacity_below_enrolment(self, mock_db, principal):
        """Reject a capacity lower than the enrolled count."""
        school_class = _class(capacity=30)

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=school_class)
            mock_repo.lock_class = AsyncMock(return_value=school_class)
            mock_repo.student_count = AsyncMock(return_value=25)

            with pytest.raises(BusinessRuleError) as exc_info:
                await update_class(mock_db, principal, "class-1", ClassUpdate(capacity=20))

            assert exc_info.value.error_code == "CAPACITY_BELOW_ENROLMENT"
            mock_shared.apply_changes.assert_not_called()

    @pytest.mark.asyncio
    async def test_capacity_equal_to_enrolment(self, mock_db, principal):
        """Accept a capacity equal to the enrolled count."""
        school_class = _class(capacity=30)

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=school_class)
            mock_shared.apply_changes = MagicMock(return_value=["capacity"])
            mock_repo.lock_class = AsyncMock(return_value=school_class)
            mock_repo.student_count = AsyncMock(return_value=25)

            result = await update_class(mock_db, principal, "class-1", ClassUpdate(capacity=25))

            mock_shared.apply_changes.assert_called_once_with(school_class, {"capacity": 25})
            assert result.student_count == 25

    @pytest.mark.asyncio
    async def test_capacity_change_locks_class_row(self, mock_db, principal):
        """Count enrolment under the class row lock when capacity changes."""
        school_class = _class(capacity=30)
        locked = _class(capacity=30)

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=school_class)
            mock_shared.apply_changes = MagicMock(return_value=["capacity"])
            mock_repo.lock_class = AsyncMock(return_value=locked)
            mock_repo.student_count = AsyncMock(return_value=10)

            await update_class(mock_db, principal, "class-1", ClassUpdate(capacity=40))

            mock_repo.lock_class.assert_awaited_once_with(mock_db, "class-1", SCHOOL_ID)
            mock_shared.apply_changes.assert_called_once_with(locked, {"capacity": 40})

    @pytest.mark.asyncio
    async def test_class_removed_before_lock(self, mock_db, principal):
        """Report a missing class when the row disappears before it is locked."""
        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=_class())
            mock_repo.lock_class = AsyncMock(return_value=None)
            mock_repo.student_count = AsyncMock(return_value=0)

            with pytest.raises(NotFoundError):
                await update_class(mock_db, principal, "class-1", ClassUpdate(capacity=40))

            mock_repo.student_count.assert_not_called()

    @pytest.mark.asyncio
    async def test_rename_does_not_lock(self, mock_db, principal):
        """Leave the class row unlocked when capacity is untouched."""
        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=_class())
            mock_shared.apply_changes = MagicMock(return_value=["name"])
            mock_repo.name_taken = AsyncMock(return_value=False)
            mock_repo.lock_class = AsyncMock()
            mock_repo.student_count = AsyncMock(return_value=12)

            await update_class(mock_db, principal, "class-1", ClassUpdate(name="JHS 1B"))

            mock_repo.lock_class.assert_not_called()


# ============================================
# Delete
# ============================================


@pytest.mark.asyncio
async def test_class_with_students_cannot_be_deleted(mock_db, principal):
    """Refuse to delete a class that still has students."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_class())
        mock_shared.exists_where = AsyncMock(return_value=True)
        mock_shared.remove = AsyncMock()

        with pytest.raises(DependentRecordsError) as exc_info:
            await delete_class(mock_db, principal, "class-1")

        assert exc_info.value.message == "Cannot delete class with enrolled students"
        mock_shared.remove.assert_not_called()


@pytest.mark.asyncio
async def test_class_with_lessons_cannot_be_deleted(mock_db, principal):
    """Refuse to delete a class that still has lessons."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_class())
        mock_shared.exists_where = AsyncMock(side_effect=[False, True])

        with pytest.raises(DependentRecordsError) as exc_info:
            await delete_class(mock_db, principal, "class-1")

        assert exc_info.value.message == "Cannot delete class with existing lessons"


@pytest.mark.asyncio
async def test_empty_class_is_deleted(mock_db, principal):
    """Delete a class with no students and no lessons."""
    school_class = _class()

    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=school_class)
        mock_shared.exists_where = AsyncMock(return_value=False)
        mock_shared.remove = AsyncMock()

        await delete_class(mock_db, principal, "class-1")

        assert mock_shared.exists_where.await_count == 2
        mock_shared.remove.assert_awaited_once_with(mock_db, school_class)
