"""
Tests for student enrolment.

Covers registration number uniqueness, class capacity, parent creation and
the deletion guard.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
    PermissionDeniedError,
)
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.parents.models import Parent
from edutrack.modules.students.models import Student
from edutrack.modules.students.repository import registration_number_taken
from edutrack.modules.students.schemas import StudentCreate
from edutrack.modules.students.service import (
    assign_to_class,
    create_student,
    delete_student,
    reserve_seat,
)
from edutrack.modules.users.models import User, UserRole

SERVICE = "edutrack.modules.students.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"
OTHER_SCHOOL_ID = "22222222-2222-2222-2222-222222222222"


def _student_data(**overrides):
    values = {
        "registration_number": "STU-001",
        "first_name": "Yaw",
        "last_name": "Darko",
        "parent": {"type": "existing", "parent_id": "parent-1"},
    }
    values.update(overrides)
    return StudentCreate(**values)


def _class(capacity=30):
    school_class = MagicMock(spec=SchoolClass)
    school_class.id = "class-1"
    school_class.capacity = capacity
    return school_class


def _student(class_id=None):
    student = MagicMock(spec=Student)
    student.id = "student-1"
    student.school_id = SCHOOL_ID
    student.class_id = class_id
    student.full_name = "Yaw Darko"
    student.registration_number = "STU-001"
    return student


# ============================================
# Capacity
# ============================================


class TestReserveSeat:
    """The class row is locked before its enrolment is counted."""

    @pytest.mark.asyncio
    async def test_seat_available(self, mock_db):
        """Lock the class and pass when a seat is free."""
        with patch(f"{SERVICE}.class_repository") as mock_classes:
            mock_classes.lock_class = AsyncMock(return_value=_class(capacity=30))
            mock_classes.student_count = AsyncMock(return_value=29)

            await reserve_seat(mock_db, "class-1", SCHOOL_ID)

            mock_classes.lock_class.assert_awaited_once_with(mock_db, "class-1", SCHOOL_ID)

    @pytest.mark.asyncio
    async def test_class_full(self, mock_db):
        """Reject enrolment once the class reaches capacity."""
        with patch(f"{SERVICE}.class_repository") as mock_classes:
            mock_classes.lock_class = AsyncMock(return_value=_class(capacity=30))
            mock_classes.student_count = AsyncMock(return_value=30)

            with pytest.raises(BusinessRuleError) as exc_info:
                await reserve_seat(mock_db, "class-1", SCHOOL_ID)

            assert exc_info.value.error_code == "CLASS_FULL"
            assert exc_info.value.message == "Class is at full capacity"

    @pytest.mark.asyncio
    async def test_class_in_other_school(self, mock_db):
        """Treat a class outside the school as missing."""
        with patch(f"{SERVICE}.class_repository") as mock_classes:
            mock_classes.lock_class = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError):
                await reserve_seat(mock_db, "class-x", SCHOOL_ID)


# ============================================
# Enrolment
# ============================================


@pytest.mark.asyncio
async def test_teacher_cannot_enroll(mock_db, teacher):
    """Only school managers may enrol students."""
    with pytest.raises(PermissionDeniedError):
        await create_student(mock_db, teacher, _student_data())


@pytest.mark.asyncio
async def test_registration_number_unique_in_school(mock_db, principal):
    """Reject a registration number already used in the school."""
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.registration_number_taken = AsyncMock(return_value=True)

        with pytest.raises(ConflictError):
            await create_student(mock_db, principal, _student_data())

        mock_repo.registration_number_taken.assert_awaited_once_with(mock_db, SCHOOL_ID, "STU-001")


@pytest.mark.asyncio
async def test_registration_number_reusable_in_another_school(mock_db, actor_factory):
    """A registration number taken in one school is free in another."""
    principal = actor_factory(UserRole.PRINCIPAL, school_id=OTHER_SCHOOL_ID)
    taken = {(SCHOOL_ID, "STU-001")}
    parent = MagicMock(spec=Parent)
    parent.id = "parent-1"

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.parent_repository") as mock_parents,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock),
        patch(f"{SERVICE}.user_service"),
    ):
        mock_repo.registration_number_taken = AsyncMock(
            side_effect=lambda db, school_id, number: (school_id, number) in taken
        )
        mock_parents.get_by_id = AsyncMock(return_value=parent)
        mock_shared.add = AsyncMock(return_value=_student())

        await create_student(mock_db, principal, _student_data())

        mock_repo.registration_number_taken.assert_awaited_once_with(
            mock_db, OTHER_SCHOOL_ID, "STU-001"
        )
        new_row = mock_shared.add.call_args.args[1]
        assert new_row.school_id == OTHER_SCHOOL_ID
        assert new_row.registration_number == "STU-001"


@pytest.mark.asyncio
async def test_registration_number_lookup_filters_by_school(mock_db):
    """The uniqueness query is limited to the given school."""
    mock_db.scalar = AsyncMock(return_value=0)

    assert await registration_number_taken(mock_db, OTHER_SCHOOL_ID, "STU-001") is False

    query = mock_db.scalar.call_args.args[0]
    params = query.compile().params
    assert OTHER_SCHOOL_ID in params.values()
    assert "STU-001" in params.values()
    assert SCHOOL_ID not in params.values()


@pytest.mark.asyncio
async def test_enroll_with_existing_parent(mock_db, school_admin):
    """Tell an existing parent about the new enrolment."""
    parent = MagicMock(spec=Parent)
    parent.id = "parent-1"
    student = _student(class_id="class-1")

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.reserve_seat", new_callable=AsyncMock) as mock_reserve,
        patch(f"{SERVICE}.parent_repository") as mock_parents,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
        patch(f"{SERVICE}.user_service") as mock_users,
    ):
        mock_repo.registration_number_taken = AsyncMock(return_value=False)
        mock_parents.get_by_id = AsyncMock(return_value=parent)
        mock_shared.add = AsyncMock(return_value=student)

        result = await create_student(
            mock_db, school_admin, _student_data(class_id="class-1")
        )

        assert result is student
        mock_reserve.assert_awaited_once_with(mock_db, "class-1", SCHOOL_ID)
        new_row = mock_shared.add.call_args.args[1]
        assert new_row.parent_id == "parent-1"
        assert new_row.school_id == SCHOOL_ID
        args = mock_notify.call_args.args
        assert args[1] == "parent-1"
        assert args[2] == "New Student Registration"
        assert "STU-001" in args[3]
        mock_users.send_welcome_email.assert_not_called()


@pytest.mark.asyncio
async def test_enroll_with_new_parent_sends_welcome(mock_db, principal):
    """Email credentials to a parent account created with the student."""
    user = MagicMock(spec=User)
    parent = MagicMock(spec=Parent)
    parent.id = "parent-2"

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.parent_repository") as mock_parents,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock),
        patch(f"{SERVICE}.user_service") as mock_users,
    ):
        mock_repo.registration_number_taken = AsyncMock(return_value=False)
        mock_users.create_account = AsyncMock(return_value=(user, "Temp1234pass"))
        mock_users.send_welcome_email = AsyncMock()
        mock_parents.create = AsyncMock(return_value=parent)
        mock_shared.add = AsyncMock(return_value=_student())

        await create_student(
            mock_db,
            principal,
            _student_data(
                parent={
                    "type": "new",
                    "email": "mum@example.com",
                    "first_name": "Efua",
                    "last_name": "Darko",
                }
            ),
        )

        mock_users.send_welcome_email.assert_awaited_once_with(
            mock_db, user, "Temp1234pass", SCHOOL_ID
        )


@pytest.mark.asyncio
async def test_unknown_parent(mock_db, principal):
    """Reject enrolment against a parent that does not exist."""
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.parent_repository") as mock_parents,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
    ):
        mock_repo.registration_number_taken = AsyncMock(return_value=False)
        mock_parents.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await create_student(mock_db, principal, _student_data())

        mock_shared.add.assert_not_called()


# ============================================
# Class assignment and deletion
# ============================================


@pytest.mark.asyncio
async def test_reassigning_same_class_skips_capacity_check(mock_db, principal):
    """Moving a student to their current class takes no seat."""
    student = _student(class_id="class-1")

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.reserve_seat", new_callable=AsyncMock) as mock_reserve,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=student)

        await assign_to_class(mock_db, principal, "student-1", "class-1")

        mock_reserve.assert_not_called()


@pytest.mark.asyncio
async def test_student_with_history_cannot_be_deleted(mock_db, principal):
    """Refuse to delete a student with attendance or reports."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_student())
        mock_shared.remove = AsyncMock()
        mock_repo.has_history = AsyncMock(return_value=True)

        with pytest.raises(DependentRecordsError):
            await delete_student(mock_db, principal, "student-1")

        mock_shared.remove.assert_not_called()
