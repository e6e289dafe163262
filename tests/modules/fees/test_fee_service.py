"""
Tests for fee structures, breakdown items and student overrides.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import NotFoundError, PermissionDeniedError
from edutrack.modules.academics.models import AcademicYear
from edutrack.modules.fees.models import (
    FeeBreakdownItem,
    FeeOverride,
    FeeStructure,
    FeeType,
)
from edutrack.modules.fees.schemas import (
    FeeItemCreate,
    FeeItemUpdate,
    FeeOverrideSet,
    FeeStructureCreate,
    FeeStructureUpdate,
)
from edutrack.modules.fees.service import (
    add_fee_item,
    build_breakdown,
    create_fee_structure,
    delete_fee_item,
    get_student_fee_breakdown,
    set_student_override,
    update_fee_item,
    update_fee_structure,
)
from edutrack.modules.students.models import Student

SERVICE = "edutrack.modules.fees.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


def _item(item_id, amount, structure_id="fs-1"):
    item = MagicMock(spec=FeeBreakdownItem)
    item.id = item_id
    item.school_id = SCHOOL_ID
    item.fee_structure_id = structure_id
    item.name = f"Item {item_id}"
    item.description = None
    item.amount = Decimal(amount)
    item.is_mandatory = True
    item.is_recurring = True
    item.frequency = None
    item.created_at = datetime(2026, 1, 5, tzinfo=UTC)
    return item


def _structure(items, structure_id="fs-1"):
    structure = MagicMock(spec=FeeStructure)
    structure.id = structure_id
    structure.school_id = SCHOOL_ID
    structure.name = "First term fees"
    structure.fee_type = FeeType.TUITION
    structure.currency = "GHS"
    structure.due_date = None
    structure.grace_period_days = 14
    structure.late_fee = None
    structure.items = list(items)
    structure.amount = sum((item.amount for item in items), Decimal("0"))
    return structure


def _override(item_id, override_amount=None, is_exempt=False, reason=None):
    override = MagicMock(spec=FeeOverride)
    override.fee_item_id = item_id
    override.override_amount = None if override_amount is None else Decimal(override_amount)
    override.is_exempt = is_exempt
    override.reason = reason
    return override


def _year(is_current=True):
    year = MagicMock(spec=AcademicYear)
    year.id = "year-1"
    year.school_id = SCHOOL_ID
    year.name = "2025/2026"
    year.is_current = is_current
    return year


def _student():
    student = MagicMock(spec=Student)
    student.id = "student-1"
    student.school_id = SCHOOL_ID
    student.first_name = "Ama"
    student.last_name = "Mensah"
    student.registration_number = "REG-001"
    return student


# ============================================
# Fee structures
# ============================================


class TestCreateFeeStructure:
    """A structure's amount is the sum of the items it is created with."""

    @pytest.mark.asyncio
    async def test_total_from_items(self, mock_db, principal):
        """Sum item amounts into the structure amount in the year's school."""
        data = FeeStructureCreate(
            academic_year_id="year-1",
            name="First term fees",
            items=[
                FeeItemCreate(name="Tuition", amount=Decimal("850.00")),
                FeeItemCreate(name="Library levy", amount=Decimal("45.50"), is_recurring=False),
            ],
        )

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=_year())
            mock_shared.add = AsyncMock(side_effect=lambda db, entity: entity)

            structure = await create_fee_structure(mock_db, principal, data)

            assert structure.amount == Decimal("895.50")
            assert structure.school_id == SCHOOL_ID
            assert [item.school_id for item in structure.items] == [SCHOOL_ID, SCHOOL_ID]
            assert structure.items[1].is_recurring is False

    @pytest.mark.asyncio
    async def test_without_items_is_zero(self, mock_db, school_admin):
        """A structure created without items starts at zero."""
        data = FeeStructureCreate(academic_year_id="year-1", name="Sports levy")

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=_year())
            mock_shared.add = AsyncMock(side_effect=lambda db, entity: entity)

            structure = await create_fee_structure(mock_db, school_admin, data)

            assert structure.amount == Decimal("0")
            assert structure.items == []

    @pytest.mark.asyncio
    async def test_year_outside_scope(self, mock_db, principal):
        """Reject an academic year the caller cannot see."""
        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=None)
            mock_shared.add = AsyncMock()

            with pytest.raises(NotFoundError) as exc_info:
                await create_fee_structure(
                    mock_db, principal, FeeStructureCreate(academic_year_id="y-x", name="Fees")
                )

            assert exc_info.value.message == "Academic year not found"
            mock_shared.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_parent_cannot_create(self, mock_db, parent):
        """Only school staff manage fee structures."""
        with pytest.raises(PermissionDeniedError):
            await create_fee_structure(
                mock_db, parent, FeeStructureCreate(academic_year_id="year-1", name="Fees")
            )


@pytest.mark.asyncio
async def test_structure_year_must_be_in_school(mock_db, principal):
    """Reject moving a structure to an academic year of another school."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_structure([]))
        mock_shared.get_in_school = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await update_fee_structure(
                mock_db, principal, "fs-1", FeeStructureUpdate(academic_year_id="year-other")
            )

        mock_shared.get_in_school.assert_awaited_once_with(
            mock_db, AcademicYear, "year-other", SCHOOL_ID
        )
        mock_shared.apply_changes.assert_not_called()


# ============================================
# Breakdown items
# ============================================


class TestItemTotals:
    """Every item change keeps the structure amount equal to the item sum."""

    @pytest.mark.asyncio
    async def test_add_item(self, mock_db, principal):
        """Adding an item raises the structure total."""
        structure = _structure([_item("i1", "100.00")])
        new_item = _item("i2", "25.00")

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=structure)
            mock_shared.add = AsyncMock(return_value=new_item)

            result = await add_fee_item(
                mock_db, principal, "fs-1", FeeItemCreate(name="Lab fee", amount=Decimal("25"))
            )

            assert result is new_item
            assert structure.amount == Decimal("125.00")
            added = mock_shared.add.await_args.args[1]
            assert added.fee_structure_id == "fs-1"
            assert added.school_id == SCHOOL_ID

    @pytest.mark.asyncio
    async def test_update_item_amount(self, mock_db, principal):
        """Changing an item amount recomputes the total."""
        first, second = _item("i1", "100.00"), _item("i2", "50.00")
        structure = _structure([first, second])

        def apply(entity, changes):
            for field, value in changes.items():
                setattr(entity, field, value)
            return sorted(changes)

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(side_effect=[second, structure])
            mock_shared.apply_changes = MagicMock(side_effect=apply)

            await update_fee_item(
                mock_db, principal, "i2", FeeItemUpdate(amount=Decimal("80.00"))
            )

            assert structure.amount == Decimal("180.00")

    @pytest.mark.asyncio
    async def test_delete_item(self, mock_db, principal):
        """Removing an item lowers the total and deletes the row."""
        first, second = _item("i1", "100.00"), _item("i2", "50.00")
        structure = _structure([first, second])

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(side_effect=[second, structure])
            mock_shared.remove = AsyncMock()

            await delete_fee_item(mock_db, principal, "i2")

            assert structure.items == [first]
            assert structure.amount == Decimal("100.00")
            mock_shared.remove.assert_awaited_once_with(mock_db, second)

    @pytest.mark.asyncio
    async def test_item_outside_scope(self, mock_db, principal):
        """An item of another school is reported as missing."""
        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await delete_fee_item(mock_db, principal, "i-x")

            assert exc_info.value.message == "Fee item not found"


# ============================================
# Student overrides
# ============================================


class TestSetStudentOverride:
    """Overrides are upserted per item and student."""

    @pytest.mark.asyncio
    async def test_student_from_another_school(self, mock_db, principal):
        """Reject a student outside the item's school."""
        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(side_effect=[_item("i1", "100"), _structure([])])
            mock_shared.get_in_school = AsyncMock(return_value=None)
            mock_repo.get_override = AsyncMock()

            with pytest.raises(NotFoundError) as exc_info:
                await set_student_override(
                    mock_db, principal, "i1", "student-x", FeeOverrideSet(is_exempt=True)
                )

            assert exc_info.value.message == "Student not found"
            mock_repo.get_override.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_new_override(self, mock_db, principal):
        """Create an override when the student has none for the item."""
        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(side_effect=[_item("i1", "100"), _structure([])])
            mock_shared.get_in_school = AsyncMock(return_value=_student())
            mock_shared.add = AsyncMock(side_effect=lambda db, entity: entity)
            mock_repo.get_override = AsyncMock(return_value=None)

            override = await set_student_override(
                mock_db,
                principal,
                "i1",
                "student-1",
                FeeOverrideSet(override_amount=Decimal("60.00"), reason="Sibling discount"),
            )

            assert override.fee_item_id == "i1"
            assert override.student_id == "student-1"
            assert override.override_amount == Decimal("60.00")
            assert override.is_exempt is False

    @pytest.mark.asyncio
    async def test_replaces_existing_override(self, mock_db, principal):
        """Overwrite every field of an existing override."""
        existing = _override("i1", override_amount="60.00", reason="Sibling discount")

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(side_effect=[_item("i1", "100"), _structure([])])
            mock_shared.get_in_school = AsyncMock(return_value=_student())
            mock_shared.add = AsyncMock()
            mock_repo.get_override = AsyncMock(return_value=existing)

            result = await set_student_override(
                mock_db, principal, "i1", "student-1", FeeOverrideSet(is_exempt=True)
            )

            assert result is existing
            mock_shared.add.assert_not_called()
            mock_shared.apply_changes.assert_called_once_with(
                existing, {"override_amount": None, "is_exempt": True, "reason": None}
            )


def test_override_needs_amount_or_exemption():
    """An override with neither an amount nor an exemption is invalid."""
    with pytest.raises(ValueError):
        FeeOverrideSet(reason="No change")


# ============================================
# Student breakdown
# ============================================


class TestBuildBreakdown:
    """Overrides decide what a student owes per item."""

    def test_no_override_charges_item_amount(self):
        """Without an override the student pays the item amount."""
        structure = _structure([_item("i1", "100.00"), _item("i2", "40.00")])

        [entry] = build_breakdown([structure], {})

        assert [line.final_amount for line in entry.items] == [Decimal("100.00"), Decimal("40.00")]
        assert entry.total_amount == Decimal("140.00")
        assert not any(line.has_override for line in entry.items)

    def test_exemption_charges_nothing(self):
        """An exempt item costs nothing even when an amount is also set."""
        structure = _structure([_item("i1", "100.00"), _item("i2", "40.00")])
        overrides = {"i2": _override("i2", override_amount="10.00", is_exempt=True)}

        [entry] = build_breakdown([structure], overrides)

        line = entry.items[1]
        assert line.final_amount == Decimal("0")
        assert line.base_amount == Decimal("40.00")
        assert line.is_exempt is True
        assert entry.total_amount == Decimal("100.00")

    def test_override_amount_replaces_item_amount(self):
        """A reduced amount replaces the item amount for that student."""
        structure = _structure([_item("i1", "100.00")])
        overrides = {"i1": _override("i1", override_amount="75.00", reason="Scholarship")}

        [entry] = build_breakdown([structure], overrides)

        line = entry.items[0]
        assert line.final_amount == Decimal("75.00")
        assert line.override_reason == "Scholarship"
        assert line.has_override is True


class TestStudentFeeBreakdown:
    """The breakdown covers the school's current academic year by default."""

    @pytest.mark.asyncio
    async def test_parent_sees_child_breakdown(self, mock_db, parent):
        """Sum every structure of the current year for the student."""
        structures = [
            _structure([_item("i1", "100.00")], structure_id="fs-1"),
            _structure([_item("i2", "30.00", structure_id="fs-2")], structure_id="fs-2"),
        ]

        with (
            patch(f"{SERVICE}.get_scoped_student", AsyncMock(return_value=_student())),
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_repo.current_year = AsyncMock(return_value=_year())
            mock_repo.structures_for_year = AsyncMock(return_value=structures)
            mock_repo.overrides_for_student = AsyncMock(
                return_value={"i2": _override("i2", is_exempt=True)}
            )

            result = await get_student_fee_breakdown(mock_db, parent, "student-1")

            assert result.student_name == "Ama Mensah"
            assert result.academic_year_name == "2025/2026"
            assert result.total_amount == Decimal("100.00")
            mock_repo.overrides_for_student.assert_awaited_once_with(
                mock_db, "student-1", ["i1", "i2"]
            )

    @pytest.mark.asyncio
    async def test_no_current_year(self, mock_db, principal):
        """Report a missing academic year when none is current."""
        with (
            patch(f"{SERVICE}.get_scoped_student", AsyncMock(return_value=_student())),
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_repo.current_year = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await get_student_fee_breakdown(mock_db, principal, "student-1")

            assert exc_info.value.message == "Academic year not found"

    @pytest.mark.asyncio
    async def test_teacher_cannot_view(self, mock_db, teacher):
        """Teachers have no access to fee breakdowns."""
        with pytest.raises(PermissionDeniedError):
            await get_student_fee_breakdown(mock_db, teacher, "student-1")
