"""
Fees Service Layer

Fee structures are billed per academic year. A structure's ``amount`` is kept
equal to the sum of its breakdown items: every item change recomputes it.

What a student owes for an item:
- nothing when the student is exempt
- the override amount when one is set
- the item amount otherwise
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import NotFoundError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import FEE_MANAGERS, FEE_VIEWERS, ensure_role
from edutrack.core.tenancy import resolve_scope, tenant_clause
from edutrack.modules.academics.models import AcademicYear
from edutrack.modules.fees import repository
from edutrack.modules.fees.models import FeeBreakdownItem, FeeOverride, FeeStructure, FeeType
from edutrack.modules.fees.schemas import (
    FeeItemCreate,
    FeeItemUpdate,
    FeeOverrideSet,
    FeeStructureCreate,
    FeeStructureUpdate,
    StudentFeeBreakdown,
    StudentFeeLine,
    StudentFeeStructure,
)
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.models import Student
from edutrack.modules.students.service import get_scoped_student

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor, model: type[FeeStructure] | type[FeeBreakdownItem]):
    return tenant_clause(resolve_scope(actor), school_column=model.school_id)


async def _get_structure(db: AsyncSession, actor: Actor, structure_id: str) -> FeeStructure:
    structure = await shared_repository.get_scoped(
        db, FeeStructure, structure_id, _scope_clause(actor, FeeStructure)
    )
    if structure is None:
        logger.warning(f"Fee structure {structure_id} not found for {actor}")
        raise NotFoundError("Fee structure")
    return structure


async def _get_item(
    db: AsyncSession, actor: Actor, item_id: str
) -> tuple[FeeStructure, FeeBreakdownItem]:
    item = await shared_repository.get_scoped(
        db, FeeBreakdownItem, item_id, _scope_clause(actor, FeeBreakdownItem)
    )
    if item is None:
        logger.warning(f"Fee item {item_id} not found for {actor}")
        raise NotFoundError("Fee item")
    structure = await _get_structure(db, actor, item.fee_structure_id)
    return structure, item


def recalculate_total(structure: FeeStructure) -> Decimal:
    structure.amount = sum((item.amount for item in structure.items), Decimal("0"))
    return structure.amount


def _new_item(school_id: str, data: FeeItemCreate, structure_id: str | None = None):
    return FeeBreakdownItem(
        school_id=school_id,
        fee_structure_id=structure_id,
        name=data.name,
        description=data.description,
        amount=data.amount,
        is_mandatory=data.is_mandatory,
        is_recurring=data.is_recurring,
        frequency=data.frequency,
    )


# ============================================
# Fee structures
# ============================================


async def create_fee_structure(
    db: AsyncSession, actor: Actor, data: FeeStructureCreate
) -> FeeStructure:
    """
    Create a fee structure and its breakdown items in the academic year's
    school.

    Raises:
        NotFoundError: Academic year outside the caller's scope
    """
    ensure_role(actor, FEE_MANAGERS)
    year = await shared_repository.get_scoped(
        db,
        AcademicYear,
        data.academic_year_id,
        tenant_clause(resolve_scope(actor), school_column=AcademicYear.school_id),
    )
    if year is None:
        raise NotFoundError("Academic year")

    items = [_new_item(year.school_id, item) for item in data.items]
    structure = await shared_repository.add(
        db,
        FeeStructure(
            school_id=year.school_id,
            academic_year_id=year.id,
            name=data.name,
            description=data.description,
            fee_type=data.fee_type,
            amount=sum((item.amount for item in items), Decimal("0")),
            currency=data.currency,
            due_date=data.due_date,
            grace_period_days=data.grace_period_days,
            late_fee=data.late_fee,
            items=items,
        ),
    )
    logger.info(
        f"{actor} created fee structure {structure.id} ({len(items)} items, "
        f"{structure.amount} {structure.currency}) in school {year.school_id}"
    )
    return structure


async def list_fee_structures(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    academic_year_id: str | None = None,
    fee_type: FeeType | None = None,
) -> tuple[list[FeeStructure], int]:
    ensure_role(actor, FEE_MANAGERS)
    query = repository.list_query(
        _scope_clause(actor, FeeStructure), academic_year_id=academic_year_id, fee_type=fee_type
    )
    return await paginate(db, query, params)


async def get_fee_structure(db: AsyncSession, actor: Actor, structure_id: str) -> FeeStructure:
    ensure_role(actor, FEE_MANAGERS)
    return await _get_structure(db, actor, structure_id)


async def update_fee_structure(
    db: AsyncSession, actor: Actor, structure_id: str, data: FeeStructureUpdate
) -> FeeStructure:
    """Items are managed through their own operations; ``amount`` is never set directly."""
    ensure_role(actor, FEE_MANAGERS)
    structure = await _get_structure(db, actor, structure_id)
    changes = data.model_dump(exclude_unset=True)

    if "academic_year_id" in changes and await shared_repository.get_in_school(
        db, AcademicYear, changes["academic_year_id"], structure.school_id
    ) is None:
        raise NotFoundError("Academic year")

    fields = shared_repository.apply_changes(structure, changes)
    await db.flush()

    logger.info(f"{actor} updated fee structure {structure.id}: {fields}")
    return structure


async def delete_fee_structure(db: AsyncSession, actor: Actor, structure_id: str) -> None:
    ensure_role(actor, FEE_MANAGERS)
    structure = await _get_structure(db, actor, structure_id)
    await shared_repository.remove(db, structure)
    logger.info(f"{actor} deleted fee structure {structure_id}")


# ============================================
# Breakdown items
# ============================================


async def add_fee_item(
    db: AsyncSession, actor: Actor, structure_id: str, data: FeeItemCreate
) -> FeeBreakdownItem:
    ensure_role(actor, FEE_MANAGERS)
    structure = await _get_structure(db, actor, structure_id)

    item = await shared_repository.add(db, _new_item(structure.school_id, data, structure.id))
    structure.items.append(item)
    total = recalculate_total(structure)
    await db.flush()

    logger.info(f"{actor} added fee item {item.id} to structure {structure.id}, total {total}")
    return item


async def update_fee_item(
    db: AsyncSession, actor: Actor, item_id: str, data: FeeItemUpdate
) -> FeeBreakdownItem:
    ensure_role(actor, FEE_MANAGERS)
    structure, item = await _get_item(db, actor, item_id)
    changes = data.model_dump(exclude_unset=True)

    fields = shared_repository.apply_changes(item, changes)
    if "amount" in changes:
        recalculate_total(structure)
    await db.flush()

    logger.info(f"{actor} updated fee item {item.id}: {fields}")
    return item


async def delete_fee_item(db: AsyncSession, actor: Actor, item_id: str) -> None:
    """Removes the item with its student overrides."""
    ensure_role(actor, FEE_MANAGERS)
    structure, item = await _get_item(db, actor, item_id)

    structure.items.remove(item)
    total = recalculate_total(structure)
    await shared_repository.remove(db, item)

    logger.info(f"{actor} deleted fee item {item_id}, structure {structure.id} total {total}")


# ============================================
# Student overrides
# ============================================


async def set_student_override(
    db: AsyncSession, actor: Actor, item_id: str, student_id: str, data: FeeOverrideSet
) -> FeeOverride:
    """
    Create or replace a student's exception to a breakdown item.

    Raises:
        NotFoundError: Item outside the caller's scope, or student not in the
            item's school
    """
    ensure_role(actor, FEE_MANAGERS)
    _, item = await _get_item(db, actor, item_id)

    student = await shared_repository.get_in_school(db, Student, student_id, item.school_id)
    if student is None:
        raise NotFoundError("Student")

    override = await repository.get_override(db, item.id, student.id)
    if override is None:
        override = await shared_repository.add(
            db,
            FeeOverride(
                fee_item_id=item.id,
                student_id=student.id,
                override_amount=data.override_amount,
                is_exempt=data.is_exempt,
                reason=data.reason,
            ),
        )
    else:
        shared_repository.apply_changes(override, data.model_dump())
        await db.flush()

    logger.info(
        f"{actor} set fee override on item {item.id} for student {student.id} "
        f"(exempt={data.is_exempt}, amount={data.override_amount})"
    )
    return override


async def clear_student_override(
    db: AsyncSession, actor: Actor, item_id: str, student_id: str
) -> None:
    ensure_role(actor, FEE_MANAGERS)
    _, item = await _get_item(db, actor, item_id)

    override = await repository.get_override(db, item.id, student_id)
    if override is None:
        raise NotFoundError("Fee override")

    await shared_repository.remove(db, override)
    logger.info(f"{actor} cleared fee override on item {item.id} for student {student_id}")


# ============================================
# Student breakdown
# ============================================


def fee_line(item: FeeBreakdownItem, override: FeeOverride | None) -> StudentFeeLine:
    if override is None:
        final_amount = item.amount
    elif override.is_exempt:
        final_amount = Decimal("0")
    elif override.override_amount is not None:
        final_amount = override.override_amount
    else:
        final_amount = item.amount

    return StudentFeeLine(
        id=item.id,
        name=item.name,
        description=item.description,
        base_amount=item.amount,
        final_amount=final_amount,
        is_mandatory=item.is_mandatory,
        is_recurring=item.is_recurring,
        frequency=item.frequency,
        has_override=override is not None,
        is_exempt=bool(override and override.is_exempt),
        override_reason=override.reason if override else None,
    )


def build_breakdown(
    structures: list[FeeStructure], overrides: dict[str, FeeOverride]
) -> list[StudentFeeStructure]:
    result = []
    for structure in structures:
        lines = [fee_line(item, overrides.get(item.id)) for item in structure.items]
        result.append(
            StudentFeeStructure(
                fee_structure_id=structure.id,
                name=structure.name,
                fee_type=structure.fee_type,
                currency=structure.currency,
                due_date=structure.due_date,
                grace_period_days=structure.grace_period_days,
                late_fee=structure.late_fee,
                items=lines,
                total_amount=sum((line.final_amount for line in lines), Decimal("0")),
            )
        )
    return result


async def get_student_fee_breakdown(
    db: AsyncSession,
    actor: Actor,
    student_id: str,
    academic_year_id: str | None = None,
) -> StudentFeeBreakdown:
    """
    What a student owes for an academic year (the school's current year by
    default), with overrides applied.

    Raises:
        NotFoundError: Student outside the caller's scope, or no such year
    """
    ensure_role(actor, FEE_VIEWERS)
    student = await get_scoped_student(db, actor, student_id)

    if academic_year_id:
        year = await shared_repository.get_in_school(
            db, AcademicYear, academic_year_id, student.school_id
        )
    else:
        year = await repository.current_year(db, student.school_id)
    if year is None:
        raise NotFoundError("Academic year")

    structures = await repository.structures_for_year(db, student.school_id, year.id)
    item_ids = [item.id for structure in structures for item in structure.items]
    overrides = await repository.overrides_for_student(db, student.id, item_ids)

    breakdown = build_breakdown(structures, overrides)
    return StudentFeeBreakdown(
        student_id=student.id,
        student_name=f"{student.first_name} {student.last_name}",
        registration_number=student.registration_number,
        academic_year_id=year.id,
        academic_year_name=year.name,
        structures=breakdown,
        total_amount=sum((entry.total_amount for entry in breakdown), Decimal("0")),
    )
