"""
Fee Billing Models

A fee structure is what a school bills for an academic year. Its ``amount``
is always the sum of its breakdown items; a student may be exempted from an
item or charged a different amount through an override.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel, TenantMixin


class FeeType(str, Enum):
    TUITION = "TUITION"
    EXAMINATION = "EXAMINATION"
    TRANSPORT = "TRANSPORT"
    FEEDING = "FEEDING"
    UNIFORM = "UNIFORM"
    BOOKS = "BOOKS"
    OTHER = "OTHER"


class FeeFrequency(str, Enum):
    ONE_TIME = "ONE_TIME"
    MONTHLY = "MONTHLY"
    TERMLY = "TERMLY"
    YEARLY = "YEARLY"


class FeeStructure(TenantMixin, BaseModel):
    __tablename__ = "fee_structures"

    academic_year_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    fee_type: Mapped[FeeType] = mapped_column(
        ENUM(FeeType, name="fee_type", create_type=True),
        nullable=False,
        default=FeeType.TUITION,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GHS")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    grace_period_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    late_fee: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    items: Mapped[list["FeeBreakdownItem"]] = relationship(
        "FeeBreakdownItem",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="FeeBreakdownItem.created_at",
    )


class FeeBreakdownItem(TenantMixin, BaseModel):
    """One billed line of a fee structure (e.g. "Library levy")."""

    __tablename__ = "fee_breakdown_items"

    fee_structure_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("fee_structures.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    frequency: Mapped[FeeFrequency | None] = mapped_column(
        ENUM(FeeFrequency, name="fee_frequency", create_type=True),
        nullable=True,
    )


class FeeOverride(BaseModel):
    """
    A student's exception to a breakdown item: either an exemption or a
    different amount. At most one per item and student.
    """

    __tablename__ = "fee_overrides"
    __table_args__ = (
        UniqueConstraint("fee_item_id", "student_id", name="uq_fee_overrides_item_student"),
    )

    fee_item_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("fee_breakdown_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    override_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_exempt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
