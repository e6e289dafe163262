"""
Payment Models

Order payments collected through Paystack and each school's settlement
account.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel, TenantMixin


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class TransferStatus(str, Enum):
    """Paystack transfer states, stored as reported."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REVERSED = "reversed"


class OrderPayment(TenantMixin, BaseModel):
    __tablename__ = "order_payments"

    order_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("material_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reference: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    school_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        ENUM(PaymentStatus, name="payment_status", create_type=True),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    # Filled on successful charge
    transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    authorization_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    gateway_response: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    # Settlement to the school
    transfer_code: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    transfer_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    transfer_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    transferred_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class SchoolPaymentAccount(BaseModel):
    """Bank account a school is settled into; one per school."""

    __tablename__ = "school_payment_accounts"

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    account_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(30), nullable=False)
    bank_code: Mapped[str] = mapped_column(String(20), nullable=False)
    bank_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    subaccount_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    recipient_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
