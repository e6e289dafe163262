"""
Payment Schemas
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from edutrack.modules.payments.models import PaymentStatus
from edutrack.modules.shared.schemas import ORMModel


class PaymentAccountConfigure(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=200)
    account_number: str = Field(..., min_length=5, max_length=30, pattern=r"^\d+$")
    bank_code: str = Field(..., min_length=1, max_length=20)
    bank_name: str | None = Field(None, max_length=200)
    school_id: str | None = None


class PaymentAccountStatusUpdate(BaseModel):
    is_active: bool


class PaymentAccountResponse(ORMModel):
    id: str
    school_id: str
    account_name: str
    account_number: str
    bank_code: str
    bank_name: str | None
    subaccount_code: str | None
    recipient_code: str | None
    is_verified: bool
    verified_at: datetime | None
    is_active: bool
    created_at: datetime


class Bank(BaseModel):
    name: str
    code: str
    slug: str | None = None
    type: str | None = None


class PaymentStatistics(BaseModel):
    total_payments: int
    completed_payments: int
    completed_amount: Decimal
    pending_transfers: int
    transferred_amount: Decimal


class PaymentStatisticsResponse(BaseModel):
    message: str
    item: PaymentStatistics


class PaymentResponse(ORMModel):
    id: str
    order_id: str
    reference: str
    amount: Decimal
    school_amount: Decimal
    status: PaymentStatus
    paid_at: datetime | None
    transfer_code: str | None
    transfer_reference: str | None
    transfer_status: str | None
    transferred_at: datetime | None
    created_at: datetime
