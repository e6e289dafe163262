"""
Fee Billing Schemas
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from edutrack.modules.fees.models import FeeFrequency, FeeType
from edutrack.modules.shared.schemas import ORMModel, reject_null


class FeeItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    is_mandatory: bool = True
    is_recurring: bool = True
    frequency: FeeFrequency | None = None


class FeeItemUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    is_mandatory: bool | None = None
    is_recurring: bool | None = None
    frequency: FeeFrequency | None = None

    @field_validator("name", "amount", "is_mandatory", "is_recurring")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class FeeStructureCreate(BaseModel):
    """The school is the academic year's school; ``amount`` is derived from the items."""

    academic_year_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    fee_type: FeeType = FeeType.TUITION
    currency: str = Field("GHS", pattern=r"^[A-Z]{3}$")
    due_date: date | None = None
    grace_period_days: int | None = Field(None, ge=0, le=365)
    late_fee: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    items: list[FeeItemCreate] = Field(default_factory=list)


class FeeStructureUpdate(BaseModel):
    academic_year_id: str | None = None
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    fee_type: FeeType | None = None
    currency: str | None = Field(None, pattern=r"^[A-Z]{3}$")
    due_date: date | None = None
    grace_period_days: int | None = Field(None, ge=0, le=365)
    late_fee: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("academic_year_id", "name", "fee_type", "currency")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class FeeOverrideSet(BaseModel):
    override_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    is_exempt: bool = False
    reason: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _exempt_or_amount(self):
        if not self.is_exempt and self.override_amount is None:
            raise ValueError("Either override_amount or is_exempt must be set")
        return self


class FeeItemResponse(ORMModel):
    id: str
    fee_structure_id: str
    name: str
    description: str | None
    amount: Decimal
    is_mandatory: bool
    is_recurring: bool
    frequency: FeeFrequency | None
    created_at: datetime


class FeeStructureResponse(ORMModel):
    id: str
    school_id: str
    academic_year_id: str
    name: str
    description: str | None
    fee_type: FeeType
    amount: Decimal
    currency: str
    due_date: date | None
    grace_period_days: int | None
    late_fee: Decimal | None
    created_at: datetime
    items: list[FeeItemResponse]


class FeeOverrideResponse(ORMModel):
    id: str
    fee_item_id: str
    student_id: str
    override_amount: Decimal | None
    is_exempt: bool
    reason: str | None


# Student breakdown


class StudentFeeLine(BaseModel):
    id: str
    name: str
    description: str | None
    base_amount: Decimal
    final_amount: Decimal
    is_mandatory: bool
    is_recurring: bool
    frequency: FeeFrequency | None
    has_override: bool
    is_exempt: bool
    override_reason: str | None


class StudentFeeStructure(BaseModel):
    fee_structure_id: str
    name: str
    fee_type: FeeType
    currency: str
    due_date: date | None
    grace_period_days: int | None
    late_fee: Decimal | None
    items: list[StudentFeeLine]
    total_amount: Decimal


class StudentFeeBreakdown(BaseModel):
    student_id: str
    student_name: str
    registration_number: str
    academic_year_id: str
    academic_year_name: str
    structures: list[StudentFeeStructure]
    total_amount: Decimal
