"""
Material Shop Schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from edutrack.modules.shared.schemas import ORMModel, reject_null


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=500)
    school_id: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class CategoryResponse(ORMModel):
    id: str
    school_id: str
    name: str
    description: str | None
    image_url: str | None
    created_at: datetime


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    min_order_qty: int = Field(1, ge=1)
    max_order_qty: int | None = Field(None, ge=1)
    category_id: str
    brand: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    specifications: dict[str, Any] = Field(default_factory=dict)
    image_urls: list[str] = Field(default_factory=list)
    is_active: bool = True
    school_id: str | None = None

    @model_validator(mode="after")
    def _check_order_limits(self):
        if self.max_order_qty is not None and self.max_order_qty < self.min_order_qty:
            raise ValueError("max_order_qty must not be less than min_order_qty")
        return self


class MaterialUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    stock_quantity: int | None = Field(None, ge=0)
    min_order_qty: int | None = Field(None, ge=1)
    max_order_qty: int | None = Field(None, ge=1)
    category_id: str | None = None
    brand: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    specifications: dict[str, Any] | None = None
    image_urls: list[str] | None = None
    is_active: bool | None = None

    @field_validator(
        "name",
        "price",
        "stock_quantity",
        "min_order_qty",
        "category_id",
        "specifications",
        "image_urls",
        "is_active",
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class MaterialResponse(ORMModel):
    id: str
    school_id: str
    category_id: str
    name: str
    description: str | None
    price: Decimal
    stock_quantity: int
    min_order_qty: int
    max_order_qty: int | None
    brand: str | None
    model: str | None
    specifications: dict[str, Any]
    image_urls: list[str]
    is_active: bool
    created_at: datetime


# Cart


class CartItemAdd(BaseModel):
    material_id: str
    quantity: int = Field(..., ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class CartItemView(BaseModel):
    id: str
    material_id: str
    material_name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class CartView(BaseModel):
    id: str | None
    school_id: str
    parent_id: str
    items: list[CartItemView]
    item_count: int
    subtotal: Decimal


class CartResponse(BaseModel):
    message: str
    item: CartView
