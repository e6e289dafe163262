"""
Order Schemas
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from edutrack.modules.orders.models import DeliveryMethod, OrderStatus
from edutrack.modules.shared.schemas import ORMModel


class OrderCreate(BaseModel):
    """Checkout of the parent's cart for one school."""

    school_id: str
    delivery_method: DeliveryMethod = DeliveryMethod.SCHOOL_PICKUP
    delivery_address: str | None = Field(None, max_length=500)
    delivery_notes: str | None = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    admin_notes: str | None = Field(None, max_length=1000)


class OrderItemResponse(ORMModel):
    id: str
    material_id: str
    material_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(ORMModel):
    id: str
    order_number: str
    school_id: str
    parent_id: str
    subtotal: Decimal
    processing_fee: Decimal
    gateway_fee: Decimal
    total_amount: Decimal
    school_amount: Decimal
    status: OrderStatus
    delivery_method: DeliveryMethod
    delivery_address: str | None
    delivery_notes: str | None
    admin_notes: str | None
    confirmed_at: datetime | None
    prepared_at: datetime | None
    delivered_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    items: list[OrderItemResponse]


class PaymentInitialization(BaseModel):
    authorization_url: str
    access_code: str
    reference: str


class PaymentInitializationResponse(BaseModel):
    message: str
    item: PaymentInitialization
