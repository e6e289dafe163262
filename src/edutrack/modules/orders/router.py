"""
Orders Router

Endpoints:
- POST /orders - Checkout the cart for a school (parents)
- GET /orders - Own orders (parents) or the school's orders (staff)
- GET /orders/{id} - Get an order
- PUT /orders/{id}/status - Move an order along its lifecycle (managers)
- POST /orders/{id}/cancel - Cancel an order
- POST /orders/{id}/payment/initialize - Start a Paystack checkout
- GET /orders/payment/verify/{reference} - Verify a payment and confirm the order
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.core.rate_limit import enforce_rate_limit
from edutrack.modules.orders import service
from edutrack.modules.orders.models import OrderStatus
from edutrack.modules.orders.schemas import (
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    PaymentInitializationResponse,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse

router = APIRouter()

PAYMENT_INIT_LIMIT = 10
PAYMENT_INIT_WINDOW_SECONDS = 60


@router.post("", response_model=ItemResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await service.create_order(db, actor, body)
    return {"message": "Order created successfully", "item": order}


@router.get("", response_model=ListResponse[OrderResponse])
async def list_orders(
    order_status: OrderStatus | None = Query(None, alias="status"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_orders(db, actor, params, status=order_status)
    return {
        "message": "Orders retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/payment/verify/{reference}", response_model=ItemResponse[OrderResponse])
async def verify_payment(
    reference: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await service.verify_payment(db, actor, reference)
    return {"message": "Payment verified and order confirmed", "item": order}


@router.get("/{order_id}", response_model=ItemResponse[OrderResponse])
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await service.get_order(db, actor, order_id)
    return {"message": "Order retrieved successfully", "item": order}


@router.put("/{order_id}/status", response_model=ItemResponse[OrderResponse])
async def update_status(
    order_id: str,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await service.update_status(db, actor, order_id, body)
    return {"message": "Order status updated successfully", "item": order}


@router.post("/{order_id}/cancel", response_model=ItemResponse[OrderResponse])
async def cancel_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await service.cancel_order(db, actor, order_id)
    return {"message": "Order cancelled successfully", "item": order}


@router.post(
    "/{order_id}/payment/initialize",
    response_model=PaymentInitializationResponse,
    responses={429: {"description": "Too many payment attempts"}},
)
async def initialize_payment(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await enforce_rate_limit(
        f"rate_limit:payment_init:{actor.id}", PAYMENT_INIT_LIMIT, PAYMENT_INIT_WINDOW_SECONDS
    )
    checkout = await service.initialize_payment(db, actor, order_id)
    return {"message": "Payment initialized successfully", "item": checkout}
