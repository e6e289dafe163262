"""
Orders Service Layer

Checkout turns a parent's cart into a PENDING order with the fees fixed.
Payment goes through Paystack: ``initialize_payment`` starts a checkout and
``complete_payment`` settles it, whether the confirmation comes from the
verify endpoint or from the webhook. Completing a payment confirms the order
and takes the stock in the same transaction; if any item is short, nothing
is written.

Status transitions:
    PENDING -> CONFIRMED | CANCELLED
    CONFIRMED -> PREPARING | CANCELLED
    PREPARING -> READY_FOR_PICKUP | OUT_FOR_DELIVERY
    READY_FOR_PICKUP | OUT_FOR_DELIVERY -> DELIVERED
"""

import logging
import secrets
import string
import time
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import false
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.config import settings
from edutrack.core.errors import BusinessRuleError, ConflictError, NotFoundError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.paystack import calculate_transaction_fees, get_paystack_client, to_minor_units
from edutrack.core.permissions import COMMERCE_MANAGERS, SHOPPERS, ensure_role, has_role
from edutrack.core.tenancy import resolve_scope, tenant_clause
from edutrack.modules.materials import repository as material_repository
from edutrack.modules.materials.service import check_quantity
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify
from edutrack.modules.orders import repository
from edutrack.modules.orders.models import DeliveryMethod, MaterialOrder, OrderItem, OrderStatus
from edutrack.modules.orders.schemas import OrderCreate, OrderStatusUpdate
from edutrack.modules.payments.models import OrderPayment, PaymentStatus
from edutrack.modules.shared import repository as shared_repository

logger = logging.getLogger(__name__)

ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY_FOR_PICKUP, OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

# Timestamp column set when an order enters a status
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "prepared_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def generate_order_number() -> str:
    """``ORD-{epoch ms}-{9 random upper-case alphanumerics}``"""
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=MaterialOrder.school_id,
        teacher=lambda _teacher_id: false(),
        parent=lambda parent_id: MaterialOrder.parent_id == parent_id,
    )


async def _get_order(db: AsyncSession, actor: Actor, order_id: str) -> MaterialOrder:
    order = await shared_repository.get_scoped(db, MaterialOrder, order_id, _scope_clause(actor))
    if order is None:
        logger.warning(f"Order {order_id} not found for {actor}")
        raise NotFoundError("Order")
    return order


# ============================================
# Checkout
# ============================================


async def create_order(db: AsyncSession, actor: Actor, data: OrderCreate) -> MaterialOrder:
    """
    Create an order from the parent's cart for ``data.school_id`` and empty
    the cart.

    Raises:
        BusinessRuleError: Empty cart, missing delivery address, or an item
            no longer within its order limits or stock
    """
    ensure_role(actor, SHOPPERS)

    if data.delivery_method == DeliveryMethod.HOME_DELIVERY and not data.delivery_address:
        raise BusinessRuleError(
            "Delivery address is required for home delivery", error_code="ADDRESS_REQUIRED"
        )

    cart = await material_repository.get_cart(db, actor.id, data.school_id)
    if cart is None or not cart.items:
        raise BusinessRuleError("Cart is empty", error_code="CART_EMPTY")

    items = []
    for cart_item in cart.items:
        material = cart_item.material
        if not material.is_active:
            raise BusinessRuleError(
                f"{material.name} is no longer available", error_code="MATERIAL_UNAVAILABLE"
            )
        check_quantity(material, cart_item.quantity)
        items.append(
            OrderItem(
                material_id=material.id,
                material_name=material.name,
                quantity=cart_item.quantity,
                unit_price=material.price,
                total_price=material.price * cart_item.quantity,
            )
        )

    fees = calculate_transaction_fees(sum(item.total_price for item in items))
    order = await shared_repository.add(
        db,
        MaterialOrder(
            order_number=generate_order_number(),
            parent_id=actor.id,
            school_id=data.school_id,
            subtotal=fees.subtotal,
            processing_fee=fees.processing_fee,
            gateway_fee=fees.gateway_fee,
            total_amount=fees.total_amount,
            school_amount=fees.school_amount,
            status=OrderStatus.PENDING,
            delivery_method=data.delivery_method,
            delivery_address=data.delivery_address,
            delivery_notes=data.delivery_notes,
            items=items,
        ),
    )

    cart.items.clear()
    await db.flush()

    logger.info(f"{actor} created order {order.order_number} ({order.total_amount})")
    return order


# ============================================
# Payment
# ============================================


async def initialize_payment(db: AsyncSession, actor: Actor, order_id: str) -> dict[str, Any]:
    """
    Start a Paystack checkout for the caller's own PENDING order.

    Returns:
        authorization_url, access_code and reference
    """
    ensure_role(actor, SHOPPERS)
    order = await _get_order(db, actor, order_id)
    if order.status != OrderStatus.PENDING:
        raise BusinessRuleError("Order cannot be paid for", error_code="ORDER_NOT_PAYABLE")

    reference = f"{order.order_number}-{int(time.time() * 1000)}"
    async with get_paystack_client() as client:
        checkout = await client.initialize_transaction(
            email=actor.email,
            amount=to_minor_units(order.total_amount),
            reference=reference,
            callback_url=f"{settings.frontend_url}/orders/{order.id}/payment",
            metadata={
                "order_id": order.id,
                "parent_id": order.parent_id,
                "school_id": order.school_id,
                "order_number": order.order_number,
            },
        )

    payment = await shared_repository.add(
        db,
        OrderPayment(
            school_id=order.school_id,
            order_id=order.id,
            reference=checkout.get("reference", reference),
            amount=order.total_amount,
            school_amount=order.school_amount,
            status=PaymentStatus.PENDING,
        ),
    )

    logger.info(f"{actor} initialized payment {payment.reference} for order {order.id}")
    return {
        "authorization_url": checkout["authorization_url"],
        "access_code": checkout["access_code"],
        "reference": payment.reference,
    }


async def complete_payment(
    db: AsyncSession,
    payment: OrderPayment,
    transaction: dict[str, Any],
) -> bool:
    """
    Record a successful charge and confirm its order.

    Idempotent: a payment that is already COMPLETED is left untouched.

    Returns:
        True if this call completed the payment

    Raises:
        ConflictError: An item no longer has enough stock (nothing is written)
    """
    if payment.status == PaymentStatus.COMPLETED:
        logger.info(f"Payment {payment.reference} already completed")
        return False

    now = datetime.now(UTC)
    authorization = transaction.get("authorization") or {}
    payment.status = PaymentStatus.COMPLETED
    payment.transaction_id = str(transaction["id"]) if transaction.get("id") else None
    payment.authorization_code = authorization.get("authorization_code")
    payment.paid_at = now
    payment.gateway_response = transaction

    order = await repository.lock_order(db, payment.order_id)
    if order.status != OrderStatus.PENDING:
        logger.warning(
            f"Payment {payment.reference} completed for order {order.id} in status "
            f"{order.status.value}; order left unchanged"
        )
        await db.flush()
        return True

    for item in order.items:
        if not await repository.take_stock(db, item.material_id, item.quantity):
            raise ConflictError(f"Insufficient stock for {item.material_name}")

    order.status = OrderStatus.CONFIRMED
    order.confirmed_at = now
    await db.flush()

    await notify(
        db,
        order.parent_id,
        "Payment Successful",
        f"Your payment of {settings.paystack_currency} {order.total_amount} for order "
        f"{order.order_number} was successful. Your order has been confirmed.",
        NotificationType.PAYMENT,
        {"order_id": order.id, "reference": payment.reference},
    )

    logger.info(f"Payment {payment.reference} completed; order {order.order_number} confirmed")
    return True


async def verify_payment(db: AsyncSession, actor: Actor, reference: str) -> MaterialOrder:
    """
    Check a reference with Paystack and complete the payment on success.

    Raises:
        NotFoundError: Unknown reference, or an order outside the caller's scope
        BusinessRuleError: Paystack does not report the charge as successful
    """
    payment = await repository.get_payment_by_reference(db, reference)
    if payment is None:
        raise NotFoundError("Payment")
    order = await _get_order(db, actor, payment.order_id)

    if payment.status == PaymentStatus.COMPLETED:
        return order

    async with get_paystack_client() as client:
        transaction = await client.verify_transaction(reference)

    if not transaction or transaction.get("status") != "success":
        logger.warning(f"Payment {reference} was not successful")
        raise BusinessRuleError(
            "Payment verification failed", error_code="PAYMENT_NOT_SUCCESSFUL"
        )

    await complete_payment(db, payment, transaction)
    return order


# ============================================
# Fulfilment
# ============================================


async def _restore_after_cancel(db: AsyncSession, order: MaterialOrder) -> None:
    """Return stock taken on confirmation and mark completed payments refunded."""
    if order.status == OrderStatus.CONFIRMED:
        for item in order.items:
            await repository.return_stock(db, item.material_id, item.quantity)

    for payment in await repository.completed_payments(db, order.id):
        payment.status = PaymentStatus.REFUNDED


async def update_status(
    db: AsyncSession,
    actor: Actor,
    order_id: str,
    data: OrderStatusUpdate,
) -> MaterialOrder:
    ensure_role(actor, COMMERCE_MANAGERS)
    order = await _get_order(db, actor, order_id)
    previous = order.status

    if not can_transition(previous, data.status):
        raise BusinessRuleError(
            f"Cannot change order status from {previous.value} to {data.status.value}",
            error_code="INVALID_STATUS_TRANSITION",
        )

    if data.status == OrderStatus.CANCELLED:
        await _restore_after_cancel(db, order)

    order.status = data.status
    timestamp_field = _STATUS_TIMESTAMPS.get(data.status)
    if timestamp_field:
        setattr(order, timestamp_field, datetime.now(UTC))
    if data.admin_notes is not None:
        order.admin_notes = data.admin_notes
    await db.flush()

    await notify(
        db,
        order.parent_id,
        "Order Status Update",
        f"Your order {order.order_number} status has been updated to {data.status.value}",
        NotificationType.ORDER,
        {"order_id": order.id, "status": data.status.value},
    )

    logger.info(f"{actor} moved order {order.id} from {previous.value} to {data.status.value}")
    return order


async def cancel_order(db: AsyncSession, actor: Actor, order_id: str) -> MaterialOrder:
    """Cancel a PENDING or CONFIRMED order (its parent or an order manager)."""
    if not has_role(actor, SHOPPERS):
        ensure_role(actor, COMMERCE_MANAGERS)
    order = await _get_order(db, actor, order_id)

    if order.status not in CANCELLABLE:
        raise BusinessRuleError(
            "Order cannot be cancelled at this stage", error_code="ORDER_NOT_CANCELLABLE"
        )

    await _restore_after_cancel(db, order)
    order.status = OrderStatus.CANCELLED
    order.cancelled_at = datetime.now(UTC)
    await db.flush()

    if actor.id != order.parent_id:
        await notify(
            db,
            order.parent_id,
            "Order Status Update",
            f"Your order {order.order_number} status has been updated to CANCELLED",
            NotificationType.ORDER,
            {"order_id": order.id, "status": OrderStatus.CANCELLED.value},
        )

    logger.info(f"{actor} cancelled order {order.id}")
    return order


async def list_orders(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    status: OrderStatus | None = None,
) -> tuple[list[MaterialOrder], int]:
    query = repository.list_query(_scope_clause(actor), status=status)
    return await paginate(db, query, params)


async def get_order(db: AsyncSession, actor: Actor, order_id: str) -> MaterialOrder:
    return await _get_order(db, actor, order_id)
