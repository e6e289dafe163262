"""
Tests for the orders service: checkout, payment completion and fulfilment.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import BusinessRuleError, ConflictError, PermissionDeniedError
from edutrack.modules.materials.models import Cart, CartItem, Material
from edutrack.modules.orders.models import DeliveryMethod, MaterialOrder, OrderItem, OrderStatus
from edutrack.modules.orders.schemas import OrderCreate, OrderStatusUpdate
from edutrack.modules.orders.service import (
    can_transition,
    cancel_order,
    complete_payment,
    create_order,
    generate_order_number,
    update_status,
)
from edutrack.modules.payments.models import OrderPayment, PaymentStatus

SERVICE = "edutrack.modules.orders.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


def _material(name="Exercise Book", price="25.00", stock=100, min_qty=1, max_qty=None):
    material = MagicMock(spec=Material)
    material.id = f"mat-{name}"
    material.name = name
    material.price = Decimal(price)
    material.stock_quantity = stock
    material.min_order_qty = min_qty
    material.max_order_qty = max_qty
    material.is_active = True
    return material


def _cart(*lines):
    cart = MagicMock(spec=Cart)
    items = []
    for material, quantity in lines:
        item = MagicMock(spec=CartItem)
        item.material = material
        item.material_id = material.id
        item.quantity = quantity
        items.append(item)
    cart.items = items
    return cart


def _order(status: OrderStatus, parent_id="parent-1"):
    order = MagicMock(spec=MaterialOrder)
    order.id = "order-1"
    order.order_number = "ORD-1700000000000-ABCDEFGHJ"
    order.parent_id = parent_id
    order.status = status
    order.total_amount = Decimal("102.95")
    item = MagicMock(spec=OrderItem)
    item.material_id = "mat-1"
    item.material_name = "Exercise Book"
    item.quantity = 4
    order.items = [item]
    return order


def _payment(status=PaymentStatus.PENDING):
    payment = MagicMock(spec=OrderPayment)
    payment.reference = "ORD-1-ref"
    payment.order_id = "order-1"
    payment.status = status
    return payment


# ============================================
# Pure helpers
# ============================================


class TestTransitions:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
            (OrderStatus.PREPARING, OrderStatus.READY_FOR_PICKUP),
            (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
        ],
    )
    def test_allowed(self, current, target):
        """Accept each permitted status transition."""
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.PREPARING, OrderStatus.CANCELLED),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
        ],
    )
    def test_forbidden(self, current, target):
        """Reject each transition the order flow does not allow."""
        assert not can_transition(current, target)


def test_order_number_format():
    """Order numbers carry the ORD prefix, a timestamp and a random uppercase suffix."""
    number = generate_order_number()
    prefix, millis, suffix = number.split("-")

    assert prefix == "ORD"
    assert millis.isdigit()
    assert len(suffix) == 9
    assert suffix.isalnum() and suffix.upper() == suffix


# ============================================
# Checkout
# ============================================


@pytest.mark.asyncio
async def test_only_parents_check_out(mock_db, principal):
    """Only parents can check out a cart."""
    with pytest.raises(PermissionDeniedError):
        await create_order(mock_db, principal, OrderCreate(school_id=SCHOOL_ID))


@pytest.mark.asyncio
async def test_home_delivery_needs_address(mock_db, parent):
    """Reject home delivery without an address."""
    with pytest.raises(BusinessRuleError) as exc_info:
        await create_order(
            mock_db,
            parent,
            OrderCreate(school_id=SCHOOL_ID, delivery_method=DeliveryMethod.HOME_DELIVERY),
        )

    assert exc_info.value.error_code == "ADDRESS_REQUIRED"


@pytest.mark.asyncio
async def test_empty_cart(mock_db, parent):
    """Reject checkout of an empty cart."""
    with patch(f"{SERVICE}.material_repository") as mock_materials:
        mock_materials.get_cart = AsyncMock(return_value=_cart())

        with pytest.raises(BusinessRuleError) as exc_info:
            await create_order(mock_db, parent, OrderCreate(school_id=SCHOOL_ID))

        assert exc_info.value.error_code == "CART_EMPTY"


@pytest.mark.asyncio
async def test_checkout_fixes_fees_and_empties_cart(mock_db, parent):
    """Test that checkout prices every line and clears the cart."""
    cart = _cart((_material("Book", "25.00"), 2), (_material("Pen", "12.50"), 4))

    with (
        patch(f"{SERVICE}.material_repository") as mock_materials,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
    ):
        mock_materials.get_cart = AsyncMock(return_value=cart)
        mock_shared.add = AsyncMock(side_effect=lambda db, order: order)

        order = await create_order(mock_db, parent, OrderCreate(school_id=SCHOOL_ID))

        assert order.status == OrderStatus.PENDING
        assert order.parent_id == parent.id
        assert order.subtotal == Decimal("100.00")
        assert order.total_amount == Decimal("102.95")
        assert order.school_amount == Decimal("100.00")
        assert [item.total_price for item in order.items] == [Decimal("50.00"), Decimal("50.00")]
        assert cart.items == []
        mock_materials.get_cart.assert_awaited_once_with(mock_db, parent.id, SCHOOL_ID)


@pytest.mark.asyncio
async def test_checkout_rejects_quantity_above_stock(mock_db, parent):
    """Reject checkout when stock has fallen below the cart quantity."""
    cart = _cart((_material("Book", stock=1), 2))

    with (
        patch(f"{SERVICE}.material_repository") as mock_materials,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
    ):
        mock_materials.get_cart = AsyncMock(return_value=cart)

        with pytest.raises(BusinessRuleError) as exc_info:
            await create_order(mock_db, parent, OrderCreate(school_id=SCHOOL_ID))

        assert exc_info.value.error_code == "INSUFFICIENT_STOCK"
        mock_shared.add.assert_not_called()


# ============================================
# Payment completion
# ============================================


@pytest.mark.asyncio
async def test_complete_payment_is_idempotent(mock_db):
    """Test that an already completed payment is not processed again."""
    with patch(f"{SERVICE}.repository") as mock_repo:
        completed = await complete_payment(mock_db, _payment(PaymentStatus.COMPLETED), {"id": 1})

        assert completed is False
        mock_repo.lock_order.assert_not_called()


@pytest.mark.asyncio
async def test_complete_payment_confirms_order(mock_db):
    """A completed payment confirms its order."""
    payment = _payment()
    order = _order(OrderStatus.PENDING)

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_repo.lock_order = AsyncMock(return_value=order)
        mock_repo.take_stock = AsyncMock(return_value=True)

        completed = await complete_payment(
            mock_db,
            payment,
            {"id": 987, "status": "success", "authorization": {"authorization_code": "AUTH_1"}},
        )

        assert completed is True
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.transaction_id == "987"
        assert payment.authorization_code == "AUTH_1"
        assert order.status == OrderStatus.CONFIRMED
        mock_repo.take_stock.assert_awaited_once_with(mock_db, "mat-1", 4)
        assert mock_notify.call_args.args[2] == "Payment Successful"


@pytest.mark.asyncio
async def test_complete_payment_short_stock(mock_db):
    """Test that a stock shortfall aborts the confirmation."""
    order = _order(OrderStatus.PENDING)

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_repo.lock_order = AsyncMock(return_value=order)
        mock_repo.take_stock = AsyncMock(return_value=False)

        with pytest.raises(ConflictError):
            await complete_payment(mock_db, _payment(), {"id": 1})

        assert order.status == OrderStatus.PENDING
        mock_notify.assert_not_called()


@pytest.mark.asyncio
async def test_complete_payment_for_cancelled_order(mock_db):
    """Test that the payment is recorded but the order is left alone."""
    payment = _payment()
    order = _order(OrderStatus.CANCELLED)

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.lock_order = AsyncMock(return_value=order)
        mock_repo.take_stock = AsyncMock()

        assert await complete_payment(mock_db, payment, {"id": 1}) is True

        assert payment.status == PaymentStatus.COMPLETED
        assert order.status == OrderStatus.CANCELLED
        mock_repo.take_stock.assert_not_called()


# ============================================
# Fulfilment
# ============================================


@pytest.mark.asyncio
async def test_update_status_rejects_invalid_transition(mock_db, principal):
    """Reject a status change outside the order flow."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_order(OrderStatus.PENDING))

        with pytest.raises(BusinessRuleError) as exc_info:
            await update_status(
                mock_db, principal, "order-1", OrderStatusUpdate(status=OrderStatus.DELIVERED)
            )

        assert exc_info.value.error_code == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_update_status_stamps_and_notifies(mock_db, school_admin):
    """Stamp the status time and tell the parent."""
    order = _order(OrderStatus.CONFIRMED)

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=order)

        await update_status(
            mock_db,
            school_admin,
            "order-1",
            OrderStatusUpdate(status=OrderStatus.PREPARING, admin_notes="Packing"),
        )

        assert order.status == OrderStatus.PREPARING
        assert order.prepared_at is not None
        assert order.admin_notes == "Packing"
        assert mock_notify.call_args.args[2] == "Order Status Update"


@pytest.mark.asyncio
async def test_cancel_confirmed_order_restores_stock(mock_db, parent):
    """Test that cancelling after payment returns stock and refunds."""
    order = _order(OrderStatus.CONFIRMED, parent_id=parent.id)
    payment = _payment(PaymentStatus.COMPLETED)

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=order)
        mock_repo.return_stock = AsyncMock()
        mock_repo.completed_payments = AsyncMock(return_value=[payment])

        await cancel_order(mock_db, parent, "order-1")

        assert order.status == OrderStatus.CANCELLED
        mock_repo.return_stock.assert_awaited_once_with(mock_db, "mat-1", 4)
        assert payment.status == PaymentStatus.REFUNDED
        # the parent cancelled their own order
        mock_notify.assert_not_called()


@pytest.mark.asyncio
async def test_cannot_cancel_after_preparation(mock_db, parent):
    """Parents cannot cancel once preparation starts."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_order(OrderStatus.PREPARING))

        with pytest.raises(BusinessRuleError) as exc_info:
            await cancel_order(mock_db, parent, "order-1")

        assert exc_info.value.error_code == "ORDER_NOT_CANCELLABLE"
