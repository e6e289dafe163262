"""
Order Repository
"""

from sqlalchemy import ColumnElement, Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.materials.models import Material
from edutrack.modules.orders.models import MaterialOrder, OrderStatus
from edutrack.modules.payments.models import OrderPayment, PaymentStatus


def list_query(scope_clause: ColumnElement[bool], status: OrderStatus | None = None) -> Select:
    query = select(MaterialOrder).where(scope_clause)
    if status:
        query = query.where(MaterialOrder.status == status)
    return query.order_by(MaterialOrder.created_at.desc())


async def lock_order(db: AsyncSession, order_id: str) -> MaterialOrder | None:
    result = await db.execute(
        select(MaterialOrder).where(MaterialOrder.id == order_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def get_payment_by_reference(db: AsyncSession, reference: str) -> OrderPayment | None:
    """Payment row for a gateway reference, locked until the transaction ends."""
    result = await db.execute(
        select(OrderPayment).where(OrderPayment.reference == reference).with_for_update()
    )
    return result.scalar_one_or_none()


async def completed_payments(db: AsyncSession, order_id: str) -> list[OrderPayment]:
    result = await db.execute(
        select(OrderPayment).where(
            OrderPayment.order_id == order_id,
            OrderPayment.status == PaymentStatus.COMPLETED,
        )
    )
    return list(result.scalars().all())


async def take_stock(db: AsyncSession, material_id: str, quantity: int) -> bool:
    """
    Decrement stock only if enough is left.

    Returns:
        False when the material has fewer than ``quantity`` units
    """
    result = await db.execute(
        update(Material)
        .where(Material.id == material_id, Material.stock_quantity >= quantity)
        .values(stock_quantity=Material.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def return_stock(db: AsyncSession, material_id: str, quantity: int) -> None:
    await db.execute(
        update(Material)
        .where(Material.id == material_id)
        .values(stock_quantity=Material.stock_quantity + quantity)
        .execution_options(synchronize_session=False)
    )
