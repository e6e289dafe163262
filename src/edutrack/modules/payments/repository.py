"""
Payment Repository
"""

from decimal import Decimal

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.orders.models import MaterialOrder
from edutrack.modules.payments.models import (
    OrderPayment,
    PaymentStatus,
    SchoolPaymentAccount,
    TransferStatus,
)


async def get_account(db: AsyncSession, school_id: str) -> SchoolPaymentAccount | None:
    result = await db.execute(
        select(SchoolPaymentAccount).where(SchoolPaymentAccount.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def statistics(db: AsyncSession, school_id: str) -> dict[str, int | Decimal]:
    completed = OrderPayment.status == PaymentStatus.COMPLETED
    transferred = OrderPayment.transfer_status == TransferStatus.SUCCESS.value
    awaiting_transfer = completed & or_(
        OrderPayment.transfer_status.is_(None),
        OrderPayment.transfer_status == TransferStatus.PENDING.value,
    )

    row = (
        await db.execute(
            select(
                func.count(OrderPayment.id),
                func.count(OrderPayment.id).filter(completed),
                func.coalesce(func.sum(OrderPayment.school_amount).filter(completed), 0),
                func.count(OrderPayment.id).filter(awaiting_transfer),
                func.coalesce(func.sum(OrderPayment.school_amount).filter(transferred), 0),
            ).where(OrderPayment.school_id == school_id)
        )
    ).one()

    return {
        "total_payments": row[0],
        "completed_payments": row[1],
        "completed_amount": Decimal(row[2]),
        "pending_transfers": row[3],
        "transferred_amount": Decimal(row[4]),
    }


def transfer_history_query(school_id: str) -> Select:
    return (
        select(OrderPayment)
        .where(
            OrderPayment.school_id == school_id,
            OrderPayment.status == PaymentStatus.COMPLETED,
            OrderPayment.transfer_code.is_not(None),
        )
        .order_by(OrderPayment.transferred_at.desc().nulls_last(), OrderPayment.created_at.desc())
    )


async def get_by_transfer_code(db: AsyncSession, transfer_code: str) -> OrderPayment | None:
    result = await db.execute(
        select(OrderPayment).where(OrderPayment.transfer_code == transfer_code)
    )
    return result.scalar_one_or_none()


async def get_by_transfer_reference(db: AsyncSession, reference: str) -> OrderPayment | None:
    result = await db.execute(
        select(OrderPayment).where(OrderPayment.transfer_reference == reference)
    )
    return result.scalar_one_or_none()


async def untransferred_payments(
    db: AsyncSession, limit: int = 50
) -> list[tuple[OrderPayment, str, str]]:
    """
    Completed payments never handed to the gateway, for schools with an active
    transfer recipient.

    Returns:
        (payment, recipient_code, order_number) tuples, oldest payment first
    """
    result = await db.execute(
        select(OrderPayment, SchoolPaymentAccount.recipient_code, MaterialOrder.order_number)
        .join(MaterialOrder, MaterialOrder.id == OrderPayment.order_id)
        .join(SchoolPaymentAccount, SchoolPaymentAccount.school_id == OrderPayment.school_id)
        .where(
            OrderPayment.status == PaymentStatus.COMPLETED,
            OrderPayment.transfer_code.is_(None),
            OrderPayment.transfer_status.is_(None),
            SchoolPaymentAccount.is_active.is_(True),
            SchoolPaymentAccount.recipient_code.is_not(None),
        )
        .order_by(OrderPayment.paid_at)
        .limit(limit)
        .with_for_update(of=OrderPayment, skip_locked=True)
    )
    return [(row[0], row[1], row[2]) for row in result.all()]
