"""
Payments Service Layer

School settlement accounts, payment reporting and the Paystack webhook.

Parents pay the platform; each completed payment's ``school_amount`` is then
transferred to the school's recipient by the settlement job. Paystack reports
transfer outcomes back through the webhook.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import BusinessRuleError, NotFoundError, PaymentGatewayError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.paystack import get_paystack_client, to_minor_units, verify_webhook_signature
from edutrack.core.permissions import COMMERCE_MANAGERS, ensure_role
from edutrack.core.tenancy import resolve_school_id
from edutrack.modules.orders import repository as order_repository
from edutrack.modules.orders.service import complete_payment
from edutrack.modules.payments import repository
from edutrack.modules.payments.models import OrderPayment, SchoolPaymentAccount, TransferStatus
from edutrack.modules.payments.schemas import PaymentAccountConfigure
from edutrack.modules.schools.models import School

logger = logging.getLogger(__name__)

TRANSFER_EVENTS = {
    "transfer.success": TransferStatus.SUCCESS,
    "transfer.failed": TransferStatus.FAILED,
    "transfer.reversed": TransferStatus.REVERSED,
}


# ============================================
# Settlement account
# ============================================


async def configure_account(
    db: AsyncSession, actor: Actor, data: PaymentAccountConfigure
) -> SchoolPaymentAccount:
    """
    Verify the bank account with Paystack, create the subaccount and transfer
    recipient, then create or replace the school's settlement account.

    Raises:
        BusinessRuleError: The account cannot be resolved
        NotFoundError: Unknown school
        PaymentGatewayError: Subaccount or recipient creation failed
    """
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    school = await db.get(School, school_id)
    if school is None:
        raise NotFoundError("School")

    async with get_paystack_client() as client:
        try:
            resolved = await client.resolve_account_number(data.account_number, data.bank_code)
        except PaymentGatewayError as e:
            logger.warning(f"Account verification failed for school {school_id}: {e.message}")
            raise BusinessRuleError(
                "Could not verify account details", error_code="ACCOUNT_VERIFICATION_FAILED"
            ) from e
        if not resolved or not resolved.get("account_number"):
            raise BusinessRuleError("Invalid account details", error_code="INVALID_ACCOUNT")

        subaccount = await client.create_subaccount(
            business_name=school.name,
            settlement_bank=data.bank_code,
            account_number=data.account_number,
            description=f"Subaccount for {school.name}",
        )
        recipient = await client.create_transfer_recipient(
            name=data.account_name,
            account_number=data.account_number,
            bank_code=data.bank_code,
        )

    values: dict[str, Any] = {
        "account_name": data.account_name,
        "account_number": data.account_number,
        "bank_code": data.bank_code,
        "bank_name": data.bank_name,
        "subaccount_code": subaccount.get("subaccount_code"),
        "recipient_code": recipient.get("recipient_code"),
        "is_verified": True,
        "verified_at": datetime.now(UTC),
        "is_active": True,
    }

    account = await repository.get_account(db, school_id)
    if account is None:
        account = SchoolPaymentAccount(school_id=school_id, **values)
        db.add(account)
    else:
        for field, value in values.items():
            setattr(account, field, value)
    await db.flush()
    await db.refresh(account)

    logger.info(f"{actor} configured payment account for school {school_id}")
    return account


async def _get_account(db: AsyncSession, actor: Actor, school_id: str | None) -> SchoolPaymentAccount:
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, school_id)
    account = await repository.get_account(db, school_id)
    if account is None:
        raise NotFoundError("Payment account")
    return account


async def get_account(
    db: AsyncSession, actor: Actor, school_id: str | None = None
) -> SchoolPaymentAccount:
    return await _get_account(db, actor, school_id)


async def set_account_active(
    db: AsyncSession,
    actor: Actor,
    is_active: bool,
    school_id: str | None = None,
) -> SchoolPaymentAccount:
    account = await _get_account(db, actor, school_id)
    account.is_active = is_active
    await db.flush()

    logger.info(f"{actor} set payment account {account.id} active={is_active}")
    return account


async def list_banks(actor: Actor) -> list[dict[str, Any]]:
    ensure_role(actor, COMMERCE_MANAGERS)
    async with get_paystack_client() as client:
        return await client.list_banks()


# ============================================
# Reporting
# ============================================


async def get_statistics(
    db: AsyncSession, actor: Actor, school_id: str | None = None
) -> dict[str, Any]:
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, school_id)
    return await repository.statistics(db, school_id)


async def transfer_history(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    school_id: str | None = None,
) -> tuple[list[OrderPayment], int]:
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, school_id)
    return await paginate(db, repository.transfer_history_query(school_id), params)


# ============================================
# Webhook
# ============================================


async def _handle_charge_success(db: AsyncSession, data: dict[str, Any]) -> None:
    reference = data.get("reference")
    payment = await order_repository.get_payment_by_reference(db, reference) if reference else None
    if payment is None:
        logger.warning(f"Webhook charge.success for unknown reference {reference}")
        return
    await complete_payment(db, payment, data)


async def _handle_transfer_event(
    db: AsyncSession, data: dict[str, Any], status: TransferStatus
) -> None:
    transfer_code = data.get("transfer_code")
    reference = data.get("reference")
    payment = await repository.get_by_transfer_code(db, transfer_code) if transfer_code else None
    if payment is None and reference:
        payment = await repository.get_by_transfer_reference(db, reference)
    if payment is None:
        logger.warning(
            f"Webhook transfer event for unknown transfer {transfer_code or reference}"
        )
        return

    if payment.transfer_code is None:
        payment.transfer_code = transfer_code
    payment.transfer_status = status.value
    if status == TransferStatus.SUCCESS:
        payment.transferred_at = datetime.now(UTC)
    await db.flush()
    logger.info(f"Transfer {transfer_code} for payment {payment.id} is {status.value}")


async def handle_webhook(db: AsyncSession, body: bytes, signature: str | None) -> str:
    """
    Process a Paystack webhook delivery.

    Returns:
        The event name

    Raises:
        BusinessRuleError: Missing or invalid signature, or a malformed body
    """
    if not verify_webhook_signature(body, signature):
        logger.warning("Rejected Paystack webhook with invalid signature")
        raise BusinessRuleError("Invalid signature", error_code="INVALID_SIGNATURE")

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise BusinessRuleError("Invalid webhook payload", error_code="INVALID_PAYLOAD") from e

    event = payload.get("event", "")
    data = payload.get("data") or {}

    if event == "charge.success":
        await _handle_charge_success(db, data)
    elif event in TRANSFER_EVENTS:
        await _handle_transfer_event(db, data, TRANSFER_EVENTS[event])
    else:
        logger.info(f"Unhandled Paystack webhook event: {event}")

    return event


# ============================================
# Settlement
# ============================================


def transfer_reference(payment: OrderPayment) -> str:
    """Stable per payment; Paystack rejects a second transfer with the same reference."""
    return f"TXF-{payment.id}"


async def settle_school_transfers(db: AsyncSession, batch_size: int = 50) -> int:
    """
    Transfer ``school_amount`` for completed payments that have not been sent
    yet. A failed transfer is logged and left for the next run.

    Each initiated transfer is committed on its own so a later failure cannot
    roll back the record of money already sent. The transfer reference is
    derived from the payment id, so the gateway refuses a repeated transfer.

    Returns:
        Number of transfers initiated
    """
    pending = await repository.untransferred_payments(db, batch_size)
    if not pending:
        return 0

    initiated = 0
    async with get_paystack_client() as client:
        for payment, recipient_code, order_number in pending:
            reference = transfer_reference(payment)
            try:
                transfer = await client.initiate_transfer(
                    amount=to_minor_units(payment.school_amount),
                    recipient=recipient_code,
                    reference=reference,
                    reason=f"Payment for order {order_number}",
                )
            except PaymentGatewayError as e:
                logger.error(
                    f"Transfer for payment {payment.id} failed: {e.message}", exc_info=True
                )
                continue

            payment.transfer_code = transfer.get("transfer_code")
            payment.transfer_reference = transfer.get("reference") or reference
            payment.transfer_status = TransferStatus.PENDING.value
            if payment.transfer_code is None:
                logger.warning(
                    f"Transfer {reference} for payment {payment.id} returned no transfer code"
                )
            await db.commit()
            initiated += 1

    logger.info(f"Initiated {initiated} of {len(pending)} school transfer(s)")
    return initiated
