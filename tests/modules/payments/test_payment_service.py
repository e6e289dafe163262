"""
Tests for the payments service: webhook handling, settlement transfers and
account configuration.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import BusinessRuleError, PaymentGatewayError, PermissionDeniedError
from edutrack.modules.payments.models import OrderPayment, SchoolPaymentAccount, TransferStatus
from edutrack.modules.payments.schemas import PaymentAccountConfigure
from edutrack.modules.payments.service import (
    configure_account,
    handle_webhook,
    set_account_active,
    settle_school_transfers,
)
from edutrack.modules.schools.models import School

SERVICE = "edutrack.modules.payments.service"


@pytest.fixture
def paystack():
    """A Paystack client usable as ``async with get_paystack_client() as client``."""
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    return client


def _body(event: str, data: dict) -> bytes:
    return json.dumps({"event": event, "data": data}).encode()


# ============================================
# Webhook
# ============================================


class TestWebhook:
    """Paystack webhook deliveries."""

    @pytest.mark.asyncio
    async def test_invalid_signature_rejected(self, mock_db):
        """Reject a webhook whose signature does not match."""
        with patch(f"{SERVICE}.verify_webhook_signature", return_value=False):
            with pytest.raises(BusinessRuleError) as exc_info:
                await handle_webhook(mock_db, b"{}", "bad")

        assert exc_info.value.error_code == "INVALID_SIGNATURE"

    @pytest.mark.asyncio
    async def test_malformed_body_rejected(self, mock_db):
        """Reject a signed webhook body that is not JSON."""
        with patch(f"{SERVICE}.verify_webhook_signature", return_value=True):
            with pytest.raises(BusinessRuleError) as exc_info:
                await handle_webhook(mock_db, b"not json", "sig")

        assert exc_info.value.error_code == "INVALID_PAYLOAD"

    @pytest.mark.asyncio
    async def test_charge_success_completes_payment(self, mock_db):
        """Complete the payment named by a charge.success event."""
        payment = MagicMock(spec=OrderPayment)
        data = {"reference": "ORD-1-ref", "id": 55, "status": "success"}

        with (
            patch(f"{SERVICE}.verify_webhook_signature", return_value=True),
            patch(f"{SERVICE}.order_repository") as mock_orders,
            patch(f"{SERVICE}.complete_payment", new_callable=AsyncMock) as mock_complete,
        ):
            mock_orders.get_payment_by_reference = AsyncMock(return_value=payment)

            event = await handle_webhook(mock_db, _body("charge.success", data), "sig")

            assert event == "charge.success"
            mock_orders.get_payment_by_reference.assert_awaited_once_with(mock_db, "ORD-1-ref")
            mock_complete.assert_awaited_once_with(mock_db, payment, data)

    @pytest.mark.asyncio
    async def test_charge_success_unknown_reference_is_ignored(self, mock_db):
        """Acknowledge a charge for an unknown reference without changes."""
        with (
            patch(f"{SERVICE}.verify_webhook_signature", return_value=True),
            patch(f"{SERVICE}.order_repository") as mock_orders,
            patch(f"{SERVICE}.complete_payment", new_callable=AsyncMock) as mock_complete,
        ):
            mock_orders.get_payment_by_reference = AsyncMock(return_value=None)

            await handle_webhook(mock_db, _body("charge.success", {"reference": "x"}), "sig")

            mock_complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_transfer_success_marks_payment(self, mock_db):
        """Mark the transfer successful and stamp the transfer time."""
        payment = MagicMock(spec=OrderPayment)
        payment.id = "payment-1"
        payment.transferred_at = None

        with (
            patch(f"{SERVICE}.verify_webhook_signature", return_value=True),
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_repo.get_by_transfer_code = AsyncMock(return_value=payment)

            await handle_webhook(
                mock_db, _body("transfer.success", {"transfer_code": "TRF_1"}), "sig"
            )

            assert payment.transfer_status == "success"
            assert payment.transferred_at is not None

    @pytest.mark.asyncio
    async def test_transfer_failed_keeps_transferred_at_empty(self, mock_db):
        """A failed transfer leaves the transfer time unset."""
        payment = MagicMock(spec=OrderPayment)
        payment.transferred_at = None

        with (
            patch(f"{SERVICE}.verify_webhook_signature", return_value=True),
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_repo.get_by_transfer_code = AsyncMock(return_value=payment)

            await handle_webhook(mock_db, _body("transfer.failed", {"transfer_code": "TRF_1"}), "sig")

            assert payment.transfer_status == TransferStatus.FAILED.value
            assert payment.transferred_at is None

    @pytest.mark.asyncio
    async def test_unknown_event_is_acknowledged(self, mock_db):
        """Acknowledge events that need no handling."""
        with patch(f"{SERVICE}.verify_webhook_signature", return_value=True):
            event = await handle_webhook(mock_db, _body("customeridentification.success", {}), "s")

        assert event == "customeridentification.success"


# ============================================
# Settlement
# ============================================


def _payment(payment_id: str, amount: str) -> MagicMock:
    payment = MagicMock(spec=OrderPayment)
    payment.id = payment_id
    payment.school_amount = Decimal(amount)
    payment.transfer_code = None
    payment.transfer_reference = None
    payment.transfer_status = None
    return payment


class TestSettlement:
    """Transfers of school amounts to settlement accounts."""

    @pytest.mark.asyncio
    async def test_continues_after_failed_transfer(self, mock_db, paystack):
        """One failed transfer does not stop the batch."""
        failing = _payment("payment-1", "50.00")
        succeeding = _payment("payment-2", "100.00")
        paystack.initiate_transfer = AsyncMock(
            side_effect=[
                PaymentGatewayError("Insufficient balance"),
                {"transfer_code": "TRF_2", "reference": "TXF-payment-2"},
            ]
        )

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.get_paystack_client", return_value=paystack),
        ):
            mock_repo.untransferred_payments = AsyncMock(
                return_value=[(failing, "RCP_1", "ORD-1"), (succeeding, "RCP_2", "ORD-2")]
            )

            initiated = await settle_school_transfers(mock_db)

            assert initiated == 1
            assert failing.transfer_code is None
            assert failing.transfer_status is None
            assert succeeding.transfer_code == "TRF_2"
            assert succeeding.transfer_status == "pending"
            mock_db.commit.assert_awaited_once()

            second_call = paystack.initiate_transfer.call_args_list[1].kwargs
            assert second_call["amount"] == 10000
            assert second_call["recipient"] == "RCP_2"
            assert second_call["reference"] == "TXF-payment-2"
            assert second_call["reason"] == "Payment for order ORD-2"

    @pytest.mark.asyncio
    async def test_each_transfer_committed_before_the_next(self, mock_db, paystack):
        """A commit failure mid-batch keeps earlier transfers recorded and stops the run."""
        first = _payment("payment-1", "10.00")
        second = _payment("payment-2", "20.00")
        third = _payment("payment-3", "30.00")
        paystack.initiate_transfer = AsyncMock(
            side_effect=[
                {"transfer_code": "TRF_1", "reference": "TXF-payment-1"},
                {"transfer_code": "TRF_2", "reference": "TXF-payment-2"},
                {"transfer_code": "TRF_3", "reference": "TXF-payment-3"},
            ]
        )
        mock_db.commit = AsyncMock(side_effect=[None, RuntimeError("connection lost")])

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.get_paystack_client", return_value=paystack),
        ):
            mock_repo.untransferred_payments = AsyncMock(
                return_value=[
                    (first, "RCP", "ORD-1"),
                    (second, "RCP", "ORD-2"),
                    (third, "RCP", "ORD-3"),
                ]
            )

            with pytest.raises(RuntimeError):
                await settle_school_transfers(mock_db)

        assert mock_db.commit.await_count == 2
        assert paystack.initiate_transfer.await_count == 2
        assert third.transfer_code is None

    @pytest.mark.asyncio
    async def test_reference_is_stable_across_runs(self, mock_db, paystack):
        """A retried payment is sent with the same reference."""
        payment = _payment("payment-7", "15.00")
        paystack.initiate_transfer = AsyncMock(
            side_effect=[PaymentGatewayError("Timeout"), {"transfer_code": "TRF_7"}]
        )

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.get_paystack_client", return_value=paystack),
        ):
            mock_repo.untransferred_payments = AsyncMock(return_value=[(payment, "RCP", "ORD-7")])

            await settle_school_transfers(mock_db)
            await settle_school_transfers(mock_db)

        references = [c.kwargs["reference"] for c in paystack.initiate_transfer.call_args_list]
        assert references == ["TXF-payment-7", "TXF-payment-7"]
        assert payment.transfer_reference == "TXF-payment-7"

    @pytest.mark.asyncio
    async def test_missing_transfer_code_still_marks_pending(self, mock_db, paystack):
        """A transfer without a code is recorded by reference so it is not sent again."""
        payment = _payment("payment-4", "40.00")
        paystack.initiate_transfer = AsyncMock(return_value={"status": "otp"})

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.get_paystack_client", return_value=paystack),
        ):
            mock_repo.untransferred_payments = AsyncMock(return_value=[(payment, "RCP", "ORD-4")])

            assert await settle_school_transfers(mock_db) == 1

        assert payment.transfer_code is None
        assert payment.transfer_reference == "TXF-payment-4"
        assert payment.transfer_status == "pending"

    @pytest.mark.asyncio
    async def test_nothing_pending(self, mock_db):
        """No gateway client is created when nothing is due."""
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.get_paystack_client") as mock_factory,
        ):
            mock_repo.untransferred_payments = AsyncMock(return_value=[])

            assert await settle_school_transfers(mock_db) == 0
            mock_factory.assert_not_called()


@pytest.mark.asyncio
async def test_transfer_event_matched_by_reference(mock_db):
    """A transfer recorded without a code is matched on its reference."""
    payment = _payment("payment-4", "40.00")

    with (
        patch(f"{SERVICE}.verify_webhook_signature", return_value=True),
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_repo.get_by_transfer_code = AsyncMock(return_value=None)
        mock_repo.get_by_transfer_reference = AsyncMock(return_value=payment)

        await handle_webhook(
            mock_db,
            _body("transfer.success", {"transfer_code": "TRF_4", "reference": "TXF-payment-4"}),
            "sig",
        )

    mock_repo.get_by_transfer_reference.assert_awaited_once_with(mock_db, "TXF-payment-4")
    assert payment.transfer_code == "TRF_4"
    assert payment.transfer_status == "success"


# ============================================
# Settlement account
# ============================================


def _configure_request():
    return PaymentAccountConfigure(
        account_name="Accra Academy",
        account_number="0123456789",
        bank_code="GCB",
        bank_name="GCB Bank",
    )


@pytest.mark.asyncio
async def test_parent_cannot_configure_account(mock_db, parent):
    """Only school managers configure the settlement account."""
    with pytest.raises(PermissionDeniedError):
        await configure_account(mock_db, parent, _configure_request())


@pytest.mark.asyncio
async def test_unverifiable_account_rejected(mock_db, principal, paystack):
    """Reject bank details the gateway cannot resolve."""
    school = MagicMock(spec=School)
    school.name = "Accra Academy"
    mock_db.get = AsyncMock(return_value=school)
    paystack.resolve_account_number = AsyncMock(side_effect=PaymentGatewayError("Could not resolve"))

    with patch(f"{SERVICE}.get_paystack_client", return_value=paystack):
        with pytest.raises(BusinessRuleError) as exc_info:
            await configure_account(mock_db, principal, _configure_request())

    assert exc_info.value.error_code == "ACCOUNT_VERIFICATION_FAILED"
    paystack.create_subaccount.assert_not_called()


@pytest.mark.asyncio
async def test_configure_creates_verified_account(mock_db, principal, paystack):
    """Store a verified account with gateway codes."""
    school = MagicMock(spec=School)
    school.name = "Accra Academy"
    mock_db.get = AsyncMock(return_value=school)
    paystack.resolve_account_number = AsyncMock(return_value={"account_number": "0123456789"})
    paystack.create_subaccount = AsyncMock(return_value={"subaccount_code": "ACCT_1"})
    paystack.create_transfer_recipient = AsyncMock(return_value={"recipient_code": "RCP_1"})

    with (
        patch(f"{SERVICE}.get_paystack_client", return_value=paystack),
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_repo.get_account = AsyncMock(return_value=None)

        account = await configure_account(mock_db, principal, _configure_request())

        assert account.school_id == principal.school_id
        assert account.subaccount_code == "ACCT_1"
        assert account.recipient_code == "RCP_1"
        assert account.is_verified is True
        mock_db.add.assert_called_once_with(account)


@pytest.mark.asyncio
async def test_deactivate_account(mock_db, school_admin):
    """Switch the settlement account off."""
    account = MagicMock(spec=SchoolPaymentAccount)
    account.id = "account-1"
    account.is_active = True

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_account = AsyncMock(return_value=account)

        result = await set_account_active(mock_db, school_admin, False)

        assert result.is_active is False
        mock_repo.get_account.assert_awaited_once_with(mock_db, school_admin.school_id)
