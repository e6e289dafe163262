"""
Tests for Paystack fee arithmetic, webhook signatures and the API client.
"""

import hashlib
import hmac
import json
from decimal import Decimal

import httpx
import pytest

from edutrack.core.errors import PaymentGatewayError
from edutrack.core.paystack import (
    PaystackClient,
    calculate_transaction_fees,
    from_minor_units,
    to_minor_units,
    verify_webhook_signature,
)

SECRET = "sk_test_secret"


def _sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


# ============================================
# Fees
# ============================================


class TestTransactionFees:
    """Parents pay the subtotal plus 2.95%; the school receives the subtotal."""

    def test_fees_for_100(self):
        fees = calculate_transaction_fees(100)

        assert fees.subtotal == Decimal("100.00")
        assert fees.total_amount == Decimal("102.95")
        assert fees.processing_fee == Decimal("2.95")
        assert fees.gateway_fee == Decimal("1.90")
        assert fees.school_amount == Decimal("100.00")

    def test_rounds_half_up_to_cents(self):
        fees = calculate_transaction_fees("10.10")

        # 10.10 * 1.0295 = 10.39795
        assert fees.total_amount == Decimal("10.40")
        assert fees.processing_fee == Decimal("0.30")

    def test_total_is_subtotal_plus_processing_fee(self):
        fees = calculate_transaction_fees(Decimal("57.33"))
        assert fees.total_amount == fees.subtotal + fees.processing_fee


def test_minor_units():
    assert to_minor_units(Decimal("102.95")) == 10295
    assert to_minor_units(1) == 100
    assert from_minor_units(10295) == Decimal("102.95")


# ============================================
# Webhook signature
# ============================================


class TestWebhookSignature:
    body = b'{"event":"charge.success","data":{"reference":"ORD-1"}}'

    def test_valid_signature(self):
        assert verify_webhook_signature(self.body, _sign(self.body), secret=SECRET)

    def test_tampered_body(self):
        signature = _sign(self.body)
        assert not verify_webhook_signature(self.body + b" ", signature, secret=SECRET)

    def test_wrong_key(self):
        assert not verify_webhook_signature(self.body, _sign(self.body, "other"), secret=SECRET)

    def test_missing_signature(self):
        assert not verify_webhook_signature(self.body, None, secret=SECRET)
        assert not verify_webhook_signature(self.body, "", secret=SECRET)

    def test_missing_secret_rejects(self):
        assert not verify_webhook_signature(self.body, _sign(self.body), secret="")


# ============================================
# Client
# ============================================


def _client(handler) -> PaystackClient:
    return PaystackClient(
        secret_key=SECRET,
        base_url="https://paystack.test",
        currency="GHS",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_initialize_transaction_returns_data():
    """Test that the client posts the checkout and unwraps ``data``."""
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "status": True,
                "message": "Authorization URL created",
                "data": {"authorization_url": "https://checkout", "reference": "ref-1"},
            },
        )

    async with _client(handler) as client:
        data = await client.initialize_transaction(
            email="parent@example.com", amount=10295, reference="ref-1"
        )

    assert data["authorization_url"] == "https://checkout"
    assert captured["path"] == "/transaction/initialize"
    assert captured["auth"] == f"Bearer {SECRET}"
    assert captured["body"]["amount"] == 10295
    assert captured["body"]["currency"] == "GHS"


@pytest.mark.asyncio
async def test_error_status_raises_with_paystack_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"status": False, "message": "Invalid key"})

    async with _client(handler) as client:
        with pytest.raises(PaymentGatewayError) as exc_info:
            await client.verify_transaction("ref-1")

    assert exc_info.value.message == "Invalid key"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_transport_error_raises_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(PaymentGatewayError) as exc_info:
            await client.list_banks()

    assert exc_info.value.message == "Failed to fetch banks"
