"""
Paystack Payment Gateway

Async client for the Paystack REST API (transactions, subaccounts, transfer
recipients, transfers, bank lookups), the webhook signature check, and the
fee calculation applied to material orders.

Amounts sent to Paystack are in minor units (pesewas/kobo).
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import httpx

from edutrack.core.config import settings
from edutrack.core.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

# Parents pay subtotal x 1.0295 so the school still receives the full
# subtotal after Paystack's 1.9% charge.
TOTAL_MULTIPLIER = Decimal("1.0295")
GATEWAY_RATE = Decimal("0.019")

_CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TransactionFees:
    subtotal: Decimal
    total_amount: Decimal
    processing_fee: Decimal
    gateway_fee: Decimal
    school_amount: Decimal


def calculate_transaction_fees(subtotal: Decimal | int | float | str) -> TransactionFees:
    """
    Split an order subtotal into what the parent pays and what the school gets.

    >>> calculate_transaction_fees(100).total_amount
    Decimal('102.95')
    """
    subtotal = _money(Decimal(str(subtotal)))
    total = _money(subtotal * TOTAL_MULTIPLIER)

    return TransactionFees(
        subtotal=subtotal,
        total_amount=total,
        processing_fee=total - subtotal,
        gateway_fee=_money(subtotal * GATEWAY_RATE),
        school_amount=subtotal,
    )


def to_minor_units(amount: Decimal | int | float | str) -> int:
    """Convert a major-unit amount to integer pesewas/kobo."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return _money(Decimal(amount) / 100)


def verify_webhook_signature(body: bytes, signature: str | None, secret: str | None = None) -> bool:
    """
    Check the ``x-paystack-signature`` header against the raw request body.

    Paystack signs the body with HMAC-SHA512 keyed by the secret key.
    """
    if not signature:
        return False

    key = secret if secret is not None else settings.paystack_secret_key
    if not key:
        logger.error("Paystack secret key is not configured; rejecting webhook")
        return False

    expected = hmac.new(key.encode("utf-8"), body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)


class PaystackClient:
    """
    Thin async wrapper over the Paystack API.

    Every method returns the ``data`` member of Paystack's response envelope
    and raises ``PaymentGatewayError`` with Paystack's message on failure.

    Usage:
        async with PaystackClient() as paystack:
            data = await paystack.verify_transaction(reference)
    """

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        currency: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.currency = currency or settings.paystack_currency
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.paystack_base_url,
            headers={
                "Authorization": f"Bearer {secret_key or settings.paystack_secret_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout or settings.paystack_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "PaystackClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        failure_message: str,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Paystack {method} {path} transport error: {e}", exc_info=True)
            raise PaymentGatewayError(failure_message) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error or not payload.get("status", False):
            message = payload.get("message") or failure_message
            logger.error(f"Paystack {method} {path} failed ({response.status_code}): {message}")
            raise PaymentGatewayError(message)

        return payload.get("data")

    async def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        reference: str,
        callback_url: str | None = None,
        metadata: dict[str, Any] | None = None,
        subaccount: str | None = None,
    ) -> dict[str, Any]:
        """Start a checkout. ``amount`` is in minor units."""
        payload: dict[str, Any] = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "currency": self.currency,
        }
        if callback_url:
            payload["callback_url"] = callback_url
        if metadata:
            payload["metadata"] = metadata
        if subaccount:
            payload["subaccount"] = subaccount

        return await self._request(
            "POST", "/transaction/initialize", "Payment initialization failed", json=payload
        )

    async def verify_transaction(self, reference: str) -> dict[str, Any]:
        return await self._request(
            "GET", f"/transaction/verify/{reference}", "Payment verification failed"
        )

    async def create_subaccount(
        self,
        *,
        business_name: str,
        settlement_bank: str,
        account_number: str,
        percentage_charge: float = 0,
        description: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "business_name": business_name,
            "settlement_bank": settlement_bank,
            "account_number": account_number,
            "percentage_charge": percentage_charge,
        }
        if description:
            payload["description"] = description

        return await self._request("POST", "/subaccount", "Subaccount creation failed", json=payload)

    async def create_transfer_recipient(
        self,
        *,
        name: str,
        account_number: str,
        bank_code: str,
        recipient_type: str = "ghipss",
    ) -> dict[str, Any]:
        payload = {
            "type": recipient_type,
            "name": name,
            "account_number": account_number,
            "bank_code": bank_code,
            "currency": self.currency,
        }
        return await self._request(
            "POST", "/transferrecipient", "Transfer recipient creation failed", json=payload
        )

    async def initiate_transfer(
        self,
        *,
        amount: int,
        recipient: str,
        reference: str,
        reason: str | None = None,
    ) -> dict[str, Any]:
        """Pay ``amount`` (minor units) from the Paystack balance to a recipient."""
        payload: dict[str, Any] = {
            "source": "balance",
            "amount": amount,
            "recipient": recipient,
            "reference": reference,
            "currency": self.currency,
        }
        if reason:
            payload["reason"] = reason

        return await self._request("POST", "/transfer", "Transfer initiation failed", json=payload)

    async def resolve_account_number(self, account_number: str, bank_code: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            "/bank/resolve",
            "Account verification failed",
            params={"account_number": account_number, "bank_code": bank_code},
        )

    async def list_banks(self) -> list[dict[str, Any]]:
        return await self._request(
            "GET", "/bank", "Failed to fetch banks", params={"currency": self.currency}
        )

    async def verify_transfer(self, transfer_code: str) -> dict[str, Any]:
        return await self._request(
            "GET", f"/transfer/verify/{transfer_code}", "Transfer verification failed"
        )


def get_paystack_client() -> PaystackClient:
    """Factory used by services; patched in tests."""
    return PaystackClient()


__all__ = [
    "PaystackClient",
    "TransactionFees",
    "calculate_transaction_fees",
    "from_minor_units",
    "get_paystack_client",
    "to_minor_units",
    "verify_webhook_signature",
]
