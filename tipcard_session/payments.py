"""
Tip payments.

Creates a payment intent with the card processor for a guest's tip and
returns the client secret the guest's browser uses to confirm the charge.
Confirmation happens client-side; nothing here tracks payment state.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import aiohttp

from .config import TipcardConfig
from .exceptions import PaymentError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class TipPayment:
    """A tip from a guest to a staff member.

    Attributes:
        amount: Tip in major currency units (e.g. dollars)
        staff_id: Staff member receiving the tip
        room_id: Room the guest scanned the code in
        feedback: Optional free-text feedback
        rating: Optional rating
    """

    amount: Decimal | float | int | str
    staff_id: str
    room_id: str
    feedback: str | None = None
    rating: str | None = None

    def minor_units(self) -> int:
        """Amount in minor currency units (cents)."""
        try:
            amount = Decimal(str(self.amount))
        except ArithmeticError as e:
            raise ValidationError("amount", "must be a number", str(self.amount)) from e
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("amount", "must be greater than zero", str(self.amount))
        return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def metadata(self) -> dict[str, str]:
        data = {"staffId": self.staff_id, "roomId": self.room_id}
        if self.feedback:
            data["feedback"] = self.feedback
        if self.rating:
            data["rating"] = str(self.rating)
        return data


class PaymentIntentClient:
    """Client for the processor's payment-intent endpoint.

    Example:
        >>> client = PaymentIntentClient(secret_key="sk_test_...")
        >>> secret = await client.create_payment_intent(
        ...     TipPayment(amount=5, staff_id="staff-1", room_id="101")
        ... )
    """

    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        currency: str = "usd",
        session: aiohttp.ClientSession | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not secret_key:
            raise PaymentError("Payment secret key is required")
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: TipcardConfig) -> PaymentIntentClient:
        return cls(
            secret_key=config.payment_secret_key or "",
            api_base=config.payment_api_base,
            currency=config.currency,
        )

    async def create_payment_intent(self, payment: TipPayment) -> str:
        """Create a payment intent for a tip.

        Returns:
            The client secret used to confirm the charge

        Raises:
            ValidationError: If the amount is not positive
            PaymentError: If the processor rejects the request or is unreachable
        """
        form: dict[str, Any] = {
            "amount": str(payment.minor_units()),
            "currency": self.currency,
        }
        for key, value in payment.metadata().items():
            form[f"metadata[{key}]"] = value

        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

        url = f"{self.api_base}/v1/payment_intents"
        try:
            async with self._session.post(
                url, data=form, auth=aiohttp.BasicAuth(self.secret_key, "")
            ) as response:
                status = response.status
                body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            logger.error(f"Error creating payment intent: {e}")
            raise PaymentError("Failed to create payment intent", cause=e) from e

        if status != 200 or not body or "client_secret" not in body:
            message = ((body or {}).get("error") or {}).get("message", "unknown error")
            logger.error(f"Payment intent rejected ({status}): {message}")
            raise PaymentError(f"Failed to create payment intent: {message}", status=status)

        return body["client_secret"]

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
