"""
Razorpay Payment Service

Infrastructure service for the Razorpay gateway:
- Order creation through the Orders REST API
- Payment signature verification for the checkout callback
"""

import hashlib
import hmac
import logging
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from music_studio.config.settings import get_settings
from music_studio.infrastructure.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    PaymentServiceError,
)


logger = logging.getLogger(__name__)


def to_subunits(amount: int) -> int:
    """Whole rupees to paise (Razorpay amounts are in the smallest unit)."""
    return amount * 100


def compute_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """HMAC-SHA256 of "order_id|payment_id", hex encoded."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class RazorpayService:
    """
    Razorpay payment gateway client.

    Args:
        key_id: Public key id (also returned to the client for checkout)
        key_secret: Secret used for API auth and signature verification
        api_base: Orders API base URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests)
    """

    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        api_base: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._key_id = key_id
        self._key_secret = key_secret
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def key_id(self) -> Optional[str]:
        return self._key_id

    def _require_keys(self) -> None:
        if not self._key_id or not self._key_secret:
            raise ConfigurationError(
                "Razorpay is not configured",
                missing_keys=["RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET"],
            )

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self,
        amount: int,
        currency: str,
        user_id: str,
        plan: str,
    ) -> Dict[str, Any]:
        """
        Create a gateway order.

        Args:
            amount: Amount in whole currency units
            currency: ISO currency code
            user_id: Stored in order notes
            plan: Stored in order notes

        Returns:
            Order JSON as returned by Razorpay (contains "id")

        Raises:
            ConfigurationError: keys missing
            PaymentServiceError: gateway rejected the request or is unreachable
        """
        self._require_keys()

        payload = {
            "amount": to_subunits(amount),
            "currency": currency,
            "receipt": f"receipt_{user_id}_{int(time.time() * 1000)}"[:40],
            "notes": {"user_id": user_id, "plan": plan},
        }

        try:
            async with httpx.AsyncClient(
                base_url=self._api_base,
                auth=(self._key_id, self._key_secret),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post("/orders", json=payload)
                response.raise_for_status()
                order = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Razorpay rejected order for user {user_id}: {e.response.text}")
            raise PaymentServiceError(
                "Failed to create payment order",
                status_code=e.response.status_code,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"Razorpay unreachable while creating order: {e}")
            raise PaymentServiceError("Payment gateway unavailable", original_error=e)

        logger.info(f"Created Razorpay order {order.get('id')} for user {user_id} ({plan})")
        return order

    # =========================================================================
    # Verification
    # =========================================================================

    def verify_payment_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> None:
        """
        Check the signature Razorpay checkout hands back to the client.

        Raises:
            ConfigurationError: keys missing
            InvalidSignatureError: signature does not match
        """
        self._require_keys()

        expected = compute_signature(order_id, payment_id, self._key_secret)
        if not hmac.compare_digest(expected, signature):
            logger.warning(f"Invalid payment signature for order {order_id}")
            raise InvalidSignatureError("Invalid payment signature", order_id=order_id)


@lru_cache
def get_razorpay_service() -> RazorpayService:
    """Cached RazorpayService built from settings."""
    settings = get_settings()
    return RazorpayService(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        api_base=settings.razorpay_api_base,
        timeout=settings.razorpay_timeout_seconds,
    )
