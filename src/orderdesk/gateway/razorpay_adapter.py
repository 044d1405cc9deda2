"""Razorpay gateway adapter.

Talks to the Razorpay Orders REST API with ``requests`` and verifies
checkout signatures locally: the signature is the hex HMAC-SHA256 of
``"<order_id>|<payment_id>"`` keyed with the account secret.
"""

import hashlib
import hmac

import requests
import structlog

from orderdesk.errors import TransientIOError
from orderdesk.gateway.port import GatewayOrder, PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    """Production Razorpay adapter."""

    def __init__(self, key_id: str, key_secret: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 10) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def public_key(self) -> str:
        return self.key_id

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        payload = {"amount": amount, "currency": currency, "receipt": receipt}
        try:
            response = requests.post(
                f"{self.base_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Razorpay order creation failed", receipt=receipt, error=str(exc))
            raise TransientIOError(f"Payment gateway unavailable: {exc}", receipt=receipt) from exc

        data = response.json()
        logger.info("Razorpay order created", receipt=receipt, order_ref=data.get("id"))
        return GatewayOrder(
            order_ref=data["id"],
            amount=int(data.get("amount", amount)),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
        )

    def expected_signature(self, order_ref: str, payment_id: str) -> str:
        message = f"{order_ref}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_payment_signature(self, order_ref: str, payment_id: str, signature: str) -> bool:
        if not (order_ref and payment_id and signature):
            return False
        return hmac.compare_digest(self.expected_signature(order_ref, payment_id), signature)
