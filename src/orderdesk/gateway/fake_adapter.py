"""Configurable fake payment gateway for development and testing.

No external calls are made. Orders get deterministic-looking references and
the only signature accepted is ``"test-signature"``. Can be configured at
runtime (see ``/payments/gateway/configure``) to reject order creation.
"""

from uuid import uuid4

from orderdesk.errors import TransientIOError
from orderdesk.gateway.port import GatewayOrder, PaymentGateway

VALID_TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    @property
    def public_key(self) -> str:
        return "rzp_test_fake"

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        self.calls.append({"method": "create_order", "amount": amount, "currency": currency, "receipt": receipt})
        if not self.should_succeed:
            raise TransientIOError(self.failure_reason)
        return GatewayOrder(
            order_ref=f"order_fake_{uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )

    def verify_payment_signature(self, order_ref: str, payment_id: str, signature: str) -> bool:
        self.calls.append(
            {
                "method": "verify_payment_signature",
                "order_ref": order_ref,
                "payment_id": payment_id,
            }
        )
        return signature == VALID_TEST_SIGNATURE
