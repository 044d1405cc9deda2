"""Payment gateway port (abstract interface).

Checkout creates a gateway-side order; the client widget collects payment
and the gateway calls back with a signed payload that must be verified
server-side before the order is marked paid.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrder:
    """A gateway-side order the client widget pays against."""

    order_ref: str
    amount: int  # paise
    currency: str
    receipt: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Publishable key handed to the client checkout widget."""
        ...

    @abstractmethod
    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        """Create a gateway order for ``amount`` paise."""
        ...

    @abstractmethod
    def verify_payment_signature(self, order_ref: str, payment_id: str, signature: str) -> bool:
        """Check that a success callback was signed by the gateway."""
        ...
