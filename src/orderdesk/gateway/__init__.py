"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (default)
- RazorpayGateway when GATEWAY_ADAPTER=razorpay
"""

import os

from orderdesk.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the configured payment gateway (singleton)."""
    global _current_gateway
    if _current_gateway is None:
        adapter = os.environ.get("GATEWAY_ADAPTER", "fake")
        if adapter == "fake":
            from orderdesk.gateway.fake_adapter import FakeGateway

            _current_gateway = FakeGateway()
        elif adapter == "razorpay":
            from orderdesk.gateway.razorpay_adapter import RazorpayGateway

            _current_gateway = RazorpayGateway(
                key_id=os.environ["RAZORPAY_KEY_ID"],
                key_secret=os.environ["RAZORPAY_KEY_SECRET"],
            )
        else:
            raise ValueError(f"Unknown gateway adapter: {adapter}")
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
