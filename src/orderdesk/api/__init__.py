"""OrderDesk API package."""

from orderdesk.api.routes import checkout_router, failed_order_router, order_router, payment_router

__all__ = ["checkout_router", "payment_router", "order_router", "failed_order_router"]
