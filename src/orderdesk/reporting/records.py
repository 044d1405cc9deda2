"""Uniform field access over Order aggregates and plain order mappings.

Admin views work on whatever the store hands back: live aggregates,
``Order.to_dict()`` rows, or older camelCase records.
"""

from collections.abc import Mapping
from datetime import UTC, datetime

_ALIASES = {
    "id": ("id", "order_id", "orderId", "_id"),
    "delivery_provider": ("delivery_provider", "deliveryProvider"),
    "order_status": ("order_status", "orderStatus"),
    "payment_status": ("payment_status", "paymentStatus"),
    "delivery_status": ("delivery_status", "deliveryStatus"),
    "order_date": ("order_date", "orderDate", "createdAt"),
    "customer_name": ("customer_name", "customerName"),
    "customer_email": ("customer_email", "customerEmail"),
    "customer_phone": ("customer_phone", "customerPhone"),
    "waybill": ("waybill",),
}


def field_value(order, name: str):
    if isinstance(order, Mapping):
        for key in _ALIASES.get(name, (name,)):
            value = order.get(key)
            if value is not None:
                return value
        return None
    return getattr(order, name, None)


def order_date(order) -> datetime | None:
    value = field_value(order, "order_date")
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value
