"""Summary counts for the admin order console."""

from dataclasses import asdict, dataclass, field

from orderdesk.order.order import DeliveryProvider
from orderdesk.reporting.records import field_value

COUNTED_ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered")


@dataclass(frozen=True)
class OrderStats:
    total: int = 0
    by_provider: dict = field(default_factory=lambda: {p.value: 0 for p in DeliveryProvider})
    by_order_status: dict = field(default_factory=lambda: dict.fromkeys(COUNTED_ORDER_STATUSES, 0))

    def to_dict(self) -> dict:
        return asdict(self)


def compute_stats(orders) -> OrderStats:
    """Count orders by provider and by the four active order statuses.

    Provider spellings are folded together (``delhivery`` counts as
    ``DELHIVERY``); unknown providers and other statuses only add to the total.
    """
    by_provider = {p.value: 0 for p in DeliveryProvider}
    by_status = dict.fromkeys(COUNTED_ORDER_STATUSES, 0)
    total = 0
    for order in orders:
        total += 1
        provider = (field_value(order, "delivery_provider") or "").strip().upper()
        if provider in by_provider:
            by_provider[provider] += 1
        status = (field_value(order, "order_status") or "").strip().lower()
        if status in by_status:
            by_status[status] += 1
    return OrderStats(total=total, by_provider=by_provider, by_order_status=by_status)
