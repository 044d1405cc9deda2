"""Stock settlement for delivered orders.

Delivered orders hand their items to the inventory collaborator exactly
once. ``stock_decremented_at`` guards against repeats on our side; the
inventory adapter is also keyed by order id, so a retried request after a
failed save does not decrement twice.
"""

import structlog

from orderdesk.inventory import get_inventory
from orderdesk.order.order import Order

logger = structlog.get_logger(__name__)


def settle_stock(order: Order) -> bool:
    """Decrement stock if ``order`` was just delivered. Returns True when it did."""
    if not order.needs_stock_decrement:
        return False

    items = [{"item_id": item.item_id, "name": item.name, "quantity": item.quantity} for item in order.items]
    applied = get_inventory().decrement_stock(str(order.id), items)
    order.mark_stock_decremented()
    logger.info(
        "Stock settled for delivered order",
        order_id=str(order.id),
        item_count=len(items),
        already_processed=not applied,
    )
    return True
