"""Paginated order listing for the admin console."""

import math

from protean.utils.globals import current_domain

from orderdesk.order.order import Order
from orderdesk.reporting.filters import OrderFilters, filter_orders
from orderdesk.reporting.stats import compute_stats


def list_orders(page: int = 1, size: int = 20, filters: OrderFilters | None = None) -> dict:
    """Newest orders first. Stats cover the whole page; ``orders`` is filtered."""
    page = max(page, 1)
    result = (
        current_domain.repository_for(Order)
        ._dao.query.order_by("-order_date")
        .offset((page - 1) * size)
        .limit(size)
        .all()
    )
    return {
        "orders": filter_orders(result.items, filters),
        "stats": compute_stats(result.items),
        "pagination": {
            "page": page,
            "size": size,
            "total": result.total,
            "pages": math.ceil(result.total / size) if size else 0,
        },
    }
