"""Failed-order console: paginated listing and bulk purge."""

import math

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.failed_order.failed_order import FailedOrder

logger = structlog.get_logger(__name__)

_PURGE_BATCH = 200


@orderdesk.command(part_of="FailedOrder")
class PurgeFailedOrders:
    """Delete every failed-order record."""

    requested_by = String(max_length=100)


@orderdesk.command_handler(part_of=FailedOrder)
class PurgeFailedOrdersHandler:
    @handle(PurgeFailedOrders)
    def purge_failed_orders(self, command):
        dao = current_domain.repository_for(FailedOrder)._dao

        records = []
        offset = 0
        while True:
            page = dao.query.offset(offset).limit(_PURGE_BATCH).all()
            records.extend(page.items)
            offset += len(page.items)
            if not page.items or offset >= page.total:
                break

        for record in records:
            dao.delete(record)

        logger.info("Failed orders purged", purged_count=len(records), requested_by=command.requested_by)
        return len(records)


def list_failed_orders(page: int = 1, size: int = 20) -> dict:
    """Newest failures first, one page at a time."""
    page = max(page, 1)
    result = (
        current_domain.repository_for(FailedOrder)
        ._dao.query.order_by("-failed_at")
        .offset((page - 1) * size)
        .limit(size)
        .all()
    )
    return {
        "failed_orders": result.items,
        "pagination": {
            "page": page,
            "size": size,
            "total": result.total,
            "pages": math.ceil(result.total / size) if size else 0,
        },
    }
