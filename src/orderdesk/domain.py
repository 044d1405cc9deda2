"""OrderDesk bounded context: checkout, payment reconciliation, order lifecycle
and shipment dispatch for a single-storefront Indian e-commerce shop.

Uses CQRS (not event sourcing): order state is owned here, but payment and
courier outcomes arrive from external systems and are written back as
plain state changes.
"""

import structlog
from protean.domain import Domain

logger = structlog.get_logger(__name__)

orderdesk = Domain(name="orderdesk")
