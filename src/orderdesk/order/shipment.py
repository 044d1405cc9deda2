"""Shipment dispatch: courier shipment creation and tracking refresh.

Only DELHIVERY orders are shipped through the courier; SELF orders are
walked forward by hand with ``UpdateDeliveryStatus``. Shipment creation is
not guaranteed idempotent on the courier side, so each invocation makes
exactly one courier call and never retries. Asking again for an order that
already has a waybill returns that waybill without calling the courier.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from orderdesk.courier import get_courier
from orderdesk.domain import orderdesk
from orderdesk.errors import OrderDeskError, ShipmentCreationFailed, TrackingUnavailable, TransientIOError
from orderdesk.order.order import DeliveryProvider, Order, OrderStatus, PaymentStatus
from orderdesk.order.stock import settle_stock
from orderdesk.utils.logging import bind_order

logger = structlog.get_logger(__name__)

_DISPATCH_BATCH = 100


@orderdesk.command(part_of="Order")
class CreateShipment:
    """Book the courier shipment for a confirmed, paid order."""

    order_id = Identifier(required=True)


@orderdesk.command(part_of="Order")
class TrackShipment:
    """Refresh courier tracking and sync delivery status."""

    order_id = Identifier(required=True)


def _consignee(order: Order) -> dict:
    address = order.shipping_address
    if address is None:
        return {"phone": order.customer_phone}
    return {
        "first_name": address.first_name,
        "last_name": address.last_name,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "postcode": address.postcode,
        "phone": address.phone or order.customer_phone,
    }


@orderdesk.command_handler(part_of=Order)
class ShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bind_order(str(order.id))

        if order.waybill:
            logger.info("Shipment already exists", order_id=str(order.id), waybill=order.waybill)
            return order.waybill

        order.assert_shippable()
        try:
            result = get_courier().create_shipment(
                order_id=str(order.id),
                consignee=_consignee(order),
                total_weight=order.total_weight,
                declared_value=order.pricing.total_amount if order.pricing else None,
            )
        except TransientIOError as exc:
            raise ShipmentCreationFailed(exc.message, order_id=str(order.id)) from exc

        if result.get("error") or not result.get("waybill"):
            message = result.get("error") or "Courier did not return a waybill"
            logger.warning("Shipment creation failed", order_id=str(order.id), error=message)
            raise ShipmentCreationFailed(message, order_id=str(order.id))

        order.record_shipment(result["waybill"])
        repo.add(order)
        logger.info("Shipment created", order_id=str(order.id), waybill=order.waybill)
        return order.waybill

    @handle(TrackShipment)
    def track_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bind_order(str(order.id))

        if not order.waybill:
            raise TrackingUnavailable("Order has no waybill yet", order_id=str(order.id))

        try:
            result = get_courier().track(order.waybill)
        except TransientIOError as exc:
            raise TrackingUnavailable(exc.message, order_id=str(order.id)) from exc
        if result.get("error"):
            raise TrackingUnavailable(result["error"], order_id=str(order.id))

        changed = order.apply_tracking(result.get("delivery_status"), result.get("location"))
        settle_stock(order)
        repo.add(order)
        return {
            "status": result.get("status"),
            "location": result.get("location"),
            "delivery_status": order.delivery_status,
            "order_status": order.order_status,
            "changed": changed,
        }


def dispatch_pending_shipments() -> dict:
    """Attempt one shipment for every courier order still waiting for a waybill.

    Meant to be triggered by an external scheduler through the maintenance
    endpoint. Failures are logged and counted; the next sweep is the retry.
    """
    query = current_domain.repository_for(Order)._dao.query.filter(
        delivery_provider=DeliveryProvider.DELHIVERY.value,
        order_status=OrderStatus.CONFIRMED.value,
        payment_status=PaymentStatus.PAID.value,
    )

    # Shipped orders stay confirmed, so walk every page before picking.
    candidates = []
    offset = 0
    while True:
        page = query.order_by("order_date").offset(offset).limit(_DISPATCH_BATCH).all()
        candidates.extend(page.items)
        offset += len(page.items)
        if not page.items or offset >= page.total:
            break
    pending = [order for order in candidates if not order.waybill]

    created, failed = 0, 0
    for order in pending:
        try:
            current_domain.process(CreateShipment(order_id=str(order.id)), asynchronous=False)
            created += 1
        except (OrderDeskError, ValidationError) as exc:
            failed += 1
            logger.warning(
                "Automatic shipment creation failed",
                order_id=str(order.id),
                error=getattr(exc, "message", None) or str(exc),
            )

    logger.info("Shipment dispatch complete", created=created, failed=failed)
    return {"created": created, "failed": failed}
