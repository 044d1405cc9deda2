"""Order domain events: immutable facts about order state changes."""

from protean.fields import DateTime, Identifier, Integer, String

from orderdesk.domain import orderdesk


@orderdesk.event(part_of="Order")
class OrderPlaced:
    """A pending order was created at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    delivery_provider = String(required=True)
    total_amount = Integer(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    overridden = String(default="False")
    changed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class PaymentSucceeded:
    """The gateway confirmed payment and the signature verified."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String(required=True)
    amount = Integer(required=True)
    paid_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class PaymentFailed:
    """Payment was declined, cancelled, or failed verification."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_status = String(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class PaymentStatusChanged:
    """An administrator set the payment status by hand."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class DeliveryStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    location = String()
    changed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class ShipmentCreated:
    """The courier accepted the shipment and issued a waybill."""

    __version__ = 1

    order_id = Identifier(required=True)
    waybill = String(required=True)
    created_at = DateTime(required=True)
