"""Delivery status updates: command and handler.

Used by operators to walk local (SELF) deliveries forward, and as a manual
override for courier orders. Each step re-synchronizes the order status.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.order import Order
from orderdesk.order.stock import settle_stock


@orderdesk.command(part_of="Order")
class UpdateDeliveryStatus:
    order_id = Identifier(required=True)
    delivery_status = String(required=True, max_length=30)
    location = String(max_length=255)


@orderdesk.command_handler(part_of=Order)
class DeliveryStatusHandler:
    @handle(UpdateDeliveryStatus)
    def update_delivery_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_delivery_status(command.delivery_status, location=command.location)
        settle_stock(order)
        repo.add(order)
        return order.delivery_status
