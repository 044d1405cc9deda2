"""Manual order status changes: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.order import Order
from orderdesk.order.stock import settle_stock


@orderdesk.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order through its lifecycle from the admin console."""

    order_id = Identifier(required=True)
    order_status = String(required=True, max_length=20)
    override = Boolean(default=False)


@orderdesk.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.apply_transition(command.order_status, override=bool(command.override))
        settle_stock(order)
        repo.add(order)
        return order.order_status
