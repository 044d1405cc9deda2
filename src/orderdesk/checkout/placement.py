"""Order placement: command and handler.

Checkout submits the delivery address and cart. The handler validates the
address, quotes delivery, reuses or saves the address, creates the pending
order and opens a gateway order for the client widget to pay against. Any
failure along the way leaves nothing behind.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from orderdesk.checkout.address_book import remember_address
from orderdesk.checkout.quote import quote_delivery
from orderdesk.domain import orderdesk
from orderdesk.gateway import get_gateway
from orderdesk.order.order import Order, ShippingAddress

logger = structlog.get_logger(__name__)

ADDRESS_FIELDS = (
    "address_type",
    "first_name",
    "last_name",
    "street",
    "city",
    "state",
    "postcode",
    "email",
    "phone",
)
REQUIRED_FIELDS = ADDRESS_FIELDS


@orderdesk.command(part_of="Order")
class PlaceOrder:
    """Submit checkout: delivery address plus cart lines."""

    customer_id = Identifier()
    address_type = String(max_length=20)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    street = String(max_length=500)
    city = String(max_length=100)
    state = String(max_length=100)
    postcode = String(max_length=10)
    email = String(max_length=254)
    phone = String(max_length=20)
    items = Text(required=True)  # JSON list of {item_id, name, quantity, unit_price, weight}


def _address_details(command) -> dict:
    details = {field: (getattr(command, field) or "").strip() for field in ADDRESS_FIELDS}
    missing = [field for field in REQUIRED_FIELDS if not details[field]]
    if missing:
        raise ValidationError({field: ["Required for checkout"] for field in missing})
    return details


@orderdesk.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        details = _address_details(command)
        quote = quote_delivery(details["postcode"])
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        address_id = remember_address(str(command.customer_id), details) if command.customer_id else None

        order = Order.create(
            items_data=items_data,
            delivery_provider=quote["delivery_provider"],
            shipping_total=quote["fee"],
            distance=quote["distance_km"],
            customer_id=command.customer_id,
            customer_name=f"{details['first_name']} {details['last_name']}",
            customer_email=details["email"],
            customer_phone=details["phone"],
            address_id=address_id,
            shipping_address=ShippingAddress(**details),
        )

        gateway = get_gateway()
        gateway_order = gateway.create_order(
            amount=order.pricing.total_amount,
            currency=order.pricing.currency,
            receipt=str(order.id),
        )
        order.gateway_order_ref = gateway_order.order_ref
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            delivery_provider=order.delivery_provider,
            total_amount=order.pricing.total_amount,
            gateway_order_ref=gateway_order.order_ref,
        )
        return {
            "order_id": str(order.id),
            "gateway_order_ref": gateway_order.order_ref,
            "amount": gateway_order.amount,
            "currency": gateway_order.currency,
            "key": gateway.public_key,
        }
