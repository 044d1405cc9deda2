"""FailedOrder aggregate: snapshot of an order whose payment never completed.

Keyed by the order id, so repeated failure reports for one order overwrite
a single record (last reason wins). Has no lifecycle beyond bulk purge.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from orderdesk.domain import orderdesk


@orderdesk.aggregate
class FailedOrder:
    order_id = Identifier(identifier=True)
    customer_id = Identifier()
    customer_name = String(max_length=200)
    customer_email = String(max_length=254)
    customer_phone = String(max_length=20)
    delivery_provider = String(max_length=20)
    items = Text()  # JSON list of item dicts
    subtotal = Integer(default=0)
    tax = Integer(default=0)
    shipping_total = Integer(default=0)
    total_amount = Integer(default=0)
    currency = String(max_length=3, default="INR")
    distance = Float()
    total_weight = Float()
    gateway_order_ref = String(max_length=100)
    payment_status = String(max_length=20)
    error_message = String(max_length=500)
    error_code = String(max_length=100)
    error_description = String(max_length=500)
    order_date = DateTime()
    failed_at = DateTime()

    @classmethod
    def snapshot(cls, order, reason: str, error_code: str | None = None, error_description: str | None = None):
        """Capture the commerce fields of ``order`` at the moment it failed."""
        pricing = order.pricing
        failed = cls(
            order_id=str(order.id),
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            delivery_provider=order.delivery_provider,
            items=json.dumps(
                [
                    {
                        "item_id": item.item_id,
                        "name": item.name,
                        "quantity": item.quantity,
                        "unit_price": item.unit_price,
                        "weight": item.weight,
                    }
                    for item in order.items
                ]
            ),
            subtotal=pricing.subtotal if pricing else 0,
            tax=pricing.tax if pricing else 0,
            shipping_total=pricing.shipping_total if pricing else 0,
            total_amount=pricing.total_amount if pricing else 0,
            distance=order.distance,
            total_weight=order.total_weight,
            gateway_order_ref=order.gateway_order_ref,
            order_date=order.order_date,
        )
        failed.record(reason, order.payment_status, error_code, error_description)
        return failed

    def record(
        self,
        reason: str,
        payment_status: str,
        error_code: str | None = None,
        error_description: str | None = None,
    ) -> None:
        self.error_message = reason
        self.error_code = error_code
        self.error_description = error_description
        self.payment_status = payment_status
        self.failed_at = datetime.now(UTC)

    @property
    def display_error(self) -> str | None:
        """The most specific error text available."""
        return self.error_description or self.error_message

    @property
    def item_list(self) -> list[dict]:
        return json.loads(self.items) if self.items else []
