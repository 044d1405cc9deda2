"""Order aggregate (CQRS): the core of the OrderDesk domain.

An order carries three correlated state variables: ``order_status`` (the
manual lifecycle), ``payment_status`` (driven by gateway callbacks) and
``delivery_status`` (driven by the courier or by hand for local delivery).

Order lifecycle:
    pending → {confirmed, cancelled}
    confirmed → {shipped, delivered, cancelled}
    shipped → {delivered, cancelled}
    failed → pending (re-submission)
    delivered, cancelled are terminal

Delivery progress never moves backward:
    PENDING → SHIPMENT_CREATED → OUT_FOR_DELIVERY → DELIVERED
    SHIPMENT_CREATED / OUT_FOR_DELIVERY → RTO

Delivery updates drive the order forward: OUT_FOR_DELIVERY ships a
pending/confirmed order, DELIVERED delivers any order that is not cancelled.
"""

import re
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from orderdesk.config import CURRENCY
from orderdesk.domain import orderdesk
from orderdesk.errors import InvalidTransition
from orderdesk.money import gst_on
from orderdesk.order.events import (
    DeliveryStatusChanged,
    OrderPlaced,
    OrderStatusChanged,
    PaymentFailed,
    PaymentStatusChanged,
    PaymentSucceeded,
    ShipmentCreated,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class _ParsableEnum(Enum):
    """Enum that accepts legacy spellings at the input boundary."""

    @classmethod
    def _normalize(cls, raw: str) -> str:
        return raw.strip().lower()

    @classmethod
    def _aliases(cls) -> dict:
        return {}

    @classmethod
    def _field(cls) -> str:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValidationError({cls._field(): ["Status is required"]})
        key = cls._normalize(str(value))
        key = cls._aliases().get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValidationError({cls._field(): [f"Unknown value: {value}"]}) from None


class OrderStatus(_ParsableEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PaymentStatus(_ParsableEnum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DeliveryStatus(_ParsableEnum):
    PENDING = "PENDING"
    SHIPMENT_CREATED = "SHIPMENT_CREATED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    RTO = "RTO"

    @classmethod
    def _normalize(cls, raw: str) -> str:
        return raw.strip().upper().replace(" ", "_").replace("-", "_")

    @classmethod
    def _aliases(cls) -> dict:
        # Both naming schemes exist in stored data; they are one step
        return {"IN_TRANSIT": "OUT_FOR_DELIVERY"}


class DeliveryProvider(_ParsableEnum):
    SELF = "SELF"
    DELHIVERY = "DELHIVERY"

    @classmethod
    def _normalize(cls, raw: str) -> str:
        return raw.strip().upper()


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
    OrderStatus.FAILED: {OrderStatus.PENDING},
}

_DELIVERY_TRANSITIONS = {
    DeliveryStatus.PENDING: {
        DeliveryStatus.SHIPMENT_CREATED,
        DeliveryStatus.OUT_FOR_DELIVERY,
        DeliveryStatus.DELIVERED,
    },
    DeliveryStatus.SHIPMENT_CREATED: {
        DeliveryStatus.OUT_FOR_DELIVERY,
        DeliveryStatus.DELIVERED,
        DeliveryStatus.RTO,
    },
    DeliveryStatus.OUT_FOR_DELIVERY: {DeliveryStatus.DELIVERED, DeliveryStatus.RTO},
    DeliveryStatus.DELIVERED: set(),  # terminal
    DeliveryStatus.RTO: set(),  # terminal
}

_PROVIDER_DELIVERY_STEPS = {
    DeliveryProvider.SELF: [DeliveryStatus.OUT_FOR_DELIVERY, DeliveryStatus.DELIVERED],
    DeliveryProvider.DELHIVERY: [
        DeliveryStatus.SHIPMENT_CREATED,
        DeliveryStatus.OUT_FOR_DELIVERY,
        DeliveryStatus.DELIVERED,
        DeliveryStatus.RTO,
    ],
}

_SHIPPABLE_ORDER_STATUSES = {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.FAILED}


def allowed_transitions(current) -> list[OrderStatus]:
    """Order statuses reachable from ``current`` by a manual transition."""
    current = OrderStatus.parse(current)
    return sorted(_VALID_TRANSITIONS[current], key=lambda s: list(OrderStatus).index(s))


def can_transition(current, target) -> bool:
    return OrderStatus.parse(target) in _VALID_TRANSITIONS[OrderStatus.parse(current)]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@orderdesk.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout."""

    address_type = String(max_length=20)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    street = String(max_length=500)
    city = String(max_length=100)
    state = String(max_length=100)
    postcode = String(max_length=6)
    phone = String(max_length=20)
    email = String(max_length=254)


@orderdesk.value_object(part_of="Order")
class OrderPricing:
    """Order totals in paise. Derived from the items and the delivery fee."""

    subtotal = Integer(default=0, min_value=0)
    tax = Integer(default=0, min_value=0)
    shipping_total = Integer(default=0, min_value=0)
    total_amount = Integer(default=0, min_value=0)
    currency = String(max_length=3, default=CURRENCY)

    @invariant.post
    def tax_is_gst_on_subtotal(self):
        if self.tax != gst_on(self.subtotal):
            raise ValidationError({"tax": ["Tax must be 5% GST on the subtotal"]})

    @invariant.post
    def total_reconciles(self):
        if self.total_amount != self.subtotal + self.tax + self.shipping_total:
            raise ValidationError({"total_amount": ["Total must equal subtotal + tax + shipping"]})

    @classmethod
    def compute(cls, subtotal: int, shipping_total: int = 0) -> "OrderPricing":
        tax = gst_on(subtotal)
        return cls(
            subtotal=subtotal,
            tax=tax,
            shipping_total=shipping_total,
            total_amount=subtotal + tax + shipping_total,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@orderdesk.entity(part_of="Order")
class OrderItem:
    item_id = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=1)  # paise
    weight = Float(default=0.0, min_value=0.0)  # kg per unit

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@orderdesk.entity(part_of="Order")
class PaymentTransaction:
    """One gateway round trip. Appended, never edited."""

    payment_id = String(max_length=100)
    gateway_order_ref = String(max_length=100)
    amount = Integer(default=0)  # paise
    method = String(max_length=50)
    status = String(max_length=20, choices=PaymentStatus, required=True)
    signature_verified = Boolean(default=False)
    error_code = String(max_length=100)
    error_description = String(max_length=500)
    recorded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@orderdesk.aggregate
class Order:
    customer_id = Identifier()
    customer_name = String(max_length=200)
    customer_email = String(max_length=254)
    customer_phone = String(max_length=20)
    address_id = Identifier()
    shipping_address = ValueObject(ShippingAddress)

    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    distance = Float()  # km
    total_weight = Float(default=0.0)  # kg

    delivery_provider = String(choices=DeliveryProvider, required=True)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    delivery_status = String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)

    waybill = String(max_length=100)
    status_location = String(max_length=255)
    last_tracked_at = DateTime()

    gateway_order_ref = String(max_length=100)
    payment_transactions = HasMany(PaymentTransaction)
    failure_reason = String(max_length=500)

    order_date = DateTime()
    confirmed_at = DateTime()
    delivered_at = DateTime()
    stock_decremented_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def waybill_only_for_courier_orders(self):
        if self.waybill and self.delivery_provider != DeliveryProvider.DELHIVERY.value:
            raise ValidationError({"waybill": ["Only courier-delivered orders carry a waybill"]})

    @invariant.post
    def delivered_shipment_means_delivered_order(self):
        if (
            self.delivery_status == DeliveryStatus.DELIVERED.value
            and self.order_status != OrderStatus.DELIVERED.value
        ):
            raise ValidationError({"delivery_status": ["A delivered shipment requires a delivered order"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        items_data: list[dict],
        delivery_provider: str,
        shipping_total: int = 0,
        distance: float | None = None,
        customer_id: str | None = None,
        customer_name: str | None = None,
        customer_email: str | None = None,
        customer_phone: str | None = None,
        address_id: str | None = None,
        shipping_address: ShippingAddress | None = None,
    ):
        """Place a new order in pending/pending state."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        provider = DeliveryProvider.parse(delivery_provider)
        items = [OrderItem(**item_data) for item_data in items_data]
        subtotal = sum(item.line_total for item in items)
        total_weight = sum((item.weight or 0.0) * item.quantity for item in items)

        order = cls(
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            address_id=address_id,
            shipping_address=shipping_address,
            pricing=OrderPricing.compute(subtotal, shipping_total),
            distance=distance,
            total_weight=round(total_weight, 3),
            delivery_provider=provider.value,
            order_status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            delivery_status=DeliveryStatus.PENDING.value,
            order_date=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=customer_id,
                delivery_provider=provider.value,
                total_amount=order.pricing.total_amount,
                currency=order.pricing.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def awaiting_shipment(self) -> bool:
        """Courier order that is ready to hand over but has no waybill yet."""
        return (
            self.delivery_provider == DeliveryProvider.DELHIVERY.value
            and self.order_status == OrderStatus.CONFIRMED.value
            and self.is_paid
            and not self.waybill
        )

    @property
    def needs_stock_decrement(self) -> bool:
        return self.order_status == OrderStatus.DELIVERED.value and self.stock_decremented_at is None

    def available_actions(self) -> dict:
        """Next actions an operator can take on this order."""
        provider = DeliveryProvider(self.delivery_provider)
        current = DeliveryStatus(self.delivery_status)
        delivery_steps = []
        if (
            provider == DeliveryProvider.SELF
            and self.is_paid
            and self.order_status in (OrderStatus.CONFIRMED.value, OrderStatus.SHIPPED.value)
        ):
            delivery_steps = [
                step.value for step in _PROVIDER_DELIVERY_STEPS[provider] if step in _DELIVERY_TRANSITIONS[current]
            ]
        return {
            "order_status": [s.value for s in allowed_transitions(self.order_status)],
            "delivery_status": delivery_steps,
            "create_shipment": self.awaiting_shipment,
            "track": bool(self.waybill),
        }

    # -------------------------------------------------------------------
    # Order lifecycle
    # -------------------------------------------------------------------
    def apply_transition(self, target, override: bool = False) -> None:
        """Move the order to ``target`` through the manual lifecycle.

        Confirming requires a paid order unless ``override`` is set, which
        is an operator escape hatch and is logged.
        """
        target = OrderStatus.parse(target)
        current = OrderStatus(self.order_status)
        if not can_transition(current, target):
            raise InvalidTransition({"order_status": [f"Cannot transition from {current.value} to {target.value}"]})

        if target == OrderStatus.CONFIRMED and not self.is_paid:
            if not override:
                raise InvalidTransition({"order_status": ["Order cannot be confirmed before payment is received"]})
            logger.warning(
                "Order confirmed without payment by operator override",
                order_id=str(self.id),
                payment_status=self.payment_status,
            )

        if target == OrderStatus.DELIVERED and self.delivery_status == DeliveryStatus.RTO.value:
            raise InvalidTransition({"order_status": ["Shipment was returned to origin"]})

        now = datetime.now(UTC)
        previous_delivery = self.delivery_status
        with atomic_change(self):
            self.order_status = target.value
            if target == OrderStatus.CONFIRMED:
                self.confirmed_at = now
            elif target == OrderStatus.DELIVERED:
                self.delivered_at = now
                self.delivery_status = DeliveryStatus.DELIVERED.value
            elif target == OrderStatus.PENDING:
                # Re-submission after a failed payment
                self.payment_status = PaymentStatus.PENDING.value
                self.failure_reason = None
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                overridden=str(override and target == OrderStatus.CONFIRMED),
                changed_at=now,
            )
        )
        if previous_delivery != self.delivery_status:
            self.raise_(
                DeliveryStatusChanged(
                    order_id=str(self.id),
                    previous_status=previous_delivery,
                    new_status=self.delivery_status,
                    changed_at=now,
                )
            )

    def _set_order_status(self, target: OrderStatus, now: datetime) -> None:
        previous = self.order_status
        if previous == target.value:
            return
        self.order_status = target.value
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def update_delivery_status(self, target, location: str | None = None) -> bool:
        """Advance delivery status and pull the order status along with it.

        Returns False when the order is already at ``target``.
        """
        target = DeliveryStatus.parse(target)
        current = DeliveryStatus(self.delivery_status)
        if target == current:
            return False

        if target not in _DELIVERY_TRANSITIONS[current]:
            raise InvalidTransition(
                {"delivery_status": [f"Cannot move delivery from {current.value} to {target.value}"]}
            )

        provider = DeliveryProvider(self.delivery_provider)
        if target not in _PROVIDER_DELIVERY_STEPS[provider]:
            raise InvalidTransition(
                {"delivery_status": [f"{target.value} is not a delivery step for {provider.value} orders"]}
            )
        if target == DeliveryStatus.SHIPMENT_CREATED and not self.waybill:
            raise InvalidTransition({"delivery_status": ["Shipment must be created with the courier first"]})

        order_status = OrderStatus(self.order_status)
        if order_status == OrderStatus.CANCELLED and target in (
            DeliveryStatus.OUT_FOR_DELIVERY,
            DeliveryStatus.DELIVERED,
        ):
            raise InvalidTransition({"delivery_status": ["Order has been cancelled"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            if target == DeliveryStatus.DELIVERED:
                self._set_order_status(OrderStatus.DELIVERED, now)
                self.delivered_at = now
            elif target == DeliveryStatus.OUT_FOR_DELIVERY and order_status in _SHIPPABLE_ORDER_STATUSES:
                if not self.is_paid:
                    logger.warning(
                        "Unpaid order shipped by delivery update",
                        order_id=str(self.id),
                        order_status=order_status.value,
                        payment_status=self.payment_status,
                    )
                self._set_order_status(OrderStatus.SHIPPED, now)
            self.delivery_status = target.value
            if location:
                self.status_location = location
            self.updated_at = now

        self.raise_(
            DeliveryStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                location=location,
                changed_at=now,
            )
        )
        return True

    def record_shipment(self, waybill: str) -> None:
        """Attach the courier waybill issued for this order."""
        self.assert_shippable()
        if not waybill:
            raise ValidationError({"waybill": ["Courier did not return a waybill"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.waybill = waybill
            self.delivery_status = DeliveryStatus.SHIPMENT_CREATED.value
            self.updated_at = now

        self.raise_(ShipmentCreated(order_id=str(self.id), waybill=waybill, created_at=now))
        self.raise_(
            DeliveryStatusChanged(
                order_id=str(self.id),
                previous_status=DeliveryStatus.PENDING.value,
                new_status=DeliveryStatus.SHIPMENT_CREATED.value,
                changed_at=now,
            )
        )

    def assert_shippable(self) -> None:
        if self.delivery_provider != DeliveryProvider.DELHIVERY.value:
            raise ValidationError({"delivery_provider": ["Local delivery orders are not shipped by courier"]})
        if self.order_status != OrderStatus.CONFIRMED.value or not self.is_paid:
            raise ValidationError({"order_status": ["Only confirmed, paid orders can be shipped"]})
        if self.waybill:
            raise ValidationError({"waybill": ["Shipment already created"]})

    def apply_tracking(self, status: str | None, location: str | None = None) -> bool:
        """Store a courier tracking snapshot; sync delivery status if it moved forward."""
        now = datetime.now(UTC)
        self.status_location = location
        self.last_tracked_at = now

        if not status:
            return False
        target = DeliveryStatus.parse(status)
        current = DeliveryStatus(self.delivery_status)
        if target == current or target not in _DELIVERY_TRANSITIONS[current]:
            return False

        try:
            return self.update_delivery_status(target, location)
        except InvalidTransition as exc:
            logger.warning(
                "Courier status not applied",
                order_id=str(self.id),
                courier_status=target.value,
                error=exc.messages,
            )
            return False

    def mark_stock_decremented(self) -> None:
        self.stock_decremented_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment_success(
        self,
        payment_id: str,
        signature_verified: bool,
        amount: int | None = None,
        method: str | None = None,
        gateway_order_ref: str | None = None,
    ) -> bool:
        """Record a gateway success callback. Returns whether the order is now paid."""
        if self.is_paid:
            logger.info("Payment already captured, callback ignored", order_id=str(self.id), payment_id=payment_id)
            return signature_verified

        now = datetime.now(UTC)
        amount = amount if amount is not None else self.pricing.total_amount

        if not signature_verified:
            self.add_payment_transactions(
                PaymentTransaction(
                    payment_id=payment_id,
                    gateway_order_ref=gateway_order_ref or self.gateway_order_ref,
                    amount=amount,
                    method=method,
                    status=PaymentStatus.FAILED.value,
                    signature_verified=False,
                    error_description="Payment signature verification failed",
                    recorded_at=now,
                )
            )
            self.record_payment_failure("Payment signature verification failed")
            return False

        with atomic_change(self):
            self.add_payment_transactions(
                PaymentTransaction(
                    payment_id=payment_id,
                    gateway_order_ref=gateway_order_ref or self.gateway_order_ref,
                    amount=amount,
                    method=method,
                    status=PaymentStatus.PAID.value,
                    signature_verified=True,
                    recorded_at=now,
                )
            )
            self.payment_status = PaymentStatus.PAID.value
            self.failure_reason = None
            if self.order_status in (OrderStatus.PENDING.value, OrderStatus.FAILED.value):
                self._set_order_status(OrderStatus.CONFIRMED, now)
                self.confirmed_at = now
            self.updated_at = now

        self.raise_(
            PaymentSucceeded(
                order_id=str(self.id),
                payment_id=payment_id,
                amount=amount,
                paid_at=now,
            )
        )
        return True

    def record_payment_failure(
        self,
        reason: str,
        cancelled: bool = False,
        payment_id: str | None = None,
        error_code: str | None = None,
        error_description: str | None = None,
    ) -> bool:
        """Flag a failed or abandoned payment. No-op once the order is paid.

        Safe to repeat; the last reason wins.
        """
        if self.is_paid:
            logger.info("Payment already captured, failure ignored", order_id=str(self.id), reason=reason)
            return False

        now = datetime.now(UTC)
        status = PaymentStatus.CANCELLED if cancelled else PaymentStatus.FAILED
        with atomic_change(self):
            if payment_id:
                self.add_payment_transactions(
                    PaymentTransaction(
                        payment_id=payment_id,
                        gateway_order_ref=self.gateway_order_ref,
                        amount=self.pricing.total_amount if self.pricing else 0,
                        status=status.value,
                        error_code=error_code,
                        error_description=error_description,
                        recorded_at=now,
                    )
                )
            self.payment_status = status.value
            self.failure_reason = reason
            if self.order_status == OrderStatus.PENDING.value:
                self._set_order_status(OrderStatus.FAILED, now)
            self.updated_at = now

        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                payment_status=status.value,
                reason=reason,
                failed_at=now,
            )
        )
        return True

    def update_payment_status(self, target) -> None:
        """Operator correction of the payment status. ``paid`` is final."""
        target = PaymentStatus.parse(target)
        current = PaymentStatus(self.payment_status)
        if target == current:
            return
        if current == PaymentStatus.PAID:
            raise InvalidTransition({"payment_status": ["Captured payments cannot be changed"]})

        now = datetime.now(UTC)
        self.payment_status = target.value
        self.updated_at = now
        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
