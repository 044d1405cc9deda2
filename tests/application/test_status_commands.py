"""Tests for operator status commands and stock settlement."""

import pytest
from orderdesk.errors import InvalidTransition
from orderdesk.inventory import get_inventory
from orderdesk.order.delivery import UpdateDeliveryStatus
from orderdesk.order.order import DeliveryStatus, Order, OrderStatus, PaymentStatus
from orderdesk.order.payment_status import UpdatePaymentStatus
from orderdesk.order.status import UpdateOrderStatus
from protean import current_domain


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestUpdateOrderStatus:
    def test_ship_confirmed_order(self, saved_order):
        order_id = saved_order(paid=True)

        result = current_domain.process(
            UpdateOrderStatus(order_id=order_id, order_status="shipped"), asynchronous=False
        )

        assert result == OrderStatus.SHIPPED.value
        assert _order(order_id).order_status == OrderStatus.SHIPPED.value

    def test_invalid_transition_leaves_order_untouched(self, saved_order):
        order_id = saved_order()

        with pytest.raises(InvalidTransition):
            current_domain.process(UpdateOrderStatus(order_id=order_id, order_status="shipped"), asynchronous=False)

        assert _order(order_id).order_status == OrderStatus.PENDING.value

    def test_confirm_unpaid_needs_override(self, saved_order):
        order_id = saved_order()
        with pytest.raises(InvalidTransition):
            current_domain.process(UpdateOrderStatus(order_id=order_id, order_status="confirmed"), asynchronous=False)

        current_domain.process(
            UpdateOrderStatus(order_id=order_id, order_status="confirmed", override=True), asynchronous=False
        )

        order = _order(order_id)
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.confirmed_at is not None

    def test_delivering_settles_stock(self, saved_order):
        order_id = saved_order(paid=True)

        current_domain.process(UpdateOrderStatus(order_id=order_id, order_status="delivered"), asynchronous=False)

        order = _order(order_id)
        assert order.delivery_status == DeliveryStatus.DELIVERED.value
        assert order.stock_decremented_at is not None
        assert get_inventory().decremented["sku-101"] == 2


class TestUpdateDeliveryStatus:
    def test_out_for_delivery_ships_local_order(self, saved_order):
        order_id = saved_order(paid=True)

        result = current_domain.process(
            UpdateDeliveryStatus(order_id=order_id, delivery_status="OUT_FOR_DELIVERY", location="Karol Bagh"),
            asynchronous=False,
        )

        assert result == DeliveryStatus.OUT_FOR_DELIVERY.value
        order = _order(order_id)
        assert order.order_status == OrderStatus.SHIPPED.value
        assert order.status_location == "Karol Bagh"

    def test_stock_decremented_exactly_once(self, saved_order):
        order_id = saved_order(paid=True)
        for _ in range(2):
            current_domain.process(
                UpdateDeliveryStatus(order_id=order_id, delivery_status="DELIVERED"), asynchronous=False
            )

        inventory = get_inventory()
        assert len(inventory.calls) == 1
        assert inventory.decremented["sku-101"] == 2
        assert _order(order_id).order_status == OrderStatus.DELIVERED.value

    def test_cancelled_order_rejects_delivery(self, saved_order):
        order_id = saved_order(paid=True)
        current_domain.process(UpdateOrderStatus(order_id=order_id, order_status="cancelled"), asynchronous=False)

        with pytest.raises(InvalidTransition):
            current_domain.process(
                UpdateDeliveryStatus(order_id=order_id, delivery_status="DELIVERED"), asynchronous=False
            )

        assert get_inventory().calls == []


class TestUpdatePaymentStatus:
    def test_mark_failed(self, saved_order):
        order_id = saved_order()
        result = current_domain.process(
            UpdatePaymentStatus(order_id=order_id, payment_status="failed"), asynchronous=False
        )
        assert result == PaymentStatus.FAILED.value

    def test_paid_cannot_be_reverted(self, saved_order):
        order_id = saved_order(paid=True)
        with pytest.raises(InvalidTransition):
            current_domain.process(UpdatePaymentStatus(order_id=order_id, payment_status="pending"), asynchronous=False)
        assert _order(order_id).payment_status == PaymentStatus.PAID.value
