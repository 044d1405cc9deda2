"""Shared BDD fixtures and step definitions for OrderDesk."""

import pytest
from orderdesk.courier import get_courier
from orderdesk.errors import InvalidTransition
from orderdesk.failed_order.failed_order import FailedOrder
from orderdesk.inventory import get_inventory
from orderdesk.order.order import Order
from orderdesk.order.payment import RecordPaymentFailure
from orderdesk.order.shipment import CreateShipment
from orderdesk.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from pytest_bdd import given, parsers, then


def load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture()
def error():
    """Container for an exception raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse("a placed {provider} order"), target_fixture="order_id")
def _(saved_order, provider):
    return saved_order(provider=provider)


@given(parsers.parse("a paid {provider} order"), target_fixture="order_id")
def _(saved_order, provider):
    return saved_order(provider=provider, paid=True)


@given(parsers.parse("a cancelled {provider} order"), target_fixture="order_id")
def _(saved_order, provider):
    order_id = saved_order(provider=provider, paid=True)
    current_domain.process(UpdateOrderStatus(order_id=order_id, order_status="cancelled"), asynchronous=False)
    return order_id


@given("a paid DELHIVERY order with a shipment", target_fixture="order_id")
def _(saved_order):
    order_id = saved_order(provider="DELHIVERY", paid=True)
    current_domain.process(CreateShipment(order_id=order_id), asynchronous=False)
    return order_id


@given(parsers.parse('the gateway reported a failure "{code}" "{description}"'))
def _(order_id, code, description):
    current_domain.process(
        RecordPaymentFailure(order_id=order_id, error_code=code, error_description=description),
        asynchronous=False,
    )


@given(parsers.parse('the courier reports "{status}" at "{location}"'))
def _(status, location):
    get_courier().configure(tracking_status=status, tracking_location=location)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the order status is "{status}"'))
def _(order_id, status):
    assert load_order(order_id).order_status == status


@then(parsers.parse('the payment status is "{status}"'))
def _(order_id, status):
    assert load_order(order_id).payment_status == status


@then(parsers.parse('the delivery status is "{status}"'))
def _(order_id, status):
    assert load_order(order_id).delivery_status == status


@then("the change is rejected as an invalid transition")
def _(error):
    assert isinstance(error["exc"], InvalidTransition)


@then("stock was decremented once")
def _(order_id):
    inventory = get_inventory()
    assert [call["order_id"] for call in inventory.calls] == [order_id]
    assert load_order(order_id).stock_decremented_at is not None


@then("the order is not in the failed-order console")
def _(order_id):
    with pytest.raises(ObjectNotFoundError):
        current_domain.repository_for(FailedOrder).get(order_id)


@then(parsers.parse('the failed-order console shows "{message}"'))
def _(order_id, message):
    assert current_domain.repository_for(FailedOrder).get(order_id).display_error == message
