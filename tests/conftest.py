import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config environment before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path or "/bdd/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def orderdesk_bed():
    from orderdesk.domain import orderdesk

    bed = DomainFixture(orderdesk)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(orderdesk_bed):
    with orderdesk_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _fresh_adapters():
    """Every test starts with brand-new fake collaborators."""
    from orderdesk.courier import reset_courier
    from orderdesk.estimator import reset_estimator
    from orderdesk.gateway import reset_gateway
    from orderdesk.inventory import reset_inventory

    reset_gateway()
    reset_courier()
    reset_estimator()
    reset_inventory()
    yield
    reset_gateway()
    reset_courier()
    reset_estimator()
    reset_inventory()


# ---------------------------------------------------------------------------
# Order builders
# ---------------------------------------------------------------------------
SWEETS = [
    {"item_id": "sku-101", "name": "Kaju Katli 500g", "quantity": 2, "unit_price": 50000, "weight": 0.5},
]


@pytest.fixture()
def make_order():
    """Build an Order in memory. ``paid=True`` runs a verified payment through it."""
    from orderdesk.order.order import Order, ShippingAddress

    def _make(provider="SELF", paid=False, shipping_total=5000, items=None, **customer):
        order = Order.create(
            items_data=items or SWEETS,
            delivery_provider=provider,
            shipping_total=shipping_total,
            distance=8.0 if provider == "SELF" else 42.0,
            customer_id=customer.get("customer_id", "cust-001"),
            customer_name=customer.get("customer_name", "Asha Verma"),
            customer_email=customer.get("customer_email", "asha@example.com"),
            customer_phone=customer.get("customer_phone", "9876543210"),
            shipping_address=ShippingAddress(
                address_type="Home",
                first_name="Asha",
                last_name="Verma",
                street="12 MG Road",
                city="New Delhi",
                state="Delhi",
                postcode="110001",
                phone="9876543210",
                email="asha@example.com",
            ),
        )
        order.gateway_order_ref = "order_test_001"
        if paid:
            order.record_payment_success("pay_001", signature_verified=True)
        order._events.clear()
        return order

    return _make


@pytest.fixture()
def saved_order(make_order):
    """Build an order, persist it and return its id."""
    from orderdesk.order.order import Order
    from protean import current_domain

    def _save(**kwargs):
        order = make_order(**kwargs)
        current_domain.repository_for(Order).add(order)
        return str(order.id)

    return _save
