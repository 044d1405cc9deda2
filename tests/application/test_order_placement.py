"""Tests for checkout: delivery quotes, address reuse and order placement."""

import json

import pytest
from orderdesk.checkout.address_book import AddressBook
from orderdesk.checkout.placement import PlaceOrder
from orderdesk.checkout.quote import provider_for_distance, quote_delivery, validate_pincode
from orderdesk.errors import NotServiceable, TransientIOError
from orderdesk.estimator import get_estimator
from orderdesk.gateway import get_gateway
from orderdesk.order.order import DeliveryProvider, Order, OrderStatus, PaymentStatus
from protean import current_domain
from protean.exceptions import ValidationError

CHECKOUT = {
    "customer_id": "cust-001",
    "address_type": "Home",
    "first_name": "Asha",
    "last_name": "Verma",
    "street": "12 MG Road",
    "city": "New Delhi",
    "state": "Delhi",
    "postcode": "110001",
    "email": "asha@example.com",
    "phone": "9876543210",
    "items": json.dumps(
        [{"item_id": "sku-101", "name": "Kaju Katli 500g", "quantity": 2, "unit_price": 50000, "weight": 0.5}]
    ),
}


def _place(**overrides):
    return current_domain.process(PlaceOrder(**{**CHECKOUT, **overrides}), asynchronous=False)


def _order_count():
    return current_domain.repository_for(Order)._dao.query.all().total


class TestPincodeValidation:
    def test_valid(self):
        assert validate_pincode(" 110001 ") == "110001"

    def test_wrong_length(self):
        with pytest.raises(ValidationError) as exc:
            validate_pincode("11001")
        assert exc.value.messages["postcode"] == ["Pincode must be 6 digits"]

    def test_leading_zero(self):
        with pytest.raises(ValidationError) as exc:
            validate_pincode("011001")
        assert exc.value.messages["postcode"] == ["Invalid pincode format"]

    def test_letters(self):
        with pytest.raises(ValidationError) as exc:
            validate_pincode("11A001")
        assert exc.value.messages["postcode"] == ["Invalid pincode format"]


class TestDeliveryQuote:
    def test_local_radius_boundary(self):
        assert provider_for_distance(15.0) == DeliveryProvider.SELF
        assert provider_for_distance(15.1) == DeliveryProvider.DELHIVERY

    def test_radius_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOCAL_DELIVERY_RADIUS_KM", "5")
        assert provider_for_distance(8.0) == DeliveryProvider.DELHIVERY

    def test_quote(self):
        quote = quote_delivery("110001")
        assert quote == {"pincode": "110001", "distance_km": 8.0, "fee": 5000, "delivery_provider": "SELF"}

    def test_unserviceable(self):
        get_estimator().configure(unserviceable={"799001"})
        with pytest.raises(NotServiceable) as exc:
            quote_delivery("799001")
        assert exc.value.messages["postcode"] == ["Pincode not serviceable in our delivery area"]


class TestPlaceOrder:
    def test_order_is_placed_pending(self):
        result = _place()

        order = current_domain.repository_for(Order).get(result["order_id"])
        assert order.order_status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.delivery_provider == DeliveryProvider.SELF.value
        assert order.customer_name == "Asha Verma"
        assert order.shipping_address.postcode == "110001"
        assert order.distance == 8.0

    def test_checkout_response(self):
        result = _place()

        assert result["amount"] == 110000
        assert result["currency"] == "INR"
        assert result["key"] == "rzp_test_fake"
        assert result["gateway_order_ref"].startswith("order_fake_")
        order = current_domain.repository_for(Order).get(result["order_id"])
        assert order.gateway_order_ref == result["gateway_order_ref"]

    def test_gateway_order_uses_order_id_as_receipt(self):
        result = _place()
        call = get_gateway().calls[-1]
        assert call["receipt"] == result["order_id"]
        assert call["amount"] == 110000

    def test_distant_pincode_goes_by_courier(self):
        get_estimator().configure(distance_km=42.0, fee=9000)

        result = _place(postcode="400001")

        order = current_domain.repository_for(Order).get(result["order_id"])
        assert order.delivery_provider == DeliveryProvider.DELHIVERY.value
        assert order.pricing.shipping_total == 9000
        assert result["amount"] == 114000

    def test_missing_address_fields(self):
        with pytest.raises(ValidationError) as exc:
            _place(first_name="", phone="  ", city=None)

        assert set(exc.value.messages) == {"first_name", "phone", "city"}
        assert _order_count() == 0

    def test_bad_pincode(self):
        with pytest.raises(ValidationError):
            _place(postcode="1100")
        assert _order_count() == 0

    def test_unserviceable_pincode(self):
        get_estimator().configure(unserviceable={"799001"})
        with pytest.raises(NotServiceable):
            _place(postcode="799001")
        assert _order_count() == 0

    def test_gateway_outage(self):
        get_gateway().configure(should_succeed=False)
        with pytest.raises(TransientIOError):
            _place()
        assert _order_count() == 0

    def test_address_reused_across_orders(self):
        first = _place()
        second = _place()

        orders = current_domain.repository_for(Order)
        assert orders.get(first["order_id"]).address_id == orders.get(second["order_id"]).address_id
        book = current_domain.repository_for(AddressBook).get("cust-001")
        assert len(book.addresses) == 1

    def test_new_address_saved(self):
        _place()
        _place(street="221B Linking Road", city="Mumbai", state="Maharashtra", postcode="400050")

        book = current_domain.repository_for(AddressBook).get("cust-001")
        assert len(book.addresses) == 2

    def test_guest_checkout_skips_address_book(self):
        result = _place(customer_id=None)
        order = current_domain.repository_for(Order).get(result["order_id"])
        assert order.address_id is None
