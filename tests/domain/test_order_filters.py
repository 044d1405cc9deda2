"""Tests for the admin console order filters."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from orderdesk.reporting.filters import OrderFilters, filter_orders, range_start
from protean.exceptions import ValidationError

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2026, 10, 19, 15, 0, tzinfo=IST)


def _orders():
    return [
        {
            "id": "ord-1",
            "customer_name": "Asha Verma",
            "customer_email": "asha@example.com",
            "customer_phone": "9876543210",
            "delivery_provider": "SELF",
            "order_status": "confirmed",
            "payment_status": "paid",
            "delivery_status": "PENDING",
            "order_date": datetime(2026, 10, 19, 4, 0, tzinfo=UTC),
        },
        {
            "id": "ord-2",
            "customer_name": "Rahul Mehta",
            "customer_email": "rahul@example.com",
            "customer_phone": "9123456780",
            "delivery_provider": "delhivery",
            "order_status": "shipped",
            "payment_status": "paid",
            "delivery_status": "OUT_FOR_DELIVERY",
            "waybill": "WB100200300",
            "order_date": datetime(2026, 10, 15, 10, 0, tzinfo=UTC),
        },
        {
            "orderId": "ord-3",
            "customerName": "Priya Nair",
            "customerEmail": "priya@example.com",
            "customerPhone": "9000000001",
            "deliveryProvider": "DELHIVERY",
            "orderStatus": "failed",
            "paymentStatus": "failed",
            "deliveryStatus": "PENDING",
            "orderDate": "2026-08-01T10:00:00Z",
        },
    ]


def _ids(orders):
    return [o.get("id") or o.get("orderId") for o in orders]


class TestDefaults:
    def test_default_filters_keep_everything(self):
        assert _ids(filter_orders(_orders(), now=NOW, tz=IST)) == ["ord-1", "ord-2", "ord-3"]

    def test_reset_restores_defaults(self):
        filters = OrderFilters(provider="SELF", search_term="asha")
        assert not filters.is_default
        assert OrderFilters.reset().is_default

    def test_unknown_date_range(self):
        with pytest.raises(ValidationError):
            OrderFilters(date_range="year")


class TestDimensions:
    def test_provider_matches_any_case(self):
        result = filter_orders(_orders(), OrderFilters(provider="delhivery"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-2", "ord-3"]

    def test_order_status(self):
        result = filter_orders(_orders(), OrderFilters(order_status="shipped"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-2"]

    def test_payment_status_reads_camel_case_records(self):
        result = filter_orders(_orders(), OrderFilters(payment_status="failed"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-3"]

    def test_delivery_status(self):
        result = filter_orders(_orders(), OrderFilters(delivery_status="PENDING"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-1", "ord-3"]

    def test_delivery_status_matches_legacy_in_transit(self):
        legacy = {"id": "ord-9", "deliveryStatus": "IN_TRANSIT", "deliveryProvider": "DELHIVERY"}
        result = filter_orders(
            [*_orders(), legacy], OrderFilters(delivery_status="OUT_FOR_DELIVERY"), now=NOW, tz=IST
        )
        assert _ids(result) == ["ord-2", "ord-9"]

    def test_dimensions_combine(self):
        filters = OrderFilters(provider="DELHIVERY", payment_status="paid")
        assert _ids(filter_orders(_orders(), filters, now=NOW, tz=IST)) == ["ord-2"]


class TestSearch:
    def test_phone_number(self):
        result = filter_orders(_orders(), OrderFilters(search_term="9876543210"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-1"]

    def test_name_is_case_insensitive(self):
        result = filter_orders(_orders(), OrderFilters(search_term="RAHUL"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-2"]

    def test_waybill(self):
        result = filter_orders(_orders(), OrderFilters(search_term="wb1002"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-2"]

    def test_order_id(self):
        result = filter_orders(_orders(), OrderFilters(search_term="ord-3"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-3"]

    def test_blank_search_is_ignored(self):
        result = filter_orders(_orders(), OrderFilters(search_term="   "), now=NOW, tz=IST)
        assert len(result) == 3


class TestDateRange:
    def test_today_starts_at_local_midnight(self):
        assert range_start("today", NOW, IST) == datetime(2026, 10, 19, tzinfo=IST)

    def test_week_goes_back_seven_days(self):
        assert range_start("week", NOW, IST) == datetime(2026, 10, 12, tzinfo=IST)

    def test_all_has_no_start(self):
        assert range_start("all", NOW, IST) is None

    def test_today(self):
        result = filter_orders(_orders(), OrderFilters(date_range="today"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-1"]

    def test_week(self):
        result = filter_orders(_orders(), OrderFilters(date_range="week"), now=NOW, tz=IST)
        assert _ids(result) == ["ord-1", "ord-2"]

    def test_just_before_midnight_is_yesterday(self):
        late = {"id": "ord-late", "order_date": datetime(2026, 10, 18, 18, 29, tzinfo=UTC)}
        assert filter_orders([late], OrderFilters(date_range="today"), now=NOW, tz=IST) == []
