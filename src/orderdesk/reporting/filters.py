"""Compound filters for the admin order console.

Six independent dimensions, all applied together. Every dimension defaults
to no restriction ("all", or an empty search term).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from protean.exceptions import ValidationError

from orderdesk.config import store_timezone
from orderdesk.order.order import DeliveryStatus, OrderStatus, PaymentStatus
from orderdesk.reporting.records import field_value, order_date

ALL = "all"

# Days before local midnight covered by each date range
DATE_RANGES = {"today": 0, "week": 7, "month": 30}

SEARCH_FIELDS = ("id", "customer_name", "customer_email", "customer_phone", "waybill")

_STATUS_TYPES = {
    "order_status": OrderStatus,
    "payment_status": PaymentStatus,
    "delivery_status": DeliveryStatus,
}


@dataclass(frozen=True)
class OrderFilters:
    provider: str = ALL
    order_status: str = ALL
    payment_status: str = ALL
    delivery_status: str = ALL
    date_range: str = ALL
    search_term: str = ""

    def __post_init__(self):
        if self.date_range != ALL and self.date_range not in DATE_RANGES:
            raise ValidationError({"date_range": [f"Unknown date range: {self.date_range}"]})

    @classmethod
    def reset(cls) -> "OrderFilters":
        """All filters back to their defaults in one step."""
        return cls()

    @property
    def is_default(self) -> bool:
        return self == OrderFilters()


def range_start(date_range: str, now: datetime, tz: tzinfo) -> datetime | None:
    """Earliest order date included by ``date_range``, measured from local midnight."""
    if date_range == ALL:
        return None
    midnight = now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=DATE_RANGES[date_range])


def _canonical(status_type, value):
    """Legacy spellings such as ``IN_TRANSIT`` collapse onto the current status."""
    if value is None:
        return None
    try:
        return status_type.parse(value).value
    except ValidationError:
        return value


def _matches_search(order, term: str) -> bool:
    for name in SEARCH_FIELDS:
        value = field_value(order, name)
        if value is not None and term in str(value).lower():
            return True
    return False


def matches(order, filters: OrderFilters, start: datetime | None = None) -> bool:
    if filters.provider != ALL:
        provider = (field_value(order, "delivery_provider") or "").strip().upper()
        if provider != filters.provider.strip().upper():
            return False

    for name, status_type in _STATUS_TYPES.items():
        wanted = getattr(filters, name)
        if wanted != ALL and _canonical(status_type, field_value(order, name)) != _canonical(status_type, wanted):
            return False

    if start is not None:
        placed = order_date(order)
        if placed is None or placed < start:
            return False

    term = (filters.search_term or "").strip().lower()
    return not term or _matches_search(order, term)


def filter_orders(orders, filters: OrderFilters | None = None, now: datetime | None = None, tz: tzinfo | None = None):
    """Orders satisfying every filter, in their original order."""
    filters = filters or OrderFilters()
    tz = tz or store_timezone()
    now = now or datetime.now(tz)
    start = range_start(filters.date_range, now, tz)
    return [order for order in orders if matches(order, filters, start)]
