"""Courier port: abstract interface for the third-party shipping courier.

All courier adapters implement this interface. Failures are reported in the
returned dict under ``error`` rather than raised, so the dispatcher decides
how to surface them; only network faults raise ``TransientIOError``.
"""

from abc import ABC, abstractmethod

# Courier status phrases mapped onto the delivery statuses the order tracks
_COURIER_STATUSES = {
    "manifested": "SHIPMENT_CREATED",
    "not picked": "SHIPMENT_CREATED",
    "pending": "SHIPMENT_CREATED",
    "picked up": "OUT_FOR_DELIVERY",
    "in transit": "OUT_FOR_DELIVERY",
    "dispatched": "OUT_FOR_DELIVERY",
    "out for delivery": "OUT_FOR_DELIVERY",
    "delivered": "DELIVERED",
    "rto": "RTO",
    "returned": "RTO",
}


def to_delivery_status(courier_status: str | None) -> str | None:
    """Translate a courier status phrase, or None when it has no equivalent."""
    if not courier_status:
        return None
    phrase = courier_status.strip().lower()
    if phrase.startswith("rto"):
        return "RTO"
    return _COURIER_STATUSES.get(phrase)


class CourierPort(ABC):
    """Abstract interface for courier adapters."""

    @abstractmethod
    def create_shipment(
        self,
        order_id: str,
        consignee: dict,
        total_weight: float | None = None,
        declared_value: int | None = None,
    ) -> dict:
        """Book a shipment with the courier.

        Returns:
            dict with keys: waybill, and error (str) when the courier refused
        """
        ...

    @abstractmethod
    def track(self, waybill: str) -> dict:
        """Fetch the current courier status of a shipment.

        Returns:
            dict with keys: status (courier phrase), delivery_status (mapped
            or None), location, and error (str) on failure
        """
        ...
