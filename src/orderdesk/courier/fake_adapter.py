"""Fake courier adapter: deterministic courier for testing and development.

Issues mock waybills and replays a configurable tracking status.
"""

from uuid import uuid4

from orderdesk.courier.port import CourierPort, to_delivery_status


class FakeCourier(CourierPort):
    """Fake courier that always succeeds by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Courier unavailable"
        self.tracking_status = "In Transit"
        self.tracking_location = "Delhi Hub"
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Courier unavailable",
        tracking_status: str | None = None,
        tracking_location: str | None = None,
    ):
        """Configure the fake courier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        if tracking_status is not None:
            self.tracking_status = tracking_status
        if tracking_location is not None:
            self.tracking_location = tracking_location

    def create_shipment(
        self,
        order_id: str,
        consignee: dict,
        total_weight: float | None = None,
        declared_value: int | None = None,
    ) -> dict:
        self.calls.append(
            {
                "method": "create_shipment",
                "order_id": order_id,
                "pincode": consignee.get("postcode"),
                "total_weight": total_weight,
                "declared_value": declared_value,
            }
        )
        if not self.should_succeed:
            return {"waybill": None, "error": self.failure_reason}
        return {"waybill": f"FAKE{uuid4().int % 10**12:012d}"}

    def track(self, waybill: str) -> dict:
        self.calls.append({"method": "track", "waybill": waybill})
        if not self.should_succeed:
            return {"status": None, "delivery_status": None, "location": None, "error": self.failure_reason}
        return {
            "status": self.tracking_status,
            "delivery_status": to_delivery_status(self.tracking_status),
            "location": self.tracking_location,
        }
