"""Delhivery courier adapter.

Uses the Delhivery CMU create API to manifest a forward shipment and the
packages API to track it. Authentication is a static API token.
"""

import json

import requests
import structlog

from orderdesk.courier.port import CourierPort, to_delivery_status
from orderdesk.errors import TransientIOError

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://track.delhivery.com"


class DelhiveryCourier(CourierPort):
    """Production Delhivery adapter. One HTTP attempt per call."""

    def __init__(
        self,
        api_token: str,
        pickup_location: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
    ):
        self.api_token = api_token
        self.pickup_location = pickup_location
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict:
        return {"Authorization": f"Token {self.api_token}", "Accept": "application/json"}

    def _shipment_payload(self, order_id, consignee, total_weight, declared_value) -> dict:
        name = " ".join(part for part in (consignee.get("first_name"), consignee.get("last_name")) if part)
        return {
            "shipments": [
                {
                    "name": name,
                    "add": consignee.get("street", ""),
                    "city": consignee.get("city", ""),
                    "state": consignee.get("state", ""),
                    "pin": consignee.get("postcode", ""),
                    "country": "India",
                    "phone": consignee.get("phone", ""),
                    "order": order_id,
                    "payment_mode": "Prepaid",
                    "total_amount": round((declared_value or 0) / 100, 2),
                    # Delhivery expects grams
                    "weight": round((total_weight or 0) * 1000),
                }
            ],
            "pickup_location": {"name": self.pickup_location},
        }

    def create_shipment(
        self,
        order_id: str,
        consignee: dict,
        total_weight: float | None = None,
        declared_value: int | None = None,
    ) -> dict:
        payload = self._shipment_payload(order_id, consignee, total_weight, declared_value)
        try:
            response = requests.post(
                f"{self.base_url}/api/cmu/create.json",
                data={"format": "json", "data": json.dumps(payload)},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Delhivery shipment request failed", order_id=order_id, error=str(exc))
            raise TransientIOError(f"Courier unavailable: {exc}", order_id=order_id) from exc

        data = response.json()
        packages = data.get("packages") or []
        package = packages[0] if packages else {}
        waybill = package.get("waybill")
        if not data.get("success") or not waybill:
            remarks = package.get("remarks") or data.get("rmk") or "Shipment creation failed"
            if isinstance(remarks, list):
                remarks = "; ".join(str(r) for r in remarks)
            logger.warning("Delhivery rejected shipment", order_id=order_id, remarks=remarks)
            return {"waybill": None, "error": remarks}

        logger.info("Delhivery shipment created", order_id=order_id, waybill=waybill)
        return {"waybill": waybill}

    def track(self, waybill: str) -> dict:
        try:
            response = requests.get(
                f"{self.base_url}/api/v1/packages/json/",
                params={"waybill": waybill},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Delhivery tracking request failed", waybill=waybill, error=str(exc))
            raise TransientIOError(f"Courier unavailable: {exc}", waybill=waybill) from exc

        data = response.json()
        shipments = data.get("ShipmentData") or []
        if not shipments:
            return {
                "status": None,
                "delivery_status": None,
                "location": None,
                "error": data.get("Error") or "Waybill not found",
            }

        status = shipments[0].get("Shipment", {}).get("Status", {})
        raw_status = status.get("Status")
        return {
            "status": raw_status,
            "delivery_status": to_delivery_status(raw_status),
            "location": status.get("StatusLocation"),
        }
