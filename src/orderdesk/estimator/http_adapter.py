"""Distance-service estimator.

POSTs ``{"pincode": ...}`` to the store's distance service, which answers
``{"success": true, "distance": <km>, "fee": <rupees>}`` or
``{"success": false, "message": "..."}`` for pincodes it cannot serve.
"""

import requests
import structlog

from orderdesk.errors import TransientIOError
from orderdesk.estimator.port import FeeEstimator, FeeQuote
from orderdesk.money import to_paise

logger = structlog.get_logger(__name__)


class HttpEstimator(FeeEstimator):
    def __init__(self, url: str, timeout: float = 10) -> None:
        self.url = url
        self.timeout = timeout

    def estimate(self, pincode: str) -> FeeQuote | None:
        try:
            response = requests.post(self.url, json={"pincode": pincode}, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Distance service request failed", pincode=pincode, error=str(exc))
            raise TransientIOError(f"Distance service unavailable: {exc}", pincode=pincode) from exc

        data = response.json()
        if not data.get("success") or data.get("serviceable") is False or data.get("fee") is None:
            logger.info("Pincode not serviceable", pincode=pincode, message=data.get("message"))
            return None
        return FeeQuote(distance_km=float(data["distance"]), fee=to_paise(data["fee"]))
