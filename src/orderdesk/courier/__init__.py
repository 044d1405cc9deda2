"""Courier adapter abstraction: pluggable shipping courier integration."""

import os

_courier_instance = None


def get_courier():
    """Return the configured courier adapter (singleton).

    Uses FakeCourier by default. In production, set COURIER_ADAPTER=delhivery
    along with DELHIVERY_API_TOKEN and DELHIVERY_PICKUP_LOCATION.
    """
    global _courier_instance
    if _courier_instance is None:
        adapter = os.environ.get("COURIER_ADAPTER", "fake")
        if adapter == "fake":
            from orderdesk.courier.fake_adapter import FakeCourier

            _courier_instance = FakeCourier()
        elif adapter == "delhivery":
            from orderdesk.courier.delhivery_adapter import DEFAULT_BASE_URL, DelhiveryCourier

            _courier_instance = DelhiveryCourier(
                api_token=os.environ["DELHIVERY_API_TOKEN"],
                pickup_location=os.environ["DELHIVERY_PICKUP_LOCATION"],
                base_url=os.environ.get("DELHIVERY_BASE_URL", DEFAULT_BASE_URL),
            )
        else:
            raise ValueError(f"Unknown courier adapter: {adapter}")
    return _courier_instance


def reset_courier():
    """Reset the courier singleton (useful for testing)."""
    global _courier_instance
    _courier_instance = None
