"""Store-level settings read from the environment.

Adapter selection lives with each port factory (see ``orderdesk.gateway``,
``orderdesk.courier``, ``orderdesk.estimator``); this module only holds
settings shared by the domain logic itself.
"""

import os
from decimal import Decimal
from zoneinfo import ZoneInfo

GST_RATE = Decimal("0.05")
CURRENCY = "INR"

DEFAULT_STORE_TIMEZONE = "Asia/Kolkata"
DEFAULT_LOCAL_DELIVERY_RADIUS_KM = 15.0


def store_timezone() -> ZoneInfo:
    """Timezone used for "today/week/month" filters and local midnight."""
    return ZoneInfo(os.environ.get("STORE_TIMEZONE", DEFAULT_STORE_TIMEZONE))


def local_delivery_radius_km() -> float:
    """Orders within this distance are delivered by the store itself."""
    return float(os.environ.get("LOCAL_DELIVERY_RADIUS_KM", DEFAULT_LOCAL_DELIVERY_RADIUS_KM))


def is_production() -> bool:
    return os.environ.get("PROTEAN_ENV") == "production"
