"""Delivery quotes for checkout.

Validates the pincode, asks the estimator for distance and fee, and picks
the delivery provider: addresses within the local radius are delivered by
the store (SELF), the rest go through the courier (DELHIVERY).
"""

import re

from protean.exceptions import ValidationError

from orderdesk.config import local_delivery_radius_km
from orderdesk.errors import NotServiceable
from orderdesk.estimator import get_estimator
from orderdesk.order.order import DeliveryProvider

PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")


def validate_pincode(pincode: str | None) -> str:
    pincode = (pincode or "").strip()
    if len(pincode) != 6:
        raise ValidationError({"postcode": ["Pincode must be 6 digits"]})
    if not PINCODE_PATTERN.match(pincode):
        raise ValidationError({"postcode": ["Invalid pincode format"]})
    return pincode


def provider_for_distance(distance_km: float) -> DeliveryProvider:
    if distance_km <= local_delivery_radius_km():
        return DeliveryProvider.SELF
    return DeliveryProvider.DELHIVERY


def quote_delivery(pincode: str | None) -> dict:
    """Distance, fee (paise) and provider for ``pincode``.

    Raises ``ValidationError`` for a malformed pincode and ``NotServiceable``
    when the estimator cannot deliver there.
    """
    pincode = validate_pincode(pincode)
    quote = get_estimator().estimate(pincode)
    if quote is None:
        raise NotServiceable({"postcode": ["Pincode not serviceable in our delivery area"]})
    return {
        "pincode": pincode,
        "distance_km": quote.distance_km,
        "fee": quote.fee,
        "delivery_provider": provider_for_distance(quote.distance_km).value,
    }
