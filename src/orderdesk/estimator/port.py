"""Delivery fee estimator port.

Given a destination pincode, returns the road distance from the store and
the delivery fee, or None when the pincode is outside delivery coverage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FeeQuote:
    distance_km: float
    fee: int  # paise


class FeeEstimator(ABC):
    @abstractmethod
    def estimate(self, pincode: str) -> FeeQuote | None:
        """Quote delivery to ``pincode``; None means not serviceable."""
        ...
