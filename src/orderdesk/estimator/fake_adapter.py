"""Fake fee estimator with a flat quote and a configurable no-service list."""

from orderdesk.estimator.port import FeeEstimator, FeeQuote


class FakeEstimator(FeeEstimator):
    def __init__(self) -> None:
        self.distance_km: float = 8.0
        self.fee: int = 5000
        self.unserviceable: set[str] = set()
        self.calls: list[str] = []

    def configure(
        self,
        distance_km: float | None = None,
        fee: int | None = None,
        unserviceable: set[str] | None = None,
    ) -> None:
        if distance_km is not None:
            self.distance_km = distance_km
        if fee is not None:
            self.fee = fee
        if unserviceable is not None:
            self.unserviceable = set(unserviceable)

    def estimate(self, pincode: str) -> FeeQuote | None:
        self.calls.append(pincode)
        if pincode in self.unserviceable:
            return None
        return FeeQuote(distance_km=self.distance_km, fee=self.fee)
