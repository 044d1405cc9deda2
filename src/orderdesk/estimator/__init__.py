"""Fee estimator factory. ESTIMATOR_ADAPTER selects ``fake`` (default) or ``http``."""

import os

from orderdesk.estimator.port import FeeEstimator

_current_estimator: FeeEstimator | None = None


def get_estimator() -> FeeEstimator:
    global _current_estimator
    if _current_estimator is None:
        adapter = os.environ.get("ESTIMATOR_ADAPTER", "fake")
        if adapter == "fake":
            from orderdesk.estimator.fake_adapter import FakeEstimator

            _current_estimator = FakeEstimator()
        elif adapter == "http":
            from orderdesk.estimator.http_adapter import HttpEstimator

            _current_estimator = HttpEstimator(url=os.environ["DISTANCE_SERVICE_URL"])
        else:
            raise ValueError(f"Unknown estimator adapter: {adapter}")
    return _current_estimator


def reset_estimator() -> None:
    global _current_estimator
    _current_estimator = None
