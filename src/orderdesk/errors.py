"""Error taxonomy for OrderDesk.

Input and rule violations are Protean ``ValidationError`` subclasses so they
roll back the unit of work and surface as 4xx through the FastAPI exception
handlers. Failures of external collaborators derive from ``OrderDeskError``.
"""

from protean.exceptions import ValidationError


class InvalidTransition(ValidationError):
    """A status change the order lifecycle does not allow."""


class NotServiceable(ValidationError):
    """The delivery pincode is outside the coverage area."""


class OrderDeskError(Exception):
    """Base class for collaborator and reconciliation failures."""

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class VerificationFailed(OrderDeskError):
    """The gateway signature did not match the payment callback."""


class ShipmentCreationFailed(OrderDeskError):
    """The courier refused or failed to create a shipment."""


class TrackingUnavailable(OrderDeskError):
    """No waybill exists yet, or the courier could not be reached."""


class TransientIOError(OrderDeskError):
    """Network-level failure talking to an external service. Never retried here."""
