"""HTTP mapping for OrderDesk errors.

Protean's own handlers cover ``ValidationError`` (400) and
``ObjectNotFoundError`` (404). The more specific subclasses and the
collaborator failures get their own status codes here; Starlette picks the
handler registered for the closest class in the exception's MRO.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from orderdesk.errors import (
    InvalidTransition,
    NotServiceable,
    OrderDeskError,
    ShipmentCreationFailed,
    TrackingUnavailable,
    TransientIOError,
    VerificationFailed,
)

_VALIDATION_STATUS = {
    InvalidTransition: 409,
    NotServiceable: 422,
}

_COLLABORATOR_STATUS = {
    VerificationFailed: 402,
    ShipmentCreationFailed: 422,
    TrackingUnavailable: 409,
    TransientIOError: 503,
}


def _validation_handler(status_code: int):
    async def handler(_request: Request, exc) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


def _collaborator_handler(status_code: int):
    async def handler(_request: Request, exc: OrderDeskError) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.message, "details": exc.details})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for exc_class, status_code in _VALIDATION_STATUS.items():
        app.add_exception_handler(exc_class, _validation_handler(status_code))
    for exc_class, status_code in _COLLABORATOR_STATUS.items():
        app.add_exception_handler(exc_class, _collaborator_handler(status_code))
