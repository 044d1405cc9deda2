"""Payment reconciliation: commands and handler for gateway outcomes.

The checkout widget reports one of three outcomes per attempt: a signed
success payload, a failure with the gateway's error code, or a user
cancellation. Success is the only irreversible outcome: once an order is
paid, later failure or cancellation reports for it are ignored.

Orders whose payment fails stay queryable (flagged ``failed``) and are also
snapshotted into the FailedOrder console. A later verified success removes
the snapshot.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.errors import VerificationFailed
from orderdesk.failed_order.failed_order import FailedOrder
from orderdesk.gateway import get_gateway
from orderdesk.order.order import Order
from orderdesk.utils.logging import bind_order

logger = structlog.get_logger(__name__)

CANCELLED_BY_USER = "Payment cancelled by user"


@orderdesk.command(part_of="Order")
class RecordPaymentSuccess:
    """Gateway success callback for an order."""

    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=100)
    signature = String(required=True, max_length=256)
    gateway_order_ref = String(max_length=100)
    amount = Integer()  # paise
    method = String(max_length=50)


@orderdesk.command(part_of="Order")
class RecordPaymentFailure:
    """Gateway failure callback, or a client-side timeout fallback."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)
    payment_id = String(max_length=100)
    error_code = String(max_length=100)
    error_description = String(max_length=500)


@orderdesk.command(part_of="Order")
class RecordPaymentCancellation:
    """The customer dismissed the checkout widget."""

    order_id = Identifier(required=True)


def _remember_failure(order: Order, error_code: str | None = None, error_description: str | None = None) -> None:
    repo = current_domain.repository_for(FailedOrder)
    existing = repo._dao.query.filter(order_id=str(order.id)).all().items
    if existing:
        failed = existing[0]
        failed.record(order.failure_reason, order.payment_status, error_code, error_description)
    else:
        failed = FailedOrder.snapshot(order, order.failure_reason, error_code, error_description)
    repo.add(failed)


def _forget_failure(order: Order) -> None:
    repo = current_domain.repository_for(FailedOrder)
    for record in repo._dao.query.filter(order_id=str(order.id)).all().items:
        repo._dao.delete(record)


def _failure_reason(command) -> str:
    if command.reason:
        return command.reason
    if command.error_code or command.error_description:
        return ": ".join(part for part in (command.error_code, command.error_description) if part)
    return "Payment failed"


@orderdesk.command_handler(part_of=Order)
class PaymentReconciliationHandler:
    @handle(RecordPaymentSuccess)
    def record_success(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bind_order(str(order.id))

        # Verify against the reference issued for this order, not the one in the callback
        order_ref = order.gateway_order_ref or command.gateway_order_ref
        verified = get_gateway().verify_payment_signature(order_ref, command.payment_id, command.signature)
        if not verified:
            logger.warning(
                "Payment signature verification failed",
                order_id=str(order.id),
                payment_id=command.payment_id,
            )

        was_paid = order.is_paid
        order.record_payment_success(
            payment_id=command.payment_id,
            signature_verified=verified,
            amount=command.amount,
            method=command.method,
            gateway_order_ref=command.gateway_order_ref,
        )
        if not was_paid:
            if order.is_paid:
                _forget_failure(order)
            else:
                _remember_failure(order, error_description=order.failure_reason)
            repo.add(order)
        return verified

    @handle(RecordPaymentFailure)
    def record_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bind_order(str(order.id))
        changed = order.record_payment_failure(
            _failure_reason(command),
            payment_id=command.payment_id,
            error_code=command.error_code,
            error_description=command.error_description,
        )
        if changed:
            _remember_failure(order, command.error_code, command.error_description)
            repo.add(order)
        return changed

    @handle(RecordPaymentCancellation)
    def record_cancellation(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bind_order(str(order.id))
        changed = order.record_payment_failure(CANCELLED_BY_USER, cancelled=True)
        if changed:
            _remember_failure(order)
            repo.add(order)
        return changed


def record_payment_success(**fields) -> None:
    """Process a success callback; raise ``VerificationFailed`` if the signature is bad.

    The failed attempt is committed before the error is raised, so the order
    is left flagged rather than untouched.
    """
    verified = current_domain.process(RecordPaymentSuccess(**fields), asynchronous=False)
    if not verified:
        raise VerificationFailed("Payment signature verification failed", order_id=str(fields.get("order_id")))
