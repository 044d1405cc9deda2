"""Tests for payment outcomes recorded on the Order aggregate."""

import pytest
from orderdesk.errors import InvalidTransition
from orderdesk.order.events import PaymentFailed, PaymentSucceeded
from orderdesk.order.order import OrderStatus, PaymentStatus


class TestPaymentSuccess:
    def test_verified_payment_confirms_order(self, make_order):
        order = make_order()

        paid = order.record_payment_success("pay_001", signature_verified=True, method="upi")

        assert paid is True
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.confirmed_at is not None

    def test_transaction_recorded(self, make_order):
        order = make_order()
        order.record_payment_success("pay_001", signature_verified=True, method="card")

        assert len(order.payment_transactions) == 1
        txn = order.payment_transactions[0]
        assert txn.payment_id == "pay_001"
        assert txn.status == PaymentStatus.PAID.value
        assert txn.signature_verified is True
        assert txn.amount == order.pricing.total_amount
        assert txn.gateway_order_ref == "order_test_001"

    def test_payment_succeeded_event(self, make_order):
        order = make_order()
        order.record_payment_success("pay_001", signature_verified=True)
        events = [e for e in order._events if isinstance(e, PaymentSucceeded)]
        assert len(events) == 1
        assert events[0].amount == 110000

    def test_unverified_signature_fails_payment(self, make_order):
        order = make_order()

        paid = order.record_payment_success("pay_001", signature_verified=False)

        assert paid is False
        assert order.payment_status == PaymentStatus.FAILED.value
        assert order.order_status == OrderStatus.FAILED.value
        assert order.failure_reason == "Payment signature verification failed"
        assert order.payment_transactions[0].status == PaymentStatus.FAILED.value

    def test_success_after_failure(self, make_order):
        order = make_order()
        order.record_payment_failure("BAD_REQUEST_ERROR: Card declined")

        order.record_payment_success("pay_002", signature_verified=True)

        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.failure_reason is None

    def test_repeat_success_is_ignored(self, make_order):
        order = make_order(paid=True)
        order.record_payment_success("pay_002", signature_verified=True)
        assert len(order.payment_transactions) == 1


class TestPaymentFailure:
    def test_failure_flags_order(self, make_order):
        order = make_order()

        changed = order.record_payment_failure("BAD_REQUEST_ERROR: Card declined", error_code="BAD_REQUEST_ERROR")

        assert changed is True
        assert order.payment_status == PaymentStatus.FAILED.value
        assert order.order_status == OrderStatus.FAILED.value
        assert order.failure_reason == "BAD_REQUEST_ERROR: Card declined"

    def test_failure_with_payment_id_records_transaction(self, make_order):
        order = make_order()
        order.record_payment_failure(
            "Card declined",
            payment_id="pay_009",
            error_code="BAD_REQUEST_ERROR",
            error_description="Card declined",
        )
        txn = order.payment_transactions[0]
        assert txn.status == PaymentStatus.FAILED.value
        assert txn.error_code == "BAD_REQUEST_ERROR"

    def test_cancellation(self, make_order):
        order = make_order()
        order.record_payment_failure("Payment cancelled by user", cancelled=True)
        assert order.payment_status == PaymentStatus.CANCELLED.value
        assert order.order_status == OrderStatus.FAILED.value

    def test_last_reason_wins(self, make_order):
        order = make_order()
        order.record_payment_failure("first")
        order.record_payment_failure("second")
        assert order.failure_reason == "second"
        assert order.order_status == OrderStatus.FAILED.value

    def test_failure_after_success_is_noop(self, make_order):
        order = make_order(paid=True)

        changed = order.record_payment_failure("late timeout")

        assert changed is False
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.failure_reason is None
        assert not any(isinstance(e, PaymentFailed) for e in order._events)

    def test_cancellation_after_success_is_noop(self, make_order):
        order = make_order(paid=True)
        assert order.record_payment_failure("Payment cancelled by user", cancelled=True) is False
        assert order.payment_status == PaymentStatus.PAID.value


class TestPaymentStatusCorrection:
    def test_operator_can_mark_cancelled(self, make_order):
        order = make_order()
        order.update_payment_status("cancelled")
        assert order.payment_status == PaymentStatus.CANCELLED.value

    def test_paid_is_final(self, make_order):
        order = make_order(paid=True)
        with pytest.raises(InvalidTransition):
            order.update_payment_status("failed")
