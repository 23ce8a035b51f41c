"""Tests for payment status changes on the Order aggregate."""

import pytest
from factories import build_order

from bookstore.errors import InvalidOrderState
from bookstore.ordering.events import GatewayOrderAttached, PaymentConfirmed, PaymentFailed


def test_attach_gateway_order():
    order = build_order()
    order.attach_gateway_order("order_abc")
    assert order.gateway_order_id == "order_abc"
    assert isinstance(order._events[-1], GatewayOrderAttached)


def test_confirm_payment():
    order = build_order()
    assert order.confirm_payment("pay_123") is True
    assert order.payment_status == "completed"
    assert order.payment_id == "pay_123"
    assert isinstance(order._events[-1], PaymentConfirmed)


def test_confirm_payment_is_idempotent():
    order = build_order()
    order.confirm_payment("pay_123")
    order._events.clear()
    assert order.confirm_payment("pay_123") is False
    assert order._events == []


def test_second_capture_with_other_payment_id_is_duplicate():
    order = build_order()
    order.confirm_payment("pay_123")
    order._events.clear()

    assert order.confirm_payment("pay_456") is False
    assert order.payment_id == "pay_123"
    assert order._events == []


def test_confirm_after_refund_rejected():
    order = build_order(("cancelled",))
    order.refund(10.0)
    with pytest.raises(InvalidOrderState):
        order.confirm_payment("pay_123")


def test_record_failure():
    order = build_order()
    order.record_payment_failure("pay_999", reason="Card declined")
    assert order.payment_status == "failed"
    assert isinstance(order._events[-1], PaymentFailed)


def test_failure_after_capture_rejected():
    order = build_order()
    order.confirm_payment("pay_123")
    with pytest.raises(InvalidOrderState):
        order.record_payment_failure("pay_123")
    assert order.payment_status == "completed"
