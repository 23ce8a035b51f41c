"""Tests for applying verified gateway webhook events."""

from factories import add_book, get_order, place_order
from protean import current_domain

from bookstore.ordering.lifecycle import TransitionOrder
from bookstore.ordering.placement import AttachGatewayOrder
from bookstore.ordering.refund import RefundOrder
from bookstore.payments.webhook import process_webhook


def _order_with_charge(gateway_order_id="order_gw_1"):
    book_id = add_book(quantity=5)
    order_id = place_order([(book_id, 1)])
    current_domain.process(
        AttachGatewayOrder(order_id=order_id, gateway_order_id=gateway_order_id),
        asynchronous=False,
    )
    return order_id


def _payment_event(event_type, order_id="order_gw_1", payment_id="pay_1", **entity):
    return {
        "event": event_type,
        "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id, **entity}}},
    }


def test_captured_confirms_payment():
    order_id = _order_with_charge()
    assert process_webhook(_payment_event("payment.captured")) == "confirmed"
    order = get_order(order_id)
    assert order.payment_status == "completed"
    assert order.payment_id == "pay_1"


def test_order_paid_uses_gateway_order_entity():
    order_id = _order_with_charge()
    event = {"event": "order.paid", "payload": {"order": {"entity": {"id": "order_gw_1"}}}}
    assert process_webhook(event) == "confirmed"
    assert get_order(order_id).payment_status == "completed"


def test_redelivery_is_duplicate():
    _order_with_charge()
    process_webhook(_payment_event("payment.captured"))
    assert process_webhook(_payment_event("payment.captured")) == "duplicate"


def test_order_paid_after_capture_keeps_payment_id():
    order_id = _order_with_charge()
    process_webhook(_payment_event("payment.captured"))
    event = {"event": "order.paid", "payload": {"order": {"entity": {"id": "order_gw_1"}}}}

    assert process_webhook(event) == "duplicate"
    assert get_order(order_id).payment_id == "pay_1"


def test_payload_sections_of_wrong_type_treated_as_unknown():
    event = {"event": "payment.captured", "payload": {"payment": ["not", "an", "object"]}}
    assert process_webhook(event) == "unknown_order"


def test_failed_marks_payment_failed():
    order_id = _order_with_charge()
    outcome = process_webhook(_payment_event("payment.failed", error_description="Card declined"))
    assert outcome == "failed"
    assert get_order(order_id).payment_status == "failed"


def test_unknown_order_acknowledged():
    assert process_webhook(_payment_event("payment.captured", order_id="order_nobody")) == "unknown_order"


def test_other_events_ignored():
    assert process_webhook({"event": "refund.created", "payload": {}}) == "ignored"


def test_capture_after_refund_rejected():
    order_id = _order_with_charge()
    current_domain.process(
        TransitionOrder(order_id=order_id, status="cancelled", actor="admin-001"),
        asynchronous=False,
    )
    current_domain.process(RefundOrder(order_id=order_id, amount=5.0), asynchronous=False)

    assert process_webhook(_payment_event("payment.captured")) == "rejected"
    assert get_order(order_id).payment_status == "refunded"
