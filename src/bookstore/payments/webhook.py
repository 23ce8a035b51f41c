"""Apply verified gateway webhook events to orders.

Razorpay-style payloads nest the payment under ``payload.payment.entity`` and,
for ``order.paid``, the gateway order under ``payload.order.entity``.
"""

import structlog
from protean.utils.globals import current_domain

from bookstore.errors import InvalidOrderState
from bookstore.ordering.order import Order
from bookstore.ordering.payment import ConfirmPayment, RecordPaymentFailure

logger = structlog.get_logger(__name__)

CAPTURE_EVENTS = frozenset({"payment.captured", "order.paid"})
FAILURE_EVENTS = frozenset({"payment.failed"})


def _entity(event: dict, name: str) -> dict:
    node = event.get("payload")
    for key in (name, "entity"):
        node = node.get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def process_webhook(event: dict) -> str:
    """Apply one webhook event and return what happened to it."""
    event_type = event.get("event")
    payment = _entity(event, "payment")
    gateway_order = _entity(event, "order")

    if event_type not in CAPTURE_EVENTS | FAILURE_EVENTS:
        logger.info("webhook_ignored", event_type=event_type)
        return "ignored"

    gateway_order_id = payment.get("order_id") or gateway_order.get("id")
    order = current_domain.repository_for(Order).by_gateway_order_id(gateway_order_id) if gateway_order_id else None
    if order is None:
        logger.warning("webhook_for_unknown_order", event_type=event_type, gateway_order_id=gateway_order_id)
        return "unknown_order"

    try:
        if event_type in CAPTURE_EVENTS:
            confirmed = current_domain.process(
                ConfirmPayment(order_id=str(order.id), payment_id=payment.get("id") or gateway_order_id),
                asynchronous=False,
            )
            outcome = "confirmed" if confirmed else "duplicate"
        else:
            current_domain.process(
                RecordPaymentFailure(
                    order_id=str(order.id),
                    payment_id=payment.get("id"),
                    reason=payment.get("error_description"),
                ),
                asynchronous=False,
            )
            outcome = "failed"
    except InvalidOrderState as exc:
        logger.warning(
            "webhook_rejected_by_order",
            order_id=str(order.id),
            event_type=event_type,
            error=str(exc),
        )
        return "rejected"

    logger.info("webhook_applied", order_id=str(order.id), event_type=event_type, outcome=outcome)
    return outcome
