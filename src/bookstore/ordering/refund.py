"""Refund authorization for cancelled and returned orders."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from bookstore.domain import bookstore, logger
from bookstore.ordering.order import Order


@bookstore.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String(max_length=500)
    actor = String(max_length=255)


@bookstore.command_handler(part_of=Order)
class RefundOrderHandler:
    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.refund(command.amount, reason=command.reason, actor=command.actor)
        repo.add(order)
        logger.info(
            "order_refunded",
            order_id=str(order.id),
            amount=command.amount,
            actor=command.actor,
        )
