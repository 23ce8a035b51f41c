"""Payment outcomes reported by the gateway."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from bookstore.catalogue.order_stock import settle_order_stock
from bookstore.domain import bookstore, logger
from bookstore.ordering.order import Order, OrderStatus


@bookstore.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)


@bookstore.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    reason = String(max_length=500)


@bookstore.command(part_of="Order")
class AbandonCheckout:
    """The gateway refused to open a charge: cancel the order and free its stock."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@bookstore.command_handler(part_of=Order)
class PaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.confirm_payment(command.payment_id):
            logger.info("payment_already_confirmed", order_id=str(order.id), payment_id=command.payment_id)
            return False
        repo.add(order)
        return True

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_failure(payment_id=command.payment_id, reason=command.reason)
        repo.add(order)

    @handle(AbandonCheckout)
    def abandon_checkout(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        if order.status == OrderStatus.PENDING.value:
            order.system_cancel(command.reason)
            settle_order_stock(order, previous)
        order.record_payment_failure(reason=command.reason)
        repo.add(order)
