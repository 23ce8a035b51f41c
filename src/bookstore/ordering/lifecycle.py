"""Order status changes: admin transitions and customer cancel/return."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from bookstore.catalogue.order_stock import settle_order_stock
from bookstore.domain import bookstore, logger
from bookstore.ordering.order import Order, OrderStatus


def _return_window_days() -> int:
    return int(current_domain.RETURN_WINDOW_DAYS)


@bookstore.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=1000)
    actor = String(max_length=255)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()


@bookstore.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@bookstore.command(part_of="Order")
class RequestReturn:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@bookstore.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.transition(
            command.status,
            note=command.note,
            actor=command.actor,
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            estimated_delivery=command.estimated_delivery,
            return_window_days=_return_window_days(),
        )
        settle_order_stock(order, previous)
        repo.add(order)
        logger.info(
            "order_status_changed",
            order_id=str(order.id),
            previous_status=previous,
            status=order.status,
            actor=command.actor,
        )

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_for_customer(command.order_id, command.customer_id)
        previous = order.status
        order.cancel(command.reason, actor=str(command.customer_id))
        settle_order_stock(order, previous)
        repo.add(order)

    @handle(RequestReturn)
    def request_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_for_customer(command.order_id, command.customer_id)
        order.request_return(
            command.reason,
            actor=str(command.customer_id),
            return_window_days=_return_window_days(),
        )
        repo.add(order)
