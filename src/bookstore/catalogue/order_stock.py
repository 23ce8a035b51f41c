"""Stock side effects of order status changes.

Called from the order command handlers before the order is saved, so the
books and the order commit in the same unit of work:

- pending -> processing: reserved units are committed as sold.
- pending -> cancelled: reservations are released.
- processing -> cancelled: committed units are restocked.
"""

import structlog
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.ordering.order import OrderStatus

logger = structlog.get_logger(__name__)

_ACTIONS = {
    (OrderStatus.PENDING.value, OrderStatus.PROCESSING.value): "commit",
    (OrderStatus.PENDING.value, OrderStatus.CANCELLED.value): "release",
    (OrderStatus.PROCESSING.value, OrderStatus.CANCELLED.value): "restock",
}


def settle_order_stock(order, previous_status) -> str | None:
    """Apply the stock change for ``previous_status`` -> ``order.status``.

    Returns the action taken, or None when the move has no stock effect.
    """
    action = _ACTIONS.get((previous_status, order.status))
    if action is None:
        return None

    repo = current_domain.repository_for(Book)
    for item in order.ordered_items:
        book = repo.get(str(item.book_id))
        getattr(book, action)(item.quantity, order_id=str(order.id))
        repo.add(book)

    logger.info(
        "order_stock_settled",
        order_id=str(order.id),
        previous_status=previous_status,
        status=order.status,
        action=action,
    )
    return action
