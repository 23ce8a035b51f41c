"""Domain events raised by the Order aggregate.

Events that affect stock carry the order's lines as a JSON list of
``{"book_id": ..., "quantity": ...}`` so catalogue handlers can react without
loading the order.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from bookstore.domain import bookstore


@bookstore.event(part_of="Order")
class OrderPlaced:
    """A customer checked out; stock for every line is already reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON
    total = Float(required=True)
    currency = String(max_length=3, required=True)
    placed_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderProcessing:
    """Payment is settled and the order is being prepared; stock is committed."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    items = Text(required=True)  # JSON
    processing_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tracking_number = String()
    carrier = String()
    estimated_delivery = DateTime()
    shipped_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    delivered_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled.

    ``previous_status`` tells stock handlers whether units were still reserved
    (pending) or already committed (processing).
    """

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)
    actor = String()
    items = Text(required=True)  # JSON
    cancelled_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderReturned:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String(max_length=500)
    items = Text(required=True)  # JSON
    returned_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    amount = Float(required=True)
    reason = String(max_length=500)
    refunded_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class GatewayOrderAttached:
    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(required=True)


@bookstore.event(part_of="Order")
class PaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_id = String(required=True)
    confirmed_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_id = String()
    reason = String(max_length=500)


@bookstore.event(part_of="Order")
class AdminNotesUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    admin_notes = String(max_length=1000)
