"""Order aggregate: the checkout snapshot plus its lifecycle state machine.

State Machine:
    pending → processing → shipped → delivered → returned
    pending → cancelled
    processing → cancelled

``cancelled`` and ``returned`` are terminal. Every status change appends one
StatusChange to the order's history in the same write as the status itself.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from bookstore.domain import bookstore
from bookstore.errors import (
    AmountExceedsOrderTotal,
    InvalidOrderState,
    InvalidTransition,
    ReturnWindowExpired,
)

DEFAULT_RETURN_WINDOW_DAYS = 30
SYSTEM_ACTOR = "system"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    RAZORPAY = "razorpay"
    COD = "cod"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# Orders counted as revenue in sales reporting
FULFILLED_STATUSES = frozenset({OrderStatus.DELIVERED.value})

# Statuses from which a refund may be recorded
_REFUNDABLE_STATUSES = {OrderStatus.CANCELLED, OrderStatus.RETURNED}


def allowed_transitions(status) -> set:
    return _VALID_TRANSITIONS.get(OrderStatus(status), set())


def as_utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@bookstore.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout; later profile edits never touch it."""

    name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(max_length=100, default="United States")
    phone_number = String(max_length=30)


@bookstore.value_object(part_of="Order")
class OrderPricing:
    """Money summary of an order, locked at checkout.

    ``total`` always equals ``subtotal + tax + shipping - discount`` and is
    never negative. Use :meth:`compute` to build one from line subtotals.
    """

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_balance(self):
        expected = round((self.subtotal or 0) + (self.tax or 0) + (self.shipping or 0) - (self.discount or 0), 2)
        if (self.total or 0) < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})
        if abs((self.total or 0) - expected) > 0.005:
            raise ValidationError({"total": [f"Total {self.total} does not match components ({expected})"]})

    @classmethod
    def compute(cls, line_subtotals, tax=0.0, shipping=0.0, discount=0.0, currency="USD") -> "OrderPricing":
        subtotal = round(sum(line_subtotals), 2)
        tax = round(tax, 2)
        shipping = round(shipping, 2)
        discount = round(discount, 2)
        return cls(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            discount=discount,
            total=round(subtotal + tax + shipping - discount, 2),
            currency=currency,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@bookstore.entity(part_of="Order")
class OrderItem:
    """One ordered book, priced and described as it was at checkout."""

    book_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    author = String(max_length=100)
    isbn = String(max_length=13)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)
    position = Integer(default=0)


@bookstore.entity(part_of="Order")
class StatusChange:
    """A single entry in an order's append-only status history."""

    sequence = Integer(required=True, min_value=0)
    previous_status = String(max_length=20)
    status = String(required=True, max_length=20)
    note = String(max_length=1000)
    actor = String(max_length=255)
    timestamp = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@bookstore.aggregate(limit=-1)
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=100)
    customer_email = String(max_length=254)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.RAZORPAY.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=255)
    gateway_order_id = String(max_length=255)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()
    shipped_date = DateTime()
    delivered_date = DateTime()
    cancelled_date = DateTime()
    history = HasMany(StatusChange)
    cancellation_reason = String(max_length=500)
    return_reason = String(max_length=500)
    refund_amount = Float(min_value=0.0)
    refund_date = DateTime()
    refund_reason = String(max_length=500)
    customer_notes = String(max_length=500)
    admin_notes = String(max_length=1000)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total(self) -> float:
        return self.pricing.total if self.pricing else 0.0

    @property
    def ordered_items(self) -> list:
        return sorted(self.items or [], key=lambda item: item.position or 0)

    @property
    def status_history(self) -> list:
        return sorted(self.history or [], key=lambda entry: entry.sequence)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items or [])

    def items_payload(self) -> str:
        """JSON list of ``{book_id, quantity}`` carried on stock-affecting events."""
        return json.dumps([{"book_id": str(item.book_id), "quantity": item.quantity} for item in self.ordered_items])

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        customer_id,
        lines,
        pricing,
        shipping_address,
        payment_method,
        customer_name=None,
        customer_email=None,
        customer_notes=None,
        now=None,
        order_id=None,
    ):
        """Build a pending order with its first history entry.

        Args:
            lines: List of dicts with book_id, title, author, isbn,
                   unit_price and quantity, in display order.
            pricing: An OrderPricing computed from the lines.
            shipping_address: A ShippingAddress snapshot.
        """
        from bookstore.ordering.events import OrderPlaced

        now = now or datetime.now(UTC)
        identity = {"id": order_id} if order_id is not None else {}
        order = cls(
            **identity,
            order_number=order_number,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            pricing=pricing,
            shipping_address=shipping_address,
            payment_method=payment_method,
            customer_notes=customer_notes,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for position, line in enumerate(lines):
            order.add_items(
                OrderItem(
                    book_id=line["book_id"],
                    title=line["title"],
                    author=line.get("author"),
                    isbn=line.get("isbn"),
                    unit_price=line["unit_price"],
                    quantity=line["quantity"],
                    subtotal=round(line["unit_price"] * line["quantity"], 2),
                    position=position,
                )
            )
        order._record_history(None, OrderStatus.PENDING.value, "Order created", str(customer_id), now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                items=order.items_payload(),
                total=pricing.total,
                currency=pricing.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(current.value, target_status.value)

    def _record_history(self, previous_status, status, note, actor, timestamp):
        self.add_history(
            StatusChange(
                sequence=len(self.history or []),
                previous_status=previous_status,
                status=status,
                note=note,
                actor=actor,
                timestamp=timestamp,
            )
        )

    def _assert_within_return_window(self, now, window_days):
        if self.delivered_date is None:
            raise InvalidOrderState("Order has no delivery date")
        if as_utc(now) - as_utc(self.delivered_date) > timedelta(days=window_days):
            raise ReturnWindowExpired(window_days)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def transition(
        self,
        new_status,
        note=None,
        actor=None,
        tracking_number=None,
        carrier=None,
        estimated_delivery=None,
        now=None,
        return_window_days=DEFAULT_RETURN_WINDOW_DAYS,
    ):
        """Move the order to ``new_status``, recording one history entry.

        Nothing changes when the move is rejected.
        """
        from bookstore.ordering.events import (
            OrderCancelled,
            OrderDelivered,
            OrderProcessing,
            OrderReturned,
            OrderShipped,
        )

        target = OrderStatus(new_status)
        self._assert_can_transition(target)

        now = now or datetime.now(UTC)
        if target == OrderStatus.RETURNED:
            self._assert_within_return_window(now, return_window_days)

        previous = self.status
        note = note or f"Status changed from {previous} to {target.value}"

        self.status = target.value
        self.updated_at = now
        self._record_history(previous, target.value, note, actor, now)

        if target == OrderStatus.PROCESSING:
            self.raise_(
                OrderProcessing(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    items=self.items_payload(),
                    processing_at=now,
                )
            )
        elif target == OrderStatus.SHIPPED:
            self.shipped_date = now
            if tracking_number is not None:
                self.tracking_number = tracking_number
            if carrier is not None:
                self.carrier = carrier
            if estimated_delivery is not None:
                self.estimated_delivery = estimated_delivery
            self.raise_(
                OrderShipped(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    tracking_number=self.tracking_number,
                    carrier=self.carrier,
                    estimated_delivery=self.estimated_delivery,
                    shipped_at=now,
                )
            )
        elif target == OrderStatus.DELIVERED:
            self.delivered_date = now
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    delivered_at=now,
                )
            )
        elif target == OrderStatus.CANCELLED:
            self.cancelled_date = now
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    previous_status=previous,
                    reason=self.cancellation_reason,
                    actor=actor,
                    items=self.items_payload(),
                    cancelled_at=now,
                )
            )
        elif target == OrderStatus.RETURNED:
            self.raise_(
                OrderReturned(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    reason=self.return_reason,
                    items=self.items_payload(),
                    returned_at=now,
                )
            )

    def cancel(self, reason, actor=None, now=None):
        """Customer cancellation of a pending or processing order."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        self.transition(
            OrderStatus.CANCELLED.value,
            note=f"Order cancelled by customer: {reason}",
            actor=actor,
            now=now,
        )

    def request_return(self, reason, actor=None, now=None, return_window_days=DEFAULT_RETURN_WINDOW_DAYS):
        """Customer return of a delivered order within the return window."""
        self._assert_can_transition(OrderStatus.RETURNED)
        self._assert_within_return_window(now or datetime.now(UTC), return_window_days)
        self.return_reason = reason
        self.transition(
            OrderStatus.RETURNED.value,
            note=f"Return requested by customer: {reason}",
            actor=actor,
            now=now,
            return_window_days=return_window_days,
        )

    def system_cancel(self, reason):
        """Cancellation raised by the store itself, e.g. a failed gateway charge."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        self.transition(
            OrderStatus.CANCELLED.value,
            note=f"Order cancelled by system: {reason}",
            actor=SYSTEM_ACTOR,
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def refund(self, amount, reason=None, actor=None, now=None):
        """Record a refund on a cancelled or returned order. Status is kept."""
        from bookstore.ordering.events import OrderRefunded

        if OrderStatus(self.status) not in _REFUNDABLE_STATUSES:
            raise InvalidOrderState("Refund can only be processed for cancelled or returned orders")
        if self.refund_amount is not None:
            raise InvalidOrderState("Order has already been refunded")
        if amount is None or amount <= 0:
            raise ValidationError({"refund_amount": ["Refund amount must be positive"]})
        if amount > self.total:
            raise AmountExceedsOrderTotal(amount, self.total)

        now = now or datetime.now(UTC)
        self.refund_amount = amount
        self.refund_date = now
        self.refund_reason = reason
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self._record_history(
            self.status,
            self.status,
            f"Refund processed: ${amount:.2f}. Reason: {reason or 'Not specified'}",
            actor,
            now,
        )

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                amount=amount,
                reason=reason,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_gateway_order(self, gateway_order_id):
        from bookstore.ordering.events import GatewayOrderAttached

        self.gateway_order_id = gateway_order_id
        self.updated_at = datetime.now(UTC)
        self.raise_(
            GatewayOrderAttached(
                order_id=str(self.id),
                gateway_order_id=gateway_order_id,
            )
        )

    def confirm_payment(self, payment_id) -> bool:
        """Mark the payment captured. Returns False when already confirmed.

        A second capture never replaces the recorded payment id.
        """
        from bookstore.ordering.events import PaymentConfirmed

        if self.payment_status == PaymentStatus.COMPLETED.value:
            return False
        if self.payment_status == PaymentStatus.REFUNDED.value:
            raise InvalidOrderState("Payment for a refunded order cannot be confirmed")

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.COMPLETED.value
        self.payment_id = payment_id
        self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                order_number=self.order_number,
                payment_id=payment_id,
                confirmed_at=now,
            )
        )
        return True

    def record_payment_failure(self, payment_id=None, reason=None):
        from bookstore.ordering.events import PaymentFailed

        if self.payment_status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value):
            raise InvalidOrderState(f"Payment is already {self.payment_status}")

        self.payment_status = PaymentStatus.FAILED.value
        if payment_id is not None:
            self.payment_id = payment_id
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                order_number=self.order_number,
                payment_id=payment_id,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Back office
    # -------------------------------------------------------------------
    def update_admin_notes(self, admin_notes):
        from bookstore.ordering.events import AdminNotesUpdated

        self.admin_notes = admin_notes
        self.updated_at = datetime.now(UTC)
        self.raise_(AdminNotesUpdated(order_id=str(self.id), admin_notes=admin_notes))
