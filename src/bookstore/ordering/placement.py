"""Checkout: validate the basket, reserve stock and write a pending order.

Stock reservation for every line and the order itself are persisted in the
same unit of work, so a failure on any line leaves no reservation and no
order behind.
"""

import json
from collections import OrderedDict
from datetime import UTC, datetime
from uuid import uuid4

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.domain import bookstore, logger
from bookstore.errors import DuplicateOrderNumber
from bookstore.ordering.numbering import next_order_number
from bookstore.ordering.order import Order, OrderPricing, PaymentMethod, ShippingAddress


def merge_lines(items) -> "OrderedDict[str, int]":
    """Collapse repeated books into one line, keeping first-seen order."""
    merged: OrderedDict[str, int] = OrderedDict()
    for item in items:
        book_id = str(item.get("book_id") or "")
        quantity = item.get("quantity")
        if not book_id:
            raise ValidationError({"items": ["Every item needs a book_id"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Quantity for book {book_id} must be a positive integer"]})
        merged[book_id] = merged.get(book_id, 0) + quantity
    return merged


def quote(line_subtotals, tax_rate, shipping_fee, free_shipping_threshold, currency="USD") -> OrderPricing:
    """Price a basket: percentage tax plus a flat fee waived above the threshold."""
    subtotal = round(sum(line_subtotals), 2)
    shipping = 0.0 if subtotal >= free_shipping_threshold else shipping_fee
    return OrderPricing.compute(
        line_subtotals,
        tax=subtotal * tax_rate,
        shipping=shipping,
        discount=0.0,
        currency=currency,
    )


def current_quote(line_subtotals) -> OrderPricing:
    return quote(
        line_subtotals,
        tax_rate=float(current_domain.TAX_RATE),
        shipping_fee=float(current_domain.SHIPPING_FEE),
        free_shipping_threshold=float(current_domain.FREE_SHIPPING_THRESHOLD),
        currency=current_domain.CURRENCY,
    )


@bookstore.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=100)
    customer_email = String(max_length=254)
    items = Text(required=True)  # JSON: list of {book_id, quantity}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.RAZORPAY.value)
    customer_notes = String(max_length=500)
    expected_total = Float()


@bookstore.command(part_of="Order")
class AttachGatewayOrder:
    order_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=255)


@bookstore.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        merged = merge_lines(items or [])
        if not merged:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        order_id = str(uuid4())
        book_repo = current_domain.repository_for(Book)

        books = []
        lines = []
        for book_id, quantity in merged.items():
            book = book_repo.get(book_id)
            if not book.is_active:
                raise ValidationError({"items": [f"Book '{book.title}' is not available"]})
            book.reserve(quantity, order_id=order_id)
            books.append(book)
            lines.append(
                {
                    "book_id": str(book.id),
                    "title": book.title,
                    "author": book.author,
                    "isbn": book.isbn,
                    "unit_price": book.price,
                    "quantity": quantity,
                }
            )

        pricing = current_quote([line["unit_price"] * line["quantity"] for line in lines])
        if command.expected_total is not None and round(command.expected_total, 2) != pricing.total:
            raise ValidationError(
                {"amount": [f"Amount {command.expected_total:.2f} does not match order total {pricing.total:.2f}"]}
            )

        now = datetime.now(UTC)
        order_repo = current_domain.repository_for(Order)
        order_number = next_order_number(now.date(), order_repo.numbers_for_day(now.date()))

        order = Order.create(
            order_id=order_id,
            order_number=order_number,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            lines=lines,
            pricing=pricing,
            shipping_address=ShippingAddress(**address),
            payment_method=command.payment_method,
            customer_notes=command.customer_notes,
            now=now,
        )

        for book in books:
            book_repo.add(book)
        try:
            order_repo.add(order)
        except ValidationError as exc:
            if "order_number" in exc.messages:
                raise DuplicateOrderNumber(order_number) from exc
            raise

        logger.info(
            "order_placed",
            order_id=order_id,
            order_number=order_number,
            customer_id=str(command.customer_id),
            total=pricing.total,
        )
        return order_id

    @handle(AttachGatewayOrder)
    def attach_gateway_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.attach_gateway_order(command.gateway_order_id)
        repo.add(order)
