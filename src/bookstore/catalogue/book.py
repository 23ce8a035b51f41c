"""Book aggregate root with its StockLevels value object."""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, ValueObject

from bookstore.domain import bookstore
from bookstore.errors import InsufficientStock

_ISBN_PATTERN = re.compile(r"^(?:\d{9}[\dX]|\d{13})$")


class BookFormat(Enum):
    PAPERBACK = "paperback"
    HARDCOVER = "hardcover"
    EBOOK = "ebook"
    AUDIOBOOK = "audiobook"


class StockOperation(Enum):
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"


@bookstore.value_object(part_of="Book")
class StockLevels:
    """On-hand and reserved counters for a book.

    Stock changes always replace the whole value object, so ``quantity`` and
    ``reserved`` are never observable out of step with each other.
    """

    quantity: Integer(default=0, min_value=0)
    reserved: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)

    @invariant.post
    def reserved_cannot_exceed_quantity(self):
        if (self.reserved or 0) > (self.quantity or 0):
            raise ValidationError({"stock": [f"Reserved ({self.reserved}) cannot exceed quantity ({self.quantity})"]})

    @property
    def available(self) -> int:
        return (self.quantity or 0) - (self.reserved or 0)

    def replace(self, **changes) -> "StockLevels":
        values = {
            "quantity": self.quantity,
            "reserved": self.reserved,
            "low_stock_threshold": self.low_stock_threshold,
        }
        values.update(changes)
        return StockLevels(**values)


@bookstore.aggregate(limit=-1)
class Book:
    """A title offered in the store, with price and stock counters."""

    title: String(required=True, max_length=200)
    author: String(required=True, max_length=100)
    isbn: String(max_length=13)
    description: String(max_length=1000)
    category: String(max_length=100)
    format: String(choices=BookFormat, default=BookFormat.PAPERBACK.value)
    price: Float(required=True, min_value=0.0)
    original_price: Float(min_value=0.0)
    stock: ValueObject(StockLevels)
    is_active: Boolean(default=True)
    is_featured: Boolean(default=False)
    sales_count: Integer(default=0, min_value=0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def isbn_must_be_valid(self):
        if self.isbn is not None and not _ISBN_PATTERN.match(self.isbn):
            raise ValidationError({"isbn": ["ISBN must be 10 or 13 digits"]})

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def available_stock(self) -> int:
        return self.stock.available if self.stock else 0

    @property
    def discount_percentage(self) -> int:
        if self.original_price is not None and self.original_price > self.price:
            return round((self.original_price - self.price) / self.original_price * 100)
        return 0

    @property
    def is_low_stock(self) -> bool:
        quantity = self.stock.quantity if self.stock else 0
        threshold = self.stock.low_stock_threshold if self.stock else 0
        return 0 < quantity <= threshold

    @property
    def is_out_of_stock(self) -> bool:
        return (self.stock.quantity if self.stock else 0) <= 0

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        author,
        price,
        quantity=0,
        isbn=None,
        description=None,
        category=None,
        format=None,
        original_price=None,
        low_stock_threshold=10,
        is_featured=False,
    ):
        from bookstore.catalogue.events import BookAdded

        now = datetime.now(UTC)
        book = cls(
            title=title,
            author=author,
            price=price,
            isbn=isbn,
            description=description,
            category=category,
            format=format or BookFormat.PAPERBACK.value,
            original_price=original_price,
            stock=StockLevels(quantity=quantity, reserved=0, low_stock_threshold=low_stock_threshold),
            is_featured=is_featured,
            created_at=now,
            updated_at=now,
        )
        book.raise_(
            BookAdded(
                book_id=book.id,
                title=title,
                author=author,
                isbn=isbn,
                price=price,
                quantity=quantity,
                added_at=now,
            )
        )
        return book

    # -------------------------------------------------------------------
    # Details and lifecycle
    # -------------------------------------------------------------------
    def update_details(
        self,
        title=None,
        author=None,
        isbn=None,
        description=None,
        category=None,
        format=None,
        price=None,
        original_price=None,
        low_stock_threshold=None,
    ):
        from bookstore.catalogue.events import BookDetailsUpdated, BookPriceChanged

        previous_price = self.price

        if title is not None:
            self.title = title
        if author is not None:
            self.author = author
        if isbn is not None:
            self.isbn = isbn
        if description is not None:
            self.description = description
        if category is not None:
            self.category = category
        if format is not None:
            self.format = format
        if original_price is not None:
            self.original_price = original_price
        if price is not None:
            self.price = price
        if low_stock_threshold is not None:
            self.stock = self.stock.replace(low_stock_threshold=low_stock_threshold)

        self.updated_at = datetime.now(UTC)

        self.raise_(
            BookDetailsUpdated(
                book_id=self.id,
                title=self.title,
                author=self.author,
                category=self.category,
            )
        )
        if price is not None and price != previous_price:
            self.raise_(
                BookPriceChanged(
                    book_id=self.id,
                    previous_price=previous_price,
                    new_price=price,
                )
            )

    def deactivate(self):
        from bookstore.catalogue.events import BookDeactivated

        if not self.is_active:
            raise ValidationError({"is_active": ["Book is already inactive"]})

        self.is_active = False
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(BookDeactivated(book_id=self.id, deactivated_at=now))

    def reactivate(self):
        from bookstore.catalogue.events import BookReactivated

        if self.is_active:
            raise ValidationError({"is_active": ["Book is already active"]})

        self.is_active = True
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(BookReactivated(book_id=self.id, reactivated_at=now))

    def set_featured(self, is_featured):
        from bookstore.catalogue.events import BookFeatureToggled

        self.is_featured = is_featured
        self.updated_at = datetime.now(UTC)
        self.raise_(BookFeatureToggled(book_id=self.id, is_featured=is_featured))

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def reserve(self, quantity, order_id=None):
        """Hold ``quantity`` units for an order. Fails without touching stock."""
        from bookstore.catalogue.events import StockReserved

        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.available_stock
        if quantity > available:
            raise InsufficientStock(str(self.id), quantity, available)

        self.stock = self.stock.replace(reserved=self.stock.reserved + quantity)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReserved(
                book_id=self.id,
                order_id=order_id,
                quantity=quantity,
                reserved=self.stock.reserved,
                available=self.available_stock,
            )
        )

    def release(self, quantity, order_id=None):
        """Drop a reservation. Never takes ``reserved`` below zero."""
        from bookstore.catalogue.events import StockReleased

        released = min(quantity, self.stock.reserved)
        self.stock = self.stock.replace(reserved=self.stock.reserved - released)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReleased(
                book_id=self.id,
                order_id=order_id,
                quantity=released,
                reserved=self.stock.reserved,
                available=self.available_stock,
            )
        )
        return released

    def commit(self, quantity, order_id=None):
        """Turn a reservation into a sale: both on-hand and reserved drop."""
        from bookstore.catalogue.events import StockCommitted

        committed = min(quantity, self.stock.reserved)
        self.stock = self.stock.replace(
            quantity=self.stock.quantity - committed,
            reserved=self.stock.reserved - committed,
        )
        self.sales_count = (self.sales_count or 0) + committed
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockCommitted(
                book_id=self.id,
                order_id=order_id,
                quantity=committed,
                on_hand=self.stock.quantity,
                available=self.available_stock,
            )
        )

    def restock(self, quantity, order_id=None):
        """Put previously committed units back on the shelf."""
        from bookstore.catalogue.events import StockRestocked

        self.stock = self.stock.replace(quantity=self.stock.quantity + quantity)
        self.sales_count = max((self.sales_count or 0) - quantity, 0)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestocked(
                book_id=self.id,
                order_id=order_id,
                quantity=quantity,
                on_hand=self.stock.quantity,
                available=self.available_stock,
            )
        )

    def adjust_stock(self, quantity, operation, reason=None):
        from bookstore.catalogue.events import StockAdjusted

        operation = StockOperation(operation)
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        previous_quantity = self.stock.quantity
        if operation == StockOperation.SET:
            new_quantity = quantity
        elif operation == StockOperation.ADD:
            new_quantity = previous_quantity + quantity
        else:
            if quantity > self.available_stock:
                raise InsufficientStock(str(self.id), quantity, self.available_stock)
            new_quantity = previous_quantity - quantity

        if new_quantity < self.stock.reserved:
            raise InsufficientStock(str(self.id), self.stock.reserved, new_quantity)

        self.stock = self.stock.replace(quantity=new_quantity)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                book_id=self.id,
                operation=operation.value,
                quantity=quantity,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                reason=reason,
            )
        )
