"""Domain events for the Book aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from bookstore.domain import bookstore


@bookstore.event(part_of="Book")
class BookAdded:
    """A new title was added to the catalogue."""

    __version__ = 1

    book_id: Identifier(required=True)
    title: String(required=True)
    author: String(required=True)
    isbn: String()
    price: Float(required=True)
    quantity: Integer(required=True)
    added_at: DateTime(required=True)


@bookstore.event(part_of="Book")
class BookDetailsUpdated:
    __version__ = 1

    book_id: Identifier(required=True)
    title: String(required=True)
    author: String(required=True)
    category: String()


@bookstore.event(part_of="Book")
class BookPriceChanged:
    __version__ = 1

    book_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)


@bookstore.event(part_of="Book")
class BookDeactivated:
    """The book was soft-deleted and no longer sells."""

    __version__ = 1

    book_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)


@bookstore.event(part_of="Book")
class BookReactivated:
    __version__ = 1

    book_id: Identifier(required=True)
    reactivated_at: DateTime(required=True)


@bookstore.event(part_of="Book")
class BookFeatureToggled:
    __version__ = 1

    book_id: Identifier(required=True)
    is_featured: Boolean(required=True)


# Stock movements


@bookstore.event(part_of="Book")
class StockReserved:
    """Units were held for a pending order."""

    __version__ = 1

    book_id: Identifier(required=True)
    order_id: Identifier()
    quantity: Integer(required=True)
    reserved: Integer(required=True)
    available: Integer(required=True)


@bookstore.event(part_of="Book")
class StockReleased:
    """A reservation was dropped, returning units to available stock."""

    __version__ = 1

    book_id: Identifier(required=True)
    order_id: Identifier()
    quantity: Integer(required=True)
    reserved: Integer(required=True)
    available: Integer(required=True)


@bookstore.event(part_of="Book")
class StockCommitted:
    """Reserved units left the shelf for an order in processing."""

    __version__ = 1

    book_id: Identifier(required=True)
    order_id: Identifier()
    quantity: Integer(required=True)
    on_hand: Integer(required=True)
    available: Integer(required=True)


@bookstore.event(part_of="Book")
class StockRestocked:
    """Committed units came back after a cancellation."""

    __version__ = 1

    book_id: Identifier(required=True)
    order_id: Identifier()
    quantity: Integer(required=True)
    on_hand: Integer(required=True)
    available: Integer(required=True)


@bookstore.event(part_of="Book")
class StockAdjusted:
    """An admin corrected the on-hand count."""

    __version__ = 1

    book_id: Identifier(required=True)
    operation: String(required=True)
    quantity: Integer(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)
    reason: String(max_length=500)
