"""Stock movements on a single book.

Each command is one read-modify-write of a Book inside its own unit of work.
A concurrent write to the same book surfaces as ``ExpectedVersionError`` at
commit, and the handler is re-run against the fresh copy, where the stock
rules decide the outcome.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book, StockOperation
from bookstore.domain import bookstore, logger


@bookstore.command(part_of="Book")
class ReserveStock:
    book_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)
    order_id: Identifier()


@bookstore.command(part_of="Book")
class ReleaseStock:
    book_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=0)
    order_id: Identifier()


@bookstore.command(part_of="Book")
class CommitStock:
    book_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=0)
    order_id: Identifier()


@bookstore.command(part_of="Book")
class RestockBook:
    book_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=0)
    order_id: Identifier()


@bookstore.command(part_of="Book")
class AdjustStock:
    book_id: Identifier(required=True)
    quantity: Integer(required=True)
    operation: String(
        required=True,
        choices=StockOperation,
        default=StockOperation.SET.value,
    )
    reason: String(max_length=500)


@bookstore.command_handler(part_of=Book)
class StockHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.reserve(command.quantity, order_id=command.order_id)
        repo.add(book)

    @handle(ReleaseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        released = book.release(command.quantity, order_id=command.order_id)
        repo.add(book)
        return released

    @handle(CommitStock)
    def commit_stock(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.commit(command.quantity, order_id=command.order_id)
        repo.add(book)

    @handle(RestockBook)
    def restock_book(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.restock(command.quantity, order_id=command.order_id)
        repo.add(book)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        previous = book.stock.quantity
        book.adjust_stock(command.quantity, command.operation, reason=command.reason)
        repo.add(book)
        logger.info(
            "stock_adjusted",
            book_id=str(book.id),
            operation=command.operation,
            previous_quantity=previous,
            new_quantity=book.stock.quantity,
        )
