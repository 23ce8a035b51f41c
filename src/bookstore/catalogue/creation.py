"""Adding a book to the catalogue: command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Integer, String
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.domain import bookstore, logger


@bookstore.command(part_of="Book")
class AddBook:
    title: String(required=True, max_length=200)
    author: String(required=True, max_length=100)
    price: Float(required=True, min_value=0.0)
    quantity: Integer(default=0, min_value=0)
    isbn: String(max_length=13)
    description: String(max_length=1000)
    category: String(max_length=100)
    format: String(max_length=20)
    original_price: Float(min_value=0.0)
    low_stock_threshold: Integer(default=10, min_value=0)
    is_featured: Boolean(default=False)


@bookstore.command_handler(part_of=Book)
class AddBookHandler:
    @handle(AddBook)
    def add_book(self, command):
        book = Book.create(
            title=command.title,
            author=command.author,
            price=command.price,
            quantity=command.quantity,
            isbn=command.isbn,
            description=command.description,
            category=command.category,
            format=command.format,
            original_price=command.original_price,
            low_stock_threshold=command.low_stock_threshold,
            is_featured=command.is_featured,
        )
        current_domain.repository_for(Book).add(book)
        logger.info("book_added", book_id=str(book.id), title=book.title)
        return str(book.id)
