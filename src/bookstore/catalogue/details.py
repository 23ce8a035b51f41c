"""Editing a book's descriptive details and price, one at a time or in bulk."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.domain import bookstore

logger = structlog.get_logger(__name__)


@bookstore.command(part_of="Book")
class UpdateBookDetails:
    book_id: Identifier(required=True)
    title: String(max_length=200)
    author: String(max_length=100)
    isbn: String(max_length=13)
    description: String(max_length=1000)
    category: String(max_length=100)
    format: String(max_length=20)
    price: Float(min_value=0.0)
    original_price: Float(min_value=0.0)
    low_stock_threshold: Integer(min_value=0)


@bookstore.command_handler(part_of=Book)
class UpdateBookDetailsHandler:
    @handle(UpdateBookDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.update_details(
            title=command.title,
            author=command.author,
            isbn=command.isbn,
            description=command.description,
            category=command.category,
            format=command.format,
            price=command.price,
            original_price=command.original_price,
            low_stock_threshold=command.low_stock_threshold,
        )
        repo.add(book)


BULK_UPDATABLE_FIELDS = frozenset(
    {"category", "format", "price", "original_price", "low_stock_threshold", "is_featured", "is_active"}
)


@bookstore.command(part_of="Book")
class BulkUpdateBooks:
    book_ids: Text(required=True)  # JSON: list of book ids
    updates: Text(required=True)  # JSON: field -> value


def _parse_bulk(command) -> tuple[list[str], dict]:
    book_ids = json.loads(command.book_ids) if isinstance(command.book_ids, str) else command.book_ids
    updates = json.loads(command.updates) if isinstance(command.updates, str) else command.updates
    if not isinstance(book_ids, list) or not book_ids:
        raise ValidationError({"book_ids": ["Book IDs array is required"]})
    if not isinstance(updates, dict) or not updates:
        raise ValidationError({"updates": ["Updates object is required"]})
    unknown = sorted(set(updates) - BULK_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError({"updates": [f"Fields cannot be bulk updated: {', '.join(unknown)}"]})
    return [str(book_id) for book_id in book_ids], updates


@bookstore.command_handler(part_of=Book)
class BulkUpdateBooksHandler:
    @handle(BulkUpdateBooks)
    def bulk_update(self, command) -> int:
        """Apply ``updates`` to every listed book. Unknown ids are skipped.

        Returns the number of books found and updated.
        """
        book_ids, updates = _parse_bulk(command)
        details = {key: value for key, value in updates.items() if key not in ("is_featured", "is_active")}

        repo = current_domain.repository_for(Book)
        modified = 0
        for book_id in dict.fromkeys(book_ids):
            book = repo.get_or_none(book_id)
            if book is None:
                continue
            if details:
                book.update_details(**details)
            if "is_featured" in updates:
                book.set_featured(bool(updates["is_featured"]))
            if "is_active" in updates and bool(updates["is_active"]) != book.is_active:
                if updates["is_active"]:
                    book.reactivate()
                else:
                    book.deactivate()
            repo.add(book)
            modified += 1

        logger.info("books_bulk_updated", requested=len(book_ids), modified=modified, fields=sorted(updates))
        return modified
