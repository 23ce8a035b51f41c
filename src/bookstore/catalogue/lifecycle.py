"""Soft delete, reactivation and featuring of books."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.domain import bookstore


@bookstore.command(part_of="Book")
class DeactivateBook:
    book_id: Identifier(required=True)


@bookstore.command(part_of="Book")
class ReactivateBook:
    book_id: Identifier(required=True)


@bookstore.command(part_of="Book")
class FeatureBook:
    book_id: Identifier(required=True)
    is_featured: Boolean(required=True)


@bookstore.command_handler(part_of=Book)
class BookLifecycleHandler:
    @handle(DeactivateBook)
    def deactivate_book(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.deactivate()
        repo.add(book)

    @handle(ReactivateBook)
    def reactivate_book(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.reactivate()
        repo.add(book)

    @handle(FeatureBook)
    def feature_book(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.get(command.book_id)
        book.set_featured(command.is_featured)
        repo.add(book)
