"""Application tests for book catalogue commands."""

import json

import pytest
from factories import add_book, get_book
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from bookstore.catalogue.details import BulkUpdateBooks, UpdateBookDetails
from bookstore.catalogue.lifecycle import DeactivateBook, FeatureBook, ReactivateBook
from bookstore.catalogue.stock import (
    AdjustStock,
    CommitStock,
    ReleaseStock,
    ReserveStock,
    RestockBook,
)
from bookstore.errors import InsufficientStock


class TestAddBook:
    def test_add_book_persists(self):
        book_id = add_book(title="Dune", quantity=12, isbn="9780441172719")
        book = get_book(book_id)
        assert book.title == "Dune"
        assert book.stock.quantity == 12
        assert book.isbn == "9780441172719"

    def test_get_unknown_book(self):
        with pytest.raises(ObjectNotFoundError):
            get_book("missing")


class TestUpdateBookDetails:
    def test_update_persists(self):
        book_id = add_book(price=18.0)
        current_domain.process(
            UpdateBookDetails(book_id=book_id, price=14.5, category="Classics"),
            asynchronous=False,
        )
        book = get_book(book_id)
        assert book.price == 14.5
        assert book.category == "Classics"
        assert book.title == "Dune"


class TestBulkUpdateBooks:
    def _bulk(self, book_ids, updates):
        return current_domain.process(
            BulkUpdateBooks(book_ids=json.dumps(book_ids), updates=json.dumps(updates)),
            asynchronous=False,
        )

    def test_updates_every_listed_book(self):
        first = add_book(title="Dune", price=20.0)
        second = add_book(title="Emma", price=12.0)
        untouched = add_book(title="Ulysses", price=30.0)

        modified = self._bulk([first, second], {"category": "Classics", "price": 9.99, "is_featured": True})

        assert modified == 2
        for book_id in (first, second):
            book = get_book(book_id)
            assert book.category == "Classics"
            assert book.price == 9.99
            assert book.is_featured is True
        assert get_book(untouched).price == 30.0

    def test_unknown_ids_skipped(self):
        book_id = add_book()
        assert self._bulk([book_id, "missing", book_id], {"low_stock_threshold": 3}) == 1
        assert get_book(book_id).stock.low_stock_threshold == 3

    def test_deactivate_in_bulk(self):
        active = add_book(title="Dune")
        inactive = add_book(title="Emma")
        current_domain.process(DeactivateBook(book_id=inactive), asynchronous=False)

        assert self._bulk([active, inactive], {"is_active": False}) == 2
        assert get_book(active).is_active is False
        assert get_book(inactive).is_active is False

    def test_stock_fields_not_bulk_updatable(self):
        book_id = add_book(quantity=5)
        with pytest.raises(ValidationError) as exc:
            self._bulk([book_id], {"quantity": 100})
        assert "updates" in exc.value.messages
        assert get_book(book_id).stock.quantity == 5

    def test_empty_requests_rejected(self):
        with pytest.raises(ValidationError):
            self._bulk([], {"price": 1.0})
        with pytest.raises(ValidationError):
            self._bulk([add_book()], {})


class TestBookLifecycleCommands:
    def test_deactivate_and_reactivate(self):
        book_id = add_book()
        current_domain.process(DeactivateBook(book_id=book_id), asynchronous=False)
        assert get_book(book_id).is_active is False

        current_domain.process(ReactivateBook(book_id=book_id), asynchronous=False)
        assert get_book(book_id).is_active is True

    def test_feature(self):
        book_id = add_book()
        current_domain.process(FeatureBook(book_id=book_id, is_featured=True), asynchronous=False)
        assert get_book(book_id).is_featured is True


class TestStockCommands:
    def test_reserve_then_release(self):
        book_id = add_book(quantity=5)
        current_domain.process(ReserveStock(book_id=book_id, quantity=3), asynchronous=False)
        assert get_book(book_id).stock.reserved == 3

        released = current_domain.process(ReleaseStock(book_id=book_id, quantity=3), asynchronous=False)
        assert released == 3
        assert get_book(book_id).available_stock == 5

    def test_reserve_too_much_persists_nothing(self):
        book_id = add_book(quantity=2)
        with pytest.raises(InsufficientStock):
            current_domain.process(ReserveStock(book_id=book_id, quantity=3), asynchronous=False)
        book = get_book(book_id)
        assert book.stock.reserved == 0
        assert book.stock.quantity == 2

    def test_sequential_reservations_cannot_oversell(self):
        book_id = add_book(quantity=5)
        current_domain.process(ReserveStock(book_id=book_id, quantity=3), asynchronous=False)
        with pytest.raises(InsufficientStock):
            current_domain.process(ReserveStock(book_id=book_id, quantity=3), asynchronous=False)
        assert get_book(book_id).stock.reserved == 3

    def test_commit_and_restock(self):
        book_id = add_book(quantity=5)
        current_domain.process(ReserveStock(book_id=book_id, quantity=2), asynchronous=False)
        current_domain.process(CommitStock(book_id=book_id, quantity=2), asynchronous=False)
        book = get_book(book_id)
        assert book.stock.quantity == 3
        assert book.stock.reserved == 0
        assert book.sales_count == 2

        current_domain.process(RestockBook(book_id=book_id, quantity=2), asynchronous=False)
        assert get_book(book_id).stock.quantity == 5

    @pytest.mark.parametrize(
        "operation,quantity,expected",
        [("set", 30, 30), ("add", 5, 15), ("subtract", 4, 6)],
    )
    def test_adjust_stock(self, operation, quantity, expected):
        book_id = add_book(quantity=10)
        current_domain.process(
            AdjustStock(book_id=book_id, quantity=quantity, operation=operation, reason="Stocktake"),
            asynchronous=False,
        )
        assert get_book(book_id).stock.quantity == expected
