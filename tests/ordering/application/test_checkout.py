"""Application tests for checkout: stock reservation and the pending order."""

import threading

import pytest
from factories import add_book, get_book, get_order, place_order
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from bookstore.catalogue.book import Book
from bookstore.catalogue.lifecycle import DeactivateBook
from bookstore.catalogue.stock import ReserveStock
from bookstore.errors import DuplicateOrderNumber, InsufficientStock
from bookstore.ordering.order import Order
from bookstore.ordering.repository import OrderRepository


class TestPlaceOrder:
    def test_order_created_pending(self):
        book_id = add_book(price=20.0, quantity=10)
        order = get_order(place_order([(book_id, 2)]))

        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert order.customer_name == "Ada Reader"
        assert order.shipping_address.city == "Portland"
        assert order.pricing.subtotal == 40.0
        assert order.pricing.tax == 3.2
        assert order.pricing.shipping == 5.99
        assert order.total == 49.19

    def test_stock_reserved(self):
        book_id = add_book(quantity=10)
        place_order([(book_id, 3)])
        book = get_book(book_id)
        assert book.stock.reserved == 3
        assert book.stock.quantity == 10
        assert book.available_stock == 7

    def test_line_snapshot_survives_price_change(self):
        book_id = add_book(title="Dune", price=20.0)
        order_id = place_order([(book_id, 1)])

        book = get_book(book_id)
        book.update_details(price=99.0, title="Dune (Deluxe)")
        current_domain.repository_for(Book).add(book)

        item = get_order(order_id).ordered_items[0]
        assert item.title == "Dune"
        assert item.unit_price == 20.0

    def test_repeated_lines_merged(self):
        book_id = add_book(quantity=10)
        order = get_order(place_order([(book_id, 1), (book_id, 2)]))
        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert get_book(book_id).stock.reserved == 3

    def test_order_numbers_increase(self):
        book_id = add_book(quantity=10)
        first = get_order(place_order([(book_id, 1)])).order_number
        second = get_order(place_order([(book_id, 1)])).order_number
        assert first.startswith("ORD")
        assert int(second[-3:]) == int(first[-3:]) + 1

    def test_expected_total_checked(self):
        book_id = add_book(price=100.0, quantity=10)
        with pytest.raises(ValidationError) as exc:
            place_order([(book_id, 1)], expected_total=1.0)
        assert "amount" in exc.value.messages
        assert get_book(book_id).stock.reserved == 0

    def test_expected_total_accepted(self):
        book_id = add_book(price=100.0, quantity=10)
        order = get_order(place_order([(book_id, 1)], expected_total=108.0))
        assert order.total == 108.0


class TestCheckoutFailures:
    def test_insufficient_stock_persists_nothing(self):
        plenty = add_book(title="Plenty", quantity=10)
        scarce = add_book(title="Scarce", quantity=1)

        with pytest.raises(InsufficientStock):
            place_order([(plenty, 2), (scarce, 2)])

        assert get_book(plenty).stock.reserved == 0
        assert get_book(scarce).stock.reserved == 0
        assert current_domain.repository_for(Order).all_orders() == []

    def test_unknown_book(self):
        with pytest.raises(ObjectNotFoundError):
            place_order([("missing", 1)])
        assert current_domain.repository_for(Order).all_orders() == []

    def test_inactive_book_rejected(self):
        book_id = add_book()
        current_domain.process(DeactivateBook(book_id=book_id), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            place_order([(book_id, 1)])
        assert "items" in exc.value.messages

    def test_empty_basket_rejected(self):
        with pytest.raises(ValidationError):
            place_order([])

    def test_sequential_checkouts_cannot_oversell(self):
        book_id = add_book(quantity=5)
        place_order([(book_id, 3)])
        with pytest.raises(InsufficientStock):
            place_order([(book_id, 3)])
        assert get_book(book_id).stock.reserved == 3
        assert len(current_domain.repository_for(Order).all_orders()) == 1


class TestConcurrentStockWrites:
    def test_stale_copy_cannot_overwrite(self):
        book_id = add_book(quantity=5)
        repo = current_domain.repository_for(Book)
        first = repo.get(book_id)
        second = repo.get(book_id)

        first.reserve(3)
        repo.add(first)

        second.reserve(3)
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        book = get_book(book_id)
        assert book.stock.reserved == 3
        assert book.available_stock == 2

    def test_concurrent_reservations_of_last_copy(self, bookstore_bed):
        book_id = add_book(quantity=1)
        barrier = threading.Barrier(2)
        outcomes = []

        def reserve():
            with bookstore_bed.domain.domain_context():
                barrier.wait()
                try:
                    current_domain.process(ReserveStock(book_id=book_id, quantity=1), asynchronous=False)
                    outcomes.append("reserved")
                except InsufficientStock:
                    outcomes.append("insufficient")

        threads = [threading.Thread(target=reserve) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["insufficient", "reserved"]
        assert get_book(book_id).stock.reserved == 1


class TestDuplicateOrderNumber:
    def test_collision_surfaces_without_retry(self, monkeypatch):
        book_id = add_book(quantity=10)
        first = place_order([(book_id, 1)])

        lookups = []

        def stale_numbers(repo, day):
            lookups.append(day)
            return []

        monkeypatch.setattr(OrderRepository, "numbers_for_day", stale_numbers)

        with pytest.raises(DuplicateOrderNumber):
            place_order([(book_id, 2)])

        assert len(lookups) == 1
        orders = current_domain.repository_for(Order).all_orders()
        assert [str(order.id) for order in orders] == [first]
        assert get_book(book_id).stock.reserved == 1
