"""Integration tests for the storefront and admin book endpoints."""

from factories import ADMIN, add_book, auth, get_book
from protean.utils.globals import current_domain

from bookstore.catalogue.lifecycle import DeactivateBook


class TestStorefront:
    def test_list_books_is_public(self, client):
        add_book(title="Dune")
        response = client.get("/books")
        assert response.status_code == 200
        data = response.json()
        assert [book["title"] for book in data["books"]] == ["Dune"]
        assert data["pagination"]["total_books"] == 1
        assert data["pagination"]["current_page"] == 1

    def test_inactive_books_hidden(self, client):
        book_id = add_book()
        current_domain.process(DeactivateBook(book_id=book_id), asynchronous=False)
        assert client.get("/books").json()["books"] == []
        assert client.get(f"/books/{book_id}").status_code == 404

    def test_get_book(self, client):
        book_id = add_book(price=15.0, original_price=20.0, quantity=4)
        data = client.get(f"/books/{book_id}").json()
        assert data["discount_percentage"] == 25
        assert data["available_stock"] == 4
        assert data["is_low_stock"] is True


class TestAdminBookAuth:
    def test_anonymous_rejected(self, client):
        assert client.get("/admin/books").status_code == 401

    def test_customer_rejected(self, client):
        assert client.get("/admin/books", headers=auth()).status_code == 403

    def test_bad_token_rejected(self, client):
        response = client.get("/admin/books", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestAdminBooks:
    def test_add_book(self, client):
        response = client.post(
            "/admin/books",
            json={"title": "Emma", "author": "Jane Austen", "price": 9.5, "quantity": 3},
            headers=ADMIN,
        )
        assert response.status_code == 201
        book = get_book(response.json()["book_id"])
        assert book.title == "Emma"
        assert book.stock.quantity == 3

    def test_add_book_validation(self, client):
        response = client.post("/admin/books", json={"title": "No price"}, headers=ADMIN)
        assert response.status_code == 422

    def test_update_book(self, client):
        book_id = add_book()
        response = client.put(f"/admin/books/{book_id}", json={"price": 11.0}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["price"] == 11.0

    def test_adjust_stock(self, client):
        book_id = add_book(quantity=10)
        response = client.put(
            f"/admin/books/{book_id}/stock",
            json={"quantity": 5, "operation": "add", "reason": "Delivery"},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["quantity"] == 15

    def test_adjust_stock_below_reserved_conflicts(self, client):
        book_id = add_book(quantity=10)
        book = get_book(book_id)
        book.reserve(8)
        current_domain.repository_for(type(book)).add(book)

        response = client.put(
            f"/admin/books/{book_id}/stock",
            json={"quantity": 5, "operation": "set"},
            headers=ADMIN,
        )
        assert response.status_code == 409
        assert get_book(book_id).stock.quantity == 10

    def test_feature_book(self, client):
        book_id = add_book()
        response = client.put(f"/admin/books/{book_id}/feature", json={"is_featured": True}, headers=ADMIN)
        assert response.json()["is_featured"] is True

    def test_delete_is_soft(self, client):
        book_id = add_book()
        response = client.delete(f"/admin/books/{book_id}", headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"message": "Book deactivated successfully"}
        assert get_book(book_id).is_active is False

        response = client.put(f"/admin/books/{book_id}/reactivate", headers=ADMIN)
        assert response.json()["is_active"] is True

    def test_admin_list_and_search(self, client):
        add_book(title="Dune")
        add_book(title="Emma", author="Jane Austen")
        data = client.get("/admin/books", params={"search": "emma"}, headers=ADMIN).json()
        assert [book["title"] for book in data["books"]] == ["Emma"]

    def test_inventory_summary(self, client):
        add_book(price=10.0, quantity=2)
        data = client.get("/admin/books/inventory/summary", headers=ADMIN).json()
        assert data["summary"]["total_books"] == 1
        assert data["summary"]["total_value"] == 20.0

    def test_unknown_book(self, client):
        assert client.get("/admin/books/missing", headers=ADMIN).status_code == 404

    def test_bulk_update(self, client):
        first = add_book(title="Dune")
        second = add_book(title="Emma")
        response = client.post(
            "/admin/books/bulk/update",
            json={"book_ids": [first, second, "missing"], "updates": {"category": "Classics"}},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json() == {"message": "2 books updated successfully", "modified_count": 2}
        assert get_book(second).category == "Classics"

    def test_bulk_update_needs_changes(self, client):
        book_id = add_book()
        response = client.post(
            "/admin/books/bulk/update",
            json={"book_ids": [book_id], "updates": {}},
            headers=ADMIN,
        )
        assert response.status_code == 400

    def test_bulk_update_requires_admin(self, client):
        response = client.post(
            "/admin/books/bulk/update",
            json={"book_ids": ["x"], "updates": {"price": 1.0}},
            headers=auth(),
        )
        assert response.status_code == 403
