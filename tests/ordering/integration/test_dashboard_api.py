"""Integration tests for the admin dashboard analytics and reports."""

from factories import ADMIN, add_book, auth, place_order


def _delivered(client, book_id, quantity=1):
    order_id = place_order([(book_id, quantity)])
    for status in ("processing", "shipped", "delivered"):
        client.put(f"/admin/orders/{order_id}/status", json={"status": status}, headers=ADMIN)
    return order_id


class TestAnalyticsEndpoints:
    def test_sales(self, client):
        book_id = add_book(price=100.0, quantity=10, category="Fiction")
        _delivered(client, book_id, quantity=2)

        data = client.get("/admin/dashboard/analytics/sales", params={"period": "week"}, headers=ADMIN).json()

        assert data["sales"][0]["revenue"] == 216.0
        assert data["category_sales"][0]["category"] == "Fiction"

    def test_sales_rejects_unknown_period(self, client):
        response = client.get("/admin/dashboard/analytics/sales", params={"period": "decade"}, headers=ADMIN)
        assert response.status_code == 422

    def test_inventory(self, client):
        add_book(quantity=0)
        data = client.get("/admin/dashboard/analytics/inventory", headers=ADMIN).json()
        assert data["stock_distribution"]["out_of_stock"] == 1

    def test_customers(self, client):
        book_id = add_book(price=100.0, quantity=10)
        _delivered(client, book_id)
        data = client.get("/admin/dashboard/analytics/customers", headers=ADMIN).json()
        assert data["top_customers"][0]["customer_id"] == "cust-001"

    def test_popular_books(self, client):
        dune = add_book(title="Dune", price=60.0, quantity=10)
        emma = add_book(title="Emma", price=60.0, quantity=10)
        _delivered(client, dune, quantity=1)
        _delivered(client, emma, quantity=3)

        data = client.get("/admin/dashboard/reports/popular-books", params={"limit": 1}, headers=ADMIN).json()

        assert [book["title"] for book in data["popular_books"]] == ["Emma"]

    def test_revenue(self, client):
        book_id = add_book(price=100.0, quantity=10)
        _delivered(client, book_id)

        data = client.get("/admin/dashboard/reports/revenue", params={"group_by": "month"}, headers=ADMIN).json()

        assert data["summary"]["total_revenue"] == 108.0
        assert len(data["revenue"]) == 1

    def test_revenue_rejects_reversed_window(self, client):
        response = client.get(
            "/admin/dashboard/reports/revenue",
            params={"start_date": "2026-02-01", "end_date": "2026-01-01"},
            headers=ADMIN,
        )
        assert response.status_code == 400

    def test_customers_only(self, client):
        assert client.get("/admin/dashboard/analytics/sales", headers=auth()).status_code == 403
