"""Read-only statistics for the admin back office.

Sales figures only count orders in ``FULFILLED_STATUSES``; order statistics
cover every order created in the requested period.
"""

from collections import defaultdict
from datetime import UTC, datetime, timedelta

from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.ordering.order import FULFILLED_STATUSES, Order, OrderStatus, as_utc


def order_summary(order: Order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": str(order.customer_id),
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "total": order.total,
        "status": order.status,
        "created_at": order.created_at,
    }


def _revenue(orders) -> float:
    return round(sum(order.total for order in orders), 2)


def order_stats(period_days: int = 30, now: datetime | None = None) -> dict:
    now = now or datetime.now(UTC)
    since = now - timedelta(days=period_days)
    orders = current_domain.repository_for(Order).created_since(since)

    total_revenue = _revenue(orders)
    average = round(total_revenue / len(orders), 2) if orders else 0.0

    breakdown: dict[str, dict] = {}
    for order in orders:
        entry = breakdown.setdefault(order.status, {"status": order.status, "count": 0, "total_value": 0.0})
        entry["count"] += 1
        entry["total_value"] = round(entry["total_value"] + order.total, 2)

    spenders: dict[str, dict] = defaultdict(lambda: {"total_orders": 0, "total_spent": 0.0})
    for order in orders:
        if order.status == OrderStatus.CANCELLED.value:
            continue
        entry = spenders[str(order.customer_id)]
        entry.update(
            customer_id=str(order.customer_id),
            customer_name=order.customer_name,
            customer_email=order.customer_email,
        )
        entry["total_orders"] += 1
        entry["total_spent"] = round(entry["total_spent"] + order.total, 2)
    top_customers = sorted(spenders.values(), key=lambda entry: entry["total_spent"], reverse=True)[:5]

    return {
        "summary": {
            "total_orders": len(orders),
            "total_revenue": total_revenue,
            "average_order_value": average,
        },
        "status_breakdown": list(breakdown.values()),
        "recent_orders": [order_summary(order) for order in orders[:10]],
        "top_customers": top_customers,
        "period": f"{period_days} days",
    }


def overview(now: datetime | None = None) -> dict:
    now = now or datetime.now(UTC)
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_month = start_of_today.replace(day=1)

    book_repo = current_domain.repository_for(Book)
    order_repo = current_domain.repository_for(Order)

    books = book_repo.all_books()
    active_books = [book for book in books if book.is_active]
    orders = order_repo.all_orders()
    fulfilled = [order for order in orders if order.status in FULFILLED_STATUSES]
    today = [order for order in fulfilled if as_utc(order.created_at) >= start_of_today]
    month = [order for order in fulfilled if as_utc(order.created_at) >= start_of_month]

    return {
        "counts": {
            "total_books": len(books),
            "active_books": len(active_books),
            "total_orders": len(orders),
        },
        "sales": {
            "total_revenue": _revenue(fulfilled),
            "total_orders_completed": len(fulfilled),
            "today_revenue": _revenue(today),
            "today_orders": len(today),
            "month_revenue": _revenue(month),
            "month_orders": len(month),
        },
        "inventory": {
            "low_stock_books": sum(1 for book in active_books if book.is_low_stock),
            "out_of_stock_books": sum(1 for book in active_books if book.is_out_of_stock),
            "total_inventory_value": round(sum(book.price * book.stock.quantity for book in active_books), 2),
        },
        "recent_orders": [order_summary(order) for order in order_repo.recent(5)],
        "top_books": [
            {
                "id": str(book.id),
                "title": book.title,
                "author": book.author,
                "price": book.price,
                "sales_count": book.sales_count,
                "quantity": book.stock.quantity,
            }
            for book in book_repo.top_selling(5)
        ],
    }
