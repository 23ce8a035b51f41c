"""Sales, inventory and customer analytics for the admin back office.

Revenue figures count fulfilled orders only. Periods are grouped by calendar
day, month or year of the order's creation time in UTC.
"""

from collections import defaultdict
from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from bookstore.catalogue.book import Book
from bookstore.ordering.order import FULFILLED_STATUSES, Order, as_utc

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}
GROUPINGS = ("day", "month", "year")
UNCATEGORIZED = "Uncategorized"
WELL_STOCKED_ABOVE = 50

_BUCKET_FORMATS = {"day": "%Y-%m-%d", "month": "%Y-%m", "year": "%Y"}


def period_start(period: str, now: datetime) -> datetime:
    if period not in PERIOD_DAYS:
        raise ValidationError({"period": [f"Period must be one of {', '.join(PERIOD_DAYS)}"]})
    return now - timedelta(days=PERIOD_DAYS[period])


def _window(period, start, end, now):
    if start is not None and end is not None:
        if start > end:
            raise ValidationError({"start_date": ["start_date must not be after end_date"]})
        return start, end
    return period_start(period, now), now


def _fulfilled_between(start: datetime, end: datetime) -> list[Order]:
    orders = current_domain.repository_for(Order).created_since(start)
    return [
        order
        for order in orders
        if order.status in FULFILLED_STATUSES and as_utc(order.created_at) <= end
    ]


def _bucket(moment: datetime, group_by: str) -> str:
    return as_utc(moment).strftime(_BUCKET_FORMATS[group_by])


def _series(orders, group_by: str) -> list[dict]:
    buckets: dict[str, list[float]] = defaultdict(list)
    for order in orders:
        buckets[_bucket(order.created_at, group_by)].append(order.total)

    return [
        {
            "period": key,
            "revenue": round(sum(totals), 2),
            "orders": len(totals),
            "average_order_value": round(sum(totals) / len(totals), 2),
        }
        for key, totals in sorted(buckets.items())
    ]


def _books_by_id() -> dict[str, Book]:
    return {str(book.id): book for book in current_domain.repository_for(Book).all_books()}


def sales_analytics(period="month", start=None, end=None, now=None) -> dict:
    """Revenue over time plus revenue per category.

    An explicit ``start``/``end`` window wins over ``period``. Yearly periods
    are grouped by month, shorter ones by day.
    """
    now = now or datetime.now(UTC)
    explicit = start is not None and end is not None
    start, end = _window(period, start, end, now)
    group_by = "month" if period == "year" and not explicit else "day"
    orders = _fulfilled_between(start, end)

    books = _books_by_id()
    categories: dict[str, dict] = {}
    for order in orders:
        for item in order.ordered_items:
            book = books.get(str(item.book_id))
            name = (book.category if book else None) or UNCATEGORIZED
            entry = categories.setdefault(name, {"category": name, "revenue": 0.0, "quantity": 0})
            entry["revenue"] = round(entry["revenue"] + item.subtotal, 2)
            entry["quantity"] += item.quantity

    return {
        "group_by": group_by,
        "sales": _series(orders, group_by),
        "category_sales": sorted(categories.values(), key=lambda entry: entry["revenue"], reverse=True),
    }


def revenue_report(start=None, end=None, group_by="day", now=None) -> dict:
    if group_by not in GROUPINGS:
        raise ValidationError({"group_by": [f"group_by must be one of {', '.join(GROUPINGS)}"]})
    now = now or datetime.now(UTC)
    start, end = _window("month", start, end, now)
    orders = _fulfilled_between(start, end)
    totals = [order.total for order in orders]

    return {
        "revenue": _series(orders, group_by),
        "summary": {
            "total_revenue": round(sum(totals), 2),
            "total_orders": len(totals),
            "average_order_value": round(sum(totals) / len(totals), 2) if totals else 0.0,
            "max_order_value": max(totals, default=0.0),
            "min_order_value": min(totals, default=0.0),
        },
    }


def popular_books(period="month", limit=20, now=None) -> list[dict]:
    """Best sellers by units sold in fulfilled orders of the period."""
    now = now or datetime.now(UTC)
    orders = _fulfilled_between(period_start(period, now), now)
    books = _books_by_id()

    sold: dict[str, dict] = {}
    for order in orders:
        for item in order.ordered_items:
            book_id = str(item.book_id)
            entry = sold.setdefault(
                book_id,
                {"book_id": book_id, "title": item.title, "author": item.author, "quantity": 0, "revenue": 0.0},
            )
            entry["quantity"] += item.quantity
            entry["revenue"] = round(entry["revenue"] + item.subtotal, 2)

    report = []
    for entry in sorted(sold.values(), key=lambda entry: (-entry["quantity"], -entry["revenue"])):
        book = books.get(entry["book_id"])
        entry["average_price"] = round(entry["revenue"] / entry["quantity"], 2)
        entry["category"] = (book.category if book else None) or UNCATEGORIZED
        entry["current_stock"] = book.stock.quantity if book else None
        report.append(entry)
    return report[:limit]


def _stock_row(book: Book) -> dict:
    return {
        "id": str(book.id),
        "title": book.title,
        "author": book.author,
        "category": book.category,
        "price": book.price,
        "quantity": book.stock.quantity,
        "available": book.available_stock,
    }


def inventory_analytics(limit=20) -> dict:
    books = current_domain.repository_for(Book).active_books()

    distribution = {"well_stocked": 0, "healthy": 0, "low": 0, "out_of_stock": 0}
    for book in books:
        if book.is_out_of_stock:
            distribution["out_of_stock"] += 1
        elif book.is_low_stock:
            distribution["low"] += 1
        elif book.stock.quantity > WELL_STOCKED_ABOVE:
            distribution["well_stocked"] += 1
        else:
            distribution["healthy"] += 1

    by_quantity = sorted(books, key=lambda book: book.stock.quantity)
    values: dict[str, dict] = {}
    for book in books:
        name = book.category or UNCATEGORIZED
        entry = values.setdefault(name, {"category": name, "books": 0, "stock": 0, "value": 0.0})
        entry["books"] += 1
        entry["stock"] += book.stock.quantity
        entry["value"] = round(entry["value"] + book.price * book.stock.quantity, 2)

    return {
        "stock_distribution": distribution,
        "low_stock_books": [_stock_row(b) for b in by_quantity if b.is_low_stock and not b.is_out_of_stock][:limit],
        "out_of_stock_books": [_stock_row(b) for b in by_quantity if b.is_out_of_stock][:limit],
        "category_inventory_value": sorted(values.values(), key=lambda entry: entry["value"], reverse=True),
    }


def customer_analytics(now=None, limit=10) -> dict:
    """Customer figures derived from order history.

    Customers are known only through their orders; a customer is "new" on the
    day of their first order.
    """
    now = now or datetime.now(UTC)
    orders = current_domain.repository_for(Order).all_orders()

    first_orders: dict[str, datetime] = {}
    for order in orders:
        customer = str(order.customer_id)
        created = as_utc(order.created_at)
        if customer not in first_orders or created < first_orders[customer]:
            first_orders[customer] = created

    since = now - timedelta(days=30)
    new_customers: dict[str, int] = defaultdict(int)
    for first in first_orders.values():
        if first >= since:
            new_customers[_bucket(first, "day")] += 1

    spenders: dict[str, dict] = {}
    for order in orders:
        if order.status not in FULFILLED_STATUSES:
            continue
        customer = str(order.customer_id)
        entry = spenders.setdefault(
            customer,
            {
                "customer_id": customer,
                "customer_name": order.customer_name,
                "customer_email": order.customer_email,
                "total_spent": 0.0,
                "order_count": 0,
            },
        )
        entry["total_spent"] = round(entry["total_spent"] + order.total, 2)
        entry["order_count"] += 1
    for entry in spenders.values():
        entry["average_order_value"] = round(entry["total_spent"] / entry["order_count"], 2)

    return {
        "customer_stats": {
            "total_customers": len(first_orders),
            "paying_customers": len(spenders),
        },
        "new_customer_trend": [{"day": day, "new_customers": count} for day, count in sorted(new_customers.items())],
        "top_customers": sorted(spenders.values(), key=lambda entry: entry["total_spent"], reverse=True)[:limit],
    }
