"""CSV export of orders for the back office."""

import csv
import io

from protean.utils.globals import current_domain

from bookstore.ordering.order import Order

HEADER = [
    "Order Number",
    "Customer Name",
    "Customer Email",
    "Status",
    "Total",
    "Items Count",
    "Order Date",
    "Shipped Date",
    "Delivered Date",
]

FILENAME = "orders-export.csv"


def _day(moment) -> str:
    return moment.strftime("%Y-%m-%d") if moment is not None else ""


def order_row(order: Order) -> list:
    return [
        order.order_number,
        order.customer_name or "",
        order.customer_email or "",
        order.status,
        f"{order.total:.2f}",
        len(order.items or []),
        _day(order.created_at),
        _day(order.shipped_date),
        _day(order.delivered_date),
    ]


def export_orders_csv(status=None, start_date=None, end_date=None) -> str:
    """Orders matching the filters, newest first, as CSV text with a header row."""
    orders = current_domain.repository_for(Order).export_rows(status=status, start_date=start_date, end_date=end_date)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    for order in orders:
        writer.writerow(order_row(order))
    return buffer.getvalue()
