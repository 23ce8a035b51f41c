"""Query methods for the Order aggregate."""

from datetime import date

from protean.exceptions import ObjectNotFoundError

from bookstore.domain import bookstore
from bookstore.ordering.numbering import day_prefix
from bookstore.ordering.order import Order
from bookstore.utils.pagination import Page, paginate


@bookstore.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id, page=1, limit=10) -> Page:
        """The customer's orders, newest first."""
        queryset = self.query.filter(customer_id=str(customer_id)).order_by("-created_at")
        return paginate(queryset, page, limit)

    def get_for_customer(self, order_id, customer_id) -> Order:
        """Fetch an order only if it belongs to ``customer_id``.

        Someone else's order is reported exactly like a missing one.
        """
        order = self.get_or_none(order_id)
        if order is None or str(order.customer_id) != str(customer_id):
            raise ObjectNotFoundError(f"Order {order_id} not found")
        return order

    def search(
        self,
        page=1,
        limit=20,
        status=None,
        customer_id=None,
        order_number=None,
        start_date=None,
        end_date=None,
    ) -> Page:
        queryset = self._filtered(status, customer_id, order_number, start_date, end_date)
        return paginate(queryset.order_by("-created_at"), page, limit)

    def export_rows(self, status=None, start_date=None, end_date=None) -> list[Order]:
        queryset = self._filtered(status, None, None, start_date, end_date)
        return list(queryset.order_by("-created_at").all().items)

    def _filtered(self, status, customer_id, order_number, start_date, end_date):
        queryset = self.query
        if status:
            queryset = queryset.filter(status=status)
        if customer_id:
            queryset = queryset.filter(customer_id=str(customer_id))
        if order_number:
            queryset = queryset.filter(order_number__icontains=order_number)
        if start_date is not None:
            queryset = queryset.filter(created_at__gte=start_date)
        if end_date is not None:
            queryset = queryset.filter(created_at__lte=end_date)
        return queryset

    def numbers_for_day(self, day: date) -> list[str]:
        orders = self.query.filter(order_number__startswith=day_prefix(day)).all().items
        return [order.order_number for order in orders]

    def by_gateway_order_id(self, gateway_order_id) -> Order | None:
        return self.query.filter(gateway_order_id=gateway_order_id).all().first

    def created_since(self, start) -> list[Order]:
        return list(self.query.filter(created_at__gte=start).order_by("-created_at").all().items)

    def recent(self, count: int = 10) -> list[Order]:
        return list(self.query.order_by("-created_at").limit(count).all().items)

    def all_orders(self) -> list[Order]:
        return list(self.query.all().items)
