"""Query methods for the Book aggregate."""

from protean.utils.query import Q

from bookstore.catalogue.book import Book
from bookstore.domain import bookstore
from bookstore.utils.pagination import Page, paginate, paginate_list


@bookstore.repository(part_of=Book)
class BookRepository:
    def active_listing(self, page=1, limit=12, category=None, featured=None) -> Page:
        """Books visible in the storefront, newest first."""
        criteria = {"is_active": True}
        if category:
            criteria["category"] = category
        if featured is not None:
            criteria["is_featured"] = featured
        return paginate(self.query.filter(**criteria).order_by("-created_at"), page, limit)

    def admin_listing(self, page=1, limit=20, active=None, low_stock=False, search=None) -> Page:
        queryset = self.query
        if active is not None:
            queryset = queryset.filter(is_active=active)
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) | Q(author__icontains=search) | Q(isbn__icontains=search)
            )
        queryset = queryset.order_by("-created_at")

        if not low_stock:
            return paginate(queryset, page, limit)

        # Stock counters live inside the StockLevels value object
        books = [book for book in queryset.all().items if book.is_low_stock or book.is_out_of_stock]
        return paginate_list(books, page, limit)

    def all_books(self) -> list[Book]:
        return list(self.query.all().items)

    def active_books(self) -> list[Book]:
        return list(self.query.filter(is_active=True).all().items)

    def top_selling(self, count: int = 5) -> list[Book]:
        return list(self.query.filter(is_active=True).order_by("-sales_count").limit(count).all().items)

    def inventory_summary(self) -> dict:
        books = self.all_books()
        categories: dict[str, dict] = {}
        for book in books:
            if not book.is_active:
                continue
            stats = categories.setdefault(
                book.category or "Uncategorized",
                {"category": book.category or "Uncategorized", "book_count": 0, "total_stock": 0, "total_value": 0.0},
            )
            stats["book_count"] += 1
            stats["total_stock"] += book.stock.quantity
            stats["total_value"] = round(stats["total_value"] + book.price * book.stock.quantity, 2)

        return {
            "summary": {
                "total_books": len(books),
                "active_books": sum(1 for book in books if book.is_active),
                "total_stock": sum(book.stock.quantity for book in books),
                "total_value": round(sum(book.price * book.stock.quantity for book in books), 2),
                "low_stock_books": sum(1 for book in books if book.is_low_stock),
                "out_of_stock_books": sum(1 for book in books if book.is_out_of_stock),
            },
            "category_stats": sorted(categories.values(), key=lambda s: s["book_count"], reverse=True),
        }
