"""Page-number pagination over Protean querysets and plain lists."""

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Page:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self, total_key: str = "total") -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            total_key: self.total,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def paginate(queryset, page: int, limit: int) -> Page:
    """Evaluate ``queryset`` for one page. ``page`` is 1-based."""
    page = max(page, 1)
    results = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(results.items), total=results.total, page=page, limit=limit)


def paginate_list(items: list, page: int, limit: int) -> Page:
    page = max(page, 1)
    start = (page - 1) * limit
    return Page(items=items[start : start + limit], total=len(items), page=page, limit=limit)
