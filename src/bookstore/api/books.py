"""Book routes: the public storefront listing and catalogue administration."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from bookstore.api.auth import require_admin
from bookstore.api.schemas import (
    AddBookRequest,
    AdjustStockRequest,
    BookIdResponse,
    BookListResponse,
    BookResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    FeatureBookRequest,
    MessageResponse,
    UpdateBookRequest,
)
from bookstore.catalogue.book import Book
from bookstore.catalogue.creation import AddBook
from bookstore.catalogue.details import BulkUpdateBooks, UpdateBookDetails
from bookstore.catalogue.lifecycle import DeactivateBook, FeatureBook, ReactivateBook
from bookstore.catalogue.stock import AdjustStock

# ---------------------------------------------------------------------------
# Storefront
# ---------------------------------------------------------------------------
book_router = APIRouter(prefix="/books", tags=["books"])


@book_router.get("", response_model=BookListResponse)
async def list_books(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: str | None = None,
    featured: bool | None = None,
) -> BookListResponse:
    result = current_domain.repository_for(Book).active_listing(
        page=page, limit=limit, category=category, featured=featured
    )
    return BookListResponse(
        books=[BookResponse.from_book(book) for book in result.items],
        pagination=result.pagination(total_key="total_books"),
    )


@book_router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str) -> BookResponse:
    book = current_domain.repository_for(Book).get(book_id)
    if not book.is_active:
        raise ObjectNotFoundError(f"Book {book_id} not found")
    return BookResponse.from_book(book)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------
admin_book_router = APIRouter(prefix="/admin/books", tags=["admin-books"], dependencies=[Depends(require_admin)])


def _book(book_id: str) -> BookResponse:
    return BookResponse.from_book(current_domain.repository_for(Book).get(book_id))


@admin_book_router.get("", response_model=BookListResponse)
async def admin_list_books(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    active: bool | None = None,
    low_stock: bool = False,
    search: str | None = None,
) -> BookListResponse:
    result = current_domain.repository_for(Book).admin_listing(
        page=page, limit=limit, active=active, low_stock=low_stock, search=search
    )
    return BookListResponse(
        books=[BookResponse.from_book(book) for book in result.items],
        pagination=result.pagination(total_key="total_books"),
    )


@admin_book_router.get("/inventory/summary")
async def inventory_summary() -> dict:
    return current_domain.repository_for(Book).inventory_summary()


@admin_book_router.get("/{book_id}", response_model=BookResponse)
async def admin_get_book(book_id: str) -> BookResponse:
    return _book(book_id)


@admin_book_router.post("", status_code=201, response_model=BookIdResponse)
async def add_book(body: AddBookRequest) -> BookIdResponse:
    book_id = current_domain.process(AddBook(**body.model_dump()), asynchronous=False)
    return BookIdResponse(book_id=book_id)


@admin_book_router.post("/bulk/update", response_model=BulkUpdateResponse)
async def bulk_update_books(body: BulkUpdateRequest) -> BulkUpdateResponse:
    modified = current_domain.process(
        BulkUpdateBooks(
            book_ids=json.dumps(body.book_ids),
            updates=json.dumps(body.updates.model_dump(exclude_none=True)),
        ),
        asynchronous=False,
    )
    return BulkUpdateResponse(message=f"{modified} books updated successfully", modified_count=modified)


@admin_book_router.put("/{book_id}", response_model=BookResponse)
async def update_book(book_id: str, body: UpdateBookRequest) -> BookResponse:
    current_domain.process(
        UpdateBookDetails(book_id=book_id, **body.model_dump(exclude_none=True)),
        asynchronous=False,
    )
    return _book(book_id)


@admin_book_router.put("/{book_id}/stock", response_model=BookResponse)
async def adjust_stock(book_id: str, body: AdjustStockRequest) -> BookResponse:
    current_domain.process(
        AdjustStock(
            book_id=book_id,
            quantity=body.quantity,
            operation=body.operation,
            reason=body.reason,
        ),
        asynchronous=False,
    )
    return _book(book_id)


@admin_book_router.put("/{book_id}/feature", response_model=BookResponse)
async def feature_book(book_id: str, body: FeatureBookRequest) -> BookResponse:
    current_domain.process(FeatureBook(book_id=book_id, is_featured=body.is_featured), asynchronous=False)
    return _book(book_id)


@admin_book_router.delete("/{book_id}", response_model=MessageResponse)
async def deactivate_book(book_id: str) -> MessageResponse:
    current_domain.process(DeactivateBook(book_id=book_id), asynchronous=False)
    return MessageResponse(message="Book deactivated successfully")


@admin_book_router.put("/{book_id}/reactivate", response_model=BookResponse)
async def reactivate_book(book_id: str) -> BookResponse:
    current_domain.process(ReactivateBook(book_id=book_id), asynchronous=False)
    return _book(book_id)
