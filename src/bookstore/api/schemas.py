"""Pydantic request/response schemas for the bookstore API.

These are external contracts, kept separate from the internal Protean
commands and aggregates. Response models are built from aggregates with the
``from_*`` constructors.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = "United States"
    phone_number: str | None = None


class PaginationSchema(BaseModel):
    current_page: int
    total_pages: int
    has_next: bool
    has_prev: bool
    total_orders: int | None = None
    total_books: int | None = None


class OrderItemSchema(BaseModel):
    book_id: str
    title: str
    author: str | None = None
    isbn: str | None = None
    unit_price: float
    quantity: int
    subtotal: float


class StatusChangeSchema(BaseModel):
    previous_status: str | None = None
    status: str
    note: str | None = None
    actor: str | None = None
    timestamp: datetime


class PricingSchema(BaseModel):
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    currency: str


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutItem(BaseModel):
    book_id: str
    quantity: int = Field(ge=1)


class CheckoutRequest(BaseModel):
    items: list[CheckoutItem] = Field(min_length=1)
    shipping_address: AddressSchema
    payment_method: Literal["credit_card", "debit_card", "paypal", "razorpay", "cod"] = "razorpay"
    customer_notes: str | None = Field(default=None, max_length=500)
    amount: float | None = Field(default=None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"book_id": "book-001", "quantity": 2}],
                    "shipping_address": {
                        "name": "Ada Reader",
                        "street": "12 Page Lane",
                        "city": "Portland",
                        "state": "OR",
                        "zip_code": "97201",
                    },
                    "payment_method": "razorpay",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    cancellation_reason: str = Field(min_length=1, max_length=500)


class ReturnOrderRequest(BaseModel):
    return_reason: str = Field(min_length=1, max_length=500)


class UpdateStatusRequest(BaseModel):
    status: Literal["pending", "processing", "shipped", "delivered", "cancelled", "returned"]
    note: str | None = Field(default=None, max_length=1000)
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: datetime | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "shipped",
                    "tracking_number": "1Z999AA10123456784",
                    "carrier": "UPS",
                }
            ]
        }
    }


class AdminNotesRequest(BaseModel):
    admin_notes: str = Field(max_length=1000)


class RefundRequest(BaseModel):
    refund_amount: float = Field(gt=0)
    refund_reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    status: str
    items: list[OrderItemSchema]
    pricing: PricingSchema
    shipping_address: AddressSchema | None = None
    payment_method: str | None = None
    payment_status: str | None = None
    payment_id: str | None = None
    gateway_order_id: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: datetime | None = None
    shipped_date: datetime | None = None
    delivered_date: datetime | None = None
    cancelled_date: datetime | None = None
    cancellation_reason: str | None = None
    return_reason: str | None = None
    refund_amount: float | None = None
    refund_date: datetime | None = None
    refund_reason: str | None = None
    customer_notes: str | None = None
    admin_notes: str | None = None
    status_history: list[StatusChangeSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order, include_admin_notes: bool = False) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            status=order.status,
            items=[
                OrderItemSchema(
                    book_id=str(item.book_id),
                    title=item.title,
                    author=item.author,
                    isbn=item.isbn,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.ordered_items
            ],
            pricing=PricingSchema(
                subtotal=order.pricing.subtotal,
                tax=order.pricing.tax,
                shipping=order.pricing.shipping,
                discount=order.pricing.discount,
                total=order.pricing.total,
                currency=order.pricing.currency,
            ),
            shipping_address=(
                AddressSchema(
                    name=address.name,
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    zip_code=address.zip_code,
                    country=address.country,
                    phone_number=address.phone_number,
                )
                if address
                else None
            ),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_id=order.payment_id,
            gateway_order_id=order.gateway_order_id,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            estimated_delivery=order.estimated_delivery,
            shipped_date=order.shipped_date,
            delivered_date=order.delivered_date,
            cancelled_date=order.cancelled_date,
            cancellation_reason=order.cancellation_reason,
            return_reason=order.return_reason,
            refund_amount=order.refund_amount,
            refund_date=order.refund_date,
            refund_reason=order.refund_reason,
            customer_notes=order.customer_notes,
            admin_notes=order.admin_notes if include_admin_notes else None,
            status_history=[_status_change(entry) for entry in order.status_history],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def _status_change(entry) -> StatusChangeSchema:
    return StatusChangeSchema(
        previous_status=entry.previous_status,
        status=entry.status,
        note=entry.note,
        actor=entry.actor,
        timestamp=entry.timestamp,
    )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: PaginationSchema


class OrderActionResponse(BaseModel):
    message: str
    order: OrderResponse


class TrackingResponse(BaseModel):
    order_number: str
    status: str
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: datetime | None = None
    shipped_date: datetime | None = None
    delivered_date: datetime | None = None
    status_history: list[StatusChangeSchema]

    @classmethod
    def from_order(cls, order) -> "TrackingResponse":
        return cls(
            order_number=order.order_number,
            status=order.status,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            estimated_delivery=order.estimated_delivery,
            shipped_date=order.shipped_date,
            delivered_date=order.delivered_date,
            status_history=[_status_change(entry) for entry in order.status_history],
        )


class CheckoutResponse(BaseModel):
    order_id: str
    order_number: str
    gateway_order_id: str
    amount: int
    currency: str
    total: float


class RefundResponse(BaseModel):
    message: str
    refund_amount: float
    refund_date: datetime


class WebhookResponse(BaseModel):
    success: bool = True


# ---------------------------------------------------------------------------
# Book Schemas
# ---------------------------------------------------------------------------
class AddBookRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    price: float = Field(ge=0)
    quantity: int = Field(default=0, ge=0)
    isbn: str | None = None
    description: str | None = Field(default=None, max_length=1000)
    category: str | None = Field(default=None, max_length=100)
    format: Literal["paperback", "hardcover", "ebook", "audiobook"] = "paperback"
    original_price: float | None = Field(default=None, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    is_featured: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "The Pragmatic Programmer",
                    "author": "Andrew Hunt",
                    "price": 39.99,
                    "quantity": 25,
                    "isbn": "9780135957059",
                    "category": "Software",
                }
            ]
        }
    }


class UpdateBookRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=100)
    price: float | None = Field(default=None, ge=0)
    isbn: str | None = None
    description: str | None = Field(default=None, max_length=1000)
    category: str | None = Field(default=None, max_length=100)
    format: Literal["paperback", "hardcover", "ebook", "audiobook"] | None = None
    original_price: float | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)


class AdjustStockRequest(BaseModel):
    quantity: int = Field(ge=0)
    operation: Literal["set", "add", "subtract"] = "set"
    reason: str | None = Field(default=None, max_length=500)


class FeatureBookRequest(BaseModel):
    is_featured: bool


class BookIdResponse(BaseModel):
    book_id: str


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    isbn: str | None = None
    description: str | None = None
    category: str | None = None
    format: str | None = None
    price: float
    original_price: float | None = None
    discount_percentage: int = 0
    quantity: int
    reserved: int
    available_stock: int
    low_stock_threshold: int
    is_low_stock: bool
    is_out_of_stock: bool
    is_active: bool
    is_featured: bool
    sales_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_book(cls, book) -> "BookResponse":
        return cls(
            id=str(book.id),
            title=book.title,
            author=book.author,
            isbn=book.isbn,
            description=book.description,
            category=book.category,
            format=book.format,
            price=book.price,
            original_price=book.original_price,
            discount_percentage=book.discount_percentage,
            quantity=book.stock.quantity,
            reserved=book.stock.reserved,
            available_stock=book.available_stock,
            low_stock_threshold=book.stock.low_stock_threshold,
            is_low_stock=book.is_low_stock,
            is_out_of_stock=book.is_out_of_stock,
            is_active=book.is_active,
            is_featured=book.is_featured,
            sales_count=book.sales_count or 0,
            created_at=book.created_at,
            updated_at=book.updated_at,
        )


class BookListResponse(BaseModel):
    books: list[BookResponse]
    pagination: PaginationSchema


class MessageResponse(BaseModel):
    message: str


class BulkBookUpdates(BaseModel):
    category: str | None = Field(default=None, max_length=100)
    format: Literal["paperback", "hardcover", "ebook", "audiobook"] | None = None
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    is_featured: bool | None = None
    is_active: bool | None = None


class BulkUpdateRequest(BaseModel):
    book_ids: list[str] = Field(min_length=1)
    updates: BulkBookUpdates


class BulkUpdateResponse(BaseModel):
    message: str
    modified_count: int
