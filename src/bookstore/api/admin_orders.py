"""Back-office order routes. Every route requires an admin token."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from protean.utils.globals import current_domain

from bookstore.api.auth import Principal, require_admin
from bookstore.api.dependencies import end_of_day, start_of_day
from bookstore.api.schemas import (
    AdminNotesRequest,
    OrderActionResponse,
    OrderListResponse,
    OrderResponse,
    RefundRequest,
    RefundResponse,
    UpdateStatusRequest,
)
from bookstore.ordering.lifecycle import TransitionOrder
from bookstore.ordering.notes import UpdateAdminNotes
from bookstore.ordering.order import Order
from bookstore.ordering.refund import RefundOrder
from bookstore.reporting.dashboard import order_stats
from bookstore.reporting.export import FILENAME, export_orders_csv

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"], dependencies=[Depends(require_admin)])


def _admin_view(order) -> OrderResponse:
    return OrderResponse.from_order(order, include_admin_notes=True)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: str | None = None,
    customer: str | None = None,
    order_number: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> OrderListResponse:
    result = current_domain.repository_for(Order).search(
        page=page,
        limit=limit,
        status=status,
        customer_id=customer,
        order_number=order_number,
        start_date=start_of_day(start_date),
        end_date=end_of_day(end_date),
    )
    return OrderListResponse(
        orders=[_admin_view(order) for order in result.items],
        pagination=result.pagination(total_key="total_orders"),
    )


@router.get("/stats/dashboard")
async def dashboard_stats(period: int = Query(30, ge=1, le=3650)) -> dict:
    return order_stats(period_days=period)


@router.get("/export/csv")
async def export_csv(
    status: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Response:
    content = export_orders_csv(
        status=status,
        start_date=start_of_day(start_date),
        end_date=end_of_day(end_date),
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{FILENAME}"'},
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _admin_view(current_domain.repository_for(Order).get(order_id))


@router.put("/{order_id}/status", response_model=OrderActionResponse)
async def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    admin: Principal = Depends(require_admin),
) -> OrderActionResponse:
    current_domain.process(
        TransitionOrder(
            order_id=order_id,
            status=body.status,
            note=body.note,
            actor=admin.id,
            tracking_number=body.tracking_number,
            carrier=body.carrier,
            estimated_delivery=body.estimated_delivery,
        ),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).get(order_id)
    return OrderActionResponse(message="Order status updated successfully", order=_admin_view(order))


@router.put("/{order_id}/notes", response_model=OrderActionResponse)
async def update_notes(order_id: str, body: AdminNotesRequest) -> OrderActionResponse:
    current_domain.process(
        UpdateAdminNotes(order_id=order_id, admin_notes=body.admin_notes),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).get(order_id)
    return OrderActionResponse(message="Admin notes updated successfully", order=_admin_view(order))


@router.put("/{order_id}/refund", response_model=RefundResponse)
async def refund_order(
    order_id: str,
    body: RefundRequest,
    admin: Principal = Depends(require_admin),
) -> RefundResponse:
    current_domain.process(
        RefundOrder(
            order_id=order_id,
            amount=body.refund_amount,
            reason=body.refund_reason,
            actor=admin.id,
        ),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).get(order_id)
    return RefundResponse(
        message="Refund processed successfully",
        refund_amount=order.refund_amount,
        refund_date=order.refund_date,
    )
