"""Customer-facing order routes: history, cancel, return, checkout, webhook."""

import json

import structlog
from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain
from starlette.concurrency import run_in_threadpool

from bookstore.api.auth import Principal, get_current_user
from bookstore.api.dependencies import get_gateway
from bookstore.api.schemas import (
    CancelOrderRequest,
    CheckoutRequest,
    CheckoutResponse,
    OrderActionResponse,
    OrderListResponse,
    OrderResponse,
    ReturnOrderRequest,
    TrackingResponse,
    WebhookResponse,
)
from bookstore.ordering.lifecycle import CancelOrder, RequestReturn
from bookstore.ordering.order import Order
from bookstore.ordering.payment import AbandonCheckout
from bookstore.ordering.placement import AttachGatewayOrder, PlaceOrder
from bookstore.payments.port import PaymentGateway, PaymentGatewayError, to_minor_units
from bookstore.payments.webhook import process_webhook

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: Principal = Depends(get_current_user),
) -> OrderListResponse:
    result = current_domain.repository_for(Order).for_customer(user.id, page=page, limit=limit)
    return OrderListResponse(
        orders=[OrderResponse.from_order(order) for order in result.items],
        pagination=result.pagination(total_key="total_orders"),
    )


@router.post("/create", status_code=201, response_model=CheckoutResponse)
async def create_order(
    body: CheckoutRequest,
    user: Principal = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_gateway),
) -> CheckoutResponse:
    command = PlaceOrder(
        customer_id=user.id,
        customer_name=user.name,
        customer_email=user.email,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        customer_notes=body.customer_notes,
        expected_total=body.amount,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    amount_minor = to_minor_units(order.total)

    try:
        charge = await run_in_threadpool(
            gateway.create_charge,
            amount_minor,
            order.pricing.currency,
            order.order_number,
        )
    except PaymentGatewayError:
        logger.warning("checkout_charge_failed", order_id=order_id, order_number=order.order_number)
        current_domain.process(
            AbandonCheckout(order_id=order_id, reason="Payment gateway could not create a charge"),
            asynchronous=False,
        )
        raise

    current_domain.process(
        AttachGatewayOrder(order_id=order_id, gateway_order_id=charge.gateway_order_id),
        asynchronous=False,
    )
    return CheckoutResponse(
        order_id=order_id,
        order_number=order.order_number,
        gateway_order_id=charge.gateway_order_id,
        amount=charge.amount_minor,
        currency=charge.currency,
        total=order.total,
    )


@router.post("/webhook", response_model=WebhookResponse)
async def payment_webhook(
    request: Request,
    x_razorpay_signature: str = Header(default=""),
    gateway: PaymentGateway = Depends(get_gateway),
):
    payload = await request.body()
    if not gateway.verify_webhook_signature(payload, x_razorpay_signature):
        logger.warning("webhook_signature_invalid")
        return JSONResponse(status_code=400, content={"error": "Invalid signature"})

    try:
        event = json.loads(payload)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Malformed webhook payload"})
    if not isinstance(event, dict):
        return JSONResponse(status_code=400, content={"error": "Webhook payload must be a JSON object"})

    process_webhook(event)
    return WebhookResponse()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_my_order(order_id: str, user: Principal = Depends(get_current_user)) -> OrderResponse:
    order = current_domain.repository_for(Order).get_for_customer(order_id, user.id)
    return OrderResponse.from_order(order)


@router.get("/{order_id}/tracking", response_model=TrackingResponse)
async def track_order(order_id: str, user: Principal = Depends(get_current_user)) -> TrackingResponse:
    order = current_domain.repository_for(Order).get_for_customer(order_id, user.id)
    return TrackingResponse.from_order(order)


@router.put("/{order_id}/cancel", response_model=OrderActionResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    user: Principal = Depends(get_current_user),
) -> OrderActionResponse:
    current_domain.process(
        CancelOrder(order_id=order_id, customer_id=user.id, reason=body.cancellation_reason),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).get(order_id)
    return OrderActionResponse(message="Order cancelled successfully", order=OrderResponse.from_order(order))


@router.put("/{order_id}/return", response_model=OrderActionResponse)
async def return_order(
    order_id: str,
    body: ReturnOrderRequest,
    user: Principal = Depends(get_current_user),
) -> OrderActionResponse:
    current_domain.process(
        RequestReturn(order_id=order_id, customer_id=user.id, reason=body.return_reason),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).get(order_id)
    return OrderActionResponse(message="Return request submitted successfully", order=OrderResponse.from_order(order))
