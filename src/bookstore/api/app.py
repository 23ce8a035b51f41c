"""FastAPI application factory.

Every request runs inside the bookstore domain context, so handlers can use
``current_domain`` directly. Each request also gets a ``request_id`` bound
onto its log lines.
"""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.domain import Domain

from bookstore.api.admin_orders import router as admin_order_router
from bookstore.api.books import admin_book_router, book_router
from bookstore.api.dashboard import router as dashboard_router
from bookstore.api.errors import register_exception_handlers
from bookstore.api.orders import router as order_router
from bookstore.payments.port import PaymentGateway
from bookstore.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


def create_app(domain: Domain, gateway: PaymentGateway) -> FastAPI:
    app = FastAPI(
        title="Bookstore API",
        description="Online bookstore: catalogue, checkout and order management",
    )
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the domain context and tag log lines for this request."""
        request_id = request.headers.get("x-request-id") or uuid4().hex
        add_context(request_id=request_id, path=request.url.path)
        try:
            with domain.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)

    app.include_router(book_router)
    app.include_router(admin_book_router)
    app.include_router(order_router)
    app.include_router(admin_order_router)
    app.include_router(dashboard_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": domain.name,
                "gateway": type(gateway).__name__,
            }
        )

    logger.debug("app_created", domain=domain.name)
    return app
