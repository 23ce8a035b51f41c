"""Map domain and infrastructure failures to HTTP responses.

Protean's stock handlers cover validation (400), not found (404), invalid
state (409) and invalid operation (422). The handlers added here keep the same
``{"error": ...}`` body.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from bookstore.payments.port import PaymentGatewayError

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)

    @app.exception_handler(ExpectedVersionError)
    async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        logger.warning("version_conflict", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=409,
            content={"error": "The resource was modified concurrently, please retry"},
        )

    @app.exception_handler(PaymentGatewayError)
    async def gateway_error_handler(request: Request, exc: PaymentGatewayError) -> JSONResponse:
        logger.error("payment_gateway_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=502, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", path=request.url.path, method=request.method, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
