"""Map storefront errors onto HTTP responses.

Protean's own handlers cover generic ``ValidationError`` (400) and
``ObjectNotFoundError`` (404). The handlers here are registered for the
storefront's subclasses and its own error kinds; Starlette picks the most
specific handler for an exception's class.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    CartItemNotFound,
    Forbidden,
    GatewayError,
    InsufficientStock,
    InvalidStatusTransition,
    OrderNotFound,
    ProductNotFound,
    Unauthorized,
    VerificationFailed,
)

logger = structlog.get_logger(__name__)


def _error(status_code: int, error: str, detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail})


async def _conflict(request: Request, exc: InsufficientStock | InvalidStatusTransition) -> JSONResponse:
    return _error(409, type(exc).__name__, exc.messages)


async def _not_found(request: Request, exc: OrderNotFound | ProductNotFound | CartItemNotFound) -> JSONResponse:
    # ObjectNotFoundError carries its detail positionally, not as .messages
    detail = exc.args[0] if exc.args else str(exc)
    return _error(404, type(exc).__name__, detail)


async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
    return _error(401, "Unauthorized", exc.message)


async def _forbidden(request: Request, exc: Forbidden) -> JSONResponse:
    return _error(403, "Forbidden", exc.message)


async def _verification_failed(request: Request, exc: VerificationFailed) -> JSONResponse:
    return _error(400, "VerificationFailed", exc.message)


async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error("Gateway error surfaced to caller", path=request.url.path, retryable=exc.retryable)
    response = _error(503, "GatewayError", "Payment service unavailable, please retry")
    if exc.retryable:
        response.headers["Retry-After"] = "5"
    return response


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return _error(500, "Internal", "Internal error")


def register_error_handlers(app: FastAPI, include_internal: bool = False) -> None:
    """Install Protean's handlers plus the storefront-specific ones on ``app``."""
    register_exception_handlers(app)
    app.add_exception_handler(InsufficientStock, _conflict)
    app.add_exception_handler(InvalidStatusTransition, _conflict)
    app.add_exception_handler(OrderNotFound, _not_found)
    app.add_exception_handler(ProductNotFound, _not_found)
    app.add_exception_handler(CartItemNotFound, _not_found)
    app.add_exception_handler(Unauthorized, _unauthorized)
    app.add_exception_handler(Forbidden, _forbidden)
    app.add_exception_handler(VerificationFailed, _verification_failed)
    app.add_exception_handler(GatewayError, _gateway_error)
    if include_internal:
        app.add_exception_handler(Exception, _internal_error)
