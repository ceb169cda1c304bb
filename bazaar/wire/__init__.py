"""
Wire: HTTP exposure of the order service.

    from fastapi import FastAPI, Header
    from bazaar.wire import create_router, register_exception_handlers

    def identify(x_user_id: str | None = Header(default=None)) -> str | None:
        return x_user_id

    app = FastAPI()
    app.include_router(create_router(service, identify))
    register_exception_handlers(app)

Errors come back as {"ok": false, "error": CODE, "fields": [...]} with one
HTTP status per error kind (see HTTP_STATUS). Bodies that fail to parse
come back as INVALID_REQUEST once the handlers are registered.
"""

from bazaar.wire._codecs import (
    AddressBody,
    IntentItemBody,
    CreateOrderRequest,
    StatusRequest,
    PlacementResponse,
    OrderItemBody,
    OrderBody,
    OrderResponse,
    OrderListResponse,
    StatusChangeResponse,
    ErrorResponse,
)
from bazaar.wire._status import (
    HTTP_STATUS,
    error_response,
    validation_error_handler,
    register_exception_handlers,
)
from bazaar.wire._router import (
    Identify,
    create_router,
)

__all__ = (
    # Codecs
    "AddressBody",
    "IntentItemBody",
    "CreateOrderRequest",
    "StatusRequest",
    "PlacementResponse",
    "OrderItemBody",
    "OrderBody",
    "OrderResponse",
    "OrderListResponse",
    "StatusChangeResponse",
    "ErrorResponse",
    # Status
    "HTTP_STATUS",
    "error_response",
    "validation_error_handler",
    "register_exception_handlers",
    # Router
    "Identify",
    "create_router",
)
