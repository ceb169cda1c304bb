"""
FastAPI router over the order service.

Handlers only decode, call the service and encode; every decision is made
by the service.
"""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, status
from kungfu import Ok, Error

from bazaar.orders import OrderErrors, OrderService
from bazaar.wire._codecs import (
    CreateOrderRequest,
    ErrorResponse,
    OrderListResponse,
    OrderResponse,
    PlacementResponse,
    StatusChangeResponse,
    StatusRequest,
)
from bazaar.wire._status import error_response

type Identify = Callable[..., Any]
"""FastAPI dependency resolving the verified user id, or None."""

_ERRORS: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def create_router(service: OrderService, identify: Identify, *, prefix: str = "/orders") -> APIRouter:
    """
    Example:
        def identify(x_user_id: str | None = Header(default=None)) -> str | None:
            return x_user_id

        app = FastAPI()
        app.include_router(create_router(service, identify))
        register_exception_handlers(app)
    """
    router = APIRouter(prefix=prefix, tags=["orders"], responses=_ERRORS)

    @router.post("", response_model=PlacementResponse)
    async def create_order(
        payload: CreateOrderRequest,
        user_id: str | None = Depends(identify),
    ) -> Any:
        match await service.create_order(user_id, payload.to_domain()):
            case Ok(placement):
                return PlacementResponse.from_domain(placement)
            case Error(e):
                return error_response(e)

    @router.get("/mine", response_model=OrderListResponse)
    async def list_purchases(
        include_cancelled: bool = False,
        user_id: str | None = Depends(identify),
    ) -> Any:
        match await service.list_purchases(user_id, include_cancelled):
            case Ok(orders):
                return OrderListResponse.from_domain(orders)
            case Error(e):
                return error_response(e)

    @router.get("/sales", response_model=OrderListResponse)
    async def list_sales(
        include_cancelled: bool = False,
        user_id: str | None = Depends(identify),
    ) -> Any:
        match await service.list_sales(user_id, include_cancelled):
            case Ok(orders):
                return OrderListResponse.from_domain(orders)
            case Error(e):
                return error_response(e)

    @router.get("/{order_id}", response_model=OrderResponse)
    async def get_order(
        order_id: str,
        user_id: str | None = Depends(identify),
    ) -> Any:
        match await service.get_order(order_id, user_id):
            case Ok(order):
                return OrderResponse.from_domain(order)
            case Error(e):
                return error_response(e)

    @router.post("/{order_id}/status", response_model=StatusChangeResponse)
    async def change_status(
        order_id: str,
        payload: StatusRequest,
        user_id: str | None = Depends(identify),
    ) -> Any:
        if not user_id:
            return error_response(OrderErrors.unauthorized())
        match await service.transition(
            order_id,
            payload.status,
            payload.to_domain(user_id),
            tracking_number=payload.tracking_number,
            notes=payload.notes,
        ):
            case Ok(change):
                return StatusChangeResponse.from_domain(change)
            case Error(e):
                return error_response(e)

    return router


__all__ = (
    "Identify",
    "create_router",
)
