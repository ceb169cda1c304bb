"""HTTP status for each order error kind."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bazaar.orders import OrderError, OrderErrorKind, OrderErrors
from bazaar.wire._codecs import ErrorResponse

HTTP_STATUS: dict[OrderErrorKind, int] = {
    OrderErrorKind.EMPTY_CART: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.LISTING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OrderErrorKind.INVALID_PRICE: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.SELF_BUY_FORBIDDEN: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.CURRENCY_MISMATCH: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.AMOUNT_OVERFLOW: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.INVALID_ADDRESS: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    OrderErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    OrderErrorKind.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OrderErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    OrderErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    OrderErrorKind.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: OrderError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS[error.kind],
        content=ErrorResponse.from_domain(error).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies pydantic cannot parse get the same envelope as every other error."""
    fields = dict.fromkeys(str(e["loc"][-1]) for e in exc.errors() if e.get("loc"))
    return error_response(OrderErrors.invalid_request(fields))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]


__all__ = (
    "HTTP_STATUS",
    "error_response",
    "validation_error_handler",
    "register_exception_handlers",
)
