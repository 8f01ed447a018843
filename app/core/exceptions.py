from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


class InsufficientStockError(AppException):
    """Raised when a decrement would drive a ledger entry below zero."""

    def __init__(
        self,
        *,
        product_id: int,
        location_id: int,
        available: int,
        requested: int,
    ):
        super().__init__(
            409,
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Requested: {requested}",
            ErrorCode.INSUFFICIENT_STOCK,
            details={
                "product_id": product_id,
                "location_id": location_id,
                "available": available,
                "requested": requested,
            },
        )
        self.available = available
        self.requested = requested
