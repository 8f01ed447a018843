# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

from app.constants.error_codes import ErrorCode

T = TypeVar("T")


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


def error_response(
    message: str,
    error_code: ErrorCode,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error_code": error_code.value,
        "details": details,
    }


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class APIError(BaseModel):
    """Body of every non-2xx response; see app.core.error_handlers."""

    success: bool = False
    message: str
    error_code: ErrorCode
    details: Optional[Any] = None


# documented on routes whose work can be refused by the ledger
LEDGER_ERROR_RESPONSES = {
    400: {"model": APIError},
    404: {"model": APIError},
    409: {"model": APIError},
}
