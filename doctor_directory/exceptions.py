from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(APIException):
    """Malformed input, raised before any store access."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(status_code=422, detail=detail)
        self.field = field


class NotFoundError(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class ConflictError(APIException):
    """The write would break a scheduling invariant."""

    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


def create_success_response(data: dict) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render every HTTPException in the standard envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
