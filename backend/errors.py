from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from logging_config import get_logger

logger = get_logger("storefront.errors")


# Body of every error response
class ErrorResponse(BaseModel):
    message: str
    code: str


# Base class for errors that map directly to an HTTP response
class ApiError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        self.message = message
        self.headers = headers or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(message=self.message, code=self.code)


# Domain lookup miss
class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"


# Any failure coming out of the persistence layer; logged, never serialized
class StoreError(ApiError):
    status_code = 500
    code = "STORE_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class UnauthorizedError(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class RateLimitedError(ApiError):
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers=exc.headers or None,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(message="Internal server error", code="INTERNAL_ERROR").model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
