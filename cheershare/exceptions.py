import logging
from typing import Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map onto an HTTP status.

    ``message`` is what the client sees. Anything more specific belongs on the
    chained cause (``raise ... from exc``), which is logged but never returned.
    """

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request payload"


class AuthError(AppError):
    status_code = 401
    message = "Unauthorized"


class OTPExpiredOrMissingError(AuthError):
    message = "Invalid or expired OTP"


class OTPMismatchError(AuthError):
    # Same text as the expired case so callers cannot tell the two apart.
    message = "Invalid or expired OTP"


class NotFoundError(AppError):
    status_code = 404
    message = "Record not found"


class ConflictError(AppError):
    status_code = 409
    message = "Record already exists"


class StorageError(AppError):
    status_code = 500
    message = "Internal server error"


class DispatchError(AppError):
    status_code = 502
    message = "Failed to send message"


def create_error_response(error_message: str) -> dict:
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


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}: {cause!r}",
            exc_info=(type(cause), cause, cause.__traceback__),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected payload for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=create_error_response("Invalid request payload"),
    )
