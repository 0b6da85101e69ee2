from enum import Enum
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

logger = logging.getLogger(__name__)

class ErrorCode(Enum):
    """Stable error kinds exposed to callers: (code, default message, HTTP status)"""
    PARAMS_ERROR = (40000, "Invalid request parameters", 400)
    NOT_LOGIN_ERROR = (40100, "Not logged in", 401)
    SYSTEM_ERROR = (50000, "Internal system error", 500)
    OPERATION_ERROR = (50001, "Operation failed", 500)

    def __init__(self, code: int, message: str, status_code: int):
        self.code = code
        self.message = message
        self.status_code = status_code

class BusinessException(Exception):
    """Base exception for the application"""

    def __init__(self, error_code: ErrorCode, message: Optional[str] = None):
        self.error_code = error_code
        self.message = message or error_code.message
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return self.error_code.code

class ParameterValidationError(BusinessException):
    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.PARAMS_ERROR, message)

class NotLoggedInError(BusinessException):
    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.NOT_LOGIN_ERROR, message)

class OperationFailureError(BusinessException):
    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorCode.OPERATION_ERROR, message)

class ConstraintViolationError(OperationFailureError):
    """Storage rejected the write: duplicate unique key (e.g. a racing insert) or dangling foreign key"""
    pass

async def business_exception_handler(request: Request, exc: BusinessException):
    """
    Render a BusinessException with its stable error kind and message.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    if exc.error_code.status_code >= 500:
        logger.error(exc.message, extra={"request_id": request_id, "error_code": exc.code})
    else:
        logger.info(exc.message, extra={"request_id": request_id, "error_code": exc.code})

    return JSONResponse(
        status_code=exc.error_code.status_code,
        content={
            "code": exc.code,
            "error": exc.error_code.name,
            "message": exc.message,
            "request_id": request_id,
        },
    )

async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler. Returns 500 JSON response and keeps internal details in the log.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "Unhandled exception occurred",
        extra={"request_id": request_id, "path": request.url.path},
        exc_info=exc
    )

    return JSONResponse(
        status_code=500,
        content={
            "code": ErrorCode.SYSTEM_ERROR.code,
            "error": ErrorCode.SYSTEM_ERROR.name,
            "message": ErrorCode.SYSTEM_ERROR.message,
            "request_id": request_id
        },
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors raised while parsing a request.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info("Validation error", extra={"request_id": request_id, "path": request.url.path})

    return JSONResponse(
        status_code=422,
        content={
            "code": ErrorCode.PARAMS_ERROR.code,
            "error": ErrorCode.PARAMS_ERROR.name,
            "details": exc.errors(),
            "request_id": request_id
        },
    )
