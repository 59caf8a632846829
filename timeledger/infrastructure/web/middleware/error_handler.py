"""
Global error handler middleware for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import logging
import traceback
from datetime import datetime
from typing import Any, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import status

from timeledger.config import settings
from timeledger.domain.models.base import (
    BusinessRuleViolation,
    DomainException,
    EntityNotFoundError,
    ValidationError
)

logger = logging.getLogger(__name__)

# Most specific first
DOMAIN_STATUS_CODES = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error"),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (BusinessRuleViolation, status.HTTP_409_CONFLICT, "Conflict"),
    (DomainException, status.HTTP_400_BAD_REQUEST, "Bad Request"),
)

ERROR_CODE_STATUS = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "ENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "BUSINESS_RULE_VIOLATION": status.HTTP_409_CONFLICT,
}


def status_for_error_code(error_code: str) -> int:
    """HTTP status for a use case error code."""
    return ERROR_CODE_STATUS.get(error_code, status.HTTP_400_BAD_REQUEST)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Log the exception and return a JSON error response.
        """
        error_response = self.format_error_response(exc)

        if error_response["status_code"] >= 500:
            logger.error(
                "Unhandled exception: %s: %s", type(exc).__name__, exc,
                exc_info=True,
                extra={
                    "request_path": request.url.path,
                    "request_method": request.method,
                    "client_host": request.client.host if request.client else None
                }
            )
        else:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)

        if settings.debug:
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=error_response["status_code"],
            content=error_response
        )

    def format_error_response(self, exc: Exception) -> Dict[str, Any]:
        """
        Format exception into a consistent error response structure.
        """
        error_response: Dict[str, Any] = {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "timestamp": datetime.utcnow().isoformat()
        }

        for exc_type, status_code, label in DOMAIN_STATUS_CODES:
            if isinstance(exc, exc_type):
                error_response.update({
                    "error": label,
                    "message": exc.message,
                    "status_code": status_code,
                    "error_code": exc.code
                })
                field = getattr(exc, "field", None)
                if field:
                    error_response["details"] = {"field": field}
                return error_response

        if isinstance(exc, ValueError):
            error_response.update({
                "error": "Bad Request",
                "message": str(exc),
                "status_code": status.HTTP_400_BAD_REQUEST
            })

        return error_response
