"""
Renders every failure as the same JSON envelope::

    {"error": {"code", "message", "timestamp", "request_id", "details"?}}

The request ID assigned by ``RequestLoggingMiddleware`` is reused so a client
report can be matched to the server log lines for that request.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from estate_api.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# Substring of the driver message -> client-facing description
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": ErrorHandlerService._get_current_timestamp(),
        }
        if details:
            error["details"] = details
        if request_id:
            error["request_id"] = request_id
        return {"error": error}

    @staticmethod
    def _respond(
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        body = ErrorHandlerService.format_error_response(
            error_code=error_code,
            message=message,
            details=details,
            request_id=ErrorHandlerService._request_id(request)
        )
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)

    @staticmethod
    def _log_context(request: Optional[Request], **extra) -> Dict[str, Any]:
        return {
            "request_id": ErrorHandlerService._request_id(request),
            "path": request.url.path if request else None,
            **extra
        }

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Client errors are logged as warnings, server errors as errors."""
        context = ErrorHandlerService._log_context(
            request, error_code=exception.error_code, status_code=exception.status_code
        )
        log = logger.error if exception.status_code >= 500 else logger.warning
        log(f"API error [{context['request_id']}]: {exception.error_code} - {exception.detail}", extra=context)

        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            exception.error_code or "API_ERROR",
            exception.detail,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """
        Handle ``RequestValidationError`` and pydantic ``ValidationError``.

        Each failing field becomes one ``details`` entry whose ``field`` is the
        error location joined with ``" -> "`` (e.g. ``query -> userDateFrom``).
        """
        details = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
                "input": error.get("input"),
            }
            for error in exception.errors()
        ]

        context = ErrorHandlerService._log_context(request, error_count=len(details))
        logger.warning(f"Validation failed [{context['request_id']}]: {len(details)} field error(s)", extra=context)

        return ErrorHandlerService._respond(
            request, 422, "VALIDATION_ERROR", "Request validation failed", details=details
        )

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """Integrity violations are 409; every other database failure is 500."""
        if isinstance(exception, IntegrityError):
            constraint = ErrorHandlerService._extract_constraint_info(exception)
            status_code, error_code = 409, "INTEGRITY_ERROR"
            message = f"Constraint violation: {constraint}" if constraint else "Data integrity constraint violation"
        else:
            status_code, error_code, message = 500, "DATABASE_ERROR", "Database operation failed"

        context = ErrorHandlerService._log_context(
            request, error_code=error_code, exception_type=type(exception).__name__
        )
        logger.error(f"Database error [{context['request_id']}]: {exception}", extra=context, exc_info=True)

        return ErrorHandlerService._respond(request, status_code, error_code, message)

    @staticmethod
    def handle_http_exception(exception: StarletteHTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Framework-raised HTTP errors such as unknown routes or wrong methods."""
        context = ErrorHandlerService._log_context(request, status_code=exception.status_code)
        logger.warning(
            f"HTTP {exception.status_code} [{context['request_id']}]: {exception.detail}", extra=context
        )

        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """The traceback goes to the log; the client only gets a generic message."""
        context = ErrorHandlerService._log_context(request, exception_type=type(exception).__name__)
        logger.error(
            f"Unhandled {type(exception).__name__} [{context['request_id']}]: {exception}",
            extra=context,
            exc_info=exception
        )

        return ErrorHandlerService._respond(request, 500, "INTERNAL_SERVER_ERROR", GENERIC_ERROR_MESSAGE)

    @staticmethod
    def _request_id(request: Optional[Request]) -> str:
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _get_current_timestamp() -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    @staticmethod
    def _extract_constraint_info(exception: IntegrityError) -> Optional[str]:
        driver_message = str(exception.orig).lower()
        for needle, description in CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return description
        return None
