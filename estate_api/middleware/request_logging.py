"""
Per-request ID, access log and timing headers.
"""

from typing import Callable, Dict, Any
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from estate_api.services.error_handler import ErrorHandlerService

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a short ID and every response with
    ``X-Request-ID`` and ``X-Processing-Time``.

    The ID lives on ``request.state.request_id`` so error envelopes and log
    lines agree. Anything that escapes the exception handlers becomes a
    generic 500 here instead of a bare server error.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 2.0,
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.request_id = request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        if self.enable_request_logging:
            logger.info(
                f"--> [{request_id}] {request.method} {request.url.path}",
                extra={**context, **self._client_details(request)}
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(f"[{request_id}] {type(exc).__name__} escaped the handlers: {exc}", extra=context)
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        elapsed = time.perf_counter() - started

        if self.enable_request_logging:
            logger.info(
                f"<-- [{request_id}] {response.status_code} in {elapsed:.3f}s",
                extra={**context, "status_code": response.status_code, "processing_time": elapsed}
            )
        if elapsed > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}] {request.method} {request.url.path}: {elapsed:.3f}s",
                extra={**context, "processing_time": elapsed, "threshold": self.slow_request_threshold}
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{elapsed:.3f}"
        return response

    @staticmethod
    def _client_details(request: Request) -> Dict[str, Any]:
        return {
            "client_ip": request.client.host if request.client else "unknown",
            "query_params": str(request.query_params),
            "user_agent": request.headers.get("user-agent", "unknown"),
        }
