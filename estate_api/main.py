"""
ASGI application: routers, middleware, exception handlers and health checks.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError as PydanticValidationError
import logging

from estate_api.config import settings
from estate_api.database import ping_database, close_db_connection
from estate_api.routers import admin_router, auth_router, buyer_router, feedback_router
from estate_api.utils.exceptions import APIException
from estate_api.services.error_handler import ErrorHandlerService
from estate_api.middleware import RequestLoggingMiddleware

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_DESCRIPTION = """
Backend for a real-estate marketplace.

* **Admin**: one-call dashboard, listing and sales analytics, user administration
* **Buyers**: available listings, favorites, purchases, signed payment webhook
* **Feedback**: public contact form

Authenticate with `POST {prefix}/auth/login` and send `Authorization: Bearer <token>`.
"""

# Exception type -> ErrorHandlerService renderer. Starlette resolves the most
# specific registered type, so APIException wins over StarletteHTTPException.
EXCEPTION_RENDERERS = {
    APIException: ErrorHandlerService.handle_api_exception,
    RequestValidationError: ErrorHandlerService.handle_validation_error,
    PydanticValidationError: ErrorHandlerService.handle_validation_error,
    SQLAlchemyError: ErrorHandlerService.handle_database_error,
    StarletteHTTPException: ErrorHandlerService.handle_http_exception,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")
    if not await ping_database():
        logger.error("Database not reachable at startup; /health will report 503 until it is")

    yield

    await close_db_connection()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=API_DESCRIPTION.format(prefix=settings.api_prefix),
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and tokens"},
        {"name": "Admin", "description": "Dashboard, analytics and user administration"},
        {"name": "Buyer", "description": "Listings, favorites, purchases and the payment webhook"},
        {"name": "Feedback", "description": "Public contact form"},
        {"name": "Health", "description": "Liveness and database health"}
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time", "X-Next-Cursor"],
)

# Also renders anything no exception handler claimed as a generic 500.
app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=settings.slow_request_threshold,
    enable_request_logging=not settings.is_testing
)

for router in (auth_router, admin_router, buyer_router, feedback_router):
    app.include_router(router, prefix=settings.api_prefix)


def _exception_handler(render):
    async def handler(request: Request, exc: Exception):
        return render(exc, request)
    return handler


for exception_type, render in EXCEPTION_RENDERERS.items():
    app.add_exception_handler(exception_type, _exception_handler(render))


@app.get("/", tags=["Health"])
async def root():
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "api_prefix": settings.api_prefix,
        "docs": app.docs_url,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Database round trip; 503 when it fails so load balancers take the instance out."""
    if not await ping_database():
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("estate_api.main:app", host=settings.host, port=settings.port, reload=settings.debug)
