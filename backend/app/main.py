"""
FastAPI application for Training Hub.

``create_app`` assembles the service: logging, CORS, the response envelope
for every error, the per-application rate limiter and the versioned API.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import DatabaseManager, SessionLocal, check_database_connection, init_db
from app.core.exceptions import LMSError
from app.core.rate_limit import RequestRateLimiter
from app.core.responses import error_response
from app.routers import api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and the first admin outside of tests."""
    if not settings.TESTING:
        DatabaseManager.create_all_tables()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield
    logger.info(f"{settings.PROJECT_NAME} shutting down")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the service in the ``{success: false, ...}`` envelope."""

    @app.exception_handler(LMSError)
    async def lms_error_handler(request: Request, exc: LMSError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_response("Validation failed", _validation_message(exc))
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error", str(exc))
        )


def create_app(rate_limiter: Optional[RequestRateLimiter] = None) -> FastAPI:
    """
    Build the application.

    Args:
        rate_limiter: Limiter for the auth endpoints; a fresh one using
            ``settings.AUTH_RATE_LIMIT`` when omitted
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.rate_limiter = rate_limiter or RequestRateLimiter(settings.AUTH_RATE_LIMIT)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    def health():
        database_ok = check_database_connection()
        return JSONResponse(
            status_code=200 if database_ok else 503,
            content={
                "success": database_ok,
                "message": "OK" if database_ok else "Database unavailable",
                "data": {"service": settings.PROJECT_NAME, "version": settings.VERSION}
            }
        )

    return app


app = create_app()
