"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.api.v1 import api_router
from portal.core.config import settings
from portal.core.errors import (
    APIException,
    api_exception_handler,
    generic_exception_handler,
    http_exception_handler,
)
from portal.core.logging_config import configure_logging
from portal.core.middleware import ClientIdMiddleware, SecurityHeadersMiddleware
from portal.core.rate_limit import limiter
from portal.db.session import AsyncSessionLocal, Base, engine
from portal.schemas.common import HealthResponse

# Import all models so they're registered with Base.metadata
from portal.models import share_link, shoot  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    configure_logging(logging.DEBUG if settings.DEBUG else logging.INFO)
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION}",
        extra={"event_type": "system.startup", "environment": settings.ENVIRONMENT},
    )

    if not settings.ADMIN_PIN_HASH:
        logger.warning("ADMIN_PIN_HASH is not set; PIN entry will always fail")
    if not settings.admin_emails:
        logger.warning("ADMIN_EMAIL_ALLOWLIST is empty; share links cannot be issued")

    # Only auto-create tables in development/local environments
    # In production, use Alembic migrations: alembic upgrade head
    if settings.ENVIRONMENT in ("local", "development", "dev"):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified (development mode)")

    yield

    await engine.dispose()
    logger.info("Shutting down", extra={"event_type": "system.shutdown"})


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Client portal for photo and video shoots",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Standardized error envelope
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "Retry-After"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(ClientIdMiddleware)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Health check endpoint with real connectivity verification.

    Executes SELECT 1 against the database and returns 503 when it fails.
    Error details are hidden in production.
    """
    is_production = settings.ENVIRONMENT == "production"
    db_status = "disconnected"
    overall_status = "healthy"

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Health check database failure: {e}")
        db_status = "error" if is_production else f"error: {str(e)[:50]}"
        overall_status = "unhealthy"

    response = HealthResponse(
        status=overall_status,
        version=settings.APP_VERSION,
        database=db_status,
        timestamp=datetime.now(timezone.utc),
    )

    # Return 503 if unhealthy so load balancers can detect
    if overall_status == "unhealthy":
        return JSONResponse(
            status_code=503,
            content=response.model_dump(mode="json"),
        )

    return response


app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
    }
