from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from mediahub.core.config import settings
from mediahub.core.database import engine, Base
from mediahub.core.logging_config import (
    setup_logging,
    CorrelationIdMiddleware,
    log_audit_event,
)
from mediahub.api.errors import install_error_handlers
from mediahub.api.endpoints import categories, files, publications, tags
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import mediahub.models  # noqa: F401  (registers all tables on Base.metadata)
import logging

# Configure structured JSON logging
audit_logger = setup_logging()
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.ENABLE_HSTS and settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={settings.HSTS_MAX_AGE}; includeSubDomains"
            )

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # JSON API only: nothing here should ever be framed or run scripts
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )
        return response


# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting MediaHub publication service...")

    # Create database tables (migrations own the schema in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    yield

    logger.info("Shutting down MediaHub publication service...")


app = FastAPI(
    title="MediaHub - Publication Core",
    description="Publication lifecycle, moderation and engagement API",
    version="1.0.0",
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Domain errors -> JSON
install_error_handlers(app)

log_audit_event(
    event_type="app.startup",
    message=f"MediaHub starting (production={settings.is_production})",
    event_category="system",
    production=settings.is_production,
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(publications.router, prefix="/api/publications", tags=["publications"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
app.include_router(files.router, prefix="/api/files", tags=["files"])


@app.get("/")
def root():
    return {
        "name": "MediaHub",
        "version": "1.0.0",
        "description": "Publication lifecycle and moderation API",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
