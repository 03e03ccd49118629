"""
Structured JSON logging with correlation IDs and a moderation audit logger.
"""

import logging
import sys
import uuid
from typing import Optional
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

AUDIT_LOGGER_NAME = "mediahub.audit"

# Context variable for correlation ID (thread-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get() or "none"
        return True


class MediaHubJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with a fixed envelope and audit fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["correlation_id"] = getattr(record, "correlation_id", "none")
        log_record["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure structured JSON logging and return the audit logger."""

    formatter = MediaHubJsonFormatter("%(message)s")

    # Console handler with JSON formatting
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(CorrelationIdFilter())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Route uvicorn loggers through the same handler
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(console_handler)
        uvicorn_logger.propagate = False

    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.setLevel(logging.INFO)

    return audit_logger


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests."""

    async def dispatch(self, request: Request, call_next):
        # Generate or extract correlation ID
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id

        return response


def log_audit_event(
    event_type: str,
    message: str,
    level: int = logging.INFO,
    user_id: Optional[str] = None,
    publication_id: Optional[str] = None,
    event_category: str = "moderation",
    **extra_fields
):
    """
    Log a moderation/audit event with structured data.

    Args:
        event_type: Type of event (e.g., "publication.approved")
        message: Human-readable message
        level: Logging level (default: INFO)
        user_id: Acting user ID if applicable
        publication_id: Affected publication if applicable
        event_category: Event category (default: "moderation")
        **extra_fields: Additional fields to include
    """
    logger = logging.getLogger(AUDIT_LOGGER_NAME)

    extra = {
        "event_type": event_type,
        "event_category": event_category,
    }

    if user_id:
        extra["user_id"] = user_id
    if publication_id:
        extra["publication_id"] = publication_id

    extra.update(extra_fields)

    logger.log(level, message, extra=extra)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request, considering proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"
