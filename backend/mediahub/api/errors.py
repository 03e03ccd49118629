"""Render domain errors as JSON with their HTTP status code."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mediahub.core.exceptions import MediaHubError
from mediahub.core.logging_config import correlation_id_var
import logging

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MediaHubError)
    async def mediahub_error_handler(request: Request, exc: MediaHubError):
        if exc.code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}")
        else:
            logger.info(
                f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
            )
        payload = exc.to_dict()
        correlation_id = correlation_id_var.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        return JSONResponse(status_code=exc.code, content=payload)
