"""FastAPI application for remotesync."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from remotesync.api.exception_handlers import (
    unhandled_exception_handler,
    validation_exception_handler,
)
from remotesync.api.v1.api import api_router
from remotesync.core.config import settings
from remotesync.core.logging import logger


def create_app() -> FastAPI:
    """Build the application with routes and exception handlers."""
    app = FastAPI(
        title="remotesync",
        description="Create-or-update sync of content into GitHub and Google Drive",
        version="0.1.0",
    )
    app.include_router(api_router, prefix="/v1")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.with_context(environment=settings.ENVIRONMENT).info("remotesync API initialized")
    return app


app = create_app()
