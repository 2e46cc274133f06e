"""Exception handlers for the FastAPI application.

Every error leaves the service in the same body shape as a failed sync:
``{"success": false, "error_kind": ..., "error_detail": ...}``.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from remotesync.core.logging import logger
from remotesync.core.shared_models import FailureKind


def _describe_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(messages) or "Invalid request"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Missing or malformed input is a 400, not FastAPI's default 422."""
    detail = _describe_validation_error(exc)
    logger.with_context(path=request.url.path, method=request.method).warning(
        f"Rejected invalid request: {detail}"
    )
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error_kind": FailureKind.INVALID_REQUEST.value,
            "error_detail": detail,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler; internal details never reach the client."""
    logger.with_context(path=request.url.path, method=request.method).exception(
        f"Unhandled exception: {type(exc).__name__}: {exc}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error_kind": FailureKind.FATAL.value,
            "error_detail": "Internal server error",
        },
    )
