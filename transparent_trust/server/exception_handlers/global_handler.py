"""
Global Exception Handler for FastAPI Application.

Catches every unhandled exception, logs it with an error ID and the request
context, and answers with the ``INTERNAL_ERROR`` envelope so clients can
quote the ID when reporting the problem.
"""

import traceback

from fastapi import Request
from fastapi.responses import JSONResponse

from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.monitoring import log_error

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception and return a 500 envelope.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with the error ID and exception type
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal server error",
                "details": {"error_id": error_id, "error_type": type(exc).__name__},
            }
        },
    )
