"""
Exception handlers for the Transparent Trust server.

Every error leaves the API in the same envelope. ``setup_exception_handlers``
registers the handlers with the FastAPI application.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.workflow import WorkflowError

from .api_errors import (
    error_code_for_status,
    error_response,
    http_exception_handler,
    validation_exception_handler,
    workflow_exception_handler,
)
from .global_handler import global_exception_handler

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(WorkflowError, workflow_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")


__all__ = [
    "error_code_for_status",
    "error_response",
    "global_exception_handler",
    "http_exception_handler",
    "setup_exception_handlers",
    "validation_exception_handler",
    "workflow_exception_handler",
]
