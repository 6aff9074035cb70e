"""
Handlers mapping expected errors to the error envelope.

``{"error": {"code": ..., "message": ..., "details": ...}}``
"""

from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.workflow import WorkflowError

logger = get_logger(__name__)

STATUS_CODES: Dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "AUTHENTICATION_ERROR",
    status.HTTP_403_FORBIDDEN: "AUTHORIZATION_ERROR",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "VALIDATION_ERROR",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
}


def error_code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "INTERNAL_ERROR"
    return STATUS_CODES.get(status_code, "BAD_REQUEST")


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render ``HTTPException``. A dict ``detail`` may carry ``code``, ``message`` and ``details``."""
    code = error_code_for_status(exc.status_code)
    details = None
    if isinstance(exc.detail, dict):
        code = exc.detail.get("code", code)
        message = str(exc.detail.get("message", ""))
        details = exc.detail.get("details")
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, code, message, details, headers=getattr(exc, "headers", None))


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _field_errors(exc)
    logger.debug(f"Validation failed for {request.method} {request.url.path}: {details}")
    return error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Validation failed", details)


async def workflow_exception_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", str(exc))
