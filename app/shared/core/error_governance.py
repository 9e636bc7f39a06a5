"""
Unified Error Governance

Centrally classifies exceptions raised by request handlers, logs them with
structured context and renders the dashboard's error contract:
HTTP 500 with {"error": message}.
"""

from typing import Optional
from uuid import uuid4

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from app.shared.core.exceptions import IdleWatchException

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "An unexpected internal error occurred"


def handle_exception(
    request: Request, exc: Exception, error_id: Optional[str] = None
) -> JSONResponse:
    """
    Classifies and records exceptions, returning a standardized JSON response.
    """
    error_id = error_id or str(uuid4())

    if isinstance(exc, IdleWatchException):
        idlewatch_exc = exc
    else:
        idlewatch_exc = IdleWatchException(
            message=str(exc) or GENERIC_ERROR_MESSAGE,
            code="internal_error",
        )
        logger.exception(
            "unhandled_raw_exception",
            error=str(exc),
            error_id=error_id,
            path=request.url.path,
        )

    logger.error(
        "api_error",
        error_id=error_id,
        code=idlewatch_exc.code,
        message=idlewatch_exc.message,
        status_code=idlewatch_exc.status_code,
        path=request.url.path,
        details=idlewatch_exc.details,
    )

    return JSONResponse(
        status_code=idlewatch_exc.status_code,
        content={"error": idlewatch_exc.message},
    )
