#!/usr/bin/env python3
"""
Error handlers for the web application.

Scoring errors from core.errors are mapped to status codes:
ValidationError -> 400, NotFoundError -> 404, anything else -> 500.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.errors import ComputationError, NotFoundError, ScoringError, ValidationError

logger = logging.getLogger(__name__)


def _status_for(exc: ScoringError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    return 500


def _error_body(message, error_type: str, **extra) -> dict:
    body = {"success": False, "error": message, "type": error_type}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def scoring_exception_handler(
    request: Request,
    exc: ScoringError
) -> JSONResponse:
    """
    Map a ScoringError to its status code.

    Validation and not-found errors are client mistakes and logged at INFO;
    everything else is logged with a traceback.
    """
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(f"Scoring error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Rejected request to {request.url.path}: {exc.message}")

    field = exc.field if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.message, exc.error_type, field=field)
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    # Routing errors (unknown path, wrong method) share the scoring error body
    logger.info(f"HTTP {exc.status_code} for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, "HTTPException")
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Anything that escaped the scoring service surfaces as a ComputationError."""
    logger.exception(f"Unhandled error scoring {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", ComputationError.error_type)
    )
