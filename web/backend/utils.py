#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

# Batch endpoints do up to 50 scorings per call
BATCH_RATE_LIMIT = "30/minute"

limiter = Limiter(key_func=get_remote_address)


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": str(exc), "type": "RateLimitExceeded"}
    )


def batch_response(results) -> dict:
    """Shape a list of BatchItemResult into the batch response body."""
    succeeded = sum(1 for r in results if r.success)
    return {
        "success": True,
        "results": [r.to_dict() for r in results],
        "summary": {
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "cached": sum(1 for r in results if r.cached),
        },
    }
