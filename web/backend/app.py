#!/usr/bin/env python3
"""
FedSpace Scoring API - FastAPI Application

Neighborhood and property-match scores over HTTP with automatic API documentation.

Usage:
    python -m web.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException

from core.errors import ScoringError
from .config import get_config
from .exceptions import (
    scoring_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    neighborhood_router,
    match_router,
    cache_router
)
from .utils import add_rate_limit_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="FedSpace Scoring API",
        description="Federal neighborhood scores and property-to-opportunity match scores",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure rate limiting
    add_rate_limit_handlers(app)

    # Register exception handlers
    app.add_exception_handler(ScoringError, scoring_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(neighborhood_router)
    app.include_router(match_router)
    app.include_router(cache_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "fedspace-scoring"}

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting FedSpace Scoring API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
