#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import logging
import threading
from typing import Optional

from core.app_context import AppContext
from core.scoring_service import ScoringService
from .config import get_config

logger = logging.getLogger(__name__)

_context: Optional[AppContext] = None
_context_lock = threading.Lock()


def get_app_context() -> AppContext:
    """
    Lazily build the shared AppContext on first use.

    Building loads the spatial index, so it happens once per process.
    """
    global _context
    if _context is None:
        with _context_lock:
            if _context is None:
                _context = AppContext.build(get_config())
    return _context


def set_app_context(context: Optional[AppContext]) -> None:
    """Replace the shared context (startup wiring and tests)."""
    global _context
    with _context_lock:
        _context = context


def get_scoring_service() -> ScoringService:
    """
    FastAPI dependency that returns the shared ScoringService.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(service: ScoringService = Depends(get_scoring_service)):
            ...
    """
    return get_app_context().scoring_service
