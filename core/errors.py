#!/usr/bin/env python3
"""
Error taxonomy for the scoring core.

- ValidationError: malformed input, rejected before the core runs
- NotFoundError: a referenced listing/opportunity ID does not exist
- ComputationError: unexpected internal failure while scoring one item
- CacheUnavailable: the cache store could not be read or written
"""

from typing import Optional


class ScoringError(Exception):
    """Base exception for scoring core errors."""

    error_type = "ScoringError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScoringError):
    """Raised when input is malformed. Never retried."""

    error_type = "ValidationError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ScoringError):
    """Raised when a referenced listing or opportunity is missing."""

    error_type = "NotFoundError"

    def __init__(self, message: str, resource: Optional[str] = None, resource_id: Optional[str] = None):
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class ComputationError(ScoringError):
    """Raised when an engine fails unexpectedly on a single item."""

    error_type = "ComputationError"


class CacheUnavailable(ScoringError):
    """Raised by cache stores when the backing store fails."""

    error_type = "CacheUnavailable"
