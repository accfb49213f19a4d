"""API route handlers."""

from .neighborhood import router as neighborhood_router
from .match import router as match_router
from .cache import router as cache_router
