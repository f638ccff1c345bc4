"""Shared core utilities for the fragrance layering toolkit."""

from .cache import TTLCache
from .config import Settings, get_settings
from .exceptions import (
    ConfigurationError,
    NotFoundError,
    ScentLayeringError,
    UpstreamError,
)
from .logging import configure_logging
from .models import (
    FragranceRecord,
    MatchAnalysis,
    MatchBreakdown,
    Note,
    SearchHit,
)

__all__ = [
    "Settings",
    "TTLCache",
    "FragranceRecord",
    "MatchAnalysis",
    "MatchBreakdown",
    "Note",
    "SearchHit",
    "ScentLayeringError",
    "ConfigurationError",
    "UpstreamError",
    "NotFoundError",
    "get_settings",
    "configure_logging",
]
