"""Scraped fragrance source public API."""

from .client import ScrapeClient, ScrapedPage
from .parsers import parse_fragrance_details, parse_search_results
from .rate_limit import RateLimiter
from .service import ScrapeService

__all__ = [
    "RateLimiter",
    "ScrapeClient",
    "ScrapeService",
    "ScrapedPage",
    "parse_fragrance_details",
    "parse_search_results",
]
