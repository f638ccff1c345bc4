"""Structured catalog source public API."""

from .client import CatalogApiClient
from .service import CatalogService, hit_from_api, record_from_api

__all__ = ["CatalogApiClient", "CatalogService", "hit_from_api", "record_from_api"]
