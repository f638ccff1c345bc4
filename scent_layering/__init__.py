"""
Fragrance layering toolkit.

The package exposes modular building blocks for:
- classifying notes into olfactory families,
- scoring the layering compatibility of two fragrances,
- resolving fragrance records from a structured catalog API,
- scraping and parsing fragrance pages through a scraping proxy,
- an orchestrator that composes search, resolution and scoring.
"""

from .core.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
