"""Application configuration primitives."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_SECRETS_PATH = Path(".secrets/secrets.toml")


class Settings(BaseSettings):
    """Central configuration for the layering toolkit."""

    catalog_api_url: str = "https://fragrance-api.p.rapidapi.com"
    catalog_api_host: str = "fragrance-api.p.rapidapi.com"
    catalog_api_key: str | None = None
    catalog_index: str = "fragrances"

    scrape_api_url: str = "https://api.firecrawl.dev/v1/scrape"
    scrape_api_key: str | None = None
    scrape_site_url: str = "https://www.fragrantica.com"
    scrape_min_interval: float = Field(default=1.0, ge=0)
    scrape_max_retries: int = Field(default=2, ge=0)
    scrape_retry_delay: float = Field(default=1.0, ge=0)
    scrape_search_wait_ms: int = 2000
    scrape_detail_wait_ms: int = 2500

    request_timeout: float = 30.0
    catalog_cache_ttl: float = 30 * 60
    scrape_cache_ttl: float = 60 * 60
    cache_max_entries: int | None = Field(default=None, ge=1)

    llm_api_key: str | None = None
    llm_base_url: str | None = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.3-70b-versatile"
    llm_timeout: float = 20.0

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(env_prefix="SCENT_", env_file=(), extra="ignore")

    def require_catalog_api_key(self) -> str:
        if not self.catalog_api_key:
            raise ConfigurationError("SCENT_CATALOG_API_KEY is not set")
        return self.catalog_api_key

    def require_scrape_api_key(self) -> str:
        if not self.scrape_api_key:
            raise ConfigurationError("SCENT_SCRAPE_API_KEY is not set")
        return self.scrape_api_key

    def catalog_headers(self) -> dict[str, str]:
        """Return the request headers for the structured catalog API."""
        return {
            "Content-Type": "application/json",
            "x-rapidapi-key": self.require_catalog_api_key(),
            "x-rapidapi-host": self.catalog_api_host,
        }

    def scrape_headers(self) -> dict[str, str]:
        """Return the request headers for the scraping proxy."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.require_scrape_api_key()}",
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    overrides = _load_settings_overrides()
    return Settings(**overrides)


def _load_settings_overrides(secrets_path: Path = DEFAULT_SECRETS_PATH) -> dict[str, Any]:
    """Load configuration overrides from the secrets TOML file."""
    if not secrets_path.exists():
        return {}
    data = _read_toml(secrets_path)
    overrides: dict[str, Any] = {}

    catalog_cfg = _extract_section(data, "catalog_api", "rapidapi")
    if catalog_cfg:
        overrides["catalog_api_url"] = catalog_cfg.get("url")
        overrides["catalog_api_host"] = catalog_cfg.get("host")
        overrides["catalog_api_key"] = _sanitize_api_key(catalog_cfg.get("api_key"))

    scrape_cfg = _extract_section(data, "scrape", "firecrawl")
    if scrape_cfg:
        overrides["scrape_api_url"] = scrape_cfg.get("url")
        overrides["scrape_api_key"] = _sanitize_api_key(scrape_cfg.get("api_key") or scrape_cfg.get("authorization"))
        overrides["scrape_min_interval"] = _coerce_float(scrape_cfg.get("min_interval"))

    llm_cfg = _extract_section(data, "openai", "llm")
    if llm_cfg:
        overrides["llm_api_key"] = _sanitize_api_key(llm_cfg.get("api_key"))
        overrides["llm_base_url"] = llm_cfg.get("base_url")
        overrides["llm_model"] = llm_cfg.get("model")
        overrides["llm_timeout"] = _coerce_float(llm_cfg.get("timeout"))

    general_cfg = data.get("scent") or {}
    overrides.update({key: value for key, value in general_cfg.items() if key in Settings.model_fields})
    return {key: value for key, value in overrides.items() if value is not None}


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _extract_section(data: dict[str, Any], *candidates: str) -> dict[str, Any] | None:
    for key in candidates:
        section = data.get(key)
        if isinstance(section, dict):
            return section
    return None


def _sanitize_api_key(value: str | None, prefix: str = "Bearer") -> str | None:
    if not value:
        return None
    token = value.strip()
    if token.lower().startswith(f"{prefix.lower()} "):
        token = token[len(prefix) + 1 :].strip()
    return token or None


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None
