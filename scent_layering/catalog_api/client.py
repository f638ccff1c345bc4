"""HTTP client for the structured fragrance catalog search API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import UpstreamError
from scent_layering.core.logging import get_logger

LOGGER = get_logger(__name__)


class CatalogApiClient:
    """Thin async wrapper around the keyed ``multi-search`` endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._settings.request_timeout)
        self._endpoint = f"{self._settings.catalog_api_url.rstrip('/')}/multi-search"

    def _build_payload(self, query: str, limit: int) -> Mapping[str, Any]:
        return {
            "queries": [
                {
                    "indexUid": self._settings.catalog_index,
                    "q": query,
                    "limit": limit,
                }
            ]
        }

    async def search(self, query: str, limit: int = 20) -> list[dict[str, Any]]:
        """Execute the remote search and return the raw hit objects."""
        headers = self._settings.catalog_headers()
        payload = self._build_payload(query, limit)
        LOGGER.info("catalog_api.request", query=query, limit=limit)
        try:
            response = await self._client.post(self._endpoint, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            LOGGER.error("catalog_api.http_error", status=status, body=exc.response.text[:500])
            raise UpstreamError(f"Catalog API error: {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Catalog API request failed") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Catalog API returned malformed JSON", status_code=response.status_code) from exc

        hits = _extract_hits(data)
        LOGGER.info("catalog_api.response", hit_count=len(hits))
        return hits

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CatalogApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _extract_hits(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, dict):
        LOGGER.warning("catalog_api.unexpected_payload", payload_type=type(data).__name__)
        return []
    results = data.get("results")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        return []
    hits = results[0].get("hits")
    if not isinstance(hits, list):
        return []
    return [hit for hit in hits if isinstance(hit, dict)]
