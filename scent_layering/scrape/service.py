"""Public service layer for the scraped fragrance source."""

from __future__ import annotations

from urllib.parse import quote

from scent_layering.core.cache import SCRAPE_RECORD, SCRAPE_SEARCH, TTLCache
from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import UpstreamError
from scent_layering.core.logging import get_logger
from scent_layering.core.models import FragranceRecord, SearchHit

from .client import ScrapeClient
from .parsers import parse_fragrance_details, parse_search_results

LOGGER = get_logger(__name__)


class ScrapeService:
    """Search and resolve fragrances by scraping the public fragrance site."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: ScrapeClient | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or ScrapeClient(self._settings)
        self._cache = cache or TTLCache.from_settings(self._settings)
        self._site_url = self._settings.scrape_site_url.rstrip("/")

    def search_url(self, query: str) -> str:
        return f"{self._site_url}/search/?display=old&query={quote(query, safe='')}"

    def detail_url(self, hit: SearchHit) -> str:
        if hit.url.startswith("http"):
            return hit.url
        return f"{self._site_url}{hit.url if hit.url.startswith('/') else '/' + hit.url}"

    async def search(self, query: str) -> list[SearchHit]:
        """Scrape the search page for ``query``; failures propagate as UpstreamError."""
        cache_key = query.lower()
        cached = self._cache.get(SCRAPE_SEARCH, cache_key)
        if cached:
            LOGGER.debug("scrape.cache_hit", namespace=SCRAPE_SEARCH, key=cache_key)
            return cached

        page = await self._client.scrape(
            self.search_url(query),
            output_format="markdown",
            wait_for_ms=self._settings.scrape_search_wait_ms,
        )
        if not page.markdown:
            raise UpstreamError("Scrape proxy returned no markdown for search page")

        results = parse_search_results(page.markdown, site_url=self._site_url)
        LOGGER.info("scrape.search", query=query, result_count=len(results))
        if results:
            self._cache.set(SCRAPE_SEARCH, cache_key, results)
        return results

    async def resolve(self, hit: SearchHit) -> FragranceRecord:
        """Resolve a hit to a parsed record.

        Fetch failures never surface: the minimal projection of ``hit`` is
        returned with ``completeness="thin"``. Missing credentials still raise
        ConfigurationError.
        """
        cached = self._cache.get(SCRAPE_RECORD, hit.id)
        if cached is not None:
            LOGGER.debug("scrape.cache_hit", namespace=SCRAPE_RECORD, key=hit.id)
            return cached

        try:
            page = await self._client.scrape(
                self.detail_url(hit),
                output_format="markdown",
                wait_for_ms=self._settings.scrape_detail_wait_ms,
            )
            if not page.markdown:
                raise UpstreamError("Scrape proxy returned no markdown for detail page")
        except UpstreamError as exc:
            LOGGER.warning(
                "scrape.resolve_fallback",
                fragrance_id=hit.id,
                name=hit.name,
                error=str(exc),
                status=exc.status_code,
            )
            return FragranceRecord.from_hit(hit, source="scraped", completeness="thin")

        record = parse_fragrance_details(page.markdown, hit)
        self._cache.set(SCRAPE_RECORD, hit.id, record)
        return record

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "ScrapeService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
