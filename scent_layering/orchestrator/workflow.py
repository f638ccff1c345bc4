"""Compose search, resolution, scoring and advice for a pair of fragrances."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal

from structlog.contextvars import bound_contextvars

from scent_layering.advice import AdviceResult, LayeringAdvisor
from scent_layering.catalog_api import CatalogService
from scent_layering.core.cache import TTLCache
from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import NotFoundError, UpstreamError
from scent_layering.core.logging import get_logger
from scent_layering.core.models import FragranceRecord, MatchAnalysis, SearchHit
from scent_layering.matching import score
from scent_layering.scrape import ScrapeService

from .session import MIN_QUERY_LENGTH

LOGGER = get_logger(__name__)

SearchSource = Literal["scraped", "structured", "none"]

MAX_RESOLVED_PAIRINGS = 5


@dataclass(slots=True)
class SearchOutcome:
    results: list[SearchHit]
    source: SearchSource
    warning: str | None = None


@dataclass(slots=True)
class PairingResult:
    first: FragranceRecord
    second: FragranceRecord
    analysis: MatchAnalysis
    advice: AdviceResult | None = None


@dataclass(slots=True)
class ResolvedPairing:
    hit: SearchHit
    reason: str


class PairingWorkflow:
    """Facade over both sources, the scoring engine and the advisor.

    Both adapters share one TTLCache; each keeps to its own namespaces.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        scrape: ScrapeService | None = None,
        catalog: CatalogService | None = None,
        advisor: LayeringAdvisor | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._cache = cache or TTLCache.from_settings(self._settings)
        self._scrape = scrape or ScrapeService(self._settings, cache=self._cache)
        self._catalog = catalog or CatalogService(self._settings, cache=self._cache)
        self._advisor = advisor or LayeringAdvisor(self._settings)

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def search(self, query: str, *, fallback: bool = True) -> SearchOutcome:
        """Search the scraped source first, then the catalog when allowed."""
        if len(query.strip()) < MIN_QUERY_LENGTH:
            return SearchOutcome(results=[], source="none")

        warning: str | None = None
        try:
            results = await self._scrape.search(query)
            if results or not fallback:
                return SearchOutcome(results=results, source="scraped")
        except UpstreamError as exc:
            if not fallback:
                raise
            warning = f"Scraped search failed: {exc}"
            LOGGER.warning("workflow.scrape_search_failed", query=query, error=str(exc))

        results = await self._catalog.search(query)
        return SearchOutcome(results=results, source="structured" if results else "none", warning=warning)

    async def resolve(self, hit: SearchHit, source: SearchSource = "scraped") -> FragranceRecord:
        if source == "structured":
            return await self._catalog.resolve(hit.id, hit.name)
        return await self._scrape.resolve(hit)

    async def compare(
        self,
        first: SearchHit,
        second: SearchHit,
        *,
        source: SearchSource = "scraped",
        with_advice: bool = False,
    ) -> PairingResult:
        with bound_contextvars(pair=f"{first.id}:{second.id}"):
            record_a, record_b = await asyncio.gather(self.resolve(first, source), self.resolve(second, source))
            return await self.compare_records(record_a, record_b, with_advice=with_advice)

    async def compare_records(
        self,
        first: FragranceRecord,
        second: FragranceRecord,
        *,
        with_advice: bool = False,
    ) -> PairingResult:
        analysis = score(first, second)
        LOGGER.info(
            "workflow.scored",
            first=first.id,
            second=second.id,
            score=analysis.score,
            degraded=first.is_degraded or second.is_degraded,
        )
        advice = await self._advisor.analyze(first, second, analysis) if with_advice else None
        return PairingResult(first=first, second=second, analysis=analysis, advice=advice)

    async def resolve_pairings(self, record: FragranceRecord) -> list[ResolvedPairing]:
        """Resolve advisor suggestions against the catalog, skipping the record itself."""
        suggestions = await self._advisor.suggest_pairings(record)
        resolved: list[ResolvedPairing] = []
        seen_ids = {record.id}
        for suggestion in suggestions:
            try:
                hits = await self._catalog.search(f"{suggestion.name} {suggestion.brand}".strip())
            except (UpstreamError, NotFoundError) as exc:
                LOGGER.warning("workflow.pairing_search_failed", name=suggestion.name, error=str(exc))
                continue
            if not hits:
                continue
            match = _best_name_match(hits, suggestion.name)
            if match.id in seen_ids:
                continue
            seen_ids.add(match.id)
            resolved.append(ResolvedPairing(hit=match, reason=suggestion.reason))
            if len(resolved) == MAX_RESOLVED_PAIRINGS:
                break
        return resolved

    async def close(self) -> None:
        await asyncio.gather(self._scrape.close(), self._catalog.close(), self._advisor.close())

    async def __aenter__(self) -> "PairingWorkflow":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _best_name_match(hits: list[SearchHit], name: str) -> SearchHit:
    wanted = name.lower()
    wanted_head = wanted.split(" ")[0]
    for hit in hits:
        candidate = hit.name.lower()
        if not candidate:
            continue
        if wanted_head in candidate or candidate.split(" ")[0] in wanted:
            return hit
    return hits[0]
