"""Public service layer for the structured catalog source."""

from __future__ import annotations

from typing import Any

from scent_layering.core.cache import CATALOG_RECORD, CATALOG_SEARCH, CATALOG_SIMILAR, TTLCache
from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import NotFoundError
from scent_layering.core.logging import get_logger
from scent_layering.core.models import FragranceRecord, Note, SearchHit, split_into_layers

from .client import CatalogApiClient

LOGGER = get_logger(__name__)

SEARCH_LIMIT = 20
RESOLVE_LIMIT = 50
SIMILAR_LIMIT = 15
MAX_SIMILAR = 10


class CatalogService:
    """Search, resolve and find similar fragrances through the catalog API."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: CatalogApiClient | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or CatalogApiClient(self._settings)
        self._cache = cache or TTLCache.from_settings(self._settings)

    async def search(self, query: str) -> list[SearchHit]:
        cached = self._cache.get(CATALOG_SEARCH, query)
        if cached is not None:
            LOGGER.debug("catalog_api.cache_hit", namespace=CATALOG_SEARCH, key=query)
            return cached

        raw_hits = await self._client.search(query, SEARCH_LIMIT)
        hits = [hit_from_api(item) for item in raw_hits]
        self._cache.set(CATALOG_SEARCH, query, hits)
        return hits

    async def resolve(self, fragrance_id: str, name_hint: str | None = None) -> FragranceRecord:
        """Resolve a record by id, re-running search with ``name_hint`` as the query.

        Match order: exact id, then case-insensitive substring name match in either
        direction, then the first hit. Raises NotFoundError only when the search
        returns nothing.
        """
        cached = self._cache.get(CATALOG_RECORD, fragrance_id)
        if cached is not None:
            LOGGER.debug("catalog_api.cache_hit", namespace=CATALOG_RECORD, key=fragrance_id)
            return cached

        raw_hits = await self._client.search(name_hint or "", RESOLVE_LIMIT)
        item = _select_hit(raw_hits, fragrance_id, name_hint)
        if item is None:
            raise NotFoundError(f"No catalog match for fragrance '{fragrance_id}'")

        record = record_from_api(item)
        self._cache.set(CATALOG_RECORD, fragrance_id, record)
        LOGGER.info(
            "catalog_api.resolved",
            requested_id=fragrance_id,
            resolved_id=record.id,
            note_count=len(record.note_names()),
        )
        return record

    async def similar(self, fragrance_id: str, name_hint: str | None = None) -> list[SearchHit]:
        """Search by the record's first top note (or brand) and drop the record itself."""
        cached = self._cache.get(CATALOG_SIMILAR, fragrance_id)
        if cached is not None:
            return cached

        try:
            record = await self.resolve(fragrance_id, name_hint)
        except NotFoundError:
            LOGGER.info("catalog_api.similar_unresolved", fragrance_id=fragrance_id)
            return []

        term = record.top_notes[0].name if record.top_notes else record.brand
        if not term:
            return []

        raw_hits = await self._client.search(term, SIMILAR_LIMIT)
        results = [hit_from_api(item) for item in raw_hits if str(item.get("id")) != fragrance_id][:MAX_SIMILAR]
        self._cache.set(CATALOG_SIMILAR, fragrance_id, results)
        return results

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "CatalogService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _select_hit(hits: list[dict[str, Any]], fragrance_id: str, name_hint: str | None) -> dict[str, Any] | None:
    for hit in hits:
        if str(hit.get("id")) == fragrance_id:
            return hit
    if name_hint:
        hint = name_hint.lower()
        for hit in hits:
            name = str(hit.get("name") or "").lower()
            if name and (hint in name or name in hint):
                return hit
    return hits[0] if hits else None


def _brand_name(item: dict[str, Any]) -> str:
    brand = item.get("brand")
    if isinstance(brand, dict):
        return str(brand.get("name") or "")
    return ""


def _image_url(item: dict[str, Any]) -> str | None:
    image = item.get("image")
    if isinstance(image, dict) and image.get("url"):
        return str(image["url"])
    return None


def hit_from_api(item: dict[str, Any]) -> SearchHit:
    identifier = str(item.get("id"))
    return SearchHit(
        id=identifier,
        name=str(item.get("name") or ""),
        brand=_brand_name(item),
        image_url=_image_url(item),
        url=identifier,
    )


def record_from_api(item: dict[str, Any]) -> FragranceRecord:
    """Map a catalog hit onto the canonical record, splitting its flat note list into thirds."""
    notes = [
        Note(name=str(note["name"]))
        for note in item.get("notes") or []
        if isinstance(note, dict) and note.get("name")
    ]
    top, middle, base = split_into_layers(notes)
    rating = item.get("reviewsScoreAvg")
    votes = item.get("reviewsCount")
    return FragranceRecord(
        id=str(item.get("id")),
        name=str(item.get("name") or ""),
        brand=_brand_name(item),
        source="structured",
        image_url=_image_url(item),
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        votes=int(votes) if isinstance(votes, (int, float)) else None,
        top_notes=top,
        middle_notes=middle,
        base_notes=base,
        completeness="full" if notes else "partial",
    )
