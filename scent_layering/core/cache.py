"""Namespaced in-memory TTL cache shared by the source adapters."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .logging import get_logger

LOGGER = get_logger(__name__)

CATALOG_SEARCH = "catalog.search"
CATALOG_RECORD = "catalog.record"
CATALOG_SIMILAR = "catalog.similar"
SCRAPE_SEARCH = "scrape.search"
SCRAPE_RECORD = "scrape.record"


@dataclass(slots=True)
class CacheEntry:
    key: str
    value: Any
    stored_at: float


_MISS = object()


class TTLCache:
    """Key/value memoization with an independent TTL per namespace.

    Entries expire when ``now - stored_at > ttl``. When ``max_entries`` is set,
    each namespace evicts its least recently used entry once the bound is hit.
    """

    def __init__(
        self,
        ttls: Mapping[str, float],
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._ttls = dict(ttls)
        self._max_entries = max_entries
        self._clock = clock
        self._stores: dict[str, OrderedDict[str, CacheEntry]] = {namespace: OrderedDict() for namespace in self._ttls}

    @classmethod
    def from_settings(cls, settings: Any, *, clock: Callable[[], float] = time.monotonic) -> "TTLCache":
        return cls(
            {
                CATALOG_SEARCH: settings.catalog_cache_ttl,
                CATALOG_RECORD: settings.catalog_cache_ttl,
                CATALOG_SIMILAR: settings.catalog_cache_ttl,
                SCRAPE_SEARCH: settings.scrape_cache_ttl,
                SCRAPE_RECORD: settings.scrape_cache_ttl,
            },
            max_entries=settings.cache_max_entries,
            clock=clock,
        )

    @property
    def namespaces(self) -> list[str]:
        return list(self._ttls)

    def ttl(self, namespace: str) -> float:
        try:
            return self._ttls[namespace]
        except KeyError as exc:
            raise KeyError(f"Unknown cache namespace '{namespace}'") from exc

    def get(self, namespace: str, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` when absent or expired."""
        value = self._lookup(namespace, key)
        return default if value is _MISS else value

    def contains(self, namespace: str, key: str) -> bool:
        return self._lookup(namespace, key) is not _MISS

    def _lookup(self, namespace: str, key: str) -> Any:
        ttl = self.ttl(namespace)
        store = self._stores[namespace]
        entry = store.get(key)
        if entry is None:
            return _MISS
        if self._clock() - entry.stored_at > ttl:
            del store[key]
            LOGGER.debug("cache.expired", namespace=namespace, key=key)
            return _MISS
        store.move_to_end(key)
        return entry.value

    def set(self, namespace: str, key: str, value: Any) -> None:
        self.ttl(namespace)
        store = self._stores[namespace]
        store[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        store.move_to_end(key)
        if self._max_entries is not None:
            while len(store) > self._max_entries:
                evicted, _ = store.popitem(last=False)
                LOGGER.debug("cache.evicted", namespace=namespace, key=evicted)

    def clear(self, namespace: str | None = None) -> None:
        if namespace is None:
            for store in self._stores.values():
                store.clear()
            return
        self.ttl(namespace)
        self._stores[namespace].clear()

    def stats(self) -> dict[str, dict[str, Any]]:
        return {namespace: {"size": len(store), "keys": list(store.keys())} for namespace, store in self._stores.items()}


__all__ = [
    "CATALOG_RECORD",
    "CATALOG_SEARCH",
    "CATALOG_SIMILAR",
    "SCRAPE_RECORD",
    "SCRAPE_SEARCH",
    "CacheEntry",
    "TTLCache",
]
