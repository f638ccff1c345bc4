from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Callable

import httpx
import pytest

from scent_layering.core.cache import TTLCache
from scent_layering.core.config import Settings
from scent_layering.core.models import FragranceRecord, Note


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instead of waiting."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingTransport:
    """Wrap a handler in ``httpx.MockTransport`` and keep every request payload."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeCompletions:
    """Stand-in for the chat completions resource of an OpenAI client."""

    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, completions: FakeCompletions) -> None:
        self.chat = SimpleNamespace(completions=completions)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        catalog_api_key="catalog-key",
        scrape_api_key="scrape-key",
        llm_api_key=None,
        scrape_min_interval=0,
        scrape_retry_delay=0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(settings: Settings, clock: FakeClock) -> TTLCache:
    return TTLCache.from_settings(settings, clock=clock)


@pytest.fixture
def make_record() -> Callable[..., FragranceRecord]:
    def factory(
        record_id: str = "r1",
        *,
        top: tuple[str, ...] = (),
        middle: tuple[str, ...] = (),
        base: tuple[str, ...] = (),
        accords: tuple[str, ...] = (),
        name: str | None = None,
        source: str = "structured",
    ) -> FragranceRecord:
        return FragranceRecord(
            id=record_id,
            name=name or record_id,
            brand="House",
            source=source,
            top_notes=[Note(name=item) for item in top],
            middle_notes=[Note(name=item) for item in middle],
            base_notes=[Note(name=item) for item in base],
            accords=list(accords),
        )

    return factory
