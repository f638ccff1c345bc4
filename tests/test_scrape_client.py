from __future__ import annotations

import httpx
import pytest

from conftest import RecordingTransport
from scent_layering.core.config import Settings
from scent_layering.core.exceptions import ConfigurationError, UpstreamError
from scent_layering.scrape import RateLimiter, ScrapeClient

PAGE_URL = "https://www.fragrantica.com/perfume/Chanel/Bleu-de-Chanel-9099.html"


def ok_response(markdown="# Bleu de Chanel"):
    return httpx.Response(200, json={"success": True, "data": {"markdown": markdown, "metadata": {"title": "Bleu"}}})


class Responses:
    """Serve the given responses in order, repeating the last one."""

    def __init__(self, *responses):
        self._responses = list(responses)

    def __call__(self, request):
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]


def make_client(settings, handler, *, rate_limiter=None):
    transport = RecordingTransport(handler)
    sleeps: list[float] = []

    async def record_sleep(seconds):
        sleeps.append(seconds)

    client = ScrapeClient(
        settings,
        http_client=transport.client(),
        rate_limiter=rate_limiter or RateLimiter(0),
        sleep=record_sleep,
    )
    return client, transport, sleeps


async def test_scrape_posts_payload_with_bearer_token(settings):
    client, transport, _ = make_client(settings, lambda request: ok_response())

    page = await client.scrape(PAGE_URL, wait_for_ms=2500)

    assert page.url == PAGE_URL
    assert page.markdown == "# Bleu de Chanel"
    assert page.metadata == {"title": "Bleu"}
    request = transport.requests[0]
    assert request.url == settings.scrape_api_url
    assert request.headers["Authorization"] == "Bearer scrape-key"
    assert transport.payloads[0] == {
        "url": PAGE_URL,
        "formats": ["markdown"],
        "onlyMainContent": True,
        "waitFor": 2500,
    }


async def test_server_errors_are_retried_until_success(settings):
    settings = settings.model_copy(update={"scrape_retry_delay": 0.5})
    handler = Responses(httpx.Response(503), httpx.Response(502), ok_response())
    client, transport, sleeps = make_client(settings, handler)

    page = await client.scrape(PAGE_URL)

    assert page.markdown == "# Bleu de Chanel"
    assert len(transport.requests) == 3
    assert sleeps == [0.5, 0.5]


async def test_server_errors_exhaust_retries(settings):
    client, transport, _ = make_client(settings, lambda request: httpx.Response(500))

    with pytest.raises(UpstreamError) as excinfo:
        await client.scrape(PAGE_URL)

    assert excinfo.value.status_code == 500
    assert len(transport.requests) == settings.scrape_max_retries + 1


async def test_client_errors_are_not_retried(settings):
    client, transport, _ = make_client(settings, lambda request: httpx.Response(404))

    with pytest.raises(UpstreamError) as excinfo:
        await client.scrape(PAGE_URL)

    assert excinfo.value.status_code == 404
    assert len(transport.requests) == 1


async def test_unsuccessful_body_raises(settings):
    response = httpx.Response(200, json={"success": False, "error": "blocked"})
    client, transport, _ = make_client(settings, lambda request: response)

    with pytest.raises(UpstreamError, match="blocked"):
        await client.scrape(PAGE_URL)
    assert len(transport.requests) == 1


async def test_every_attempt_passes_through_rate_limiter(settings, clock):
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)
    handler = Responses(httpx.Response(503), httpx.Response(503), ok_response())
    client, _, _ = make_client(settings, handler, rate_limiter=limiter)

    await client.scrape(PAGE_URL)

    assert clock.sleeps == [1.0, 1.0]


async def test_missing_key_raises_before_request():
    settings = Settings(scrape_api_key=None, scrape_min_interval=0)
    client, transport, _ = make_client(settings, lambda request: ok_response())

    with pytest.raises(ConfigurationError):
        await client.scrape(PAGE_URL)
    assert transport.requests == []
