"""Scraping-proxy client with rate limiting and bounded retries on server errors."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Mapping

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_fixed

from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import UpstreamError
from scent_layering.core.logging import get_logger

from .rate_limit import RateLimiter

LOGGER = get_logger(__name__)

OutputFormat = Literal["markdown", "html"]


@dataclass(slots=True)
class ScrapedPage:
    url: str
    markdown: str | None = None
    html: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _is_server_error(exc: BaseException) -> bool:
    return isinstance(exc, UpstreamError) and exc.is_server_error


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    LOGGER.warning(
        "scrape.retry",
        attempt=state.attempt_number,
        status=getattr(exc, "status_code", None),
    )


class ScrapeClient:
    """POSTs target URLs to the scraping proxy.

    Every attempt passes through the shared rate limiter. Responses with a 5xx
    status are retried ``scrape_max_retries`` times with a fixed delay; any
    other failure surfaces immediately.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._settings.request_timeout)
        self._rate_limiter = rate_limiter or RateLimiter(self._settings.scrape_min_interval)
        self._sleep = sleep
        self._max_attempts = max(0, self._settings.scrape_max_retries) + 1

    def _build_payload(self, url: str, output_format: OutputFormat, wait_for_ms: int) -> Mapping[str, Any]:
        return {
            "url": url,
            "formats": [output_format],
            "onlyMainContent": True,
            "waitFor": wait_for_ms,
        }

    async def scrape(
        self,
        url: str,
        *,
        output_format: OutputFormat = "markdown",
        wait_for_ms: int = 3000,
    ) -> ScrapedPage:
        """Fetch ``url`` through the proxy, raising UpstreamError on failure."""
        headers = self._settings.scrape_headers()
        payload = self._build_payload(url, output_format, wait_for_ms)
        retryer = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_fixed(self._settings.scrape_retry_delay),
            retry=retry_if_exception(_is_server_error),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retryer:
            with attempt:
                body = await self._post(payload, headers)
        return _page_from_body(url, body)

    async def _post(self, payload: Mapping[str, Any], headers: Mapping[str, str]) -> dict[str, Any]:
        await self._rate_limiter.acquire()
        LOGGER.info("scrape.request", url=payload.get("url"))
        try:
            response = await self._client.post(self._settings.scrape_api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            LOGGER.error("scrape.http_error", status=status, body=exc.response.text[:500])
            raise UpstreamError(f"Scrape proxy error: {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Scrape proxy request failed") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError("Scrape proxy returned malformed JSON", status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise UpstreamError("Scrape proxy returned an unexpected payload", status_code=response.status_code)
        return body

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ScrapeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _page_from_body(url: str, body: dict[str, Any]) -> ScrapedPage:
    if not body.get("success"):
        raise UpstreamError(str(body.get("error") or "Scrape proxy reported failure"))
    data = body.get("data")
    if not isinstance(data, dict):
        raise UpstreamError("Scrape proxy response is missing data")
    metadata = data.get("metadata")
    return ScrapedPage(
        url=url,
        markdown=data.get("markdown"),
        html=data.get("html"),
        metadata=metadata if isinstance(metadata, dict) else {},
    )
