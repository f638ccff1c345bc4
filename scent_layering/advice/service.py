"""Free-text layering advice backed by an OpenAI-compatible chat endpoint.

The advisor only embellishes a MatchAnalysis; it never changes the score or
the records. Any failure degrades to deterministic text built from the analysis.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

import openai
from openai import AsyncOpenAI

from scent_layering.core.config import Settings, get_settings
from scent_layering.core.exceptions import ScentLayeringError
from scent_layering.core.json_utils import parse_json_response
from scent_layering.core.logging import get_logger
from scent_layering.core.models import FragranceRecord, MatchAnalysis
from scent_layering.matching.ranking import compatibility_label

from .prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    PAIRING_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_pairing_prompt,
)

LOGGER = get_logger(__name__)

MAX_PAIRINGS = 5


@dataclass(slots=True)
class AdviceResult:
    summary: str
    strengths: list[str] = field(default_factory=list)
    considerations: list[str] = field(default_factory=list)
    occasions: list[str] = field(default_factory=list)
    layering_tip: str = ""
    source: Literal["llm", "fallback"] = "fallback"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class PairingSuggestion:
    name: str
    brand: str
    reason: str = ""


def fallback_advice(first: FragranceRecord, second: FragranceRecord, analysis: MatchAnalysis) -> AdviceResult:
    label = compatibility_label(analysis.score)
    if analysis.shared_notes:
        strengths = [f"Shared notes ({', '.join(analysis.shared_notes)}) create cohesion"]
    else:
        strengths = ["Both perfumes have distinct character that could create complexity"]
    if analysis.potential_clashes:
        considerations = [f"Watch for intensity balance between {analysis.potential_clashes[0]}"]
    else:
        considerations = ["Apply lightly and let each fragrance bloom naturally"]
    return AdviceResult(
        summary=(
            f"Based on note analysis, {first.name} and {second.name} show {label} compatibility for layering."
        ),
        strengths=strengths,
        considerations=considerations,
        occasions=["Evening events", "Special occasions"],
        layering_tip="Apply the heavier fragrance first, then layer the lighter one on top.",
        source="fallback",
    )


class LayeringAdvisor:
    """Wraps the chat completion API with a timeout and graceful degradation."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model = self._settings.llm_model
        self._client = client or self._make_client()

    def _make_client(self) -> AsyncOpenAI | None:
        if not self._settings.llm_api_key:
            return None
        return AsyncOpenAI(
            api_key=self._settings.llm_api_key,
            base_url=self._settings.llm_base_url,
            timeout=self._settings.llm_timeout,
            max_retries=0,
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def analyze(
        self,
        first: FragranceRecord,
        second: FragranceRecord,
        analysis: MatchAnalysis,
    ) -> AdviceResult:
        if self._client is None:
            LOGGER.info("advice.disabled", reason="missing_api_key")
            return fallback_advice(first, second, analysis)

        prompt = build_analysis_prompt(first, second, analysis)
        try:
            content = await self._complete(ANALYSIS_SYSTEM_PROMPT, prompt, temperature=0.7, max_tokens=1000)
            payload = parse_json_response(content)
        except (openai.APIError, ScentLayeringError) as exc:
            LOGGER.warning("advice.analysis_failed", error=str(exc), error_type=type(exc).__name__)
            return fallback_advice(first, second, analysis)

        if not isinstance(payload, dict) or not payload.get("summary"):
            LOGGER.warning("advice.unexpected_payload", payload_type=type(payload).__name__)
            return fallback_advice(first, second, analysis)

        return AdviceResult(
            summary=str(payload["summary"]),
            strengths=_string_list(payload.get("strengths")),
            considerations=_string_list(payload.get("considerations")),
            occasions=_string_list(payload.get("occasions")),
            layering_tip=str(payload.get("layeringTip") or payload.get("layering_tip") or ""),
            source="llm",
        )

    async def suggest_pairings(self, record: FragranceRecord) -> list[PairingSuggestion]:
        if self._client is None:
            return []
        try:
            content = await self._complete(PAIRING_SYSTEM_PROMPT, build_pairing_prompt(record), temperature=0.8, max_tokens=800)
            payload = parse_json_response(content)
        except (openai.APIError, ScentLayeringError) as exc:
            LOGGER.warning("advice.pairings_failed", error=str(exc), error_type=type(exc).__name__)
            return []

        raw = payload.get("pairings") if isinstance(payload, dict) else None
        suggestions: list[PairingSuggestion] = []
        for item in raw or []:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            suggestions.append(
                PairingSuggestion(
                    name=str(item["name"]),
                    brand=str(item.get("brand") or ""),
                    reason=str(item.get("reason") or ""),
                )
            )
        return suggestions[:MAX_PAIRINGS]

    async def _complete(self, system_prompt: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]
