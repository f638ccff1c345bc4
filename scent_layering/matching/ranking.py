"""Rank a collection of fragrances against the one currently being worn."""

from __future__ import annotations

from typing import Iterable, Literal

from scent_layering.core.models import FragranceRecord, MatchAnalysis

from .engine import score

CompatibilityLabel = Literal["good", "moderate", "limited"]


def compatibility_label(value: int) -> CompatibilityLabel:
    if value >= 70:
        return "good"
    if value >= 50:
        return "moderate"
    return "limited"


def rank_by_compatibility(
    current: FragranceRecord,
    candidates: Iterable[FragranceRecord],
) -> list[tuple[FragranceRecord, MatchAnalysis]]:
    """Score every candidate against ``current``, best match first.

    The record itself is skipped; ties keep the input order.
    """
    scored = [(candidate, score(current, candidate)) for candidate in candidates if candidate.id != current.id]
    return sorted(scored, key=lambda item: item[1].score, reverse=True)
