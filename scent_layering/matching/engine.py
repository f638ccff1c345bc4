"""Deterministic multi-factor layering compatibility score.

The final score blends four sub-scores, each normalised to 0-100:

- note overlap: shared-note ratio mapped through a curve that peaks between
  10% and 40% overlap and decays for near-duplicates,
- family harmony: count-weighted average family affinity across both records,
- layer balance: distance of the combined pyramid from 30/40/30,
- accord blend: average family affinity of the three dominant accords.

None of the functions raise for well-formed records; missing data degrades to
the documented neutral values.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Final

from scent_layering.core.models import FragranceRecord, MatchAnalysis, MatchBreakdown
from scent_layering.taxonomy import classify, compat, normalize_note_name

WEIGHTS: Final[dict[str, float]] = {
    "note_overlap": 0.20,
    "family_harmony": 0.35,
    "layer_balance": 0.20,
    "accord_blend": 0.25,
}

NEUTRAL_SCORE: Final[float] = 50.0
NEUTRAL_ACCORD_SCORE: Final[float] = 70.0
IDEAL_LAYER_RATIOS: Final[tuple[float, float, float]] = (0.30, 0.40, 0.30)
COMPLEMENTARY_THRESHOLD: Final[int] = 75
CLASH_THRESHOLD: Final[int] = 50
MAX_COMPLEMENTARY: Final[int] = 5
MAX_CLASHES: Final[int] = 3
DOMINANT_ACCORDS: Final[int] = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return min(high, max(low, value))


def _normalized_notes(record: FragranceRecord) -> list[str]:
    seen: dict[str, None] = {}
    for name in record.note_names():
        normalized = normalize_note_name(name)
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def _family_counts(record: FragranceRecord) -> Counter[str]:
    counts: Counter[str] = Counter()
    for name in record.note_names():
        family = classify(name)
        if family:
            counts[family] += 1
    return counts


def overlap_curve(ratio: float) -> float:
    """Map a shared-note ratio onto the 0-100 overlap score."""
    if ratio < 0.1:
        score = ratio * 500
    elif ratio <= 0.4:
        score = 50 + (ratio - 0.1) * 166.7
    else:
        score = 100 - (ratio - 0.4) * 83.3
    return _clamp(score)


def calculate_note_overlap(first: FragranceRecord, second: FragranceRecord) -> tuple[float, list[str]]:
    """Return the overlap score and the shared note names in first-record order."""
    notes_first = _normalized_notes(first)
    notes_second = set(_normalized_notes(second))
    shared = [note for note in notes_first if note in notes_second]
    total_unique = len(set(notes_first) | notes_second)
    if total_unique == 0:
        return NEUTRAL_SCORE, shared
    return overlap_curve(len(shared) / total_unique), shared


def calculate_family_harmony(first: FragranceRecord, second: FragranceRecord) -> float:
    families_first = _family_counts(first)
    families_second = _family_counts(second)
    if not families_first or not families_second:
        return NEUTRAL_SCORE

    total = 0.0
    weight_sum = 0
    for family_a, count_a in families_first.items():
        for family_b, count_b in families_second.items():
            weight = count_a * count_b
            total += compat(family_a, family_b) * weight
            weight_sum += weight
    return total / weight_sum if weight_sum else NEUTRAL_SCORE


def calculate_layer_balance(first: FragranceRecord, second: FragranceRecord) -> float:
    layers = (
        len(first.top_notes) + len(second.top_notes),
        len(first.middle_notes) + len(second.middle_notes),
        len(first.base_notes) + len(second.base_notes),
    )
    total = sum(layers)
    if total == 0:
        return NEUTRAL_SCORE
    deviations = [abs(count / total - ideal) for count, ideal in zip(layers, IDEAL_LAYER_RATIOS)]
    average = sum(deviations) / len(deviations)
    return max(0.0, 100 - average * 333)


def calculate_accord_blend(first: FragranceRecord, second: FragranceRecord) -> float:
    if not first.accords or not second.accords:
        return NEUTRAL_ACCORD_SCORE

    families_first = [classify(accord.lower()) for accord in first.accords[:DOMINANT_ACCORDS]]
    families_second = [classify(accord.lower()) for accord in second.accords[:DOMINANT_ACCORDS]]

    scores = [
        compat(family_a, family_b)
        for family_a in families_first
        if family_a
        for family_b in families_second
        if family_b
    ]
    if not scores:
        return NEUTRAL_ACCORD_SCORE
    return sum(scores) / len(scores)


def find_complementary_notes(first: FragranceRecord, second: FragranceRecord) -> list[str]:
    """Notes unique to ``second`` whose family pairs well with one of ``first``'s families."""
    families_first = set(_family_counts(first))
    notes_first = set(_normalized_notes(first))
    complementary: list[str] = []
    seen: set[str] = set()

    for note in second.note_names():
        normalized = normalize_note_name(note)
        if normalized in notes_first or normalized in seen:
            continue
        family = classify(note)
        if not family:
            continue
        if any(compat(family_a, family) >= COMPLEMENTARY_THRESHOLD for family_a in families_first):
            complementary.append(note)
            seen.add(normalized)
            if len(complementary) == MAX_COMPLEMENTARY:
                break
    return complementary


def find_potential_clashes(first: FragranceRecord, second: FragranceRecord) -> list[str]:
    """First-found cross-record note pairs whose families score below the clash threshold."""
    classified_second = [(note, classify(note)) for note in second.note_names()]
    clashes: list[str] = []

    for note_a in first.note_names():
        family_a = classify(note_a)
        if not family_a:
            continue
        for note_b, family_b in classified_second:
            if not family_b:
                continue
            if compat(family_a, family_b) < CLASH_THRESHOLD:
                clashes.append(f"{note_a} + {note_b}")
                if len(clashes) == MAX_CLASHES:
                    return clashes
    return clashes


def score(first: FragranceRecord, second: FragranceRecord) -> MatchAnalysis:
    """Score how well two fragrances layer together."""
    note_overlap, shared = calculate_note_overlap(first, second)
    family_harmony = calculate_family_harmony(first, second)
    layer_balance = calculate_layer_balance(first, second)
    accord_blend = calculate_accord_blend(first, second)

    blended = (
        note_overlap * WEIGHTS["note_overlap"]
        + family_harmony * WEIGHTS["family_harmony"]
        + layer_balance * WEIGHTS["layer_balance"]
        + accord_blend * WEIGHTS["accord_blend"]
    )

    return MatchAnalysis(
        score=_round_half_up(blended),
        breakdown=MatchBreakdown(
            note_overlap=_round_half_up(note_overlap),
            family_harmony=_round_half_up(family_harmony),
            layer_balance=_round_half_up(layer_balance),
            accord_blend=_round_half_up(accord_blend),
        ),
        shared_notes=shared,
        complementary_notes=find_complementary_notes(first, second),
        potential_clashes=find_potential_clashes(first, second),
    )
