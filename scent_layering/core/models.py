"""Shared data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

SourceKind = Literal["structured", "scraped"]
Completeness = Literal["full", "partial", "thin"]


@dataclass(slots=True, frozen=True)
class Note:
    name: str
    intensity: float | None = None
    image_url: str | None = None


@dataclass(slots=True)
class SearchHit:
    id: str
    name: str
    brand: str
    url: str
    image_url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class FragranceRecord:
    """Canonical fragrance entity shared by both source adapters and the scoring engine."""

    id: str
    name: str
    brand: str
    source: SourceKind
    image_url: str | None = None
    url: str | None = None
    rating: float | None = None
    votes: int | None = None
    top_notes: list[Note] = field(default_factory=list)
    middle_notes: list[Note] = field(default_factory=list)
    base_notes: list[Note] = field(default_factory=list)
    accords: list[str] = field(default_factory=list)
    accord_strengths: dict[str, str] = field(default_factory=dict)
    longevity: str | None = None
    sillage: str | None = None
    year: str | None = None
    gender: str | None = None
    perfumer: str | None = None
    concentration: str | None = None
    completeness: Completeness = "full"

    def note_names(self) -> list[str]:
        """Return every note name, top layer first, in declared order."""
        return [note.name for note in (*self.top_notes, *self.middle_notes, *self.base_notes)]

    @property
    def has_notes(self) -> bool:
        return bool(self.top_notes or self.middle_notes or self.base_notes)

    @property
    def is_degraded(self) -> bool:
        return self.completeness != "full"

    @classmethod
    def from_hit(cls, hit: SearchHit, *, source: SourceKind, completeness: Completeness = "thin") -> "FragranceRecord":
        """Project a search hit onto a record with empty note and accord lists."""
        return cls(
            id=hit.id,
            name=hit.name,
            brand=hit.brand,
            source=source,
            image_url=hit.image_url,
            url=hit.url,
            completeness=completeness,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class MatchBreakdown:
    note_overlap: int
    family_harmony: int
    layer_balance: int
    accord_blend: int


@dataclass(slots=True)
class MatchAnalysis:
    score: int
    breakdown: MatchBreakdown
    shared_notes: list[str] = field(default_factory=list)
    complementary_notes: list[str] = field(default_factory=list)
    potential_clashes: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def split_into_layers(notes: list[Note]) -> tuple[list[Note], list[Note], list[Note]]:
    """Approximate a pyramid from a flat note list by cutting it into thirds.

    The boundary is ``ceil(n / 3)``, so earlier layers receive the remainder.
    """
    third = -(-len(notes) // 3)
    return notes[:third], notes[third : third * 2], notes[third * 2 :]
