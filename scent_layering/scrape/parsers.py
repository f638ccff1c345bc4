"""Best-effort extraction of fragrance data from scraped markdown.

Each field is recovered by an ordered tuple of strategies; the first strategy
returning a non-empty value wins and a field with no match stays unset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar
from urllib.parse import unquote

from scent_layering.core.logging import get_logger
from scent_layering.core.models import FragranceRecord, Note, SearchHit, split_into_layers

LOGGER = get_logger(__name__)

T = TypeVar("T")

MAX_SEARCH_RESULTS = 20
MAX_ACCORDS = 10

SITE_URL = "https://www.fragrantica.com"

SEARCH_IMAGE_PATTERN = re.compile(
    r"!\[\]\((https://fimgs\.net/mdimg/perfume/m\.(\d+)\.jpg)\)",
    flags=re.IGNORECASE,
)
SEARCH_BLOCK_PATTERN = re.compile(
    r"!\[\]\((https://fimgs\.net/mdimg/perfume/m\.(\d+)\.jpg)\)\s*\n\s*"
    r"\[([^\]]+)\]\(https://www\.fragrantica\.com/perfume/([^/]+)/([^)]+)\.html\)\s*\n\s*"
    r"([A-Za-z][^\n]*)",
    flags=re.IGNORECASE,
)
SEARCH_LINK_PATTERN = re.compile(
    r"\[([^\]]+)\]\(https://www\.fragrantica\.com/perfume/([^/]+)/([^)]+)-(\d+)\.html\)",
    flags=re.IGNORECASE,
)

GENDER_PATTERN = re.compile(r"^#\s+(.+?)\s+for\s+(men|women|unisex)", flags=re.IGNORECASE | re.MULTILINE)
IMAGE_PATTERN = re.compile(r"!\[perfume[^\]]*\]\((https://fimgs\.net/mdimg/perfume[^)]+)\)", flags=re.IGNORECASE)
ACCORDS_SECTION_PATTERN = re.compile(
    r"###### main accords\s*([\s\S]*?)(?=\n\n\n|\n#{1,5}\s|\nUser\s|\nWhen\s|Perfume rating|Online shop)",
    flags=re.IGNORECASE,
)
ACCORD_DENYLIST = ("sponsored", "online", "shop", "offers", "rating", "buy", "price", "sale")

TOP_NOTES_PATTERN = re.compile(r"top\s+notes?\s+(?:is|are)\s+([^;.]+?)(?:;|\.|\s+middle|\s+heart)", flags=re.IGNORECASE)
MIDDLE_NOTES_PATTERN = re.compile(r"(?:middle|heart)\s+notes?\s+(?:is|are)\s+([^;.]+?)(?:;|\.|\s+base)", flags=re.IGNORECASE)
BASE_NOTES_PATTERN = re.compile(r"base\s+notes?\s+(?:is|are)\s+([^;.]+?)(?:;|\.)", flags=re.IGNORECASE)
NOTE_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\([^)]*/notes/[^)]+\)", flags=re.IGNORECASE)
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\([^)]+\)")
NOTE_SPLIT_PATTERN = re.compile(r",|;|\s+and\s+", flags=re.IGNORECASE)
ARTICLE_PATTERN = re.compile(r"^(is|are|the|a|an)$", flags=re.IGNORECASE)

RATING_PATTERN = re.compile(r"(?:Perfume\s+)?rating\s+(\d+\.\d+)\s+out\s+of\s+5", flags=re.IGNORECASE)
VOTES_PATTERN = re.compile(r"(?:with\s+)?(\d{1,3}(?:,\d{3})*)\s+votes", flags=re.IGNORECASE)
YEAR_CONTEXT_PATTERN = re.compile(r"\b(?:launched|released|from|in)\s*(\d{4})", flags=re.IGNORECASE)
YEAR_BARE_PATTERN = re.compile(r"\b(19\d{2}|20[0-2]\d)\b")
LONGEVITY_PATTERN = re.compile(
    r"longevity[:\s]*(very weak|weak|moderate|long lasting|very long lasting|eternal)",
    flags=re.IGNORECASE,
)
SILLAGE_PATTERN = re.compile(r"sillage[:\s]*(intimate|soft|moderate|heavy|enormous)", flags=re.IGNORECASE)
_NAME_CHARS = r"a-zA-Zéèêëàâäùûüôöîïç\s\-'"
PERFUMER_PROSE_PATTERN = re.compile(
    r"(?:nose behind this fragrance is|created by|perfumer[:\s]*)\s*(?:\*\*)?"
    rf"([A-Z][{_NAME_CHARS}]+?)(?:\*\*)?(?:\.|,|\s+Top|\s+Middle|\s+Base|\n)",
    flags=re.IGNORECASE,
)
PERFUMER_LINK_PATTERN = re.compile(rf"### Perfumer[\s\S]*?\[([A-Z][{_NAME_CHARS}]+)\]\(", flags=re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class FieldExtractor(Generic[T]):
    """Ordered strategies for one field; the first result that is not None or "" wins."""

    name: str
    strategies: tuple[Callable[[str], T | None], ...]

    def extract(self, text: str) -> T | None:
        for strategy in self.strategies:
            value = strategy(text)
            if value is not None and value != "":
                return value
        return None


# Search results ------------------------------------------------------------------


def parse_search_results(markdown: str, *, site_url: str = SITE_URL) -> list[SearchHit]:
    """Recover search hits from a results page, deduplicated by id and capped at 20."""
    results = _search_hits_from_blocks(markdown, site_url)
    if not results:
        results = _search_hits_from_links(markdown, site_url)

    seen: set[str] = set()
    unique: list[SearchHit] = []
    for hit in results:
        key = hit.id.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(hit)
    return unique[:MAX_SEARCH_RESULTS]


def _search_hits_from_blocks(markdown: str, site_url: str) -> list[SearchHit]:
    hits: list[SearchHit] = []
    for match in SEARCH_BLOCK_PATTERN.finditer(markdown):
        image_url, identifier, display_name, brand_slug, name_slug, brand_line = match.groups()
        brand = brand_line.strip() or _brand_from_slug(brand_slug)
        name = display_name.strip()
        if not name or not brand:
            continue
        hits.append(
            SearchHit(
                id=identifier,
                name=unquote(name),
                brand=brand,
                image_url=image_url,
                url=f"{site_url}/perfume/{brand_slug}/{name_slug}.html",
            )
        )
    return hits


def _search_hits_from_links(markdown: str, site_url: str) -> list[SearchHit]:
    images = {identifier: url for url, identifier in SEARCH_IMAGE_PATTERN.findall(markdown)}
    hits: list[SearchHit] = []
    for match in SEARCH_LINK_PATTERN.finditer(markdown):
        display_name, brand_slug, name_slug, identifier = match.groups()
        brand = _brand_from_slug(brand_slug)
        name = display_name.strip()
        if not name or not brand:
            continue
        hits.append(
            SearchHit(
                id=identifier,
                name=unquote(name),
                brand=brand,
                image_url=images.get(identifier),
                url=f"{site_url}/perfume/{brand_slug}/{name_slug}-{identifier}.html",
            )
        )
    return hits


def _brand_from_slug(slug: str) -> str:
    return unquote(slug.replace("-", " ")).strip()


# Notes -------------------------------------------------------------------------


def parse_notes_from_text(text: str) -> list[Note]:
    """Split prose such as "Lavender, Iris and Pear" into notes."""
    clean = MARKDOWN_LINK_PATTERN.sub(r"\1", text)
    parts = (part.strip() for part in NOTE_SPLIT_PATTERN.split(clean))
    return [Note(name=part) for part in parts if 1 < len(part) < 50 and not ARTICLE_PATTERN.match(part)]


def _layer_from_prose(pattern: re.Pattern[str]) -> Callable[[str], list[Note] | None]:
    def strategy(text: str) -> list[Note] | None:
        match = pattern.search(text)
        return parse_notes_from_text(match.group(1)) if match else None

    return strategy


def notes_from_prose(markdown: str) -> tuple[list[Note], list[Note], list[Note]]:
    return (
        _layer_from_prose(TOP_NOTES_PATTERN)(markdown) or [],
        _layer_from_prose(MIDDLE_NOTES_PATTERN)(markdown) or [],
        _layer_from_prose(BASE_NOTES_PATTERN)(markdown) or [],
    )


def notes_from_links(markdown: str) -> tuple[list[Note], list[Note], list[Note]]:
    """Collect note-page links, deduplicate them and split the list into thirds."""
    seen: set[str] = set()
    notes: list[Note] = []
    for raw in NOTE_LINK_PATTERN.findall(markdown):
        name = raw.strip()
        if not (1 < len(name) < 40) or "!" in name or not name[:1].isalpha() or not name[:1].isascii():
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        notes.append(Note(name=name))
    return split_into_layers(notes)


NOTE_LAYER_STRATEGIES: tuple[Callable[[str], tuple[list[Note], list[Note], list[Note]]], ...] = (
    notes_from_prose,
    notes_from_links,
)


def extract_note_layers(markdown: str) -> tuple[list[Note], list[Note], list[Note]]:
    for strategy in NOTE_LAYER_STRATEGIES:
        layers = strategy(markdown)
        if any(layers):
            return layers
    return [], [], []


# Accords -----------------------------------------------------------------------


def _is_accord_line(line: str) -> bool:
    return (
        2 < len(line) < 25
        and not line.startswith(("#", "[", "!"))
        and not line[:1].isdigit()
        and "http" not in line
        and ":" not in line
        and "a" <= line[:1] <= "z"
        and not any(token in line for token in ACCORD_DENYLIST)
    )


def extract_accords(markdown: str) -> list[str]:
    section = ACCORDS_SECTION_PATTERN.search(markdown)
    if not section:
        return []
    lines = (line.strip().lower() for line in section.group(1).split("\n"))
    return [line for line in lines if _is_accord_line(line)][:MAX_ACCORDS]


# Scalar fields -----------------------------------------------------------------


def _group(pattern: re.Pattern[str], index: int = 1) -> Callable[[str], str | None]:
    def strategy(text: str) -> str | None:
        match = pattern.search(text)
        return match.group(index) if match else None

    return strategy


def _rating(text: str) -> float | None:
    match = RATING_PATTERN.search(text)
    return float(match.group(1)) if match else None


def _votes(text: str) -> int | None:
    match = VOTES_PATTERN.search(text)
    return int(match.group(1).replace(",", "")) if match else None


def _perfumer_from_prose(text: str) -> str | None:
    match = PERFUMER_PROSE_PATTERN.search(text)
    if not match:
        return None
    cleaned = match.group(1).strip()
    cleaned = re.sub(r"^\[|\]$", "", cleaned)
    cleaned = re.sub(r"!\[.*$", "", cleaned)
    return cleaned.strip() or None


def _perfumer_from_link(text: str) -> str | None:
    match = PERFUMER_LINK_PATTERN.search(text)
    return match.group(1).strip() if match else None


def _gender(text: str) -> str | None:
    match = GENDER_PATTERN.search(text)
    return match.group(2).lower() if match else None


GENDER = FieldExtractor("gender", (_gender,))
IMAGE = FieldExtractor("image_url", (_group(IMAGE_PATTERN),))
RATING = FieldExtractor("rating", (_rating,))
VOTES = FieldExtractor("votes", (_votes,))
YEAR = FieldExtractor("year", (_group(YEAR_CONTEXT_PATTERN), _group(YEAR_BARE_PATTERN)))
LONGEVITY = FieldExtractor("longevity", (_group(LONGEVITY_PATTERN),))
SILLAGE = FieldExtractor("sillage", (_group(SILLAGE_PATTERN),))
PERFUMER = FieldExtractor("perfumer", (_perfumer_from_prose, _perfumer_from_link))


# Detail page -------------------------------------------------------------------


def parse_fragrance_details(markdown: str, hit: SearchHit) -> FragranceRecord:
    """Build a record from a detail page, falling back to the hit for identity fields."""
    record = FragranceRecord.from_hit(hit, source="scraped", completeness="full")
    record.gender = GENDER.extract(markdown)
    record.image_url = IMAGE.extract(markdown) or hit.image_url
    record.accords = extract_accords(markdown)
    record.top_notes, record.middle_notes, record.base_notes = extract_note_layers(markdown)
    record.rating = RATING.extract(markdown)
    record.votes = VOTES.extract(markdown)
    record.year = YEAR.extract(markdown)
    record.longevity = LONGEVITY.extract(markdown)
    record.sillage = SILLAGE.extract(markdown)
    record.perfumer = PERFUMER.extract(markdown)
    if not record.has_notes:
        record.completeness = "partial"

    LOGGER.info(
        "scrape.parsed",
        name=record.name,
        accords=len(record.accords),
        top=len(record.top_notes),
        middle=len(record.middle_notes),
        base=len(record.base_notes),
        completeness=record.completeness,
    )
    return record
