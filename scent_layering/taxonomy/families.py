"""Olfactory family keyword table and the substring-based note classifier."""

from __future__ import annotations

from typing import Final, Literal

FamilyId = Literal[
    "citrus",
    "floral",
    "woody",
    "oriental",
    "spicy",
    "fresh",
    "green",
    "fruity",
    "gourmand",
    "musky",
    "animalic",
    "earthy",
]

# Iteration order is the tie-break: the first family with a matching keyword wins.
NOTE_FAMILIES: Final[dict[FamilyId, tuple[str, ...]]] = {
    "citrus": (
        "bergamot", "lemon", "orange", "grapefruit", "lime", "mandarin", "yuzu",
        "citron", "tangerine", "pomelo", "blood orange", "citrus", "neroli",
    ),
    "floral": (
        "rose", "jasmine", "lily", "violet", "iris", "peony", "magnolia", "tuberose",
        "gardenia", "ylang-ylang", "orange blossom", "honeysuckle", "freesia",
        "carnation", "geranium", "lotus", "orchid", "plumeria", "frangipani", "heliotrope",
    ),
    "woody": (
        "sandalwood", "cedar", "oud", "agarwood", "vetiver", "patchouli", "birch",
        "cypress", "guaiac wood", "teak", "driftwood", "mahogany", "ebony",
        "pine", "fir", "juniper", "bamboo", "oak",
    ),
    "oriental": (
        "vanilla", "amber", "benzoin", "labdanum", "incense", "myrrh", "frankincense",
        "opoponax", "copal", "balsam", "resin", "ambergris",
    ),
    "spicy": (
        "cinnamon", "cardamom", "pepper", "clove", "nutmeg", "ginger", "saffron",
        "cumin", "coriander", "anise", "star anise", "pink pepper", "black pepper",
        "white pepper",
    ),
    "fresh": (
        "mint", "eucalyptus", "tea", "green tea", "cucumber", "melon", "water",
        "marine", "aquatic", "ozonic", "aldehydes", "sea salt",
    ),
    "green": (
        "grass", "leaf", "green", "galbanum", "fig leaf", "basil", "artemisia",
        "tomato leaf", "violet leaf", "ivy",
    ),
    "fruity": (
        "apple", "peach", "apricot", "plum", "cherry", "raspberry", "strawberry",
        "blackberry", "blackcurrant", "pear", "coconut", "mango", "pineapple",
        "banana", "passion fruit", "lychee", "fig", "date", "pomegranate",
    ),
    "gourmand": (
        "chocolate", "coffee", "caramel", "honey", "praline", "almond", "hazelnut",
        "tonka", "cotton candy", "marshmallow", "cream", "milk", "butter",
        "brown sugar", "maple",
    ),
    "musky": (
        "musk", "white musk", "skin", "cashmere", "suede", "leather",
    ),
    "animalic": (
        "civet", "castoreum", "hyraceum", "costus", "animalic",
    ),
    "earthy": (
        "moss", "oakmoss", "earth", "soil", "peat", "mushroom", "truffle",
        "vetiver", "orris root",
    ),
}

FAMILIES: Final[tuple[FamilyId, ...]] = tuple(NOTE_FAMILIES)


def normalize_note_name(name: str) -> str:
    return name.lower().strip()


def classify(note_name: str) -> FamilyId | None:
    """Return the olfactory family of a free-text note, or None when unmatched.

    A family matches when the normalised note contains one of its keywords or a
    keyword contains the note ("bergamot" and "fresh bergamot zest" both map to
    citrus). Blank input never matches.
    """
    normalized = normalize_note_name(note_name or "")
    if not normalized:
        return None
    for family, keywords in NOTE_FAMILIES.items():
        if any(keyword in normalized or normalized in keyword for keyword in keywords):
            return family
    return None
