"""Static family-to-family affinity table."""

from __future__ import annotations

from functools import lru_cache
from typing import Final, Mapping

from .families import FAMILIES, FamilyId

SAME_FAMILY_SCORE: Final[int] = 85
DEFAULT_SCORE: Final[int] = 50

# Each pair is declared once; the matrix mirrors it so lookups are symmetric.
DECLARED_PAIRS: Final[dict[FamilyId, dict[FamilyId, int]]] = {
    "citrus": {
        "floral": 85, "woody": 70, "oriental": 60, "spicy": 65, "fresh": 95, "green": 90,
        "fruity": 80, "gourmand": 50, "musky": 75, "animalic": 40, "earthy": 55,
    },
    "floral": {
        "woody": 80, "oriental": 85, "spicy": 70, "fresh": 70, "green": 75,
        "fruity": 85, "gourmand": 70, "musky": 90, "animalic": 60, "earthy": 65,
    },
    "woody": {
        "oriental": 95, "spicy": 90, "fresh": 65, "green": 70,
        "fruity": 55, "gourmand": 75, "musky": 85, "animalic": 80, "earthy": 90,
    },
    "oriental": {
        "spicy": 95, "fresh": 45, "green": 50,
        "fruity": 65, "gourmand": 90, "musky": 90, "animalic": 85, "earthy": 80,
    },
    "spicy": {
        "fresh": 50, "green": 55, "fruity": 60, "gourmand": 85, "musky": 80, "animalic": 75, "earthy": 75,
    },
    "fresh": {
        "green": 95, "fruity": 85, "gourmand": 40, "musky": 70, "animalic": 30, "earthy": 55,
    },
    "green": {
        "fruity": 75, "gourmand": 45, "musky": 65, "animalic": 35, "earthy": 70,
    },
    "fruity": {
        "gourmand": 90, "musky": 75, "animalic": 45, "earthy": 50,
    },
    "gourmand": {
        "musky": 80, "animalic": 70, "earthy": 60,
    },
    "musky": {
        "animalic": 85, "earthy": 75,
    },
    "animalic": {
        "earthy": 80,
    },
}


def build_matrix(
    declared: Mapping[str, Mapping[str, int]] = DECLARED_PAIRS,
) -> dict[str, dict[str, int]]:
    """Mirror declared pairs into a symmetric matrix.

    Raises ValueError when a pair is declared in both directions with different
    values, or when a score falls outside 0-100.
    """
    matrix: dict[str, dict[str, int]] = {family: {} for family in FAMILIES}
    for family_a, row in declared.items():
        for family_b, value in row.items():
            if not 0 <= value <= 100:
                raise ValueError(f"Compatibility {family_a}/{family_b} out of range: {value}")
            if family_a == family_b:
                raise ValueError(f"Same-family pairs are fixed at {SAME_FAMILY_SCORE}: {family_a}")
            existing = matrix.setdefault(family_b, {}).get(family_a)
            if existing is not None and existing != value:
                raise ValueError(f"Asymmetric compatibility for {family_a}/{family_b}: {value} != {existing}")
            matrix.setdefault(family_a, {})[family_b] = value
            matrix[family_b][family_a] = value
    return matrix


@lru_cache(maxsize=1)
def _matrix() -> dict[str, dict[str, int]]:
    return build_matrix()


def compat(family_a: str, family_b: str) -> int:
    """Return the 0-100 affinity between two families.

    Same-family pairs score SAME_FAMILY_SCORE; undeclared pairs fall back to
    DEFAULT_SCORE.
    """
    if family_a == family_b:
        return SAME_FAMILY_SCORE
    return _matrix().get(family_a, {}).get(family_b, DEFAULT_SCORE)
