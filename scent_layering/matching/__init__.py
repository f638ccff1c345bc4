"""Layering compatibility scoring."""

from .engine import (
    WEIGHTS,
    calculate_accord_blend,
    calculate_family_harmony,
    calculate_layer_balance,
    calculate_note_overlap,
    find_complementary_notes,
    find_potential_clashes,
    overlap_curve,
    score,
)
from .ranking import compatibility_label, rank_by_compatibility

__all__ = [
    "WEIGHTS",
    "calculate_accord_blend",
    "calculate_family_harmony",
    "calculate_layer_balance",
    "calculate_note_overlap",
    "compatibility_label",
    "find_complementary_notes",
    "find_potential_clashes",
    "overlap_curve",
    "rank_by_compatibility",
    "score",
]
