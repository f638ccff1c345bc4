"""Note taxonomy and family compatibility tables."""

from .compatibility import DEFAULT_SCORE, SAME_FAMILY_SCORE, build_matrix, compat
from .families import FAMILIES, NOTE_FAMILIES, FamilyId, classify, normalize_note_name

__all__ = [
    "DEFAULT_SCORE",
    "FAMILIES",
    "NOTE_FAMILIES",
    "SAME_FAMILY_SCORE",
    "FamilyId",
    "build_matrix",
    "classify",
    "compat",
    "normalize_note_name",
]
