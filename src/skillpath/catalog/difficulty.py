"""Difficulty normalization rule table.

Upstream drafts describe difficulty as numbers (1-5), numeric strings, or free
labels. Everything collapses into beginner / intermediate / advanced; anything
unrecognized is beginner.
"""

from __future__ import annotations

import math

DIFFICULTY_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")

# Upper bound (inclusive) -> level. Values above the last band are advanced.
NUMERIC_BANDS: list[tuple[float, str]] = [
    (2, "beginner"),
    (3, "intermediate"),
]

LABEL_SYNONYMS: dict[str, str] = {
    "beginner": "beginner",
    "easy": "beginner",
    "basic": "beginner",
    "novice": "beginner",
    "introductory": "beginner",
    "intermediate": "intermediate",
    "medium": "intermediate",
    "moderate": "intermediate",
    "advanced": "advanced",
    "hard": "advanced",
    "expert": "advanced",
    "difficult": "advanced",
}


def _from_number(value: float) -> str:
    if math.isnan(value):
        return "beginner"
    for upper, level in NUMERIC_BANDS:
        if value <= upper:
            return level
    return "advanced"


def normalize_difficulty(value: object) -> str:
    """Map a raw difficulty value onto one of DIFFICULTY_LEVELS."""
    if isinstance(value, bool) or value is None:
        return "beginner"
    if isinstance(value, (int, float)):
        return _from_number(value)

    label = str(value).strip().casefold()
    if not label:
        return "beginner"
    try:
        return _from_number(float(label))
    except ValueError:
        pass
    return LABEL_SYNONYMS.get(label, "beginner")
