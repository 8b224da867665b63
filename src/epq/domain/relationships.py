"""Relationship score rules."""
from __future__ import annotations

from typing import Mapping, Tuple

RELATIONSHIP_MIN = -100
RELATIONSHIP_MAX = 100
HIGH_RELATIONSHIP_THRESHOLD = 50

# Checked top-down; the first floor the score reaches wins.
_STATUS_BANDS: Tuple[Tuple[int, str], ...] = (
    (80, "Devoted Ally"),
    (60, "Trusted Friend"),
    (40, "Good Friend"),
    (20, "Friendly"),
    (10, "Acquaintance"),
    (-10, "Neutral"),
    (-20, "Unfriendly"),
    (-40, "Hostile"),
    (-60, "Enemy"),
    (-80, "Bitter Enemy"),
)


def clamp_relationship(score: int) -> int:
    return max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, score))


def relationship_status(score: int) -> str:
    """Return the descriptive status for a relationship score."""
    for floor, label in _STATUS_BANDS:
        if score >= floor:
            return label
    return "Mortal Enemy"


def count_maxed(relationships: Mapping[str, int]) -> int:
    return sum(1 for score in relationships.values() if score == RELATIONSHIP_MAX)


def count_minned(relationships: Mapping[str, int]) -> int:
    return sum(1 for score in relationships.values() if score == RELATIONSHIP_MIN)


def count_high(relationships: Mapping[str, int], threshold: int = HIGH_RELATIONSHIP_THRESHOLD) -> int:
    return sum(1 for score in relationships.values() if score >= threshold)
