"""Character definition structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

CHARACTER_CATEGORIES = ("ally", "neutral", "antagonist", "referenced")


@dataclass(frozen=True, slots=True)
class CharacterDef:
    """Non-player character the player can build a relationship with."""

    id: str
    name: str
    role: str
    description: str
    category: str
    location: str = ""
    initial_relationship: int = 0
    relationship_thresholds: Dict[str, int] = field(default_factory=dict)
    # Keyed by minimum relationship score.
    unlocks: Dict[int, str] = field(default_factory=dict)
