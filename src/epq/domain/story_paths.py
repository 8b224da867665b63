"""Rules for the three narrative paths.

Scene ids carry their path as a one-letter prefix (``A-1-015``). Ids prefixed
with ``X-`` are shared content reachable from every path, including before a
path has been chosen.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Dict, Iterable, NamedTuple, Tuple

from epq.core.types import GamePath
from epq.domain.relationships import HIGH_RELATIONSHIP_THRESHOLD, count_high

GAME_PATHS: Tuple[GamePath, ...] = ("A", "B", "C")
SHARED_SCENE_PREFIX = "X-"
PATH_SELECTION_SCENE_ID = "X-0-014"


@dataclass(frozen=True, slots=True)
class PathInfo:
    id: GamePath
    name: str
    description: str
    approach: str


PATH_INFO: Dict[GamePath, PathInfo] = {
    "A": PathInfo(
        "A",
        "Path A: Night",
        "Escape under cover of darkness through stealth and cunning",
        "Stealth and infiltration",
    ),
    "B": PathInfo(
        "B",
        "Path B: Social",
        "Build alliances and manipulate relationships to gain freedom",
        "Social manipulation and alliances",
    ),
    "C": PathInfo(
        "C",
        "Path C: Day (Justice)",
        "Gather evidence to expose corruption and achieve legal freedom",
        "Investigation and evidence gathering",
    ),
}


@dataclass(frozen=True, slots=True)
class PathWeights:
    """Scoring constants for path recommendations."""

    stealth: float = 2.0
    per_high_relationship: float = 1.5
    evidence: float = 3.0
    high_relationship_threshold: int = HIGH_RELATIONSHIP_THRESHOLD


DEFAULT_PATH_WEIGHTS = PathWeights()


class PathSignals(NamedTuple):
    has_evidence: bool
    high_relationships: int
    has_stealth_items: bool


def is_game_path(value: object) -> bool:
    return isinstance(value, str) and value in GAME_PATHS


def get_path_info(path: GamePath) -> PathInfo:
    return PATH_INFO[path]


def get_path_display_name(path: GamePath | None) -> str:
    if path is None:
        return "No path selected"
    return PATH_INFO[path].name


def is_scene_on_path(scene_id: str, path: GamePath) -> bool:
    return scene_id.startswith(f"{path}-")


def is_shared_scene(scene_id: str) -> bool:
    return scene_id.startswith(SHARED_SCENE_PREFIX)


def get_path_from_scene_id(scene_id: str) -> GamePath | None:
    first = scene_id[:1]
    if first in GAME_PATHS:
        return first  # type: ignore[return-value]
    return None


def can_access_scene(scene_id: str, current_path: GamePath | None) -> bool:
    """Return True if a player on ``current_path`` may enter ``scene_id``.

    Collaborators call this before navigating; the store does not enforce it.
    """
    if is_shared_scene(scene_id):
        return True
    if current_path is None:
        return False
    return is_scene_on_path(scene_id, current_path)


def get_recommended_path(
    has_evidence: bool,
    high_relationships: int,
    has_stealth_items: bool,
    weights: PathWeights = DEFAULT_PATH_WEIGHTS,
) -> GamePath | None:
    """Pick the path with the highest affinity score.

    Returns None when every score is zero. Ties go to C, then B, then A.
    """
    scores: Dict[GamePath, float] = {
        "A": weights.stealth if has_stealth_items else 0.0,
        "B": high_relationships * weights.per_high_relationship,
        "C": weights.evidence if has_evidence else 0.0,
    }
    best = max(scores.values())
    if best <= 0:
        return None
    for path in ("C", "B", "A"):
        if scores[path] == best:
            return path
    return None


def path_signals(
    state,
    stealth_item_ids: Collection[str],
    weights: PathWeights = DEFAULT_PATH_WEIGHTS,
) -> PathSignals:
    """Derive recommendation signals from anything shaped like a GameState."""
    inventory: Iterable[str] = state.inventory
    return PathSignals(
        has_evidence=len(state.evidence) > 0,
        high_relationships=count_high(state.relationships, weights.high_relationship_threshold),
        has_stealth_items=any(item_id in stealth_item_ids for item_id in inventory),
    )
