from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from epq.core.types import GamePath, WorkAssignment
from epq.domain.timeline import DayTime

START_SCENE_ID = "X-0-001"
MAX_HISTORY_LENGTH = 20


@dataclass
class GameStats:
    scenes_visited: int = 0
    choices_made: int = 0
    items_found: int = 0
    relationships_maxed: int = 0
    relationships_minned: int = 0
    stage_reached: int = 0
    path_taken: GamePath | None = None
    play_time_seconds: int = 0

    def is_default(self) -> bool:
        return self == GameStats()


@dataclass
class GameState:
    """Mutable aggregate owned by a single GameStore.

    ``inventory``, ``flags``, ``evidence``, ``visited_scenes`` and
    ``discovered_characters`` are kept as insertion-ordered lists without
    duplicates; the store is responsible for that invariant. The opening
    scene counts as visited from the start.
    """

    current_scene_id: str = START_SCENE_ID
    scene_history: List[str] = field(default_factory=list)
    visited_scenes: List[str] = field(default_factory=lambda: [START_SCENE_ID])
    inventory: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    relationships: Dict[str, int] = field(default_factory=dict)
    evidence: List[str] = field(default_factory=list)
    discovered_characters: List[str] = field(default_factory=list)
    current_path: GamePath | None = None
    day_time: DayTime | None = None
    work_assignment: WorkAssignment | None = None
    stats: GameStats = field(default_factory=lambda: GameStats(scenes_visited=1))
