"""Read-only summaries derived from GameStats."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from epq.domain.state import GameStats
from epq.domain.timeline import MAX_DAYS

SCORE_WEIGHTS: Dict[str, int] = {
    "scenes_visited": 1,
    "choices_made": 2,
    "items_found": 3,
    "relationships_maxed": 5,
    "relationships_minned": 3,
    "stage_reached": 10,
}


@dataclass(frozen=True, slots=True)
class Band:
    label: str
    description: str


@dataclass(frozen=True, slots=True)
class StageDescription:
    description: str
    progress: str


@dataclass(frozen=True, slots=True)
class MilestoneInfo:
    id: str
    name: str
    description: str


@dataclass(frozen=True, slots=True)
class StatsSummary:
    completion: int
    engagement: Band
    collector: Band
    relationships: str
    stage: StageDescription
    score: int
    rank: Band


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def completion_percentage(scenes_visited: int, total_scenes: int = 100) -> int:
    if total_scenes <= 0:
        return 0
    return min(100, _round_half_up(scenes_visited / total_scenes * 100))


def engagement_level(choices_made: int) -> Band:
    if choices_made < 10:
        return Band("Cautious", "Taking a careful approach")
    if choices_made < 30:
        return Band("Engaged", "Actively exploring options")
    if choices_made < 60:
        return Band("Invested", "Deeply involved in the story")
    return Band("Completionist", "Exploring every possibility")


def collector_rank(items_found: int) -> Band:
    if items_found == 0:
        return Band("Minimalist", "Traveling light")
    if items_found < 5:
        return Band("Novice Collector", "Starting to gather resources")
    if items_found < 10:
        return Band("Skilled Collector", "Building a useful inventory")
    if items_found < 20:
        return Band("Expert Collector", "Finding valuable items")
    return Band("Master Collector", "Found everything worth finding")


def relationship_mastery(maxed: int, minned: int) -> str:
    if maxed + minned == 0:
        return "Neutral with everyone"
    if maxed > minned:
        return f"{maxed} strong {'ally' if maxed == 1 else 'allies'}"
    if minned > maxed:
        return f"{minned} dangerous {'enemy' if minned == 1 else 'enemies'}"
    return f"{maxed} allies, {minned} enemies"


def stage_description(stage_reached: int) -> StageDescription:
    if stage_reached == 0:
        return StageDescription("Just beginning", "Day 1")
    if stage_reached < 3:
        return StageDescription("Early days", f"Day {stage_reached}")
    if stage_reached < 5:
        return StageDescription("Making progress", f"Day {stage_reached}")
    if stage_reached < MAX_DAYS:
        return StageDescription("Nearly there", f"Day {stage_reached}")
    return StageDescription("Reached the end", f"Day {MAX_DAYS}")


def calculate_game_score(stats: GameStats) -> int:
    return sum(getattr(stats, name) * weight for name, weight in SCORE_WEIGHTS.items())


def game_rank(score: int) -> Band:
    if score < 50:
        return Band("Newcomer", "Just starting your journey")
    if score < 150:
        return Band("Survivor", "Finding your way")
    if score < 300:
        return Band("Strategist", "Playing smart")
    if score < 500:
        return Band("Master Planner", "Excellent execution")
    return Band("Legend", "Peak performance")


def stats_summary(stats: GameStats) -> StatsSummary:
    score = calculate_game_score(stats)
    return StatsSummary(
        completion=completion_percentage(stats.scenes_visited),
        engagement=engagement_level(stats.choices_made),
        collector=collector_rank(stats.items_found),
        relationships=relationship_mastery(stats.relationships_maxed, stats.relationships_minned),
        stage=stage_description(stats.stage_reached),
        score=score,
        rank=game_rank(score),
    )


def format_play_time(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


# Order matters: achieved_milestones reports in this order.
_MILESTONES: Dict[str, tuple[str, str, Callable[[GameStats], bool]]] = {
    "first_choice": ("First Choice", "Made your first decision", lambda s: s.choices_made >= 1),
    "ten_choices": ("Decision Maker", "Made 10 choices", lambda s: s.choices_made >= 10),
    "first_item": ("First Find", "Found your first item", lambda s: s.items_found >= 1),
    "first_ally": ("First Ally", "Maxed a relationship", lambda s: s.relationships_maxed >= 1),
    "first_enemy": ("First Enemy", "Made an enemy", lambda s: s.relationships_minned >= 1),
    "reached_day_3": ("Midpoint", "Reached Day 3", lambda s: s.stage_reached >= 3),
    "reached_day_6": ("The End", "Reached the final day", lambda s: s.stage_reached >= 6),
    "completionist": ("Completionist", "Made 100+ choices", lambda s: s.choices_made >= 100),
    "collector": ("Master Collector", "Found 20+ items", lambda s: s.items_found >= 20),
    "diplomat": ("Diplomat", "Maxed 3+ relationships", lambda s: s.relationships_maxed >= 3),
    "antagonist": ("Antagonist", "Made 3+ enemies", lambda s: s.relationships_minned >= 3),
}

MILESTONE_IDS = tuple(_MILESTONES)


def check_milestones(stats: GameStats) -> Dict[str, bool]:
    return {milestone_id: check(stats) for milestone_id, (_, _, check) in _MILESTONES.items()}


def achieved_milestones(stats: GameStats) -> List[MilestoneInfo]:
    return [
        MilestoneInfo(milestone_id, name, description)
        for milestone_id, (name, description, check) in _MILESTONES.items()
        if check(stats)
    ]
