"""Static scene graph validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, MutableMapping, Sequence

from epq.data.repositories import ScenesRepository
from epq.domain.defs import SceneDef
from epq.domain.state import START_SCENE_ID
from epq.domain.story_paths import get_path_from_scene_id

Severity = str


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


@dataclass(frozen=True, slots=True)
class SceneEdge:
    target_id: str
    field_path: str


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def has_errors(issues: Sequence[Issue]) -> bool:
    return any(issue.severity == "ERROR" for issue in issues)


def validate_scene_graph(
    scenes: Mapping[str, SceneDef],
    entry_roots: Sequence[str] = (START_SCENE_ID,),
    *,
    error_on_autoadvance_cycle: bool = True,
) -> list[Issue]:
    """Check references, reachability, dead ends and auto-advance cycles."""
    issues: list[Issue] = []
    scene_ids = set(scenes)
    edges = {scene_id: _scene_edges(scene) for scene_id, scene in scenes.items()}

    for root in entry_roots:
        if root not in scene_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_ENTRY_ROOT",
                    message="Entry root references missing scene.",
                    context={"referenced_id": root},
                )
            )

    for scene_id, scene in scenes.items():
        _validate_references(scene_id, edges[scene_id], scene_ids, issues)
        _validate_path_crossing(scene_id, edges[scene_id], issues)
        if not scene.is_ending and not scene.choices and scene.next_scene_id is None:
            issues.append(
                Issue(
                    severity="WARN",
                    code="DEAD_END",
                    message="Scene has no choices, no next scene and is not an ending.",
                    context={"scene_id": scene_id},
                )
            )

    _validate_reachability(edges, scene_ids, entry_roots, issues)
    _validate_auto_advance_cycles(scenes, issues, error_on_autoadvance_cycle=error_on_autoadvance_cycle)
    return issues


def validate_scenes_repository(
    repo: ScenesRepository,
    entry_roots: Sequence[str] = (START_SCENE_ID,),
) -> list[Issue]:
    scenes = {scene_id: repo.get(scene_id) for scene_id in repo.list_ids()}
    return validate_scene_graph(scenes, entry_roots)


def _scene_edges(scene: SceneDef) -> list[SceneEdge]:
    edges: list[SceneEdge] = []
    if scene.next_scene_id is not None:
        edges.append(SceneEdge(scene.next_scene_id, "nextScene"))
    for index, choice in enumerate(scene.choices):
        edges.append(SceneEdge(choice.next_scene_id, f"choices[{index}].nextScene"))
    for index, hotspot in enumerate(scene.content.hotspots):
        if hotspot.next_scene_id is not None:
            edges.append(SceneEdge(hotspot.next_scene_id, f"content.hotspots[{index}].nextScene"))
    return edges


def _validate_references(
    scene_id: str, edges: Sequence[SceneEdge], scene_ids: set[str], issues: list[Issue]
) -> None:
    for edge in edges:
        if edge.target_id in scene_ids:
            continue
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_SCENE_REF",
                message="Scene references missing scene.",
                context={
                    "scene_id": scene_id,
                    "field_path": edge.field_path,
                    "referenced_id": edge.target_id,
                },
            )
        )


def _validate_path_crossing(scene_id: str, edges: Sequence[SceneEdge], issues: list[Issue]) -> None:
    source_path = get_path_from_scene_id(scene_id)
    if source_path is None:
        return
    for edge in edges:
        target_path = get_path_from_scene_id(edge.target_id)
        if target_path is not None and target_path != source_path:
            issues.append(
                Issue(
                    severity="WARN",
                    code="CROSS_PATH_REF",
                    message="Path-specific scene links into another path.",
                    context={
                        "scene_id": scene_id,
                        "field_path": edge.field_path,
                        "referenced_id": edge.target_id,
                    },
                )
            )


def _validate_reachability(
    edges: Mapping[str, Sequence[SceneEdge]],
    scene_ids: set[str],
    entry_roots: Sequence[str],
    issues: list[Issue],
) -> None:
    reachable: set[str] = set()
    stack = [root for root in entry_roots if root in scene_ids]
    while stack:
        scene_id = stack.pop()
        if scene_id in reachable:
            continue
        reachable.add(scene_id)
        stack.extend(edge.target_id for edge in edges[scene_id] if edge.target_id in scene_ids)
    for scene_id in sorted(scene_ids - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_SCENE",
                message="Scene is unreachable from the entry roots.",
                context={"scene_id": scene_id},
            )
        )


def _validate_auto_advance_cycles(
    scenes: Mapping[str, SceneDef],
    issues: list[Issue],
    *,
    error_on_autoadvance_cycle: bool,
) -> None:
    candidate_ids = {scene_id for scene_id, scene in scenes.items() if scene.auto_advances}
    adjacency: MutableMapping[str, str] = {}
    for scene_id in candidate_ids:
        next_id = scenes[scene_id].next_scene_id
        if next_id in candidate_ids:
            adjacency[scene_id] = next_id  # type: ignore[assignment]

    visited: set[str] = set()
    cycles: list[list[str]] = []
    for start in sorted(candidate_ids):
        if start in visited:
            continue
        trail: list[str] = []
        current: str | None = start
        while current is not None and current not in visited:
            visited.add(current)
            trail.append(current)
            current = adjacency.get(current)
        if current is not None and current in trail:
            cycles.append(trail[trail.index(current) :])

    severity = "ERROR" if error_on_autoadvance_cycle else "WARN"
    for cycle in cycles:
        issues.append(
            Issue(
                severity=severity,
                code="AUTOADVANCE_CYCLE",
                message="Auto-advance cycle detected.",
                context={"cycle": " -> ".join(cycle + [cycle[0]])},
            )
        )
