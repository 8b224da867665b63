"""Repository for authored scene definitions."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Tuple

from epq.data import paths
from epq.data.errors import DataValidationError, SceneNotFoundError
from epq.data.json_loader import load_json_directory
from epq.data.repositories.base import RepositoryBase
from epq.domain.defs import (
    SCENE_KINDS,
    ChoiceDef,
    HotspotDef,
    RequirementsDef,
    SceneContentDef,
    SceneDef,
    SetDelta,
    StateDeltaDef,
)
from epq.domain.flags import is_valid_flag

logger = logging.getLogger(__name__)


class ScenesRepository(RepositoryBase[SceneDef]):
    """Loads every ``scenes/*.json`` file and validates its structure.

    Files are read in name order. When two files define the same id, the
    earlier file wins and the later definition is skipped.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__("scenes", base_path)
        self._load_order: List[str] = []

    def _load_definitions(self) -> Dict[str, SceneDef]:
        scenes: Dict[str, SceneDef] = {}
        load_order: List[str] = []
        scenes_dir = paths.get_scenes_path(self._base_path)
        for file_path, raw in load_json_directory(scenes_dir):
            for scene in self._parse_document(raw, file_path.name):
                if scene.id in scenes:
                    logger.warning("Skipping duplicate scene %s from %s", scene.id, file_path.name)
                    continue
                scenes[scene.id] = scene
                load_order.append(scene.id)
        self._load_order = load_order
        logger.debug("Loaded %d scenes from %s", len(scenes), scenes_dir)
        return scenes

    def get(self, scene_id: str) -> SceneDef:
        """Return a scene by id or raise SceneNotFoundError."""
        try:
            return self._table()[scene_id]
        except KeyError as exc:
            raise SceneNotFoundError(scene_id) from exc

    def list_ids(self) -> List[str]:
        """Scene ids in load order."""
        self._table()
        return list(self._load_order)

    def reload(self) -> None:
        super().reload()
        self._load_order = []

    def _parse_document(self, raw: object, source: str) -> List[SceneDef]:
        document = self._require_mapping(raw, source)
        raw_scenes = document.get("scenes")
        if not isinstance(raw_scenes, list):
            raise DataValidationError(f"{source} must contain a 'scenes' list.")
        return [
            self._parse_scene(entry, f"{source} scenes[{index}]")
            for index, entry in enumerate(raw_scenes)
        ]

    def _parse_scene(self, raw: object, context: str) -> SceneDef:
        scene_data = self._require_mapping(raw, context)
        scene_id = self._require_str(scene_data.get("id"), f"{context} id")
        context = f"scene '{scene_id}'"
        kind = self._require_str(scene_data.get("type"), f"{context} type")
        if kind not in SCENE_KINDS:
            raise DataValidationError(f"{context} type '{kind}' is not one of {list(SCENE_KINDS)}.")

        content = self._parse_content(scene_data.get("content"), f"{context} content")
        choices = self._parse_choices(scene_data.get("choices"), context)
        next_scene_id = self._optional_str(scene_data.get("nextScene"), f"{context} nextScene")
        return SceneDef(
            id=scene_id,
            kind=kind,  # type: ignore[arg-type]
            content=content,
            choices=choices,
            next_scene_id=next_scene_id,
            state_deltas=self._parse_deltas(scene_data, context),
        )

    def _parse_content(self, raw: object, context: str) -> SceneContentDef:
        content = self._require_mapping(raw, context)
        text = content.get("text", "")
        text = self._require_str(text, f"{context} text")
        pages = self._str_list(content.get("pages"), f"{context} pages")
        if not text and not pages:
            raise DataValidationError(f"{context} needs 'text' or 'pages'.")
        hotspots_raw = content.get("hotspots")
        hotspots: Tuple[HotspotDef, ...] = ()
        if hotspots_raw is not None:
            if not isinstance(hotspots_raw, list):
                raise DataValidationError(f"{context} hotspots must be a list if provided.")
            hotspots = tuple(
                self._parse_hotspot(entry, f"{context} hotspots[{index}]")
                for index, entry in enumerate(hotspots_raw)
            )
        return SceneContentDef(
            text=text,
            pages=pages,
            speaker=self._optional_str(content.get("speaker"), f"{context} speaker"),
            visual=self._optional_str(content.get("visual"), f"{context} visual"),
            hotspots=hotspots,
        )

    def _parse_hotspot(self, raw: object, context: str) -> HotspotDef:
        data = self._require_mapping(raw, context)
        return HotspotDef(
            id=self._require_str(data.get("id"), f"{context} id"),
            label=self._require_str(data.get("label"), f"{context} label"),
            next_scene_id=self._optional_str(data.get("nextScene"), f"{context} nextScene"),
            state_deltas=self._parse_deltas(data, context),
        )

    def _parse_choices(self, raw: object, context: str) -> Tuple[ChoiceDef, ...]:
        if raw is None:
            return ()
        if not isinstance(raw, list):
            raise DataValidationError(f"{context} choices must be a list if provided.")
        choices: List[ChoiceDef] = []
        for index, entry in enumerate(raw):
            choice_ctx = f"{context} choices[{index}]"
            choice_data = self._require_mapping(entry, choice_ctx)
            choices.append(
                ChoiceDef(
                    text=self._require_str(choice_data.get("text"), f"{choice_ctx} text"),
                    next_scene_id=self._require_str(choice_data.get("nextScene"), f"{choice_ctx} nextScene"),
                    requirements=self._parse_requirements(choice_data.get("requirements"), choice_ctx),
                    state_deltas=self._parse_deltas(choice_data, choice_ctx),
                )
            )
        return tuple(choices)

    def _parse_requirements(self, raw: object, context: str) -> RequirementsDef:
        if raw is None:
            return RequirementsDef()
        ctx = f"{context} requirements"
        data = self._require_mapping(raw, ctx)
        flags = self._flag_list(data.get("flags"), f"{ctx} flags")
        not_flags = self._flag_list(data.get("notFlags"), f"{ctx} notFlags")
        return RequirementsDef(
            items=self._str_list(data.get("items"), f"{ctx} items"),
            not_items=self._str_list(data.get("notItems"), f"{ctx} notItems"),
            flags=flags,
            not_flags=not_flags,
            evidence=self._str_list(data.get("evidence"), f"{ctx} evidence"),
            not_evidence=self._str_list(data.get("notEvidence"), f"{ctx} notEvidence"),
            relationships=self._int_map(data.get("relationships"), f"{ctx} relationships"),
            max_relationships=self._int_map(data.get("maxRelationships"), f"{ctx} maxRelationships"),
        )

    def _parse_deltas(self, data: dict[str, object], context: str) -> StateDeltaDef:
        flag_changes = self._optional_mapping(data.get("flagChanges"), f"{context} flagChanges")
        item_changes = self._optional_mapping(data.get("itemChanges"), f"{context} itemChanges")
        evidence_changes = self._optional_mapping(data.get("evidenceChanges"), f"{context} evidenceChanges")
        return StateDeltaDef(
            flags=SetDelta(
                add=self._flag_list(flag_changes.get("set"), f"{context} flagChanges set"),
                remove=self._flag_list(flag_changes.get("unset"), f"{context} flagChanges unset"),
            ),
            items=SetDelta(
                add=self._str_list(item_changes.get("add"), f"{context} itemChanges add"),
                remove=self._str_list(item_changes.get("remove"), f"{context} itemChanges remove"),
            ),
            evidence=SetDelta(
                add=self._str_list(evidence_changes.get("add"), f"{context} evidenceChanges add"),
                remove=self._str_list(evidence_changes.get("remove"), f"{context} evidenceChanges remove"),
            ),
            relationships=self._int_map(data.get("relationshipChanges"), f"{context} relationshipChanges"),
        )

    def _flag_list(self, raw: object, context: str) -> Tuple[str, ...]:
        flags = self._str_list(raw, context)
        for flag in flags:
            if not is_valid_flag(flag):
                raise DataValidationError(f"{context} contains invalid flag '{flag}' (expected 'category:name').")
        return flags

    def _optional_mapping(self, raw: object, context: str) -> dict[str, object]:
        if raw is None:
            return {}
        return self._require_mapping(raw, context)

    def _int_map(self, raw: object, context: str) -> Dict[str, int]:
        if raw is None:
            return {}
        data = self._require_mapping(raw, context)
        return {
            self._require_str(key, f"{context} key"): self._require_int(value, f"{context} '{key}'")
            for key, value in data.items()
        }
