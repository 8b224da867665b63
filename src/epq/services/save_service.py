"""Serialization and slot I/O for saved games."""
from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping

from epq.core.types import GamePath, SaveSlot, WorkAssignment
from epq.data.repositories import ScenesRepository
from epq.data.save_slots import AUTO_SAVE_SLOT, SaveSlotStore, SlotMetadata
from epq.domain.relationships import RELATIONSHIP_MAX, RELATIONSHIP_MIN
from epq.domain.state import MAX_HISTORY_LENGTH, GameState, GameStats
from epq.domain.story_paths import is_game_path
from epq.domain.timeline import DayTime, is_valid_time
from epq.domain.work_assignments import is_valid_work_assignment
from epq.services.errors import SaveLoadError, SaveNotFoundError

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]
_DATE_FORMAT = "%b %d, %Y %H:%M"


@dataclass(slots=True)
class SaveMetadata:
    """Summary stored alongside a save for menu display."""

    slot: SaveSlot
    current_scene: str
    current_path: GamePath | None
    day_time: Dict[str, Any] | None
    play_time_seconds: int
    timestamp: float
    date_string: str


@dataclass(slots=True)
class SaveRecord:
    save_version: int
    metadata: SaveMetadata
    game_state: GameState


class SaveService:
    """Converts GameState to/from a validated, versioned payload and stores it in slots."""

    SAVE_VERSION = 1

    def __init__(
        self,
        *,
        scenes_repo: ScenesRepository,
        slot_store: SaveSlotStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._scenes_repo = scenes_repo
        self._slot_store = slot_store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def slot_store(self) -> SaveSlotStore:
        return self._slot_store

    # Codec ---------------------------------------------------------------

    def serialize(self, state: GameState, slot: SaveSlot) -> SavePayload:
        """Return a JSON-serializable payload for disk persistence."""
        return {
            "save_version": self.SAVE_VERSION,
            "metadata": asdict(self._build_metadata(state, slot)),
            "game_state": self._serialize_state(state),
        }

    def deserialize(self, payload: Mapping[str, Any]) -> SaveRecord:
        """Validate a persisted payload and rebuild the record it describes."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        version = payload.get("save_version")
        if version != self.SAVE_VERSION:
            raise SaveLoadError(f"Unsupported save version: {version!r}")
        metadata_payload = payload.get("metadata")
        state_payload = payload.get("game_state")
        if not isinstance(metadata_payload, Mapping) or not isinstance(state_payload, Mapping):
            raise SaveLoadError("Save data is missing required sections.")
        return SaveRecord(
            save_version=version,
            metadata=self._deserialize_metadata(metadata_payload),
            game_state=self._deserialize_state(state_payload),
        )

    # Slot I/O ------------------------------------------------------------

    def save(self, slot: SaveSlot, state: GameState) -> SaveRecord:
        """Write ``state`` into ``slot``, replacing whatever was there."""
        metadata = self._build_metadata(state, slot)
        payload = {
            "save_version": self.SAVE_VERSION,
            "metadata": asdict(metadata),
            "game_state": self._serialize_state(state),
        }
        path = self._slot_store.write_slot(slot, payload)
        logger.info("Saved game to slot %s (%s)", slot, path)
        return SaveRecord(self.SAVE_VERSION, metadata, copy.deepcopy(state))

    def load(self, slot: SaveSlot) -> SaveRecord | None:
        """Return the record in ``slot``, or None when the slot is empty."""
        try:
            payload = self._slot_store.read_slot(slot)
        except SaveNotFoundError:
            return None
        record = self.deserialize(payload)
        logger.info("Loaded game from slot %s", slot)
        return record

    def delete(self, slot: SaveSlot) -> bool:
        deleted = self._slot_store.delete_slot(slot)
        if deleted:
            logger.info("Deleted save slot %s", slot)
        return deleted

    def has_autosave(self) -> bool:
        return self._slot_store.slot_exists(AUTO_SAVE_SLOT)

    def list_slots(self) -> List[SlotMetadata]:
        return self._slot_store.list_slots()

    def most_recent_slot(self) -> int | None:
        """Manual slot holding the newest save, or None when every slot is empty."""
        best_slot: int | None = None
        best_timestamp = float("-inf")
        for entry in self._slot_store.list_slots():
            if entry.metadata is None:
                continue
            timestamp = entry.metadata.get("timestamp")
            if isinstance(timestamp, (int, float)) and timestamp > best_timestamp:
                best_timestamp = timestamp
                best_slot = entry.slot  # type: ignore[assignment]
        return best_slot

    def export_slot(self, slot: SaveSlot) -> str | None:
        """Return the slot's save as pretty-printed JSON, or None when empty."""
        record = self.load(slot)
        if record is None:
            return None
        payload = {
            "save_version": record.save_version,
            "metadata": asdict(record.metadata),
            "game_state": self._serialize_state(record.game_state),
        }
        return json.dumps(payload, indent=2, sort_keys=True)

    def import_slot(self, slot: SaveSlot, text: str) -> SaveRecord:
        """Validate exported JSON and store it in ``slot`` with fresh metadata."""
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SaveLoadError(f"Imported save is not valid JSON: {exc}") from exc
        record = self.deserialize(payload)
        return self.save(slot, record.game_state)

    # Helpers -------------------------------------------------------------

    def _build_metadata(self, state: GameState, slot: SaveSlot) -> SaveMetadata:
        now = self._clock()
        return SaveMetadata(
            slot=slot,
            current_scene=state.current_scene_id,
            current_path=state.current_path,
            day_time=self._serialize_day_time(state.day_time),
            play_time_seconds=state.stats.play_time_seconds,
            timestamp=now.timestamp(),
            date_string=now.strftime(_DATE_FORMAT),
        )

    def _serialize_state(self, state: GameState) -> Dict[str, Any]:
        return {
            "current_scene_id": state.current_scene_id,
            "scene_history": list(state.scene_history),
            "visited_scenes": list(state.visited_scenes),
            "inventory": list(state.inventory),
            "flags": list(state.flags),
            "relationships": dict(state.relationships),
            "evidence": list(state.evidence),
            "discovered_characters": list(state.discovered_characters),
            "current_path": state.current_path,
            "day_time": self._serialize_day_time(state.day_time),
            "work_assignment": state.work_assignment,
            "stats": asdict(state.stats),
        }

    @staticmethod
    def _serialize_day_time(day_time: DayTime | None) -> Dict[str, Any] | None:
        if day_time is None:
            return None
        return {"day": day_time.day, "period": day_time.period}

    def _deserialize_metadata(self, payload: Mapping[str, Any]) -> SaveMetadata:
        slot = payload.get("slot")
        if slot != AUTO_SAVE_SLOT and (isinstance(slot, bool) or not isinstance(slot, int)):
            raise SaveLoadError("metadata.slot must be an integer or 'auto'.")
        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise SaveLoadError("metadata.timestamp must be a number.")
        return SaveMetadata(
            slot=slot,
            current_scene=self._require_str(payload.get("current_scene"), "metadata.current_scene"),
            current_path=self._coerce_path(payload.get("current_path"), "metadata.current_path"),
            day_time=self._serialize_day_time(self._coerce_day_time(payload.get("day_time"), "metadata.day_time")),
            play_time_seconds=self._coerce_non_negative_int(
                payload.get("play_time_seconds"), "metadata.play_time_seconds", default=0
            ),
            timestamp=float(timestamp),
            date_string=self._require_str(payload.get("date_string"), "metadata.date_string"),
        )

    def _deserialize_state(self, payload: Mapping[str, Any]) -> GameState:
        current_scene_id = self._require_str(payload.get("current_scene_id"), "game_state.current_scene_id")
        self._validate_scene(current_scene_id, "game_state.current_scene_id")
        history = self._coerce_str_list(
            payload.get("scene_history"), "game_state.scene_history", unique=False
        )
        if len(history) > MAX_HISTORY_LENGTH:
            raise SaveLoadError(f"game_state.scene_history exceeds {MAX_HISTORY_LENGTH} entries.")
        for scene_id in history:
            self._validate_scene(scene_id, "game_state.scene_history")

        state = GameState(current_scene_id=current_scene_id, scene_history=history)
        state.visited_scenes = self._coerce_str_list(payload.get("visited_scenes"), "game_state.visited_scenes")
        state.inventory = self._coerce_str_list(payload.get("inventory"), "game_state.inventory")
        state.flags = self._coerce_str_list(payload.get("flags"), "game_state.flags")
        state.relationships = self._coerce_relationships(payload.get("relationships"))
        state.evidence = self._coerce_str_list(payload.get("evidence"), "game_state.evidence")
        state.discovered_characters = self._coerce_str_list(
            payload.get("discovered_characters"), "game_state.discovered_characters"
        )
        state.current_path = self._coerce_path(payload.get("current_path"), "game_state.current_path")
        state.day_time = self._coerce_day_time(payload.get("day_time"), "game_state.day_time")
        state.work_assignment = self._coerce_work_assignment(payload.get("work_assignment"))
        state.stats = self._coerce_stats(payload.get("stats"))
        return state

    def _validate_scene(self, scene_id: str, context: str) -> None:
        if not self._scenes_repo.exists(scene_id):
            raise SaveLoadError(f"{context} references unknown scene '{scene_id}'.")

    def _coerce_relationships(self, value: Any) -> Dict[str, int]:
        if value is None:
            return {}
        mapping = self._require_dict(value, "game_state.relationships")
        result: Dict[str, int] = {}
        for character_id, score in mapping.items():
            key = self._require_str(character_id, "game_state.relationships key")
            score_int = self._require_int(score, f"game_state.relationships.{key}")
            if not RELATIONSHIP_MIN <= score_int <= RELATIONSHIP_MAX:
                raise SaveLoadError(f"game_state.relationships.{key} is out of range: {score_int}")
            result[key] = score_int
        return result

    def _coerce_stats(self, value: Any) -> GameStats:
        if value is None:
            return GameStats()
        mapping = self._require_dict(value, "game_state.stats")
        counters = {
            name: self._coerce_non_negative_int(mapping.get(name), f"game_state.stats.{name}", default=0)
            for name in (
                "scenes_visited",
                "choices_made",
                "items_found",
                "relationships_maxed",
                "relationships_minned",
                "stage_reached",
                "play_time_seconds",
            )
        }
        path_taken = self._coerce_path(mapping.get("path_taken"), "game_state.stats.path_taken")
        return GameStats(path_taken=path_taken, **counters)

    @staticmethod
    def _coerce_path(value: Any, context: str) -> GamePath | None:
        if value is None:
            return None
        if not is_game_path(value):
            raise SaveLoadError(f"{context} must be 'A', 'B', 'C' or null, got {value!r}.")
        return value

    @staticmethod
    def _coerce_work_assignment(value: Any) -> WorkAssignment | None:
        if value is None:
            return None
        if not is_valid_work_assignment(value):
            raise SaveLoadError(f"Invalid work_assignment value: {value!r}")
        return value

    def _coerce_day_time(self, value: Any, context: str) -> DayTime | None:
        if value is None:
            return None
        mapping = self._require_dict(value, context)
        day_time = DayTime(day=mapping.get("day"), period=mapping.get("period"))  # type: ignore[arg-type]
        if not is_valid_time(day_time):
            raise SaveLoadError(f"{context} is not a valid day/period: {dict(mapping)!r}")
        return day_time

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_dict(value: Any, context: str) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        return dict(value)

    def _coerce_non_negative_int(self, value: Any, context: str, *, default: int) -> int:
        if value is None:
            return default
        value_int = self._require_int(value, context)
        if value_int < 0:
            raise SaveLoadError(f"{context} must be a non-negative integer.")
        return value_int

    def _coerce_str_list(self, value: Any, context: str, *, unique: bool = True) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        result: List[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise SaveLoadError(f"{context} entries must be strings.")
            if unique and entry in result:
                continue
            result.append(entry)
        return result
