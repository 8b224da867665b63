"""Central game state store.

The store owns a single GameState and is the only thing that mutates it.
Collaborators read ``store.state`` freely and call store methods to change it;
subscribers are told about every change through StoreEvent objects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Collection, List

from epq.core.types import GamePath, SaveSlot, TimeOfDay, WorkAssignment
from epq.data.repositories import ScenesRepository
from epq.data.save_slots import AUTO_SAVE_SLOT, SlotMetadata
from epq.domain.defs import ChoiceDef, SceneDef, StateDeltaDef
from epq.domain.relationships import clamp_relationship, count_maxed, count_minned
from epq.domain.requirements import ChoiceAvailability, check_requirements, choices_with_availability
from epq.domain.state import MAX_HISTORY_LENGTH, GameState
from epq.domain.story_paths import PathWeights, get_recommended_path, is_game_path, path_signals
from epq.domain.timeline import DayTime, advance_time, path_c_start_time, set_time
from epq.domain.work_assignments import is_valid_work_assignment
from epq.services.autosave import AutoSaveScheduler
from epq.services.errors import ChoiceUnavailableError, PathAlreadySetError
from epq.services.save_service import SaveRecord, SaveService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoreEvent:
    """Base class for store events."""


@dataclass(slots=True)
class SceneChangedEvent(StoreEvent):
    previous_scene_id: str
    scene_id: str
    went_back: bool = False


@dataclass(slots=True)
class StateChangedEvent(StoreEvent):
    """A single field of the state changed, e.g. ``("inventory", "added", "key")``."""

    field: str
    action: str
    key: str | None = None
    value: object = None


@dataclass(slots=True)
class TimeAdvancedEvent(StoreEvent):
    previous: DayTime | None
    current: DayTime


@dataclass(slots=True)
class GameResetEvent(StoreEvent):
    new_game: bool = False


@dataclass(slots=True)
class GameLoadedEvent(StoreEvent):
    slot: SaveSlot


@dataclass(slots=True)
class TransitionResult:
    """Returned after entering a scene."""

    scene: SceneDef
    previous_scene_id: str
    first_visit: bool


Listener = Callable[[StoreEvent], None]


class GameStore:
    """Application service that owns and mutates the game state."""

    def __init__(
        self,
        scenes_repo: ScenesRepository,
        *,
        save_service: SaveService | None = None,
        autosave: AutoSaveScheduler | None = None,
        state: GameState | None = None,
        path_weights: PathWeights | None = None,
    ) -> None:
        self._scenes_repo = scenes_repo
        self._save_service = save_service
        self._autosave = autosave
        self._path_weights = path_weights or PathWeights()
        self._state = state if state is not None else GameState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def current_scene(self) -> SceneDef:
        return self._scenes_repo.get(self._state.current_scene_id)

    # Observers -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; call the returned function to unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning("Store subscriber %r failed on %s", listener, type(event).__name__, exc_info=True)

    # Navigation ----------------------------------------------------------

    def go_to_scene(self, scene_id: str, record_history: bool = True) -> TransitionResult:
        """Enter ``scene_id``, applying the scene's own state changes."""
        scene = self._scenes_repo.get(scene_id)
        state = self._state
        previous = state.current_scene_id
        if record_history:
            state.scene_history.append(previous)
            if len(state.scene_history) > MAX_HISTORY_LENGTH:
                del state.scene_history[: len(state.scene_history) - MAX_HISTORY_LENGTH]
        state.current_scene_id = scene_id
        first_visit = scene_id not in state.visited_scenes
        if first_visit:
            state.visited_scenes.append(scene_id)
            state.stats.scenes_visited = len(state.visited_scenes)
        logger.debug("Scene %s -> %s", previous, scene_id)
        self._emit(SceneChangedEvent(previous_scene_id=previous, scene_id=scene_id))
        self.apply_deltas(scene.state_deltas)
        self._schedule_autosave()
        return TransitionResult(scene=scene, previous_scene_id=previous, first_visit=first_visit)

    def enter_start_scene(self) -> TransitionResult:
        """Apply the current scene's own changes without recording a move.

        Called once when a game begins. The opening scene is already counted
        as visited, and nothing is autosaved.
        """
        scene = self.current_scene
        self._emit(SceneChangedEvent(previous_scene_id=scene.id, scene_id=scene.id))
        self.apply_deltas(scene.state_deltas)
        return TransitionResult(scene=scene, previous_scene_id=scene.id, first_visit=False)

    def transition_to_scene(self, scene_id: str, choice: ChoiceDef | None = None) -> TransitionResult:
        """Apply ``choice`` (if any) and move to ``scene_id``."""
        # Fail before touching state when the target does not exist.
        self._scenes_repo.get(scene_id)
        if choice is not None:
            self.apply_deltas(choice.state_deltas)
            self._state.stats.choices_made += 1
        return self.go_to_scene(scene_id)

    def available_choices(self) -> List[ChoiceAvailability]:
        return choices_with_availability(self.current_scene.choices, self._state)

    def choose(self, index: int) -> TransitionResult:
        """Select the choice at ``index`` on the current scene."""
        scene = self.current_scene
        if not scene.choices:
            raise ValueError(f"Scene '{scene.id}' has no choices to select.")
        if not 0 <= index < len(scene.choices):
            raise IndexError(f"Choice index {index} is invalid for scene '{scene.id}'.")
        choice = scene.choices[index]
        check = check_requirements(choice.requirements, self._state)
        if not check.can_select:
            raise ChoiceUnavailableError(index, check.reason)
        return self.transition_to_scene(choice.next_scene_id, choice)

    def continue_scene(self) -> TransitionResult:
        """Follow the current scene's ``next_scene_id``."""
        scene = self.current_scene
        if scene.next_scene_id is None:
            raise ValueError(f"Scene '{scene.id}' has no next scene.")
        return self.go_to_scene(scene.next_scene_id)

    def interact_hotspot(self, hotspot_id: str) -> TransitionResult | None:
        """Examine a hotspot on the current scene and follow it if it leads somewhere.

        Returns None when the hotspot only changes state.
        """
        scene = self.current_scene
        hotspot = next((spot for spot in scene.content.hotspots if spot.id == hotspot_id), None)
        if hotspot is None:
            raise KeyError(f"Scene '{scene.id}' has no hotspot '{hotspot_id}'.")
        if hotspot.next_scene_id is not None:
            self._scenes_repo.get(hotspot.next_scene_id)
        self.apply_deltas(hotspot.state_deltas)
        if hotspot.next_scene_id is None:
            self._schedule_autosave()
            return None
        return self.go_to_scene(hotspot.next_scene_id)

    def go_back(self) -> str | None:
        """Return to the previous scene without re-running its state changes."""
        state = self._state
        if not state.scene_history:
            return None
        previous = state.current_scene_id
        state.current_scene_id = state.scene_history.pop()
        self._emit(SceneChangedEvent(previous_scene_id=previous, scene_id=state.current_scene_id, went_back=True))
        self._schedule_autosave()
        return state.current_scene_id

    def can_go_back(self) -> bool:
        return bool(self._state.scene_history)

    def clear_history(self) -> None:
        self._state.scene_history.clear()
        self._emit(StateChangedEvent("scene_history", "cleared"))

    def apply_deltas(self, deltas: StateDeltaDef) -> None:
        """Apply a scene or choice delta through the regular mutators."""
        for flag in deltas.flags.add:
            self.set_flag(flag)
        for flag in deltas.flags.remove:
            self.unset_flag(flag)
        for item_id in deltas.items.add:
            self.add_item(item_id)
        for item_id in deltas.items.remove:
            self.remove_item(item_id)
        for evidence_id in deltas.evidence.add:
            self.add_evidence(evidence_id)
        for evidence_id in deltas.evidence.remove:
            self.remove_evidence(evidence_id)
        for character_id, delta in deltas.relationships.items():
            self.change_relationship(character_id, delta)

    # Inventory, flags, evidence, characters ----------------------------

    def add_item(self, item_id: str) -> bool:
        if item_id in self._state.inventory:
            return False
        self._state.inventory.append(item_id)
        self._state.stats.items_found += 1
        self._emit(StateChangedEvent("inventory", "added", item_id))
        return True

    def remove_item(self, item_id: str) -> bool:
        if item_id not in self._state.inventory:
            return False
        self._state.inventory.remove(item_id)
        self._emit(StateChangedEvent("inventory", "removed", item_id))
        return True

    def has_item(self, item_id: str) -> bool:
        return item_id in self._state.inventory

    def set_flag(self, flag: str) -> bool:
        if flag in self._state.flags:
            return False
        self._state.flags.append(flag)
        self._emit(StateChangedEvent("flags", "set", flag))
        return True

    def unset_flag(self, flag: str) -> bool:
        if flag not in self._state.flags:
            return False
        self._state.flags.remove(flag)
        self._emit(StateChangedEvent("flags", "unset", flag))
        return True

    def has_flag(self, flag: str) -> bool:
        return flag in self._state.flags

    def add_evidence(self, evidence_id: str) -> bool:
        if evidence_id in self._state.evidence:
            return False
        self._state.evidence.append(evidence_id)
        self._emit(StateChangedEvent("evidence", "added", evidence_id))
        return True

    def remove_evidence(self, evidence_id: str) -> bool:
        if evidence_id not in self._state.evidence:
            return False
        self._state.evidence.remove(evidence_id)
        self._emit(StateChangedEvent("evidence", "removed", evidence_id))
        return True

    def has_evidence(self, evidence_id: str) -> bool:
        return evidence_id in self._state.evidence

    def discover_character(self, character_id: str) -> bool:
        if character_id in self._state.discovered_characters:
            return False
        self._state.discovered_characters.append(character_id)
        self._emit(StateChangedEvent("discovered_characters", "added", character_id))
        return True

    def has_discovered_character(self, character_id: str) -> bool:
        return character_id in self._state.discovered_characters

    # Relationships -------------------------------------------------------

    def change_relationship(self, character_id: str, delta: int) -> int:
        return self.set_relationship(character_id, self.get_relationship(character_id) + delta)

    def set_relationship(self, character_id: str, score: int) -> int:
        """Store a clamped score and return it."""
        relationships = self._state.relationships
        clamped = clamp_relationship(score)
        relationships[character_id] = clamped
        self._state.stats.relationships_maxed = count_maxed(relationships)
        self._state.stats.relationships_minned = count_minned(relationships)
        self._emit(StateChangedEvent("relationships", "changed", character_id, clamped))
        return clamped

    def get_relationship(self, character_id: str) -> int:
        return self._state.relationships.get(character_id, 0)

    # Path ----------------------------------------------------------------

    def set_path(self, path: GamePath) -> None:
        if not is_game_path(path):
            raise ValueError(f"Unknown path: {path!r}")
        current = self._state.current_path
        if current == path:
            return
        if current is not None:
            raise PathAlreadySetError(f"Path already set to {current}; cannot switch to {path}.")
        self._state.current_path = path
        self._state.stats.path_taken = path
        logger.info("Path %s selected", path)
        self._emit(StateChangedEvent("current_path", "set", value=path))

    def get_path(self) -> GamePath | None:
        return self._state.current_path

    def is_on_path(self, path: GamePath) -> bool:
        return self._state.current_path == path

    def recommended_path(self, stealth_item_ids: Collection[str]) -> GamePath | None:
        signals = path_signals(self._state, stealth_item_ids, self._path_weights)
        return get_recommended_path(*signals, weights=self._path_weights)

    # Work assignment ----------------------------------------------------

    def set_work_assignment(self, assignment: WorkAssignment) -> None:
        if not is_valid_work_assignment(assignment):
            raise ValueError(f"Unknown work assignment: {assignment!r}")
        current = self._state.work_assignment
        if current is not None and current != assignment:
            logger.warning("Replacing work assignment %s with %s", current, assignment)
        self._state.work_assignment = assignment
        self._emit(StateChangedEvent("work_assignment", "set", value=assignment))

    def get_work_assignment(self) -> WorkAssignment | None:
        return self._state.work_assignment

    def has_work_assignment(self) -> bool:
        return self._state.work_assignment is not None

    # Time ----------------------------------------------------------------

    def initialize_time(self) -> DayTime:
        return self._change_time(path_c_start_time())

    def advance_to_next_period(self) -> DayTime | None:
        """Move the clock forward one period; None when it cannot move."""
        current = self._state.day_time
        if current is None:
            logger.warning("Cannot advance time before it is initialized")
            return None
        next_time = advance_time(current)
        if next_time is None:
            logger.warning("Cannot advance time past %s", current)
            return None
        return self._change_time(next_time)

    def set_day_time(self, day: int, period: TimeOfDay) -> DayTime | None:
        day_time = set_time(day, period)
        if day_time is None:
            return None
        return self._change_time(day_time)

    def _change_time(self, day_time: DayTime) -> DayTime:
        previous = self._state.day_time
        self._state.day_time = day_time
        self._state.stats.stage_reached = max(self._state.stats.stage_reached, day_time.day)
        self._emit(TimeAdvancedEvent(previous=previous, current=day_time))
        return day_time

    def get_day_time(self) -> DayTime | None:
        return self._state.day_time

    def is_time_of_day(self, period: TimeOfDay) -> bool:
        day_time = self._state.day_time
        return day_time is not None and day_time.period == period

    # Session -------------------------------------------------------------

    def record_play_time(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("Play time cannot be negative.")
        self._state.stats.play_time_seconds += seconds

    def has_progress(self) -> bool:
        """True once anything has happened beyond entering the opening scene."""
        return self._state not in (GameState(), self._new_game_state())

    def _new_game_state(self) -> GameState:
        scratch = GameStore(self._scenes_repo)
        scratch.enter_start_scene()
        return scratch.state

    def reset_game(self, delete_autosave: bool = False) -> None:
        self._replace_state(GameState(), delete_autosave)
        logger.info("Game reset")
        self._emit(GameResetEvent())

    def start_new_game(self, delete_autosave: bool = True) -> None:
        """Replace the state with a fresh game and enter the opening scene."""
        self._replace_state(GameState(), delete_autosave)
        logger.info("New game started")
        self._emit(GameResetEvent(new_game=True))
        self.enter_start_scene()

    def _replace_state(self, state: GameState, delete_autosave: bool) -> None:
        if self._autosave is not None:
            self._autosave.cancel()
        self._state = state
        if delete_autosave and self._save_service is not None:
            self._save_service.delete(AUTO_SAVE_SLOT)

    # Persistence ---------------------------------------------------------

    def _require_save_service(self) -> SaveService:
        if self._save_service is None:
            raise RuntimeError("GameStore was created without a SaveService.")
        return self._save_service

    def save_to_slot(self, slot: int) -> SaveRecord:
        return self._require_save_service().save(slot, self._state)

    def load_from_slot(self, slot: SaveSlot) -> bool:
        """Replace the live state with the slot's save; False when the slot is empty."""
        record = self._require_save_service().load(slot)
        if record is None:
            return False
        if self._autosave is not None:
            self._autosave.cancel()
        self._state = record.game_state
        self._emit(GameLoadedEvent(slot=slot))
        return True

    def delete_slot(self, slot: int) -> bool:
        return self._require_save_service().delete(slot)

    def list_slots(self) -> List[SlotMetadata]:
        return self._require_save_service().list_slots()

    def perform_autosave(self) -> SaveRecord:
        """Write the autosave slot immediately, bypassing the debounce."""
        if self._autosave is not None:
            self._autosave.cancel()
        return self._require_save_service().save(AUTO_SAVE_SLOT, self._state)

    def load_from_autosave(self) -> bool:
        return self.load_from_slot(AUTO_SAVE_SLOT)

    def has_autosave_data(self) -> bool:
        return self._require_save_service().has_autosave()

    def flush_autosave(self) -> bool:
        if self._autosave is None:
            return False
        return self._autosave.flush()

    def _schedule_autosave(self) -> None:
        if self._autosave is not None:
            self._autosave.schedule(self._state)
