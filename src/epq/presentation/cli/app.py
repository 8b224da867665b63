"""Console-driven UI loop for El Palo de Queso."""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Literal

from epq.data.errors import SaveLoadError
from epq.data.repositories import ItemsRepository, ScenesRepository
from epq.data.save_slots import SaveSlotStore
from epq.domain.relationships import relationship_status
from epq.domain.stats import achieved_milestones, format_play_time, stats_summary
from epq.domain.story_paths import PATH_SELECTION_SCENE_ID, get_path_display_name, get_path_from_scene_id
from epq.domain.timeline import format_day_time
from epq.domain.work_assignments import WORK_ASSIGNMENTS, format_work_assignment
from epq.presentation.cli import config
from epq.presentation.cli.render import (
    render_bullet_lines,
    render_choices,
    render_heading,
    render_hotspots,
    render_menu,
    render_scene,
)
from epq.services import (
    AutoSaveScheduler,
    ChoiceUnavailableError,
    GameStore,
    SaveService,
    StateChangedEvent,
    StoreEvent,
    TimeAdvancedEvent,
)

logger = logging.getLogger(__name__)

MenuAction = Literal["new_game", "continue", "load", "quit"]
LoopOutcome = Literal["menu", "quit"]
LOG_LEVEL_ENV_VAR = "EPQ_LOG_LEVEL"
TIMEOUT_SCENE_ID = "END-3-TIMEOUT"
WORK_FLAG_CATEGORY = "quest"


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Start the interactive CLI session."""
    configure_logging()
    settings = config.load_config()
    store = _build_store(settings)
    items_repo = ItemsRepository()
    store.subscribe(_print_event)
    print("=== El Palo de Queso ===")
    while True:
        action = _main_menu_loop(store)
        if action == "quit":
            break
        if action == "new_game":
            store.start_new_game()
        elif action == "continue":
            if not store.load_from_autosave():
                print("No autosave found.")
                continue
        elif action == "load" and not _load_slot_menu(store):
            continue
        if _run_scene_loop(store, items_repo, settings) == "quit":
            break
    store.flush_autosave()
    print("Goodbye!")


def _build_store(settings: Dict[str, Any]) -> GameStore:
    """Construct the GameStore with concrete repositories and persistence."""
    scenes_repo = ScenesRepository()
    save_service = SaveService(
        scenes_repo=scenes_repo,
        slot_store=SaveSlotStore(config.get_save_dir()),
    )
    autosave = AutoSaveScheduler(
        save_service,
        delay=settings["autosave_delay_ms"] / 1000,
        enabled=settings["autosave_enabled"],
    )
    return GameStore(scenes_repo, save_service=save_service, autosave=autosave)


def _main_menu_loop(store: GameStore) -> MenuAction:
    options: list[tuple[str, MenuAction]] = [("New Game", "new_game")]
    if store.has_autosave_data():
        options.append(("Continue", "continue"))
    options.extend([("Load Game", "load"), ("Quit", "quit")])
    while True:
        render_menu("Main Menu", [label for label, _ in options])
        raw = input("Select an option: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1][1]
        print(f"Invalid selection. Please enter 1-{len(options)}.")


def _load_slot_menu(store: GameStore) -> bool:
    labels = []
    for entry in store.list_slots():
        if not entry.exists:
            labels.append(f"Slot {entry.slot}: empty")
        elif entry.is_corrupt or entry.metadata is None:
            labels.append(f"Slot {entry.slot}: unreadable")
        else:
            labels.append(f"Slot {entry.slot}: {entry.metadata.get('current_scene')} ({entry.metadata.get('date_string')})")
    render_menu("Load Game", labels)
    raw = input("Slot number (blank to cancel): ").strip()
    if not raw.isdigit():
        return False
    try:
        if store.load_from_slot(int(raw)):
            return True
        print("That slot is empty.")
    except SaveLoadError as exc:
        print(f"Could not load save: {exc}")
    return False


def _run_scene_loop(store: GameStore, items_repo: ItemsRepository, settings: Dict[str, Any]) -> LoopOutcome:
    started = time.monotonic()
    try:
        while True:
            scene = store.current_scene
            pages = scene.content.pages or (scene.content.text,)
            render_scene(scene.id, scene.content.speaker, pages, settings["text_speed"])
            if scene.is_ending:
                _render_summary(store)
                return "menu"
            if scene.id == PATH_SELECTION_SCENE_ID and store.get_path() is None:
                stealth_ids = items_repo.ids_with_tag("stealth")
                recommended = store.recommended_path(stealth_ids)
                if recommended is not None:
                    print(f"(Your instincts point toward {get_path_display_name(recommended)}.)")
            choices = store.available_choices()
            render_choices(choices)
            hotspots = scene.content.hotspots
            render_hotspots([hotspot.label for hotspot in hotspots])
            prompt = "\n[number] choose, [Enter] continue, b back, s save, i status, q menu"
            if hotspots:
                prompt += ", h<number> examine"
            command = input(f"{prompt}: ").strip().lower()
            if command == "q":
                return "menu"
            if command == "b":
                if store.go_back() is None:
                    print("Nowhere to go back to.")
                continue
            if command == "s":
                _save_prompt(store)
                continue
            if command == "i":
                _render_status(store)
                continue
            if command == "" and scene.auto_advances:
                store.continue_scene()
            elif command.isdigit() and choices:
                if not _choose(store, int(command) - 1):
                    continue
            elif command.startswith("h") and command[1:].isdigit() and hotspots:
                if not _examine(store, int(command[1:]) - 1):
                    continue
            else:
                print("Please enter a listed option.")
                continue
            _after_move(store)
    finally:
        store.record_play_time(int(time.monotonic() - started))


def _choose(store: GameStore, index: int) -> bool:
    try:
        store.choose(index)
    except ChoiceUnavailableError as exc:
        print(f"That choice is locked: {exc.reason}")
    except IndexError:
        print("There is no such choice.")
    else:
        return True
    return False


def _examine(store: GameStore, index: int) -> bool:
    """Examine a hotspot; True when it moved the player to another scene."""
    hotspots = store.current_scene.content.hotspots
    if not 0 <= index < len(hotspots):
        print("There is nothing like that here.")
        return False
    if store.interact_hotspot(hotspots[index].id) is None:
        print("Nothing else stands out.")
        return False
    return True


def _after_move(store: GameStore) -> None:
    """Lock in the path on the first path scene and run the justice clock."""
    if store.get_path() is None:
        path = get_path_from_scene_id(store.state.current_scene_id)
        if path is None:
            return
        store.set_path(path)
        if path == "C":
            store.initialize_time()
        return
    if not store.is_on_path("C") or store.current_scene.is_ending:
        return
    if store.get_work_assignment() is None:
        for assignment in WORK_ASSIGNMENTS:
            if store.has_flag(f"{WORK_FLAG_CATEGORY}:work_{assignment}"):
                store.set_work_assignment(assignment)
                break
    if store.advance_to_next_period() is None:
        store.go_to_scene(TIMEOUT_SCENE_ID)


def _save_prompt(store: GameStore) -> None:
    raw = input("Save to slot (1-3): ").strip()
    if not raw.isdigit():
        print("Save cancelled.")
        return
    try:
        record = store.save_to_slot(int(raw))
    except (SaveLoadError, OSError) as exc:
        print(f"Could not save: {exc}")
        return
    print(f"Saved to slot {record.metadata.slot} at {record.metadata.date_string}.")


def _render_status(store: GameStore) -> None:
    state = store.state
    render_heading("Status")
    lines = [
        f"Path: {get_path_display_name(state.current_path)}",
        f"Time: {format_day_time(state.day_time)}",
        f"Inventory: {', '.join(state.inventory) or 'empty'}",
        f"Evidence: {', '.join(state.evidence) or 'none'}",
    ]
    if state.current_path == "C":
        lines.append(f"Work: {format_work_assignment(state.work_assignment)}")
    lines.extend(
        f"{character}: {score} ({relationship_status(score)})" for character, score in state.relationships.items()
    )
    render_bullet_lines(lines)


def _render_summary(store: GameStore) -> None:
    stats = store.state.stats
    summary = stats_summary(stats)
    render_heading("The End")
    render_bullet_lines(
        [
            f"Score: {summary.score} ({summary.rank.label})",
            f"Scenes visited: {stats.scenes_visited} ({summary.completion}% complete)",
            f"Choices made: {stats.choices_made} ({summary.engagement.label})",
            f"Items found: {stats.items_found} ({summary.collector.label})",
            f"Relationships: {summary.relationships}",
            f"Play time: {format_play_time(stats.play_time_seconds)}",
        ]
    )
    milestones = achieved_milestones(stats)
    if milestones:
        render_heading("Milestones")
        render_bullet_lines(f"{milestone.name}: {milestone.description}" for milestone in milestones)


def _print_event(event: StoreEvent) -> None:
    if isinstance(event, StateChangedEvent):
        if event.field == "inventory" and event.action == "added":
            print(f"- Obtained: {event.key}")
        elif event.field == "evidence" and event.action == "added":
            print(f"- Evidence collected: {event.key}")
        elif event.field == "relationships":
            print(f"- {event.key} relationship is now {event.value}")
    elif isinstance(event, TimeAdvancedEvent):
        print(f"- {format_day_time(event.current)}")
