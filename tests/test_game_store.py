from __future__ import annotations

import copy
from pathlib import Path

import pytest

from epq.data.errors import SceneNotFoundError
from epq.data.repositories import ScenesRepository
from epq.data.save_slots import SaveSlotStore
from epq.domain.state import MAX_HISTORY_LENGTH, GameState
from epq.domain.timeline import DayTime
from epq.services import (
    ChoiceUnavailableError,
    GameLoadedEvent,
    GameResetEvent,
    GameStore,
    PathAlreadySetError,
    SaveService,
    SceneChangedEvent,
    StateChangedEvent,
    TimeAdvancedEvent,
)

FIXTURE_DEFINITIONS = Path(__file__).parent / "fixtures" / "data" / "definitions"


def _make_store(save_dir: Path | None = None) -> GameStore:
    scenes_repo = ScenesRepository(FIXTURE_DEFINITIONS)
    save_service = None
    if save_dir is not None:
        save_service = SaveService(scenes_repo=scenes_repo, slot_store=SaveSlotStore(save_dir))
    store = GameStore(scenes_repo, save_service=save_service)
    store.enter_start_scene()
    return store


def test_entering_start_scene_applies_its_deltas() -> None:
    store = _make_store()

    assert store.state.current_scene_id == "X-0-001"
    assert store.state.scene_history == []
    assert store.state.visited_scenes == ["X-0-001"]
    assert store.has_flag("story:arrived")
    assert store.state.stats.scenes_visited == 1


def test_fresh_store_counts_the_opening_scene_as_visited() -> None:
    store = GameStore(ScenesRepository(FIXTURE_DEFINITIONS))
    assert not store.has_progress()

    result = store.go_to_scene("X-0-002")

    assert result.first_visit is True
    assert store.state.visited_scenes == ["X-0-001", "X-0-002"]
    assert store.state.stats.scenes_visited == 2
    assert store.has_progress()


def test_new_game_has_no_progress_until_the_player_acts(tmp_path: Path) -> None:
    store = _make_store(tmp_path)
    store.continue_scene()
    store.add_item("lockpick")

    store.start_new_game()

    assert store.state.current_scene_id == "X-0-001"
    assert store.has_flag("story:arrived")
    assert store.state.visited_scenes == ["X-0-001"]
    assert store.state.stats.scenes_visited == 1
    assert store.state.scene_history == []
    assert not store.has_progress()

    store.continue_scene()
    assert store.state.stats.scenes_visited == 2
    assert store.has_progress()


def test_full_choice_flow_updates_items_flags_and_stats() -> None:
    store = _make_store()
    store.continue_scene()

    with pytest.raises(ChoiceUnavailableError) as excinfo:
        store.choose(1)
    assert excinfo.value.reason == "Requires: key"

    result = store.choose(0)
    assert result.scene.id == "X-0-003"
    assert result.first_visit is True
    assert store.has_item("key")
    assert store.get_relationship("guard") == -20
    assert store.has_flag("loc:storeroom_key")
    assert store.state.stats.choices_made == 1
    assert store.state.stats.items_found == 1

    store.continue_scene()
    store.choose(1)
    assert store.current_scene.is_ending
    assert store.state.scene_history == ["X-0-001", "X-0-002", "X-0-003", "X-0-002"]
    assert store.state.stats.scenes_visited == 4
    assert store.state.stats.choices_made == 2


def test_locked_relationship_choice_reports_current_score() -> None:
    store = _make_store()
    store.continue_scene()
    store.change_relationship("guard", -20)

    availability = store.available_choices()

    assert [entry.can_select for entry in availability] == [True, False, False, True]
    assert availability[2].reason == "Requires guard relationship ≥ 50 (current: -20)"


def test_choose_rejects_out_of_range_indices() -> None:
    store = _make_store()
    store.continue_scene()

    with pytest.raises(IndexError):
        store.choose(4)
    with pytest.raises(IndexError):
        store.choose(-1)
    assert store.state.current_scene_id == "X-0-002"


def test_choose_on_scene_without_choices_raises() -> None:
    store = _make_store()

    with pytest.raises(ValueError):
        store.choose(0)


def test_continue_without_next_scene_raises() -> None:
    store = _make_store()
    store.go_to_scene("X-0-004")

    with pytest.raises(ValueError):
        store.continue_scene()


def test_transition_to_unknown_scene_leaves_state_untouched() -> None:
    store = _make_store()
    store.continue_scene()
    choice = store.current_scene.choices[0]

    with pytest.raises(SceneNotFoundError):
        store.transition_to_scene("X-9-999", choice)

    assert store.state.inventory == []
    assert store.state.stats.choices_made == 0
    assert store.state.current_scene_id == "X-0-002"


def test_history_keeps_only_the_most_recent_entries() -> None:
    store = _make_store()
    for index in range(25):
        store.go_to_scene("X-0-002" if index % 2 == 0 else "X-0-003")

    history = store.state.scene_history
    assert len(history) == MAX_HISTORY_LENGTH
    # The final call moved from X-0-003 onto X-0-002.
    assert history[-1] == "X-0-003"
    assert store.state.visited_scenes == ["X-0-001", "X-0-002", "X-0-003"]


def test_go_back_does_not_replay_scene_deltas() -> None:
    store = _make_store()
    store.continue_scene()
    store.unset_flag("story:arrived")

    assert store.go_back() == "X-0-001"
    assert store.state.current_scene_id == "X-0-001"
    assert not store.has_flag("story:arrived")
    assert store.go_back() is None
    assert not store.can_go_back()


def test_hotspot_without_target_only_applies_its_changes() -> None:
    store = _make_store()
    store.go_to_scene("A-1-001")

    assert store.interact_hotspot("drawer") is None

    assert store.has_item("lockpick")
    assert store.state.current_scene_id == "A-1-001"
    assert store.state.stats.choices_made == 0


def test_hotspot_with_target_moves_to_that_scene() -> None:
    store = _make_store()
    store.go_to_scene("A-1-001")

    result = store.interact_hotspot("desk")

    assert result is not None
    assert result.scene.id == "X-0-004"
    assert store.state.scene_history[-1] == "A-1-001"


def test_unknown_hotspot_raises() -> None:
    store = _make_store()
    store.go_to_scene("A-1-001")

    with pytest.raises(KeyError):
        store.interact_hotspot("window")
    assert not store.has_item("lockpick")


def test_clear_history() -> None:
    store = _make_store()
    store.continue_scene()
    store.clear_history()

    assert store.state.scene_history == []


def test_set_helpers_report_whether_anything_changed() -> None:
    store = _make_store()

    assert store.add_item("lockpick") is True
    assert store.add_item("lockpick") is False
    assert store.state.stats.items_found == 1
    assert store.remove_item("lockpick") is True
    assert store.remove_item("lockpick") is False
    assert store.add_evidence("ledger") is True
    assert store.add_evidence("ledger") is False
    assert store.discover_character("guard") is True
    assert store.has_discovered_character("guard")
    assert store.set_flag("story:arrived") is False


def test_relationships_clamp_and_count_extremes() -> None:
    store = _make_store()

    assert store.change_relationship("guard", 150) == 100
    assert store.state.stats.relationships_maxed == 1
    assert store.change_relationship("guard", -300) == -100
    assert store.state.stats.relationships_maxed == 0
    assert store.state.stats.relationships_minned == 1
    assert store.set_relationship("cook", 40) == 40
    assert store.get_relationship("nobody") == 0


def test_set_path_is_locked_once_chosen() -> None:
    store = _make_store()

    store.set_path("A")
    store.set_path("A")
    assert store.is_on_path("A")
    assert store.state.stats.path_taken == "A"
    with pytest.raises(PathAlreadySetError):
        store.set_path("B")
    with pytest.raises(ValueError):
        store.set_path("Z")  # type: ignore[arg-type]


def test_recommended_path_prefers_evidence() -> None:
    store = _make_store()
    assert store.recommended_path({"lockpick"}) is None

    store.add_item("lockpick")
    assert store.recommended_path({"lockpick"}) == "A"

    store.add_evidence("ledger")
    assert store.recommended_path({"lockpick"}) == "C"


def test_work_assignment_validation() -> None:
    store = _make_store()

    store.set_work_assignment("library")
    store.set_work_assignment("kitchen")
    assert store.get_work_assignment() == "kitchen"
    with pytest.raises(ValueError):
        store.set_work_assignment("mines")  # type: ignore[arg-type]


def test_clock_runs_until_the_final_night() -> None:
    store = _make_store()
    assert store.advance_to_next_period() is None

    assert store.initialize_time() == DayTime(1, "morning")
    for _ in range(23):
        assert store.advance_to_next_period() is not None

    assert store.get_day_time() == DayTime(6, "night")
    assert store.is_time_of_day("night")
    assert store.advance_to_next_period() is None
    assert store.state.stats.stage_reached == 6


def test_set_day_time_rejects_out_of_range_values() -> None:
    store = _make_store()

    assert store.set_day_time(7, "morning") is None
    assert store.set_day_time(3, "dusk") is None  # type: ignore[arg-type]
    assert store.get_day_time() is None
    assert store.set_day_time(3, "evening") == DayTime(3, "evening")
    store.set_day_time(1, "morning")
    assert store.state.stats.stage_reached == 3


def test_subscribers_receive_events_until_unsubscribed() -> None:
    store = _make_store()
    events = []
    unsubscribe = store.subscribe(events.append)

    store.continue_scene()
    store.initialize_time()
    unsubscribe()
    store.add_item("key")

    assert isinstance(events[0], SceneChangedEvent)
    assert events[0].previous_scene_id == "X-0-001"
    assert any(isinstance(event, TimeAdvancedEvent) for event in events)
    assert not any(isinstance(event, StateChangedEvent) and event.key == "key" for event in events)


def test_failing_subscriber_does_not_block_others() -> None:
    store = _make_store()
    seen = []

    def broken(_event) -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.add_item("key")

    assert store.has_item("key")
    assert len(seen) == 1


def test_record_play_time() -> None:
    store = _make_store()
    store.record_play_time(30)
    store.record_play_time(15)

    assert store.state.stats.play_time_seconds == 45
    with pytest.raises(ValueError):
        store.record_play_time(-1)


def test_reset_clears_progress() -> None:
    store = _make_store()
    events = []
    store.subscribe(events.append)
    store.continue_scene()
    assert store.has_progress()

    store.reset_game()

    assert store.state == GameState()
    assert not store.has_progress()
    assert isinstance(events[-1], GameResetEvent)
    assert events[-1].new_game is False


def test_save_and_load_slot_round_trip(tmp_path: Path) -> None:
    store = _make_store(tmp_path)
    store.continue_scene()
    store.choose(0)
    store.save_to_slot(1)
    expected = copy.deepcopy(store.state)
    events = []
    store.subscribe(events.append)

    store.start_new_game()
    assert store.load_from_slot(1) is True

    assert store.state == expected
    assert isinstance(events[-1], GameLoadedEvent)
    assert store.load_from_slot(2) is False


def test_list_slots_reports_saved_slots(tmp_path: Path) -> None:
    store = _make_store(tmp_path)
    store.save_to_slot(2)

    entries = {entry.slot: entry for entry in store.list_slots()}

    assert sorted(entries) == [1, 2, 3]
    assert not entries[1].exists
    assert entries[2].exists
    assert entries[2].metadata["current_scene"] == "X-0-001"


def test_start_new_game_removes_autosave(tmp_path: Path) -> None:
    store = _make_store(tmp_path)
    store.perform_autosave()
    assert store.has_autosave_data()

    store.start_new_game()

    assert not store.has_autosave_data()
    assert store.load_from_autosave() is False


def test_persistence_requires_a_save_service() -> None:
    store = _make_store()

    with pytest.raises(RuntimeError):
        store.save_to_slot(1)
    assert store.flush_autosave() is False


def test_flag_item_and_goto_from_a_fresh_state() -> None:
    store = GameStore(ScenesRepository(FIXTURE_DEFINITIONS))

    store.set_flag("story:intro_complete")
    store.add_item("lockpick")
    store.go_to_scene("A-1-001")

    assert store.has_flag("story:intro_complete")
    assert store.state.inventory == ["lockpick"]
    assert store.state.current_scene_id == "A-1-001"
    assert store.state.scene_history == ["X-0-001"]


def test_go_back_after_several_transitions() -> None:
    store = _make_store()
    store.continue_scene()
    store.choose(0)
    store.continue_scene()
    assert store.state.scene_history == ["X-0-001", "X-0-002", "X-0-003"]

    assert store.go_back() == "X-0-003"
    assert store.state.scene_history == ["X-0-001", "X-0-002"]


def test_maxed_counter_does_not_grow_at_the_cap() -> None:
    store = _make_store()

    store.change_relationship("guard", 1000)
    store.change_relationship("guard", 10)

    assert store.get_relationship("guard") == 100
    assert store.state.stats.relationships_maxed == 1
