from __future__ import annotations

import copy
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from epq.data.repositories import ScenesRepository
from epq.data.save_slots import SaveSlotStore
from epq.domain.state import GameState, GameStats
from epq.domain.timeline import DayTime
from epq.services.errors import SaveLoadError
from epq.services.save_service import SaveService

FIXTURE_DEFINITIONS = Path(__file__).parent / "fixtures" / "data" / "definitions"
FIXED_NOW = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


class _StepClock:
    """Returns a later time on every call."""

    def __init__(self, start: datetime) -> None:
        self._current = start

    def __call__(self) -> datetime:
        now = self._current
        self._current += timedelta(minutes=1)
        return now


def _make_service(tmp_path: Path, clock=None) -> SaveService:
    return SaveService(
        scenes_repo=ScenesRepository(FIXTURE_DEFINITIONS),
        slot_store=SaveSlotStore(tmp_path),
        clock=clock or (lambda: FIXED_NOW),
    )


def _make_state() -> GameState:
    return GameState(
        current_scene_id="A-1-001",
        scene_history=["X-0-001", "X-0-002", "X-0-003", "X-0-002"],
        visited_scenes=["X-0-001", "X-0-002", "X-0-003", "A-1-001"],
        inventory=["key"],
        flags=["story:arrived", "loc:storeroom_key"],
        relationships={"guard": -20, "maria": 100},
        evidence=["ledger"],
        discovered_characters=["guard"],
        current_path="A",
        day_time=DayTime(2, "evening"),
        work_assignment="library",
        stats=GameStats(
            scenes_visited=4,
            choices_made=3,
            items_found=1,
            relationships_maxed=1,
            stage_reached=2,
            path_taken="A",
            play_time_seconds=95,
        ),
    )


def test_serialize_round_trip_preserves_state(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    state = _make_state()

    payload = json.loads(json.dumps(service.serialize(state, 1)))
    record = service.deserialize(payload)

    assert record.game_state == state
    assert record.save_version == SaveService.SAVE_VERSION
    assert record.metadata.current_scene == "A-1-001"
    assert record.metadata.current_path == "A"
    assert record.metadata.day_time == {"day": 2, "period": "evening"}
    assert record.metadata.play_time_seconds == 95
    assert record.metadata.date_string == "Mar 05, 2024 14:30"


def test_save_and_load_through_slots(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    state = _make_state()

    saved = service.save(2, state)
    state.inventory.append("lockpick")
    loaded = service.load(2)

    assert saved.game_state.inventory == ["key"]
    assert loaded is not None
    assert loaded.game_state.inventory == ["key"]
    assert loaded.metadata.slot == 2
    assert service.load(3) is None
    assert service.delete(2) is True
    assert service.load(2) is None


def test_autosave_slot(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    assert not service.has_autosave()

    service.save("auto", _make_state())

    assert service.has_autosave()
    assert all(not entry.exists for entry in service.list_slots())


def test_most_recent_slot_uses_timestamps(tmp_path: Path) -> None:
    service = _make_service(tmp_path, clock=_StepClock(FIXED_NOW))
    assert service.most_recent_slot() is None

    service.save(3, _make_state())
    service.save(1, _make_state())
    service.save("auto", _make_state())

    assert service.most_recent_slot() == 1


def test_duplicate_set_entries_are_dropped(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    payload = service.serialize(_make_state(), 1)
    payload["game_state"]["inventory"] = ["key", "key", "lockpick"]

    record = service.deserialize(payload)

    assert record.game_state.inventory == ["key", "lockpick"]
    assert record.game_state.scene_history == ["X-0-001", "X-0-002", "X-0-003", "X-0-002"]


@pytest.mark.parametrize(
    ("section", "key", "value"),
    [
        (None, "save_version", 99),
        ("game_state", "current_scene_id", "X-9-999"),
        ("game_state", "scene_history", ["X-0-001"] * 21),
        ("game_state", "scene_history", ["X-9-999"]),
        ("game_state", "inventory", "key"),
        ("game_state", "relationships", {"guard": 101}),
        ("game_state", "relationships", {"guard": "high"}),
        ("game_state", "current_path", "D"),
        ("game_state", "day_time", {"day": 7, "period": "morning"}),
        ("game_state", "day_time", {"day": 1, "period": "noon"}),
        ("game_state", "work_assignment", "mines"),
        ("game_state", "stats", {"choices_made": -1}),
        ("game_state", "stats", {"items_found": True}),
        ("metadata", "timestamp", "yesterday"),
        ("metadata", "slot", 1.5),
    ],
)
def test_invalid_payloads_are_rejected(tmp_path: Path, section: str | None, key: str, value: object) -> None:
    service = _make_service(tmp_path)
    payload = copy.deepcopy(service.serialize(_make_state(), 1))
    target = payload if section is None else payload[section]
    target[key] = value

    with pytest.raises(SaveLoadError):
        service.deserialize(payload)


def test_missing_sections(tmp_path: Path) -> None:
    service = _make_service(tmp_path)

    with pytest.raises(SaveLoadError):
        service.deserialize({"save_version": 1, "metadata": {}})
    with pytest.raises(SaveLoadError):
        service.deserialize([])  # type: ignore[arg-type]


def test_corrupt_slot_file_raises_on_load(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    service.slot_store.slot_path(1).write_text("not json", encoding="utf-8")

    with pytest.raises(SaveLoadError):
        service.load(1)


def test_export_and_import(tmp_path: Path) -> None:
    service = _make_service(tmp_path)
    assert service.export_slot(1) is None
    service.save(1, _make_state())

    exported = service.export_slot(1)
    assert exported is not None
    assert json.loads(exported)["game_state"]["current_scene_id"] == "A-1-001"

    record = service.import_slot(3, exported)

    assert record.metadata.slot == 3
    loaded = service.load(3)
    assert loaded is not None
    assert loaded.game_state == _make_state()


def test_import_rejects_invalid_text(tmp_path: Path) -> None:
    service = _make_service(tmp_path)

    with pytest.raises(SaveLoadError):
        service.import_slot(1, "{broken")
    with pytest.raises(SaveLoadError):
        service.import_slot(1, json.dumps({"save_version": 1}))
    assert service.load(1) is None
