from pathlib import Path

import pytest

from epq.data.errors import InvalidSaveSlotError, SaveLoadError, SaveNotFoundError
from epq.data.save_slots import AUTO_SAVE_SLOT, SaveSlotStore


def test_write_read_delete_slot(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path / "saves")
    payload = {"metadata": {"current_scene": "X-0-001"}, "game_state": {}}

    path = store.write_slot(2, payload)

    assert path == tmp_path / "saves" / "slot_2.json"
    assert store.slot_exists(2)
    assert store.read_slot(2) == payload
    assert not (tmp_path / "saves" / "slot_2.json.tmp").exists()
    assert store.delete_slot(2) is True
    assert store.delete_slot(2) is False
    assert not store.slot_exists(2)


def test_reading_empty_slot(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)

    with pytest.raises(SaveNotFoundError):
        store.read_slot(1)


def test_corrupt_slot(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)
    store.slot_path(1).write_text("{oops", encoding="utf-8")
    store.slot_path(2).write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(SaveLoadError):
        store.read_slot(1)
    with pytest.raises(SaveLoadError):
        store.read_slot(2)
    assert store.describe_slot(1).is_corrupt
    assert store.describe_slot(2).is_corrupt


def test_list_slots_covers_manual_slots_only(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)
    store.write_slot(1, {"metadata": {"slot": 1}})
    store.write_slot(AUTO_SAVE_SLOT, {"metadata": {"slot": AUTO_SAVE_SLOT}})

    entries = store.list_slots()

    assert [entry.slot for entry in entries] == [1, 2, 3]
    assert [entry.exists for entry in entries] == [True, False, False]
    assert entries[0].metadata == {"slot": 1}
    assert store.slot_exists(AUTO_SAVE_SLOT)


@pytest.mark.parametrize("slot", [0, 4, "1", True, None, 1.0])
def test_invalid_slots_are_rejected(tmp_path: Path, slot: object) -> None:
    store = SaveSlotStore(tmp_path)

    with pytest.raises(InvalidSaveSlotError):
        store.validate_slot(slot)
    with pytest.raises(ValueError):
        store.slot_exists(slot)  # type: ignore[arg-type]


def test_custom_slot_count(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path, slot_count=5)

    assert store.manual_slots() == [1, 2, 3, 4, 5]
    store.validate_slot(5)
