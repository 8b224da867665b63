from __future__ import annotations

from pathlib import Path

from epq.data.repositories import ItemsRepository, ScenesRepository
from epq.data.save_slots import SaveSlotStore
from epq.domain.timeline import DayTime
from epq.presentation.cli import app
from epq.presentation.cli.config import DEFAULT_CONFIG
from epq.services import GameStore, SaveService


def _make_store() -> GameStore:
    store = GameStore(ScenesRepository())
    store.enter_start_scene()
    return store


def _feed_input(monkeypatch, answers: list[str]) -> None:
    remaining = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(remaining))


def test_entering_justice_path_starts_the_clock() -> None:
    store = _make_store()
    store.go_to_scene("C-1-001")

    app._after_move(store)

    assert store.get_path() == "C"
    assert store.get_day_time() == DayTime(1, "morning")


def test_justice_path_moves_advance_time_and_pick_assignment() -> None:
    store = _make_store()
    store.go_to_scene("C-1-001")
    app._after_move(store)

    store.choose(0)
    app._after_move(store)

    assert store.get_work_assignment() == "library"
    assert store.get_day_time() == DayTime(1, "day")
    assert store.has_evidence("warden_ledger")


def test_running_out_of_time_ends_the_game() -> None:
    store = _make_store()
    store.go_to_scene("C-1-001")
    app._after_move(store)
    store.set_day_time(6, "night")

    store.choose(1)
    app._after_move(store)

    assert store.state.current_scene_id == "END-3-TIMEOUT"
    assert store.has_flag("ending:timeout")


def test_other_paths_do_not_use_the_clock() -> None:
    store = _make_store()
    store.go_to_scene("A-1-001")
    app._after_move(store)
    store.choose(0)
    app._after_move(store)

    assert store.get_path() == "A"
    assert store.get_day_time() is None


def test_scene_loop_continues_and_returns_to_menu(monkeypatch, capsys) -> None:
    store = _make_store()
    settings = dict(DEFAULT_CONFIG, text_speed="instant")
    _feed_input(monkeypatch, ["", "q"])

    outcome = app._run_scene_loop(store, ItemsRepository(), settings)

    assert outcome == "menu"
    assert store.state.current_scene_id == "X-0-002"
    assert "Officer Ramirez" in capsys.readouterr().out


def test_scene_loop_reports_locked_choices(monkeypatch, capsys) -> None:
    store = _make_store()
    store.go_to_scene("A-1-001")
    app._after_move(store)
    settings = dict(DEFAULT_CONFIG, text_speed="instant")
    _feed_input(monkeypatch, ["2", "q"])

    app._run_scene_loop(store, ItemsRepository(), settings)

    out = capsys.readouterr().out
    assert "That choice is locked: Requires: spoon" in out
    assert store.state.current_scene_id == "A-1-001"


def test_print_event_announces_items(capsys) -> None:
    store = _make_store()
    store.subscribe(app._print_event)

    store.add_item("spoon")
    store.change_relationship("maria", 5)

    out = capsys.readouterr().out
    assert "- Obtained: spoon" in out
    assert "- maria relationship is now 5" in out


def test_summary_lists_score(capsys) -> None:
    store = _make_store()
    store.go_to_scene("X-0-002")

    app._render_summary(store)

    assert "Scenes visited: 2" in capsys.readouterr().out


def test_validate_definitions(capsys) -> None:
    from epq.main import validate

    fixtures = Path(__file__).parent / "fixtures" / "data" / "definitions"

    assert validate(str(fixtures)) == 0
    assert "Scene graph OK." in capsys.readouterr().out


def test_status_shows_relationship_labels(capsys) -> None:
    store = _make_store()
    store.set_relationship("maria", 65)

    app._render_status(store)

    assert "maria: 65 (Trusted Friend)" in capsys.readouterr().out


def test_load_menu_lists_slots_from_the_store(tmp_path: Path, monkeypatch, capsys) -> None:
    scenes_repo = ScenesRepository()
    store = GameStore(
        scenes_repo,
        save_service=SaveService(scenes_repo=scenes_repo, slot_store=SaveSlotStore(tmp_path)),
    )
    store.enter_start_scene()
    store.save_to_slot(2)
    monkeypatch.setattr(app.config, "get_save_dir", lambda: tmp_path / "elsewhere")
    _feed_input(monkeypatch, ["2"])

    assert app._load_slot_menu(store) is True

    out = capsys.readouterr().out
    assert "Slot 1: empty" in out
    assert "Slot 2: X-0-001" in out


def test_scene_loop_examines_hotspots(monkeypatch, capsys) -> None:
    store = _make_store()
    store.go_to_scene("C-1-002")
    app._after_move(store)
    settings = dict(DEFAULT_CONFIG, text_speed="instant")
    _feed_input(monkeypatch, ["h1", "h9", "q"])

    app._run_scene_loop(store, ItemsRepository(), settings)

    out = capsys.readouterr().out
    assert "h1. Leather-bound ledger" in out
    assert "Nothing else stands out." in out
    assert "There is nothing like that here." in out
    assert store.has_flag("disc:ledger_payments")
    assert store.state.current_scene_id == "C-1-002"
    assert store.get_day_time() == DayTime(1, "morning")


def test_hotspot_leading_elsewhere_counts_as_a_move(monkeypatch) -> None:
    store = _make_store()
    store.go_to_scene("C-1-002")
    app._after_move(store)
    settings = dict(DEFAULT_CONFIG, text_speed="instant")
    _feed_input(monkeypatch, ["h2", "q"])

    app._run_scene_loop(store, ItemsRepository(), settings)

    assert store.state.current_scene_id == "C-1-011"
    assert store.has_evidence("missing_prisoner_list")
    assert store.get_day_time() == DayTime(1, "day")
