from epq.domain.timeline import (
    DayTime,
    advance_time,
    calculate_progress,
    compare_times,
    format_day_time,
    get_period_info,
    is_after,
    is_before,
    is_equal,
    is_final_day,
    is_time_between,
    is_valid_time,
    path_c_start_time,
    remaining_days,
    set_time,
)


def test_advance_rolls_night_into_next_morning() -> None:
    assert advance_time(DayTime(1, "morning")) == DayTime(1, "day")
    assert advance_time(DayTime(2, "night")) == DayTime(3, "morning")
    assert advance_time(DayTime(6, "night")) is None


def test_set_time_validates_ranges() -> None:
    assert set_time(4, "evening") == DayTime(4, "evening")
    assert set_time(0, "morning") is None
    assert set_time(7, "morning") is None
    assert set_time(2, "noon") is None
    assert not is_valid_time(None)
    assert not is_valid_time(DayTime(True, "day"))  # type: ignore[arg-type]


def test_comparisons_order_by_day_then_period() -> None:
    early = DayTime(2, "night")
    late = DayTime(3, "morning")

    assert compare_times(early, late) < 0
    assert compare_times(late, late) == 0
    assert is_before(early, late)
    assert is_after(late, early)
    assert is_equal(early, DayTime(2, "night"))
    assert is_time_between(DayTime(2, "night"), early, late)
    assert not is_time_between(DayTime(3, "day"), early, late)
    assert sorted([late, early], key=DayTime.sort_key) == [early, late]


def test_progress_and_remaining_days() -> None:
    assert calculate_progress(path_c_start_time()) == 0
    assert calculate_progress(DayTime(2, "morning")) == 17
    assert calculate_progress(DayTime(6, "night")) == 96
    assert remaining_days(DayTime(2, "day")) == 4
    assert is_final_day(DayTime(6, "morning"))
    assert not is_final_day(DayTime(5, "night"))


def test_formatting() -> None:
    assert format_day_time(DayTime(3, "evening")) == "Day 3, Evening"
    assert format_day_time(None) == "Time not set"
    assert get_period_info("night").name == "Night"
