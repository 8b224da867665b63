"""Day/period clock for the justice path.

The clock runs over ``MAX_DAYS`` days, each split into four periods. Times are
ordered by day first, then by the period's position in ``TIME_PERIODS``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from epq.core.types import TimeOfDay

MAX_DAYS = 6
TIME_PERIODS: Tuple[TimeOfDay, ...] = ("morning", "day", "evening", "night")
TOTAL_PERIODS = MAX_DAYS * len(TIME_PERIODS)


@dataclass(frozen=True, slots=True)
class DayTime:
    """A point on the in-fiction clock."""

    day: int
    period: TimeOfDay

    def sort_key(self) -> Tuple[int, int]:
        return (self.day, TIME_PERIODS.index(self.period))


@dataclass(frozen=True, slots=True)
class TimePeriodInfo:
    id: TimeOfDay
    name: str
    description: str


_PERIOD_INFO: Dict[TimeOfDay, TimePeriodInfo] = {
    "morning": TimePeriodInfo(
        "morning", "Morning", "Early morning hours, prisoners begin their daily routines"
    ),
    "day": TimePeriodInfo("day", "Day", "Midday, when most activities and investigations occur"),
    "evening": TimePeriodInfo("evening", "Evening", "Late afternoon, winding down for the night"),
    "night": TimePeriodInfo("night", "Night", "Nighttime, lockdown in effect"),
}


def get_period_info(period: TimeOfDay) -> TimePeriodInfo:
    return _PERIOD_INFO[period]


def path_c_start_time() -> DayTime:
    return DayTime(day=1, period="morning")


def is_valid_period(period: object) -> bool:
    return isinstance(period, str) and period in TIME_PERIODS


def is_valid_time(day_time: DayTime | None) -> bool:
    if day_time is None:
        return False
    return (
        isinstance(day_time.day, int)
        and not isinstance(day_time.day, bool)
        and 1 <= day_time.day <= MAX_DAYS
        and is_valid_period(day_time.period)
    )


def set_time(day: int, period: str) -> DayTime | None:
    """Return a DayTime for the given values, or None when they are out of range.

    Callers probe speculatively, so invalid input is reported through the
    return value rather than an exception.
    """
    candidate = DayTime(day=day, period=period)  # type: ignore[arg-type]
    if not is_valid_time(candidate):
        return None
    return candidate


def advance_time(current: DayTime) -> DayTime | None:
    """Return the next period, rolling night into the next morning.

    Returns None once the final night has been reached.
    """
    index = TIME_PERIODS.index(current.period)
    if index < len(TIME_PERIODS) - 1:
        return DayTime(day=current.day, period=TIME_PERIODS[index + 1])
    if current.day < MAX_DAYS:
        return DayTime(day=current.day + 1, period=TIME_PERIODS[0])
    return None


def compare_times(first: DayTime, second: DayTime) -> int:
    """Return a negative number, zero or a positive number like ``cmp``."""
    if first.day != second.day:
        return first.day - second.day
    return TIME_PERIODS.index(first.period) - TIME_PERIODS.index(second.period)


def is_before(first: DayTime, second: DayTime) -> bool:
    return compare_times(first, second) < 0


def is_after(first: DayTime, second: DayTime) -> bool:
    return compare_times(first, second) > 0


def is_equal(first: DayTime, second: DayTime) -> bool:
    return first.day == second.day and first.period == second.period


def is_time_between(current: DayTime, start: DayTime, end: DayTime) -> bool:
    """Inclusive on both ends."""
    return not is_before(current, start) and not is_after(current, end)


def calculate_progress(day_time: DayTime) -> int:
    """Percentage of the clock elapsed, rounded to the nearest integer."""
    elapsed = (day_time.day - 1) * len(TIME_PERIODS) + TIME_PERIODS.index(day_time.period)
    # Half-up rounding; built-in round() would round 12.5 down to 12.
    return int(elapsed * 100 / TOTAL_PERIODS + 0.5)


def remaining_days(day_time: DayTime) -> int:
    return MAX_DAYS - day_time.day


def is_final_day(day_time: DayTime) -> bool:
    return day_time.day == MAX_DAYS


def format_day_time(day_time: DayTime | None) -> str:
    if day_time is None:
        return "Time not set"
    return f"Day {day_time.day}, {get_period_info(day_time.period).name}"
