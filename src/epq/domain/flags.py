"""Namespaced story flags.

A flag is a ``category:name`` token. A flag that is present in the player's
flag list is "true"; an absent flag is "false". Flags never carry values.
"""
from __future__ import annotations

from typing import Iterable, List, NamedTuple

FLAG_SEPARATOR = ":"

FLAG_CATEGORIES = {
    "STORY": "story",
    "CHARACTER": "char",
    "LOCATION": "loc",
    "ITEM_USED": "used",
    "QUEST": "quest",
    "ENDING": "ending",
    "COMBAT": "combat",
    "DISCOVERED": "disc",
}


class ParsedFlag(NamedTuple):
    category: str
    name: str


def make_flag(category: str, name: str) -> str:
    """Build a flag token, e.g. ``make_flag("story", "met_warden")``."""
    flag = f"{category}{FLAG_SEPARATOR}{name}"
    if not is_valid_flag(flag):
        raise ValueError(f"Invalid flag components: category={category!r} name={name!r}")
    return flag


def parse_flag(flag: str) -> ParsedFlag | None:
    parts = flag.split(FLAG_SEPARATOR)
    if len(parts) != 2:
        return None
    return ParsedFlag(category=parts[0], name=parts[1])


def is_valid_flag(flag: object) -> bool:
    """Return True when ``flag`` is a string of the form ``category:name``."""
    if not isinstance(flag, str):
        return False
    parsed = parse_flag(flag)
    return parsed is not None and bool(parsed.category) and bool(parsed.name)


def flags_in_category(flags: Iterable[str], category: str) -> List[str]:
    result: List[str] = []
    for flag in flags:
        parsed = parse_flag(flag)
        if parsed is not None and parsed.category == category:
            result.append(flag)
    return result


def has_all_flags(current: Iterable[str], required: Iterable[str]) -> bool:
    current_set = set(current)
    return all(flag in current_set for flag in required)


def has_any_flag(current: Iterable[str], candidates: Iterable[str]) -> bool:
    current_set = set(current)
    return any(flag in current_set for flag in candidates)


def count_set_flags(current: Iterable[str], candidates: Iterable[str]) -> int:
    current_set = set(current)
    return sum(1 for flag in candidates if flag in current_set)


def unset_flags(current: Iterable[str], candidates: Iterable[str]) -> List[str]:
    """Return the candidates that are not currently set, preserving order."""
    current_set = set(current)
    return [flag for flag in candidates if flag not in current_set]
