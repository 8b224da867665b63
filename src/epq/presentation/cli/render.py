"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import sys
import textwrap
import time
from typing import Iterable, Sequence

from epq.domain.requirements import ChoiceAvailability

# Seconds per character for the typewriter effect.
TEXT_SPEED_DELAYS = {
    "slow": 0.04,
    "medium": 0.015,
    "fast": 0.004,
    "instant": 0.0,
}
_WRAP_WIDTH = 78


def debug_enabled() -> bool:
    """Return True only when EPQ_DEBUG is explicitly set to '1'."""
    return os.getenv("EPQ_DEBUG") == "1"


def wrap_paragraphs(text: str, width: int = _WRAP_WIDTH) -> list[str]:
    """Wrap each paragraph on word boundaries, keeping blank lines between them."""
    lines: list[str] = []
    for index, paragraph in enumerate(text.split("\n\n")):
        if index:
            lines.append("")
        lines.extend(textwrap.wrap(paragraph, width=width, break_long_words=False) or [""])
    return lines


def type_out(text: str, text_speed: str = "instant") -> None:
    delay = TEXT_SPEED_DELAYS.get(text_speed, 0.0)
    if delay <= 0:
        print(text)
        return
    for char in text:
        sys.stdout.write(char)
        sys.stdout.flush()
        time.sleep(delay)
    sys.stdout.write("\n")


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_scene(scene_id: str, speaker: str | None, pages: Sequence[str], text_speed: str) -> None:
    render_heading(speaker or "Story")
    if debug_enabled():
        print(f"[{scene_id}]")
    for index, page in enumerate(pages):
        if index:
            print("\n---")
        for line in wrap_paragraphs(page):
            type_out(line, text_speed)


def render_choices(choices: Sequence[ChoiceAvailability]) -> None:
    """Display numbered choices; locked ones show why."""
    if not choices:
        return
    render_heading("Choices")
    for entry in choices:
        label = f"{entry.index + 1}. {entry.choice.text}"
        if not entry.can_select:
            label = f"{label} [locked: {entry.reason}]"
        print(label)


def render_hotspots(labels: Sequence[str]) -> None:
    if not labels:
        return
    render_heading("Look Around")
    for idx, label in enumerate(labels, start=1):
        print(f"h{idx}. {label}")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")
