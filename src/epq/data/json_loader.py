"""Low-level JSON helpers for repositories."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Tuple

from .errors import DataLoadError


def load_json(path: Path) -> object:
    """Load JSON from disk and raise DataLoadError on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(f"Definition file not found: {path}") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read definition file: {path}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {path}: {exc}") from exc


def load_json_directory(directory: Path, pattern: str = "*.json") -> List[Tuple[Path, object]]:
    """Load every matching file in ``directory`` ordered by file name."""
    if not directory.is_dir():
        raise DataLoadError(f"Definition directory not found: {directory}")
    files = sorted(directory.glob(pattern), key=lambda path: path.name)
    if not files:
        raise DataLoadError(f"No definition files matching '{pattern}' in {directory}")
    return [(path, load_json(path)) for path in files]
