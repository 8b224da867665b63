"""Data layer utilities for loading JSON definitions."""

from .errors import (
    DataLoadError,
    DataValidationError,
    InvalidSaveSlotError,
    SaveLoadError,
    SaveNotFoundError,
    SceneNotFoundError,
)
from .paths import get_definitions_path, get_repo_root, get_scenes_path

__all__ = [
    "DataLoadError",
    "DataValidationError",
    "InvalidSaveSlotError",
    "SaveLoadError",
    "SaveNotFoundError",
    "SceneNotFoundError",
    "get_definitions_path",
    "get_repo_root",
    "get_scenes_path",
]
