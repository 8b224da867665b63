"""Base repository implementation for JSON definition data."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, TypeVar

from epq.data import paths
from epq.data.errors import DataValidationError
from epq.data.json_loader import load_json

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Lazy loading and caching shared by every definition repository.

    Subclasses implement ``_build``; repositories spread over several files
    override ``_load_definitions`` instead.
    """

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    def _get_file_path(self) -> Path:
        return paths.get_definitions_path(self._base_path) / self._filename

    def _load_raw(self) -> dict[str, object]:
        file_path = self._get_file_path()
        raw = load_json(file_path)
        if not isinstance(raw, dict):
            raise DataValidationError(f"Expected top-level object in {file_path}")
        return raw

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        """Convert a raw dict into typed definitions."""
        raise NotImplementedError

    def _load_definitions(self) -> Dict[str, T]:
        return self._build(self._load_raw())

    def _table(self) -> Dict[str, T]:
        if self._definitions is None:
            self._definitions = self._load_definitions()
        return self._definitions

    def get(self, def_id: str) -> T:
        """Return a definition by id."""
        try:
            return self._table()[def_id]
        except KeyError as exc:
            raise KeyError(def_id) from exc

    def exists(self, def_id: str) -> bool:
        return def_id in self._table()

    def count(self) -> int:
        return len(self._table())

    def all(self) -> list[T]:
        """Return all definitions sorted deterministically by id."""
        table = self._table()
        return [table[key] for key in sorted(table)]

    def reload(self) -> None:
        """Drop the cache so the next access re-reads the files."""
        self._definitions = None

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @classmethod
    def _optional_str(cls, value: object, context: str) -> str | None:
        if value is None:
            return None
        return cls._require_str(value, context)

    @classmethod
    def _str_list(cls, value: object, context: str) -> tuple[str, ...]:
        if value is None:
            return ()
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list if provided.")
        return tuple(cls._require_str(entry, f"{context}[{index}]") for index, entry in enumerate(value))
