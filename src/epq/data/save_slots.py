"""File-system helpers for save slot storage."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from epq.core.types import SaveSlot
from epq.data.errors import InvalidSaveSlotError, SaveLoadError, SaveNotFoundError

logger = logging.getLogger(__name__)

AUTO_SAVE_SLOT = "auto"
DEFAULT_SLOT_COUNT = 3


@dataclass(slots=True)
class SlotMetadata:
    """Describes the contents of a save slot for menu display."""

    slot: SaveSlot
    exists: bool
    metadata: Dict[str, Any] | None = None
    is_corrupt: bool = False


class SaveSlotStore:
    """Stores one JSON document per slot inside ``base_dir``.

    Manual slots are numbered ``1..slot_count``; the ``"auto"`` slot is
    reserved for autosaves and never listed with the manual ones.
    """

    def __init__(self, base_dir: Path | str, slot_count: int = DEFAULT_SLOT_COUNT) -> None:
        self._base_dir = Path(base_dir)
        self._slot_count = slot_count

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def slot_count(self) -> int:
        return self._slot_count

    def manual_slots(self) -> List[int]:
        return list(range(1, self._slot_count + 1))

    def list_slots(self) -> List[SlotMetadata]:
        """Return metadata for each manual slot."""
        return [self.describe_slot(slot) for slot in self.manual_slots()]

    def describe_slot(self, slot: SaveSlot) -> SlotMetadata:
        self.validate_slot(slot)
        path = self.slot_path(slot)
        if not path.exists():
            return SlotMetadata(slot=slot, exists=False)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Save slot %s at %s is unreadable", slot, path)
            return SlotMetadata(slot=slot, exists=True, is_corrupt=True)
        raw_metadata = payload.get("metadata") if isinstance(payload, dict) else None
        if not isinstance(raw_metadata, dict):
            return SlotMetadata(slot=slot, exists=True, is_corrupt=True)
        return SlotMetadata(slot=slot, exists=True, metadata=raw_metadata)

    def slot_exists(self, slot: SaveSlot) -> bool:
        """Return True if the slot has data on disk."""
        self.validate_slot(slot)
        return self.slot_path(slot).exists()

    def read_slot(self, slot: SaveSlot) -> Dict[str, Any]:
        """Load and parse the payload stored in the requested slot."""
        self.validate_slot(slot)
        path = self.slot_path(slot)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise SaveNotFoundError(f"Save slot {slot} is empty.") from exc
        except OSError as exc:
            raise SaveLoadError(f"Unable to read save slot {slot}: {exc}") from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SaveLoadError(f"Save slot {slot} contains invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise SaveLoadError(f"Save slot {slot} must contain a JSON object.")
        return payload

    def write_slot(self, slot: SaveSlot, payload: Dict[str, Any]) -> Path:
        """Persist the payload into the requested slot, replacing any previous save."""
        self.validate_slot(slot)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        path = self.slot_path(slot)
        temp_path = path.with_suffix(".json.tmp")
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(temp_path, path)
        return path

    def delete_slot(self, slot: SaveSlot) -> bool:
        """Delete the slot payload; return False when there was nothing to delete."""
        self.validate_slot(slot)
        try:
            self.slot_path(slot).unlink()
        except FileNotFoundError:
            return False
        return True

    def slot_path(self, slot: SaveSlot) -> Path:
        return self._base_dir / f"slot_{slot}.json"

    def validate_slot(self, slot: object) -> None:
        if slot == AUTO_SAVE_SLOT:
            return
        if isinstance(slot, bool) or not isinstance(slot, int) or not 1 <= slot <= self._slot_count:
            raise InvalidSaveSlotError(
                f"Slot must be '{AUTO_SAVE_SLOT}' or an integer between 1 and {self._slot_count}, got {slot!r}."
            )
