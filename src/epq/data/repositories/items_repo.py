"""Items repository."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from epq.data.errors import DataValidationError
from epq.data.repositories.base import RepositoryBase
from epq.domain.defs import ItemDef


class ItemsRepository(RepositoryBase[ItemDef]):
    """Loads and validates item definitions."""

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__("items.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, ItemDef]:
        items: Dict[str, ItemDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Item IDs must be strings.")
            item_data = self._require_mapping(payload, f"item '{raw_id}'")
            items[raw_id] = ItemDef(
                id=raw_id,
                name=self._require_str(item_data.get("name"), f"item '{raw_id}' name"),
                description=self._require_str(item_data.get("description"), f"item '{raw_id}' description"),
                tags=self._str_list(item_data.get("tags"), f"item '{raw_id}' tags"),
            )
        return items

    def ids_with_tag(self, tag: str) -> List[str]:
        """Ids of items carrying ``tag``, sorted."""
        return [item.id for item in self.all() if item.has_tag(tag)]
