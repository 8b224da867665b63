"""Item definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class ItemDef:
    """Collectable inventory item."""

    id: str
    name: str
    description: str
    tags: Tuple[str, ...] = ()

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags
