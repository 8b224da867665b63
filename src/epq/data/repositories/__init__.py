"""Repository exports."""

from .characters_repo import CharactersRepository
from .evidence_repo import EvidenceRepository
from .items_repo import ItemsRepository
from .scenes_repo import ScenesRepository

__all__ = [
    "CharactersRepository",
    "EvidenceRepository",
    "ItemsRepository",
    "ScenesRepository",
]
