"""Domain definition exports."""

from .character_def import CHARACTER_CATEGORIES, CharacterDef
from .evidence_def import EvidenceDef
from .item_def import ItemDef
from .scene_def import (
    SCENE_KINDS,
    ChoiceDef,
    HotspotDef,
    RequirementsDef,
    SceneContentDef,
    SceneDef,
    SetDelta,
    StateDeltaDef,
)

__all__ = [
    "CHARACTER_CATEGORIES",
    "CharacterDef",
    "ChoiceDef",
    "EvidenceDef",
    "HotspotDef",
    "ItemDef",
    "RequirementsDef",
    "SCENE_KINDS",
    "SceneContentDef",
    "SceneDef",
    "SetDelta",
    "StateDeltaDef",
]
