"""Service layer exports."""

from .autosave import AutoSaveScheduler
from .errors import ChoiceUnavailableError, PathAlreadySetError
from .game_store import (
    GameLoadedEvent,
    GameResetEvent,
    GameStore,
    SceneChangedEvent,
    StateChangedEvent,
    StoreEvent,
    TimeAdvancedEvent,
    TransitionResult,
)
from .save_service import SaveMetadata, SaveRecord, SaveService

__all__ = [
    "AutoSaveScheduler",
    "ChoiceUnavailableError",
    "GameLoadedEvent",
    "GameResetEvent",
    "GameStore",
    "PathAlreadySetError",
    "SaveMetadata",
    "SaveRecord",
    "SaveService",
    "SceneChangedEvent",
    "StateChangedEvent",
    "StoreEvent",
    "TimeAdvancedEvent",
    "TransitionResult",
]
