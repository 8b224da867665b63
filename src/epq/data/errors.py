"""Custom exceptions for data loading and validation."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when JSON files are missing or invalid."""


class DataValidationError(DataError):
    """Raised when JSON content fails structural validation."""


class SceneNotFoundError(KeyError):
    """Raised when a scene id is absent from the loaded scene table."""

    def __init__(self, scene_id: str) -> None:
        super().__init__(scene_id)
        self.scene_id = scene_id

    def __str__(self) -> str:
        return f"Scene not found: {self.scene_id}"


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""


class InvalidSaveSlotError(SaveLoadError, ValueError):
    """Raised for slot identifiers outside the configured range."""


class SaveNotFoundError(SaveLoadError):
    """Raised when reading a slot that holds no save."""
