"""Service-layer exceptions."""

from epq.data.errors import InvalidSaveSlotError, SaveLoadError, SaveNotFoundError


class ChoiceUnavailableError(Exception):
    """Raised when a locked choice is selected."""

    def __init__(self, index: int, reason: str | None) -> None:
        super().__init__(f"Choice {index} is unavailable: {reason}")
        self.index = index
        self.reason = reason


class PathAlreadySetError(ValueError):
    """Raised when a different path is chosen after one is already set."""


__all__ = [
    "ChoiceUnavailableError",
    "InvalidSaveSlotError",
    "PathAlreadySetError",
    "SaveLoadError",
    "SaveNotFoundError",
]
