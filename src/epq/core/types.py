"""Shared type aliases for the core and domain layers."""
from typing import Literal, Union

GamePath = Literal["A", "B", "C"]
TimeOfDay = Literal["morning", "day", "evening", "night"]
WorkAssignment = Literal["kitchen", "laundry", "yard", "infirmary", "chapel", "library"]
SceneKind = Literal["narrative", "dialogue", "choice", "investigation", "ending"]
SaveSlot = Union[int, Literal["auto"]]

__all__ = ["GamePath", "TimeOfDay", "WorkAssignment", "SceneKind", "SaveSlot"]
