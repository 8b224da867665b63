"""Evidence definition structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EvidenceDef:
    """A piece of evidence gathered on the justice path."""

    id: str
    name: str
    description: str
