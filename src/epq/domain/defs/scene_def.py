"""Scene definition structures used by the runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from epq.core.types import SceneKind

SCENE_KINDS: Tuple[SceneKind, ...] = ("narrative", "dialogue", "choice", "investigation", "ending")


@dataclass(frozen=True, slots=True)
class SetDelta:
    """Ids to add to and remove from a set-like collection."""

    add: Tuple[str, ...] = ()
    remove: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.add and not self.remove


@dataclass(frozen=True, slots=True)
class StateDeltaDef:
    """State changes attached to a scene (on entry) or a choice (on selection).

    Flags use ``add``/``remove`` for set/unset. Relationship values are deltas,
    not absolute scores.
    """

    flags: SetDelta = field(default_factory=SetDelta)
    items: SetDelta = field(default_factory=SetDelta)
    evidence: SetDelta = field(default_factory=SetDelta)
    relationships: Dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return (
            self.flags.is_empty
            and self.items.is_empty
            and self.evidence.is_empty
            and not self.relationships
        )


@dataclass(frozen=True, slots=True)
class RequirementsDef:
    """Conjunction of predicate families gating a choice."""

    items: Tuple[str, ...] = ()
    not_items: Tuple[str, ...] = ()
    flags: Tuple[str, ...] = ()
    not_flags: Tuple[str, ...] = ()
    evidence: Tuple[str, ...] = ()
    not_evidence: Tuple[str, ...] = ()
    relationships: Dict[str, int] = field(default_factory=dict)
    max_relationships: Dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (
            self.items
            or self.not_items
            or self.flags
            or self.not_flags
            or self.evidence
            or self.not_evidence
            or self.relationships
            or self.max_relationships
        )


@dataclass(frozen=True, slots=True)
class ChoiceDef:
    """Represents a selectable choice on a scene."""

    text: str
    next_scene_id: str
    requirements: RequirementsDef = field(default_factory=RequirementsDef)
    state_deltas: StateDeltaDef = field(default_factory=StateDeltaDef)


@dataclass(frozen=True, slots=True)
class HotspotDef:
    """Clickable point of interest inside an investigation scene."""

    id: str
    label: str
    next_scene_id: str | None = None
    state_deltas: StateDeltaDef = field(default_factory=StateDeltaDef)


@dataclass(frozen=True, slots=True)
class SceneContentDef:
    """Narrative payload of a scene: single text or paginated text."""

    text: str = ""
    pages: Tuple[str, ...] = ()
    speaker: str | None = None
    visual: str | None = None
    hotspots: Tuple[HotspotDef, ...] = ()

    @property
    def is_paginated(self) -> bool:
        return bool(self.pages)

    @property
    def full_text(self) -> str:
        if self.pages:
            return "\n\n".join(self.pages)
        return self.text


@dataclass(frozen=True, slots=True)
class SceneDef:
    """Fully parsed scene."""

    id: str
    kind: SceneKind
    content: SceneContentDef
    choices: Tuple[ChoiceDef, ...] = ()
    next_scene_id: str | None = None
    state_deltas: StateDeltaDef = field(default_factory=StateDeltaDef)

    @property
    def is_ending(self) -> bool:
        return self.kind == "ending"

    @property
    def auto_advances(self) -> bool:
        """True for linear scenes that continue without a choice."""
        return self.next_scene_id is not None and not self.choices
