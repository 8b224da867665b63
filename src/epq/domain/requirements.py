"""Evaluate choice requirements against a player snapshot.

A snapshot is anything exposing ``inventory``, ``flags``, ``evidence`` and
``relationships``; a GameState qualifies. Evaluation never raises and never
mutates its inputs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Sequence, Tuple

from epq.domain.defs import ChoiceDef, RequirementsDef

# Raw authoring keys accepted for each family, camelCase first.
_FAMILY_KEYS: Dict[str, Tuple[str, ...]] = {
    "items": ("items",),
    "not_items": ("notItems", "not_items"),
    "flags": ("flags",),
    "not_flags": ("notFlags", "not_flags"),
    "evidence": ("evidence",),
    "not_evidence": ("notEvidence", "not_evidence"),
    "relationships": ("relationships",),
    "max_relationships": ("maxRelationships", "max_relationships"),
}


class RequirementCheck(NamedTuple):
    can_select: bool
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ChoiceAvailability:
    index: int
    choice: ChoiceDef
    can_select: bool
    reason: str | None = None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [entry for entry in value if isinstance(entry, str)]


def _score_map(value: Any) -> Dict[str, int]:
    if not isinstance(value, Mapping):
        return {}
    result: Dict[str, int] = {}
    for key, score in value.items():
        if isinstance(key, str) and isinstance(score, (int, float)) and not isinstance(score, bool):
            result[key] = score  # type: ignore[assignment]
    return result


def coerce_requirements(raw: RequirementsDef | Mapping[str, Any] | None) -> RequirementsDef:
    """Normalize a requirements value into a RequirementsDef.

    Families with an unexpected shape are dropped rather than reported.
    """
    if raw is None:
        return RequirementsDef()
    if isinstance(raw, RequirementsDef):
        return raw
    if not isinstance(raw, Mapping):
        return RequirementsDef()

    def pick(family: str) -> Any:
        for key in _FAMILY_KEYS[family]:
            if key in raw:
                return raw[key]
        return None

    return RequirementsDef(
        items=tuple(_string_list(pick("items"))),
        not_items=tuple(_string_list(pick("not_items"))),
        flags=tuple(_string_list(pick("flags"))),
        not_flags=tuple(_string_list(pick("not_flags"))),
        evidence=tuple(_string_list(pick("evidence"))),
        not_evidence=tuple(_string_list(pick("not_evidence"))),
        relationships=_score_map(pick("relationships")),
        max_relationships=_score_map(pick("max_relationships")),
    )


def _missing(required: Iterable[str], owned: Iterable[str]) -> List[str]:
    owned_set = set(owned)
    return [entry for entry in required if entry not in owned_set]


def _present(forbidden: Iterable[str], owned: Iterable[str]) -> List[str]:
    owned_set = set(owned)
    return [entry for entry in forbidden if entry in owned_set]


def check_requirements(
    requirements: RequirementsDef | Mapping[str, Any] | None,
    snapshot: Any,
) -> RequirementCheck:
    """Return whether the requirements hold and, if not, why.

    Families are checked in a fixed order and the first failure is reported.
    """
    req = coerce_requirements(requirements)
    if req.is_empty:
        return RequirementCheck(True)

    inventory = snapshot.inventory
    flags = snapshot.flags
    evidence = snapshot.evidence
    relationships: Mapping[str, int] = snapshot.relationships

    missing = _missing(req.items, inventory)
    if missing:
        return RequirementCheck(False, f"Requires: {', '.join(missing)}")

    forbidden = _present(req.not_items, inventory)
    if forbidden:
        return RequirementCheck(False, f"Cannot have: {', '.join(forbidden)}")

    missing = _missing(req.flags, flags)
    if missing:
        return RequirementCheck(False, f"Requires flags: {', '.join(missing)}")

    forbidden = _present(req.not_flags, flags)
    if forbidden:
        return RequirementCheck(False, f"Cannot have flags: {', '.join(forbidden)}")

    missing = _missing(req.evidence, evidence)
    if missing:
        return RequirementCheck(False, f"Requires evidence: {', '.join(missing)}")

    forbidden = _present(req.not_evidence, evidence)
    if forbidden:
        return RequirementCheck(False, f"Cannot have evidence: {', '.join(forbidden)}")

    for character_id, minimum in req.relationships.items():
        current = relationships.get(character_id, 0)
        if current < minimum:
            return RequirementCheck(
                False,
                f"Requires {character_id} relationship ≥ {minimum} (current: {current})",
            )

    for character_id, maximum in req.max_relationships.items():
        current = relationships.get(character_id, 0)
        if current > maximum:
            return RequirementCheck(
                False,
                f"Requires {character_id} relationship ≤ {maximum} (current: {current})",
            )

    return RequirementCheck(True)


def choices_with_availability(choices: Sequence[ChoiceDef], snapshot: Any) -> List[ChoiceAvailability]:
    result: List[ChoiceAvailability] = []
    for index, choice in enumerate(choices):
        check = check_requirements(choice.requirements, snapshot)
        result.append(ChoiceAvailability(index, choice, check.can_select, check.reason))
    return result


def filter_available_choices(
    choices: Sequence[ChoiceDef],
    snapshot: Any,
    hide_unavailable: bool = False,
) -> List[ChoiceAvailability]:
    """Annotate choices, optionally dropping the locked ones."""
    annotated = choices_with_availability(choices, snapshot)
    if hide_unavailable:
        return [entry for entry in annotated if entry.can_select]
    return annotated
