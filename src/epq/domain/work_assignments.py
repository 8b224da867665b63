"""Work assignments available on the justice path.

Each assignment fixes which items, evidence and characters the player can
reach during the working periods of the day.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from epq.core.types import WorkAssignment

WORK_ASSIGNMENTS: Tuple[WorkAssignment, ...] = (
    "kitchen",
    "laundry",
    "yard",
    "infirmary",
    "chapel",
    "library",
)


@dataclass(frozen=True, slots=True)
class WorkAssignmentDef:
    id: WorkAssignment
    name: str
    description: str
    location: str
    opportunities: Tuple[str, ...]
    items: Tuple[str, ...]
    evidence: Tuple[str, ...]
    characters: Tuple[str, ...]


_ASSIGNMENTS: Dict[WorkAssignment, WorkAssignmentDef] = {
    "kitchen": WorkAssignmentDef(
        id="kitchen",
        name="Kitchen Duty",
        description="Prepare meals for prisoners and staff",
        location="Prison Kitchen",
        opportunities=(
            "Access to kitchen knives and tools",
            "Overhear guard conversations during meals",
            "Build rapport with kitchen staff",
            "Access to food storage areas",
        ),
        items=("kitchen_knife", "master_key_copy", "food_rations"),
        evidence=("food_poisoning_records",),
        characters=("chef_gomez", "guard_torres"),
    ),
    "laundry": WorkAssignmentDef(
        id="laundry",
        name="Laundry Service",
        description="Wash and distribute prison uniforms",
        location="Laundry Room",
        opportunities=(
            "Access to guard uniforms for disguise",
            "Chemical supplies for cleaning",
            "Meet prisoners from all blocks",
            "Access to laundry carts for transport",
        ),
        items=("guard_uniform", "cleaning_chemicals", "laundry_cart_access"),
        evidence=("uniform_theft_evidence",),
        characters=("laundry_supervisor", "maria"),
    ),
    "yard": WorkAssignmentDef(
        id="yard",
        name="Yard Maintenance",
        description="Maintain outdoor areas and gardens",
        location="Prison Yard",
        opportunities=(
            "Study perimeter walls and fences",
            "Access to gardening tools",
            "Outdoor time and fresh air",
            "Observe guard patrol patterns",
        ),
        items=("gardening_tools", "rope", "perimeter_map"),
        evidence=("escape_attempt_reports",),
        characters=("gardener_carlos", "yard_guard"),
    ),
    "infirmary": WorkAssignmentDef(
        id="infirmary",
        name="Infirmary Assistant",
        description="Help medical staff with basic tasks",
        location="Medical Wing",
        opportunities=(
            "Access to medical supplies and drugs",
            "Build relationship with doctor/nurses",
            "Access to medical records",
            "Learn about guard and staff health",
        ),
        items=("sedatives", "medical_supplies", "patient_records"),
        evidence=("medical_malpractice_records", "prisoner_injury_logs"),
        characters=("doctor_reyes", "nurse_santos"),
    ),
    "chapel": WorkAssignmentDef(
        id="chapel",
        name="Chapel Services",
        description="Assist with religious services and maintenance",
        location="Prison Chapel",
        opportunities=(
            "Private conversations with chaplain",
            "Access to chapel during off-hours",
            "Meet prisoners seeking guidance",
            "Access to chapel records and archives",
        ),
        items=("chaplain_trust", "chapel_key", "archived_documents"),
        evidence=("chaplain_witness_statement",),
        characters=("chaplain_ortiz",),
    ),
    "library": WorkAssignmentDef(
        id="library",
        name="Library Assistant",
        description="Organize books and help with prison records",
        location="Prison Library",
        opportunities=(
            "Access to legal resources",
            "Research prison history and layout",
            "Access to administrative records",
            "Build relationship with librarian",
        ),
        items=("legal_books", "prison_blueprints", "administrative_access"),
        evidence=("warden_ledger", "missing_prisoner_list"),
        characters=("librarian_julia", "records_clerk"),
    ),
}


def is_valid_work_assignment(value: object) -> bool:
    return isinstance(value, str) and value in _ASSIGNMENTS


def get_work_assignment(assignment: WorkAssignment) -> WorkAssignmentDef:
    try:
        return _ASSIGNMENTS[assignment]
    except KeyError as exc:
        raise ValueError(f"Unknown work assignment: {assignment!r}") from exc


def all_work_assignments() -> list[WorkAssignmentDef]:
    return [_ASSIGNMENTS[assignment] for assignment in WORK_ASSIGNMENTS]


def get_assignment_items(assignment: WorkAssignment) -> Tuple[str, ...]:
    return get_work_assignment(assignment).items


def get_assignment_evidence(assignment: WorkAssignment) -> Tuple[str, ...]:
    return get_work_assignment(assignment).evidence


def get_assignment_characters(assignment: WorkAssignment) -> Tuple[str, ...]:
    return get_work_assignment(assignment).characters


def get_recommended_assignment(
    has_evidence_goal: bool,
    has_social_goal: bool,
    has_stealth_goal: bool,
) -> WorkAssignment | None:
    """Evidence goals beat social goals, which beat stealth goals."""
    if has_evidence_goal:
        return "library"
    if has_social_goal:
        return "kitchen"
    if has_stealth_goal:
        return "yard"
    return None


def format_work_assignment(assignment: WorkAssignment | None) -> str:
    if assignment is None:
        return "No assignment"
    definition = get_work_assignment(assignment)
    return f"{definition.name} - {definition.location}"
