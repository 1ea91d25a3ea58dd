# dream_planner/constraints.py
import logging
from typing import Dict, Iterable, List

from dream_planner.catalog import lookup, normalize_goal_type
from dream_planner.models import BUDGET_CONSTRAINT, TIME_CONSTRAINT, Constraint


logger = logging.getLogger("dream_planner")

MIN_SEQUENCE_LENGTH = 3

# Substrings that mark a milestone as indispensable under a rushed timeline
CRITICAL_MILESTONE_PATTERNS: Dict[str, List[str]] = {
    "wedding": ["budget", "venue", "vendor", "invitations", "wedding_day"],
    "home": ["financial", "mortgage", "house_hunting", "inspection", "closing"],
    "baby": ["prenatal", "nursery", "hospital_bag", "baby_arrival"],
    "relocation": ["visa", "job_search", "housing", "travel", "settling"],
    "business": ["validation", "business_plan", "legal", "product", "launch"],
    "financial": ["goal_definition", "budget", "savings", "monitoring"],
}

BUDGET_CHECKPOINT = "budget_checkpoint_and_review"
FINANCIAL_HEALTH_CHECK = "financial_health_check"


def constraint_types(constraints: Iterable) -> set[str]:
    """Accepts Constraint records, mappings with a 'type' key or bare strings."""
    types = set()
    for c in constraints or []:
        if isinstance(c, Constraint):
            types.add(c.type)
        elif isinstance(c, dict):
            if c.get("type"):
                types.add(str(c["type"]))
        elif isinstance(c, str):
            types.add(c)
    return types


def _compress_for_time(sequence: List[str], goal_type: str) -> List[str]:
    patterns = CRITICAL_MILESTONE_PATTERNS.get(goal_type) or []
    if patterns:
        return [
            entry for entry in sequence
            if any(p.lower() in entry.lower() for p in patterns)
        ]
    # no critical list: keep every other milestone plus the last one
    last = len(sequence) - 1
    return [entry for i, entry in enumerate(sequence) if i % 2 == 0 or i == last]


def _add_budget_checkpoints(sequence: List[str]) -> List[str]:
    sequence = list(sequence)

    planning_index = next(
        (i for i, entry in enumerate(sequence) if "planning" in entry or "budget" in entry),
        -1,
    )
    if planning_index != -1 and planning_index < len(sequence) - 1:
        sequence.insert(planning_index + 1, BUDGET_CHECKPOINT)

    mid_point = len(sequence) // 2
    if 0 < mid_point < len(sequence) - 1:
        sequence.insert(mid_point, FINANCIAL_HEALTH_CHECK)

    return sequence


def adjust(sequence: List[str], constraints: Iterable, goal_type=None) -> List[str]:
    """
    Reshape a catalog sequence according to the user's constraints.

    - time_constraint: keep only the goal type's critical milestones
      (or every other one when the goal type has no critical list)
    - budget_constraint: add a budget checkpoint after the first planning/budget
      stage and a financial health check at the midpoint

    If fewer than MIN_SEQUENCE_LENGTH entries survive, the catalog sequence for
    goal_type is returned untouched. The input list is never mutated.
    """
    goal_type = normalize_goal_type(goal_type)
    types = constraint_types(constraints)
    adjusted = list(sequence)

    if TIME_CONSTRAINT in types:
        adjusted = _compress_for_time(adjusted, goal_type)

    if BUDGET_CONSTRAINT in types:
        adjusted = _add_budget_checkpoints(adjusted)

    if len(adjusted) < MIN_SEQUENCE_LENGTH:
        logger.info(
            f"adjust: only {len(adjusted)} milestone(s) left for '{goal_type}' after constraints "
            f"{sorted(types)}, reverting to the catalog sequence"
        )
        return lookup(goal_type)

    return adjusted


def determine_milestone_sequence(goal_type, constraints: Iterable = ()) -> List[str]:
    return adjust(lookup(goal_type), constraints, goal_type)
