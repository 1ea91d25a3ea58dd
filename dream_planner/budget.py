# dream_planner/budget.py
from typing import Iterable, List, Mapping, Optional, Tuple

from dream_planner import settings
from dream_planner.models import BudgetAllocation, MilestoneAllocation


DEFAULT_WEIGHT = 0.10

# Share of the total budget per milestone category; first substring match wins.
# Not normalized across the milestone set, so amounts need not add up to the total.
CATEGORY_WEIGHTS: List[Tuple[str, float]] = [
    ("venue", 0.30),
    ("catering", 0.25),
    ("photography", 0.12),
    ("dress", 0.08),
    ("flowers", 0.05),
    ("music", 0.08),
    ("invitations", 0.02),
    ("planning", 0.10),
]


def _title_of(milestone) -> str:
    if isinstance(milestone, Mapping):
        return str(milestone.get("title") or "")
    return str(getattr(milestone, "title", "") or "")


def category_weight(title: str) -> float:
    lowered = title.lower()
    for key, weight in CATEGORY_WEIGHTS:
        if key in lowered:
            return weight
    return DEFAULT_WEIGHT


def allocate_budget(milestones: Iterable, total_budget: Optional[float]) -> BudgetAllocation:
    if not total_budget:
        return BudgetAllocation(
            total=0,
            by_milestone={},
            currency=settings.CURRENCY,
            message="No budget specified",
        )

    by_milestone = {}
    for milestone in milestones or []:
        title = _title_of(milestone)
        weight = category_weight(title)
        by_milestone[title] = MilestoneAllocation(
            amount=total_budget * weight,
            percentage=round(weight * 100, 1),
        )

    return BudgetAllocation(
        total=total_budget,
        by_milestone=by_milestone,
        currency=settings.CURRENCY,
    )
