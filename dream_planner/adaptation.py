# dream_planner/adaptation.py
import logging
from typing import Any

from dream_planner.budget import allocate_budget
from dream_planner.enricher import adjust_for_constraints, calculate_total_duration
from dream_planner.models import RoadmapChanges, RoadmapGenerationResult


logger = logging.getLogger("dream_planner")


def adapt_roadmap(result: RoadmapGenerationResult, changes: Any) -> RoadmapGenerationResult:
    """
    Re-derive an existing roadmap after the user changes budget, timeline or location.
    The input result is left untouched.
    """
    if not isinstance(changes, RoadmapChanges):
        changes = RoadmapChanges.model_validate(changes or {})

    adapted = result.model_copy(deep=True)
    roadmap = adapted.roadmap

    if changes.budget:
        adapted.budget_allocation = allocate_budget(roadmap.milestones, changes.budget)
        roadmap.metadata.estimated_cost = adapted.budget_allocation.total
        logger.info(f"[ADAPT] budget reallocated to {changes.budget}")

    if changes.timeline:
        for milestone in roadmap.milestones:
            milestone.estimated_duration = adjust_for_constraints(
                milestone.estimated_duration, changes.constraints
            )
        roadmap.metadata.total_duration = calculate_total_duration(roadmap.milestones)
        logger.info(f"[ADAPT] timeline changed to '{changes.timeline}', total {roadmap.metadata.total_duration}")

    if changes.location:
        roadmap.metadata.location = changes.location
        logger.info(f"[ADAPT] location changed to '{changes.location}'")

    return adapted
