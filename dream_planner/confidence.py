# dream_planner/confidence.py
from typing import List

from dream_planner.models import Milestone, UserContext


SIMPLE_WEIGHTS = {
    "budget": 0.3,
    "timeline": 0.3,
    "location": 0.2,
    "preferences": 0.2,
}

EXTENDED_WEIGHTS = {
    "budget": 0.2,
    "timeline": 0.2,
    "location": 0.15,
    "preferences": 0.15,
    "milestone_count": 0.15,
    "detail": 0.15,
}

IDEAL_MILESTONE_RANGE = (6, 12)
MIN_USEFUL_MILESTONES = 4


def _clip(score: float) -> float:
    return round(max(0.0, min(1.0, score)), 4)


def _context_score(user_context: UserContext, weights: dict) -> float:
    score = 0.0
    if user_context.budget:
        score += weights["budget"]
    if user_context.timeline:
        score += weights["timeline"]
    if user_context.location:
        score += weights["location"]
    if user_context.preferences:
        score += weights["preferences"]
    return score


def calculate_confidence(user_context: UserContext) -> float:
    return _clip(_context_score(user_context, SIMPLE_WEIGHTS))


def calculate_extended_confidence(user_context: UserContext, milestones: List[Milestone]) -> float:
    """Also rewards a milestone count in the 6-12 range and a description plus tasks on every milestone."""
    score = _context_score(user_context, EXTENDED_WEIGHTS)

    count = len(milestones or [])
    low, high = IDEAL_MILESTONE_RANGE
    if low <= count <= high:
        score += EXTENDED_WEIGHTS["milestone_count"]
    elif count >= MIN_USEFUL_MILESTONES:
        score += EXTENDED_WEIGHTS["milestone_count"] * 0.7

    if milestones and all(m.description and m.tasks for m in milestones):
        score += EXTENDED_WEIGHTS["detail"]

    return _clip(score)
