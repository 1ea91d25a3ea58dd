# dream_planner/milestone_factory.py
import logging
import math
import uuid
from typing import Dict, List, Optional

from dream_planner.models import Milestone, Task


logger = logging.getLogger("dream_planner")

DEFAULT_TEMPLATE = "financial"

MILESTONE_TEMPLATES: Dict[str, List[str]] = {
    "wedding": [
        "Set wedding budget and open savings account",
        "Choose wedding date and book venue",
        "Select and book key vendors (photographer, caterer, florist)",
        "Send save-the-dates and invitations",
        "Final details, rehearsal, and big day!",
    ],
    "engagement": [
        "Research and choose engagement ring",
        "Plan the proposal (location, timing, details)",
        "Pop the question!",
        "Celebrate with family and friends",
        "Announce engagement",
    ],
    "home": [
        "Calculate required deposit and get mortgage advice",
        "Start saving for deposit",
        "Get mortgage pre-approval",
        "Search for properties and schedule viewings",
        "Make offer, complete purchase, and move in!",
    ],
    "baby": [
        "Prepare finances and build emergency fund",
        "Health check-ups and prepare for pregnancy",
        "Set up nursery and get baby essentials",
        "Arrange parental leave and childcare",
        "Welcome your little one!",
    ],
    "travel": [
        "Choose destination and set travel budget",
        "Save for trip and book flights",
        "Book accommodation and plan itinerary",
        "Prepare travel documents and insurance",
        "Enjoy your adventure together!",
    ],
    "career": [
        "Define career goals and create action plan",
        "Update CV, portfolio, and LinkedIn",
        "Network and apply for target opportunities",
        "Prepare for interviews and skill up",
        "Secure new position and transition",
    ],
    "education": [
        "Research programs and admission requirements",
        "Prepare applications and required documents",
        "Apply for programs and scholarships",
        "Secure funding and plan logistics",
        "Start your educational journey!",
    ],
    "financial": [
        "Set financial goals and create budget",
        "Build emergency fund (3-6 months expenses)",
        "Start investing and savings plan",
        "Track progress and adjust as needed",
        "Reach financial milestone!",
    ],
}

# Cost of living relative to Dublin; "default" covers everything unlisted
LOCATION_MULTIPLIERS: Dict[str, float] = {
    "dublin": 1.0,
    "cork": 0.75,
    "galway": 0.7,
    "limerick": 0.65,
    "ireland": 0.8,
    "london": 1.4,
    "manchester": 0.9,
    "edinburgh": 0.95,
    "belfast": 0.7,
    "uk": 1.0,
    "paris": 1.3,
    "berlin": 0.85,
    "amsterdam": 1.1,
    "madrid": 0.75,
    "barcelona": 0.8,
    "rome": 0.85,
    "lisbon": 0.65,
    "default": 0.85,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_location_multiplier(location: Optional[str]) -> float:
    if not location:
        return LOCATION_MULTIPLIERS["default"]

    key = location.lower().strip()
    if key in LOCATION_MULTIPLIERS:
        return LOCATION_MULTIPLIERS[key]

    # "Dublin, Ireland" -> dublin
    for name, multiplier in LOCATION_MULTIPLIERS.items():
        if name in key:
            return multiplier

    return LOCATION_MULTIPLIERS["default"]


def get_milestone_template(goal_type: Optional[str]) -> List[str]:
    return list(MILESTONE_TEMPLATES.get(goal_type or "", MILESTONE_TEMPLATES[DEFAULT_TEMPLATE]))


def get_available_goal_types() -> List[str]:
    return list(MILESTONE_TEMPLATES.keys())


def calculate_monthly_savings(total_cost: float, months: Optional[int]) -> int:
    if not months or months <= 0:
        return 0
    return _round_half_up(total_cost / months)


def generate_milestone(
    goal_type: Optional[str],
    title: str,
    timeline_months: int,
    budget: float,
    location: Optional[str],
    preferences=None,
    description: Optional[str] = None,
) -> Milestone:
    """
    Base milestone record: the goal type's task list and a location adjusted cost.

    `preferences` is accepted for signature compatibility with callers that pass the
    user's preference list; the base record does not use it.
    """
    multiplier = get_location_multiplier(location)
    milestone_id = str(uuid.uuid4())

    tasks = [
        Task(id=f"{milestone_id}_task_{i}", title=task_title)
        for i, task_title in enumerate(get_milestone_template(goal_type))
    ]

    milestone = Milestone(
        id=milestone_id,
        title=title,
        description=description or f"Achieve your {goal_type} goal together",
        estimated_cost=_round_half_up(budget * multiplier),
        duration=f"{timeline_months} months",
        timeline_months=timeline_months,
        tasks=tasks,
        goal_type=goal_type,
        location=location or "Unknown",
        location_multiplier=multiplier,
    )

    logger.debug(
        f"Generated milestone {milestone.id} '{milestone.title}' "
        f"cost={milestone.estimated_cost} timeline={milestone.duration}"
    )
    return milestone
