# dream_planner/enricher.py
"""
Turns a winning sequence of snake_case entries into full milestone records:
titles, dependency chain, duration estimates and partner task assignment.
"""
import math
import re
from typing import Iterable, List, Tuple

from dream_planner.constraints import constraint_types
from dream_planner.milestone_factory import generate_milestone
from dream_planner.models import TIME_CONSTRAINT, Milestone, Task, UserContext


DEFAULT_BUDGET = 10000
DEFAULT_LOCATION = "US"
DEFAULT_DURATION = "1-2 weeks"

# First substring match wins, order matters
DURATION_TABLE: List[Tuple[str, str]] = [
    ("research", "1-2 weeks"),
    ("planning", "2-3 weeks"),
    ("booking", "1-2 weeks"),
    ("shopping", "2-4 weeks"),
    ("preparation", "3-6 weeks"),
    ("execution", "1 day - 1 week"),
    ("review", "1 week"),
]

CREATIVE_KEYWORDS = ["design", "style", "decor", "flowers", "aesthetic"]
LOGISTICAL_KEYWORDS = ["book", "schedule", "coordinate", "confirm", "budget"]

_NUMBER_RE = re.compile(r"\d+")


def title_from_entry(entry: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in entry.split("_"))


def adjust_for_constraints(duration: str, constraints: Iterable) -> str:
    """Halves both bounds of a duration range when the user is short on time."""
    if TIME_CONSTRAINT not in constraint_types(constraints):
        return duration

    numbers = [int(n) for n in _NUMBER_RE.findall(duration or "")]
    if not numbers:
        return duration
    low = numbers[0]
    high = numbers[1] if len(numbers) > 1 else numbers[0]
    return f"{math.ceil(low / 2)}-{math.ceil(high / 2)} weeks"


def estimate_duration(entry: str, constraints: Iterable = ()) -> str:
    for key, duration in DURATION_TABLE:
        if key in entry:
            return adjust_for_constraints(duration, constraints)
    return DEFAULT_DURATION


def calculate_total_duration(milestones: List[Milestone]) -> str:
    total_weeks = 0.0
    for m in milestones:
        duration = m.estimated_duration or m.duration
        numbers = [int(n) for n in _NUMBER_RE.findall(duration or "")]
        if numbers:
            total_weeks += sum(numbers) / len(numbers)

    if total_weeks < 4:
        return f"{total_weeks:.0f} weeks"
    if total_weeks < 52:
        return f"{total_weeks / 4:.1f} months"
    return f"{total_weeks / 52:.1f} years"


def estimate_task_time(title: str) -> str:
    title = title.lower()
    if "research" in title or "compare" in title:
        return "2-4 hours"
    if "book" in title or "schedule" in title:
        return "1-2 hours"
    if "create" in title or "design" in title:
        return "3-5 hours"
    return "1-2 hours"


def assignment_reason(title: str) -> str:
    title = title.lower()
    if "creative" in title or "design" in title:
        return "Creative task - suits visual/design skills"
    if "budget" in title or "financial" in title:
        return "Financial task - requires number management"
    if "research" in title:
        return "Research task - requires analytical skills"
    return "Balanced task distribution"


def assign_tasks_to_partners(tasks: List[Task]) -> List[Task]:
    assigned = []
    for i, task in enumerate(tasks or []):
        lowered = task.title.lower()
        partner = "partner_a" if i % 2 == 0 else "partner_b"
        if any(k in lowered for k in CREATIVE_KEYWORDS):
            partner = "partner_b"
        elif any(k in lowered for k in LOGISTICAL_KEYWORDS):
            partner = "partner_a"

        assigned.append(task.model_copy(update={
            "suggested_assignee": partner,
            "estimated_time": estimate_task_time(task.title),
            "assignment_reason": assignment_reason(task.title),
        }))
    return assigned


def enrich_sequence(sequence: List[str], goal_type: str, user_context: UserContext) -> List[Milestone]:
    budget = user_context.budget_amount or DEFAULT_BUDGET
    location = user_context.location_text or DEFAULT_LOCATION
    preferences = list(user_context.preferences)
    constraints = user_context.constraints

    milestones = []
    for i, entry in enumerate(sequence):
        milestone = generate_milestone(
            goal_type=goal_type,
            title=title_from_entry(entry),
            timeline_months=1,
            budget=budget,
            location=location,
            preferences=preferences,
        )
        milestone.depends_on = [sequence[i - 1]] if i > 0 else []
        milestone.estimated_duration = estimate_duration(entry, constraints)
        milestone.tasks = assign_tasks_to_partners(milestone.tasks)
        milestones.append(milestone)
    return milestones
