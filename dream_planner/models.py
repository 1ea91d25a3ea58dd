# dream_planner/models.py
"""
Typed records exchanged by the roadmap pipeline.

Python attributes are snake_case; `to_dict()` produces the wire shape consumed by the
UI/chat collaborators (camelCase where they expect it, e.g. `estimatedCost`).
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


TIME_CONSTRAINT = "time_constraint"
BUDGET_CONSTRAINT = "budget_constraint"


class GenerationMethod(str, Enum):
    TEMPLATE = "template"
    TEMPLATE_VALIDATED = "template_validated"
    TEMPLATE_CUSTOMIZED = "template_customized"
    CLAUDE_GENERATED = "claude_generated"
    FALLBACK = "fallback"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# -----------------------
# User context (input, never mutated)
# -----------------------

class BudgetHint(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    amount: Optional[float] = None
    confidence: Optional[float] = None


class TimelineHint(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: Optional[str] = None
    unit: Optional[str] = None
    confidence: Optional[float] = None


class LocationHint(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: Optional[str] = None
    confidence: Optional[float] = None


class Preference(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category: Optional[str] = None
    value: Optional[str] = None
    confidence: Optional[float] = None


class Constraint(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str


class UserContext(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    budget: Optional[BudgetHint] = None
    timeline: Optional[TimelineHint] = None
    location: Optional[LocationHint] = None
    preferences: List[Preference] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)

    @field_validator("budget", mode="before")
    @classmethod
    def _bare_amount(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return {"amount": value}
        return value

    @field_validator("timeline", "location", mode="before")
    @classmethod
    def _bare_text(cls, value):
        if isinstance(value, str):
            return {"text": value}
        return value

    @field_validator("preferences", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("constraints", mode="before")
    @classmethod
    def _coerce_constraints(cls, value):
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            return value
        # chat collaborators sometimes send ["time_constraint"] instead of [{"type": ...}]
        return [{"type": c} if isinstance(c, str) else c for c in value]

    def has_constraint(self, constraint_type: str) -> bool:
        return any(c.type == constraint_type for c in self.constraints)

    @property
    def budget_amount(self) -> Optional[float]:
        return self.budget.amount if self.budget else None

    @property
    def location_text(self) -> Optional[str]:
        return self.location.text if self.location else None


class GenerationOptions(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    use_claude_validation: bool = Field(default=True, alias="useClaudeValidation")
    extended_confidence: bool = Field(default=False, alias="extendedConfidence")


# -----------------------
# Roadmap output
# -----------------------

class Task(WireModel):
    id: str
    title: str
    completed: bool = False
    ai_generated: bool = Field(default=True, alias="aiGenerated")
    suggested_assignee: Optional[str] = None
    estimated_time: Optional[str] = None
    assignment_reason: Optional[str] = None


class Milestone(WireModel):
    id: str
    title: str
    description: str = ""
    estimated_cost: float = Field(default=0, alias="estimatedCost")
    duration: str = ""
    timeline_months: int = 1
    tasks: List[Task] = Field(default_factory=list)
    depends_on: List[str] = Field(default_factory=list)
    estimated_duration: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    goal_type: Optional[str] = Field(default=None, alias="goalType")
    location: Optional[str] = None
    location_multiplier: Optional[float] = Field(default=None, alias="locationMultiplier")


class MilestoneAllocation(WireModel):
    amount: float
    percentage: float


class BudgetAllocation(WireModel):
    total: float = 0
    by_milestone: Dict[str, MilestoneAllocation] = Field(default_factory=dict, alias="byMilestone")
    currency: str = "USD"
    message: Optional[str] = None


class RoadmapMetadata(WireModel):
    total_milestones: int = Field(alias="totalMilestones")
    total_duration: str = Field(alias="totalDuration")
    estimated_cost: float = Field(alias="estimatedCost")
    location: Optional[str] = None
    generation_method: GenerationMethod = Field(alias="generationMethod")
    validation_insights: Optional[str] = Field(default=None, alias="validationInsights")
    confidence: float


class Roadmap(WireModel):
    goal: str
    milestones: List[Milestone]
    metadata: RoadmapMetadata


class RoadmapGenerationResult(WireModel):
    roadmap: Roadmap
    budget_allocation: BudgetAllocation = Field(alias="budgetAllocation")


class CustomizationResult(WireModel):
    approved: bool
    customized_sequence: List[str] = Field(alias="customizedSequence")
    insights: str


class RoadmapChanges(WireModel):
    budget: Optional[float] = None
    timeline: Optional[str] = None
    location: Optional[str] = None
    constraints: List[Constraint] = Field(default_factory=list)
