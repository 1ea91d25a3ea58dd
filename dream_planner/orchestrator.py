# dream_planner/orchestrator.py
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from dream_planner.base_utils import BaseUtils
from dream_planner.budget import allocate_budget
from dream_planner.catalog import is_generic_sequence, normalize_goal_type
from dream_planner.confidence import calculate_confidence, calculate_extended_confidence
from dream_planner.constraints import determine_milestone_sequence
from dream_planner.enricher import calculate_total_duration, enrich_sequence
from dream_planner.exceptions import GenerationLayerError
from dream_planner.generation_boundary import GenerationBoundary
from dream_planner.models import (
    GenerationMethod,
    GenerationOptions,
    Roadmap,
    RoadmapGenerationResult,
    RoadmapMetadata,
    UserContext,
)


logger = logging.getLogger("dream_planner")


class GenerationState(str, Enum):
    TEMPLATE = "template"
    VALIDATING_CUSTOMIZING = "validating_customizing"
    PURE_GENERATING = "pure_generating"
    FALLBACK = "fallback"
    DONE = "done"


@dataclass
class _GenerationRun:
    user_context: UserContext
    goal_type: str
    goal_description: Optional[str]
    options: GenerationOptions
    template_sequence: List[str] = field(default_factory=list)
    sequence: List[str] = field(default_factory=list)
    method: Optional[GenerationMethod] = None
    insights: Optional[str] = None


class RoadmapOrchestrator(BaseUtils):
    """
    Hybrid roadmap generation as an explicit state machine.

        TEMPLATE -> VALIDATING_CUSTOMIZING -> PURE_GENERATING -> FALLBACK -> DONE

    Every state may jump straight to DONE. Generation layer failures only move the
    run to the next state, so generate_roadmap always returns a roadmap.
    """

    def __init__(self, boundary: Optional[GenerationBoundary] = None):
        self.boundary = boundary or GenerationBoundary()
        self._transitions = {
            GenerationState.TEMPLATE: self._run_template,
            GenerationState.VALIDATING_CUSTOMIZING: self._run_validating,
            GenerationState.PURE_GENERATING: self._run_pure_generating,
            GenerationState.FALLBACK: self._run_fallback,
        }

    # -----------------------
    # Input coercion
    # -----------------------

    def _coerce_user_context(self, user_context: Any) -> UserContext:
        if isinstance(user_context, UserContext):
            return user_context
        try:
            return UserContext.model_validate(user_context or {})
        except ValidationError as e:
            if not isinstance(user_context, Mapping):
                self.color_print(
                    f"Unusable user context, continuing without it: {e}",
                    color="yellow",
                    level=logging.WARNING,
                )
                return UserContext()

        # keep every field that validates on its own
        kept, dropped = {}, []
        for name in UserContext.model_fields:
            if name not in user_context:
                continue
            try:
                UserContext.model_validate({name: user_context[name]})
                kept[name] = user_context[name]
            except ValidationError:
                dropped.append(name)

        self.color_print(
            f"Ignoring invalid user context field(s) {dropped}",
            color="yellow",
            level=logging.WARNING,
        )
        return UserContext.model_validate(kept)

    def _coerce_options(self, options: Any) -> GenerationOptions:
        if isinstance(options, GenerationOptions):
            return options
        if isinstance(options, Mapping):
            try:
                return GenerationOptions.model_validate(dict(options))
            except ValidationError as e:
                self.color_print(f"Invalid generation options, using defaults: {e}", color="yellow", level=logging.WARNING)
        return GenerationOptions()

    # -----------------------
    # Transitions
    # -----------------------

    async def _run_template(self, run: _GenerationRun) -> GenerationState:
        run.template_sequence = determine_milestone_sequence(run.goal_type, run.user_context.constraints)
        run.sequence = list(run.template_sequence)

        generic = is_generic_sequence(run.template_sequence)
        if run.goal_description and (run.options.use_claude_validation or generic):
            logger.info(
                f"[TEMPLATE] {len(run.template_sequence)} entries for '{run.goal_type}'"
                f"{' (generic)' if generic else ''}, validating against the description"
            )
            return GenerationState.VALIDATING_CUSTOMIZING

        run.method = GenerationMethod.TEMPLATE
        logger.info(f"[TEMPLATE] using catalog sequence for '{run.goal_type}' ({len(run.sequence)} entries)")
        return GenerationState.DONE

    async def _run_validating(self, run: _GenerationRun) -> GenerationState:
        try:
            result = await self.boundary.validate_and_customize(
                run.template_sequence,
                run.goal_type,
                run.goal_description,
                run.user_context,
            )
        except GenerationLayerError as e:
            self.color_print(f"[VALIDATING] layer failed, trying pure generation: {e}", color="red", level=logging.WARNING)
            return GenerationState.PURE_GENERATING

        run.sequence = list(result.customized_sequence)
        run.insights = result.insights
        run.method = (
            GenerationMethod.TEMPLATE_VALIDATED if result.approved
            else GenerationMethod.TEMPLATE_CUSTOMIZED
        )
        logger.info(f"[VALIDATING] {run.method.value}: {len(run.sequence)} entries. {run.insights}")
        return GenerationState.DONE

    async def _run_pure_generating(self, run: _GenerationRun) -> GenerationState:
        try:
            sequence = await self.boundary.generate_sequence(run.goal_description, run.user_context)
        except GenerationLayerError as e:
            self.color_print(f"[PURE_GENERATING] layer failed, falling back: {e}", color="red", level=logging.WARNING)
            return GenerationState.FALLBACK

        run.sequence = list(sequence)
        run.method = GenerationMethod.CLAUDE_GENERATED
        logger.info(f"[PURE_GENERATING] generated {len(run.sequence)} entries")
        return GenerationState.DONE

    async def _run_fallback(self, run: _GenerationRun) -> GenerationState:
        run.sequence = list(run.template_sequence)
        run.method = GenerationMethod.FALLBACK
        logger.info(f"[FALLBACK] using catalog sequence for '{run.goal_type}' ({len(run.sequence)} entries)")
        return GenerationState.DONE

    # -----------------------
    # Assembly
    # -----------------------

    def _build_result(self, run: _GenerationRun) -> RoadmapGenerationResult:
        milestones = enrich_sequence(run.sequence, run.goal_type, run.user_context)
        budget_allocation = allocate_budget(milestones, run.user_context.budget_amount)

        if run.options.extended_confidence:
            confidence = calculate_extended_confidence(run.user_context, milestones)
        else:
            confidence = calculate_confidence(run.user_context)

        metadata = RoadmapMetadata(
            total_milestones=len(milestones),
            total_duration=calculate_total_duration(milestones),
            estimated_cost=budget_allocation.total,
            location=run.user_context.location_text,
            generation_method=run.method,
            validation_insights=run.insights,
            confidence=confidence,
        )
        return RoadmapGenerationResult(
            roadmap=Roadmap(goal=run.goal_type, milestones=milestones, metadata=metadata),
            budget_allocation=budget_allocation,
        )

    async def generate_roadmap(
        self,
        user_context: Any,
        goal_type: Optional[str],
        goal_description: Optional[str] = None,
        options: Any = None,
    ) -> RoadmapGenerationResult:
        run = _GenerationRun(
            user_context=self._coerce_user_context(user_context),
            goal_type=normalize_goal_type(goal_type),
            goal_description=(goal_description or "").strip() or None,
            options=self._coerce_options(options),
        )

        state = GenerationState.TEMPLATE
        while state is not GenerationState.DONE:
            next_state = await self._transitions[state](run)
            logger.debug(f"[ROADMAP] {state.value} -> {next_state.value}")
            state = next_state

        return self._build_result(run)


async def generate_roadmap(
    user_context: Any,
    goal_type: Optional[str],
    goal_description: Optional[str] = None,
    options: Any = None,
    *,
    boundary: Optional[GenerationBoundary] = None,
) -> RoadmapGenerationResult:
    return await RoadmapOrchestrator(boundary).generate_roadmap(
        user_context, goal_type, goal_description, options
    )


def generate_roadmap_sync(
    user_context: Any,
    goal_type: Optional[str],
    goal_description: Optional[str] = None,
    options: Any = None,
    *,
    boundary: Optional[GenerationBoundary] = None,
) -> RoadmapGenerationResult:
    return asyncio.run(
        generate_roadmap(user_context, goal_type, goal_description, options, boundary=boundary)
    )
