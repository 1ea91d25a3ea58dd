# dream_planner/generation_boundary.py

import asyncio
import logging
from typing import Any, List, Optional

from dream_planner import settings
from dream_planner.base_utils import BaseUtils
from dream_planner.exceptions import GenerationShapeError, GenerationTransportError
from dream_planner.model_props import get_generation_preset, get_generation_presets
from dream_planner.models import CustomizationResult, UserContext
from dream_planner.prompts import (
    PURE_GENERATION_PROMPT,
    REFINE_SEQUENCE_PROMPT,
    VALIDATE_AND_CUSTOMIZE_PROMPT,
)


logger = logging.getLogger("dream_planner")

CUSTOMIZED_LENGTH = (3, 20)
GENERATED_LENGTH = (3, 15)

DEFAULT_INSIGHTS = "Template validated and customized for your specific goal"


class GenerationBoundary(BaseUtils):
    """
    Request/response contract with the external text generator.

    Every request is a single attempt: a transport error, an unparseable answer or
    an answer of the wrong shape raises a GenerationLayerError subclass and the
    caller decides what to fall back to.
    """

    def __init__(self, llm: Any = None, model_name: Optional[str] = None):
        self._llm = llm
        self.model_name = model_name or settings.PLANNER_MODEL
        try:
            get_generation_presets()
        except (FileNotFoundError, ValueError) as e:
            self.color_print(
                f"Generation presets could not be loaded, every generation request will fail: {e}",
                color="red",
                level=logging.ERROR,
            )

    @property
    def llm(self):
        if self._llm is None:
            self._llm = self._build_llm_for_model(self.model_name)
        return self._llm

    # -----------------------
    # Prompt helpers
    # -----------------------

    def _format_user_context(self, user_context: UserContext) -> str:
        budget = user_context.budget_amount
        timeline = user_context.timeline.text if user_context.timeline else None
        preferences = ", ".join(p.value for p in user_context.preferences if p.value)
        constraints = ", ".join(c.type for c in user_context.constraints)
        return "\n".join([
            f"- Budget: {f'${budget:g}' if budget else 'Not specified'}",
            f"- Timeline: {timeline or 'Not specified'}",
            f"- Location: {user_context.location_text or 'Not specified'}",
            f"- Preferences: {preferences or 'None'}",
            f"- Constraints: {constraints or 'None'}",
        ])

    def _format_sequence(self, sequence: List[str]) -> str:
        return "\n".join(f"{i + 1}. {entry}" for i, entry in enumerate(sequence))

    # -----------------------
    # Transport + parsing
    # -----------------------

    async def _ask(self, prompt: str, kind: str) -> str:
        llm = self.llm
        if llm is None:
            raise GenerationTransportError(f"No LLM available for {kind} (model {self.model_name})")

        try:
            max_tokens, temperature = get_generation_preset(kind)
        except (FileNotFoundError, ValueError) as e:
            raise GenerationTransportError(f"{kind}: no generation preset: {e}") from e

        try:
            return await asyncio.to_thread(
                llm.invoke,
                prompt,
                retries=1,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as e:
            raise GenerationTransportError(f"{kind}: generator call failed: {e}") from e

    def _parse(self, raw: str, kind: str):
        if not isinstance(raw, str) or not raw.strip():
            raise GenerationShapeError(f"{kind}: empty response from generator")
        try:
            return self.load_fault_tolerant_json(self.extract_fenced_block(raw))
        except Exception as e:
            raise GenerationShapeError(f"{kind}: response is not valid JSON: {e}") from e

    def _check_sequence(self, value, bounds: tuple[int, int], kind: str) -> List[str]:
        low, high = bounds
        if not isinstance(value, list):
            raise GenerationShapeError(f"{kind}: expected a list of milestones, got {type(value).__name__}")
        if not low <= len(value) <= high:
            raise GenerationShapeError(f"{kind}: invalid sequence length {len(value)} (expected {low}-{high})")
        if not all(isinstance(item, str) for item in value):
            raise GenerationShapeError(f"{kind}: sequence contains non-string items")
        return list(value)

    # -----------------------
    # Requests
    # -----------------------

    async def validate_and_customize(
        self,
        template_sequence: List[str],
        goal_type: str,
        goal_description: str,
        user_context: UserContext,
    ) -> CustomizationResult:
        prompt = self.unsafe_string_format(
            VALIDATE_AND_CUSTOMIZE_PROMPT,
            template_sequence=self._format_sequence(template_sequence),
            goal_type=goal_type or "unknown",
            goal_description=goal_description,
            user_context=self._format_user_context(user_context),
        )
        raw = await self._ask(prompt, "validate_customize")
        parsed = self._parse(raw, "validate_customize")

        if not isinstance(parsed, dict):
            raise GenerationShapeError(
                f"validate_customize: expected a JSON object, got {type(parsed).__name__}"
            )
        sequence = self._check_sequence(
            parsed.get("customizedSequence"), CUSTOMIZED_LENGTH, "validate_customize"
        )
        insights = parsed.get("insights")
        return CustomizationResult(
            approved=parsed.get("approved") is not False,
            customized_sequence=sequence,
            insights=insights if isinstance(insights, str) and insights.strip() else DEFAULT_INSIGHTS,
        )

    async def generate_sequence(
        self,
        goal_description: str,
        user_context: UserContext,
    ) -> List[str]:
        prompt = self.unsafe_string_format(
            PURE_GENERATION_PROMPT,
            goal_description=goal_description,
            user_context=self._format_user_context(user_context),
        )
        raw = await self._ask(prompt, "pure_generation")
        parsed = self._parse(raw, "pure_generation")
        return self._check_sequence(parsed, GENERATED_LENGTH, "pure_generation")

    async def refine_sequence(
        self,
        template_sequence: List[str],
        goal_type: str,
        goal_description: str,
        user_context: UserContext,
    ) -> List[str]:
        """
        Deprecated: superseded by validate_and_customize.

        Unlike the other requests, an answer of the wrong shape keeps the template
        sequence instead of failing; transport and parse errors still raise.
        """
        prompt = self.unsafe_string_format(
            REFINE_SEQUENCE_PROMPT,
            template_sequence=self._format_sequence(template_sequence),
            goal_type=goal_type or "unknown",
            goal_description=goal_description,
            user_context=self._format_user_context(user_context),
        )
        raw = await self._ask(prompt, "refine")
        parsed = self._parse(raw, "refine")
        try:
            return self._check_sequence(parsed, GENERATED_LENGTH, "refine")
        except GenerationShapeError as e:
            self.color_print(f"refine_sequence: {e}, using template", color="yellow", level=logging.WARNING)
            return list(template_sequence)
