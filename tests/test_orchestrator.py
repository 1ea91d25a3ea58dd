"""Tests for the layered roadmap generation state machine."""

import asyncio
import json

import pytest

from conftest import FakeLlm
from dream_planner.catalog import GENERIC_SEQUENCE, lookup
from dream_planner.constraints import determine_milestone_sequence
from dream_planner.generation_boundary import GenerationBoundary
from dream_planner.models import GenerationMethod, RoadmapGenerationResult
from dream_planner.orchestrator import RoadmapOrchestrator, generate_roadmap, generate_roadmap_sync

CUSTOM = ["engagement_party", "venue_tour", "vendor_meetings", "invitations", "ceremony", "reception"]
GENERATED = ["idea_validation", "market_research", "business_plan", "funding", "soft_launch", "full_launch"]


def _run(llm, context=None, goal_type="wedding", description="A rustic wedding", options=None):
    orchestrator = RoadmapOrchestrator(GenerationBoundary(llm=llm))
    return asyncio.run(orchestrator.generate_roadmap(context or {}, goal_type, description, options))


def _titles(result):
    return [m.title for m in result.roadmap.milestones]


class TestLayers:
    def test_no_description_uses_template_without_calls(self):
        llm = FakeLlm()
        result = _run(llm, description=None)

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE
        assert len(result.roadmap.milestones) == len(lookup("wedding"))
        assert llm.calls == []

    def test_validation_disabled_uses_template(self):
        llm = FakeLlm()
        result = _run(llm, options={"useClaudeValidation": False})

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE
        assert llm.calls == []

    def test_validation_forced_for_generic_sequence(self):
        llm = FakeLlm([json.dumps({"approved": False, "customizedSequence": GENERATED})])
        result = _run(llm, goal_type="bakery", description="Open a bakery", options={"useClaudeValidation": False})

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE_CUSTOMIZED
        assert len(llm.calls) == 1

    def test_approved_template(self):
        llm = FakeLlm([json.dumps({"approved": True, "customizedSequence": CUSTOM, "insights": "Looks right"})])
        result = _run(llm)
        metadata = result.roadmap.metadata

        assert metadata.generation_method == GenerationMethod.TEMPLATE_VALIDATED
        assert metadata.validation_insights == "Looks right"
        assert _titles(result)[0] == "Engagement Party"
        assert metadata.total_milestones == len(CUSTOM)

    def test_customized_template(self):
        llm = FakeLlm([json.dumps({"approved": False, "customizedSequence": CUSTOM, "insights": "Reworked"})])
        result = _run(llm)

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE_CUSTOMIZED

    def test_validation_failure_falls_through_to_pure_generation(self):
        llm = FakeLlm([RuntimeError("500"), json.dumps(GENERATED)])
        result = _run(llm, goal_type="business", description="Open a bakery")

        assert result.roadmap.metadata.generation_method == GenerationMethod.CLAUDE_GENERATED
        assert _titles(result)[0] == "Idea Validation"
        assert result.roadmap.metadata.validation_insights is None
        assert len(llm.calls) == 2

    def test_too_short_generation_falls_back(self):
        llm = FakeLlm(["not json at all", json.dumps(["a"])])
        result = _run(llm)

        assert result.roadmap.metadata.generation_method == GenerationMethod.FALLBACK
        assert len(result.roadmap.milestones) == len(lookup("wedding"))

    def test_every_call_failing_still_returns_a_roadmap(self, failing_llm):
        result = _run(failing_llm, options={"useClaudeValidation": True})

        assert result.roadmap.metadata.generation_method in (GenerationMethod.TEMPLATE, GenerationMethod.FALLBACK)
        assert len(result.roadmap.milestones) > 0
        assert len(failing_llm.calls) == 2

    def test_fallback_keeps_constraint_adjustment(self, failing_llm):
        context = {"constraints": [{"type": "time_constraint"}]}
        result = _run(failing_llm, context=context)

        assert result.roadmap.metadata.total_milestones == len(
            determine_milestone_sequence("wedding", context["constraints"])
        )

    def test_fallback_for_unknown_goal_uses_generic_sequence(self, failing_llm):
        result = _run(failing_llm, goal_type="bakery", description="Open a bakery")

        assert result.roadmap.metadata.total_milestones == len(GENERIC_SEQUENCE)
        assert _titles(result)[0] == "Goal Definition And Research"


class TestResilience:
    @pytest.mark.parametrize("context", [
        None,
        {},
        {"budget": None, "timeline": None, "location": None, "preferences": None, "constraints": None},
        {"budget": {}, "location": {}},
        {"budget": "lots"},
        {"constraints": "time_constraint"},
        {"preferences": [{"value": None}]},
        ["not", "a", "mapping"],
        "just text",
    ])
    def test_never_raises_for_any_context(self, failing_llm, context):
        result = _run(failing_llm, context=context)

        assert isinstance(result, RoadmapGenerationResult)
        assert len(result.roadmap.milestones) > 0

    def test_missing_planner_config_falls_back(self, missing_planner_config):
        llm = FakeLlm([json.dumps({"customizedSequence": CUSTOM}), json.dumps(GENERATED)])
        result = asyncio.run(generate_roadmap({}, "wedding", "A rustic wedding", boundary=GenerationBoundary(llm=llm)))

        assert result.roadmap.metadata.generation_method == GenerationMethod.FALLBACK
        assert len(result.roadmap.milestones) == len(lookup("wedding"))
        assert llm.calls == []

    def test_dependency_chain(self, failing_llm):
        result = _run(failing_llm)
        milestones = result.roadmap.milestones
        sequence = lookup("wedding")

        assert milestones[0].depends_on == []
        for i in range(1, len(milestones)):
            assert milestones[i].depends_on == [sequence[i - 1]]


class TestUserContextCoercion:
    def test_bare_values_are_accepted(self):
        context = {
            "budget": 25000,
            "location": {"text": "Dublin"},
            "constraints": [{"type": "time_constraint"}],
        }
        result = _run(FakeLlm(), context=context, description=None)
        metadata = result.roadmap.metadata

        assert metadata.estimated_cost == 25000
        assert metadata.location == "Dublin"
        assert metadata.total_milestones == len(determine_milestone_sequence("wedding", context["constraints"]))
        assert metadata.total_milestones < len(lookup("wedding"))
        assert metadata.confidence == 0.5

    def test_invalid_field_keeps_the_others(self):
        context = {
            "budget": "lots",
            "timeline": "6 months",
            "location": {"text": "Rome"},
            "preferences": [{"category": "style", "value": "rustic"}],
            "constraints": ["time_constraint"],
        }
        orchestrator = RoadmapOrchestrator(GenerationBoundary(llm=FakeLlm()))
        user_context = orchestrator._coerce_user_context(context)

        assert user_context.budget is None
        assert user_context.timeline.text == "6 months"
        assert user_context.location_text == "Rome"
        assert user_context.preferences[0].value == "rustic"
        assert user_context.has_constraint("time_constraint")

    def test_invalid_field_is_logged(self, caplog):
        orchestrator = RoadmapOrchestrator(GenerationBoundary(llm=FakeLlm()))
        with caplog.at_level("WARNING", logger="dream_planner"):
            orchestrator._coerce_user_context({"budget": "lots", "location": "Rome"})

        assert "['budget']" in caplog.text


class TestAssembly:
    def test_metadata_and_budget(self, full_context):
        result = _run(FakeLlm(), context=full_context, description=None)
        metadata = result.roadmap.metadata

        assert result.roadmap.goal == "wedding"
        assert metadata.estimated_cost == 30000
        assert metadata.location == "Dublin, Ireland"
        assert metadata.confidence == 1.0
        assert result.budget_allocation.total == 30000
        assert "Venue Research And Booking" in result.budget_allocation.by_milestone

    def test_no_budget(self):
        result = _run(FakeLlm(), description=None)

        assert result.budget_allocation.message == "No budget specified"
        assert result.roadmap.metadata.estimated_cost == 0
        assert result.roadmap.metadata.confidence == 0

    def test_extended_confidence_option(self, full_context):
        result = _run(FakeLlm(), context=full_context, description=None, options={"extendedConfidence": True})

        # 14 milestones are outside the 6-12 sweet spot
        assert result.roadmap.metadata.confidence == round(0.2 + 0.2 + 0.15 + 0.15 + 0.15 * 0.7 + 0.15, 4)

    def test_wire_shape(self):
        data = _run(FakeLlm(), description=None).to_dict()

        assert set(data) == {"roadmap", "budgetAllocation"}
        assert data["roadmap"]["metadata"]["generationMethod"] == "template"
        milestone = data["roadmap"]["milestones"][0]
        assert "estimatedCost" in milestone
        assert "createdAt" in milestone
        assert milestone["depends_on"] == []


class TestEntryPoints:
    def test_module_level_coroutine(self):
        boundary = GenerationBoundary(llm=FakeLlm())
        result = asyncio.run(generate_roadmap({}, "home", boundary=boundary))

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE

    def test_sync_wrapper(self):
        llm = FakeLlm([json.dumps({"customizedSequence": CUSTOM})])
        result = generate_roadmap_sync({}, "wedding", "Beach wedding", boundary=GenerationBoundary(llm=llm))

        assert result.roadmap.metadata.generation_method == GenerationMethod.TEMPLATE_VALIDATED
