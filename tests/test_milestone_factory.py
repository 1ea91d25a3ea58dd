"""Tests for base milestone records."""

import uuid

import pytest

from dream_planner.milestone_factory import (
    LOCATION_MULTIPLIERS,
    MILESTONE_TEMPLATES,
    calculate_monthly_savings,
    generate_milestone,
    get_available_goal_types,
    get_location_multiplier,
    get_milestone_template,
)


class TestLocationMultiplier:
    def test_exact_match(self):
        assert get_location_multiplier("London") == 1.4

    def test_substring_match(self):
        assert get_location_multiplier("Dublin, Ireland") == 1.0
        assert get_location_multiplier("County Galway") == 0.7

    @pytest.mark.parametrize("location", [None, "", "US", "Tokyo"])
    def test_default(self, location):
        assert get_location_multiplier(location) == LOCATION_MULTIPLIERS["default"]


class TestGenerateMilestone:
    def test_builds_tasks_from_goal_template(self):
        milestone = generate_milestone("wedding", "Venue Booking", 1, 10000, "Paris", [])

        uuid.UUID(milestone.id)
        assert [t.title for t in milestone.tasks] == MILESTONE_TEMPLATES["wedding"]
        assert milestone.tasks[0].id == f"{milestone.id}_task_0"
        assert all(not t.completed and t.ai_generated for t in milestone.tasks)

    def test_cost_is_adjusted_for_location(self):
        milestone = generate_milestone("home", "Deposit", 3, 10000, "Paris", [])

        assert milestone.estimated_cost == 13000
        assert milestone.location_multiplier == 1.3
        assert milestone.duration == "3 months"

    def test_cost_rounds_half_up(self):
        # 6 * 0.75 = 4.5
        assert generate_milestone("home", "x", 1, 6, "Cork", []).estimated_cost == 5

    def test_unknown_goal_type_uses_financial_tasks(self):
        milestone = generate_milestone("business", "Launch", 1, 1000, None, [])

        assert [t.title for t in milestone.tasks] == MILESTONE_TEMPLATES["financial"]
        assert milestone.location == "Unknown"

    def test_default_description(self):
        milestone = generate_milestone("baby", "Nursery", 1, 1000, "Cork", [])

        assert milestone.description == "Achieve your baby goal together"

    def test_explicit_description_wins(self):
        milestone = generate_milestone("baby", "Nursery", 1, 1000, "Cork", [], description="Paint it yellow")

        assert milestone.description == "Paint it yellow"


class TestHelpers:
    def test_monthly_savings(self):
        assert calculate_monthly_savings(12000, 12) == 1000
        assert calculate_monthly_savings(1000, 0) == 0
        assert calculate_monthly_savings(1000, None) == 0

    def test_template_lookup_falls_back_to_financial(self):
        assert get_milestone_template("pets") == MILESTONE_TEMPLATES["financial"]

    def test_available_goal_types(self):
        assert "engagement" in get_available_goal_types()
        assert len(get_available_goal_types()) == 8
