"""Tests for the category-weighted budget split."""

from dream_planner import settings
from dream_planner.budget import allocate_budget, category_weight
from dream_planner.models import Milestone


class TestAllocateBudget:
    def test_venue_gets_more_than_invitations(self):
        allocation = allocate_budget([{"title": "Venue Booking"}, {"title": "Invitations"}], 30000)

        venue = allocation.by_milestone["Venue Booking"]
        invitations = allocation.by_milestone["Invitations"]
        assert venue.amount > invitations.amount
        assert venue.amount == 9000
        assert venue.percentage == 30.0
        assert invitations.percentage == 2.0

    def test_missing_budget_is_zeroed(self):
        allocation = allocate_budget([{"title": "Venue Booking"}], None)

        assert allocation.total == 0
        assert allocation.by_milestone == {}
        assert allocation.message == "No budget specified"

    def test_zero_budget_is_treated_as_missing(self):
        assert allocate_budget([{"title": "Venue"}], 0).message == "No budget specified"

    def test_accepts_milestone_records(self):
        allocation = allocate_budget([Milestone(id="1", title="Catering Tasting")], 1000)

        assert allocation.by_milestone["Catering Tasting"].amount == 250

    def test_weights_are_not_normalized(self):
        titles = [{"title": f"Step {i}"} for i in range(3)]
        allocation = allocate_budget(titles, 1000)

        assert allocation.total == 1000
        assert sum(a.amount for a in allocation.by_milestone.values()) == 300

    def test_currency_comes_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "CURRENCY", "EUR")

        assert allocate_budget([{"title": "Venue"}], 100).currency == "EUR"

    def test_wire_shape(self):
        data = allocate_budget([{"title": "Venue"}], 100).to_dict()

        assert data["byMilestone"]["Venue"] == {"amount": 30.0, "percentage": 30.0}
        assert data["total"] == 100


class TestCategoryWeight:
    def test_first_match_in_table_order_wins(self):
        # venue precedes catering in the table
        assert category_weight("Catering At The Venue") == 0.30

    def test_default_weight(self):
        assert category_weight("Honeymoon") == 0.10

    def test_match_is_case_insensitive(self):
        assert category_weight("PHOTOGRAPHY") == 0.12
