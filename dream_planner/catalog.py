# dream_planner/catalog.py
"""
Curated milestone sequences per goal type.

Each list is a hand-ordered, end-to-end journey. Unknown goal types get the
generic five-stage sequence, which the orchestrator treats as a signal that the
generator should customize the roadmap.
"""
from typing import Dict, List


GENERIC_SEQUENCE: List[str] = [
    "goal_definition_and_research",
    "comprehensive_planning",
    "budget_and_resource_allocation",
    "execution_and_implementation",
    "completion_and_celebration",
]

_RELOCATION: List[str] = [
    "destination_research",               # cost of living, culture, climate
    "visa_and_immigration_planning",      # requirements, documents, application
    "job_search_in_new_location",
    "housing_search_and_securing",        # neighborhoods, virtual tours, lease/buy
    "financial_planning_for_move",        # currency exchange, banking, moving budget
    "logistics_and_moving_coordination",  # movers, shipping, sell/donate
    "legal_and_administrative_tasks",     # cancel subscriptions, transfer records
    "farewell_and_closure",
    "travel_arrangements",                # flights, arrival logistics, temporary housing
    "settling_into_new_location",         # utilities, neighborhood, friends
    "cultural_adaptation",
    "establishing_new_life",              # local ID, bank account, doctors
    "reflection_and_integration",
]

MILESTONE_SEQUENCES: Dict[str, List[str]] = {
    "wedding": [
        "engagement_celebration",
        "vision_and_style_discovery",       # style, theme, priorities
        "budget_and_financial_planning",    # budget, joint account, expense tracking
        "guest_list_development",
        "venue_research_and_booking",
        "vendor_discovery_and_selection",   # photographers, caterers, florists, DJs
        "save_the_date_distribution",
        "attire_shopping_and_fittings",
        "invitation_design_and_mailing",
        "ceremony_and_vows_planning",
        "reception_details_finalization",   # menu, seating chart, playlist, decor
        "final_vendor_confirmations",       # day-of timeline
        "wedding_day_execution",
        "post_wedding_tasks",               # thank you cards, vendor payments, name changes
    ],
    "home": [
        "financial_health_assessment",      # credit score, debts, affordability
        "savings_and_down_payment_plan",
        "mortgage_preapproval_process",
        "location_and_neighborhood_research",
        "real_estate_agent_selection",
        "house_hunting_and_tours",
        "offer_preparation_and_negotiation",
        "home_inspection_and_appraisal",
        "mortgage_finalization",            # rate lock, documents
        "title_and_insurance_review",
        "final_walkthrough",
        "closing_and_possession",
        "moving_and_setup",
        "home_maintenance_planning",
    ],
    "baby": [
        "preconception_planning",
        "pregnancy_confirmation",
        "prenatal_care_establishment",
        "financial_planning_for_baby",
        "nursery_planning_and_setup",
        "baby_registry_creation",
        "childbirth_education",             # classes, birth plan, hospital tour
        "maternity_leave_planning",
        "hospital_bag_preparation",         # car seat, final birth plan
        "baby_arrival_and_postpartum",
        "newborn_care_and_adjustment",
        "work_transition_planning",         # childcare, return to work
        "first_year_milestones",
    ],
    "business": [
        "idea_validation_and_research",
        "target_market_identification",
        "business_model_development",       # revenue streams, pricing, unit economics
        "comprehensive_business_plan",
        "legal_structure_and_registration",
        "funding_and_capital_raising",
        "branding_and_identity_creation",
        "product_or_service_development",   # MVP, beta users
        "operations_and_infrastructure",
        "marketing_strategy_execution",
        "soft_launch_and_testing",
        "full_launch_and_promotion",
        "customer_acquisition",
        "growth_and_scaling",
    ],
    "vacation": [
        "destination_brainstorming",
        "budget_and_savings_plan",
        "travel_dates_finalization",
        "flight_research_and_booking",
        "accommodation_selection",
        "itinerary_planning",
        "travel_documents_preparation",     # passport/visa, insurance, vaccinations
        "packing_and_preparation",
        "pre_trip_arrangements",
        "trip_execution_and_enjoyment",
        "post_trip_reflection",
    ],
    "emergency_fund": [
        "current_expenses_analysis",
        "emergency_fund_goal_setting",      # 3-6 months of expenses
        "income_and_debt_assessment",
        "budget_optimization",
        "automated_savings_setup",
        "high_yield_savings_account",
        "side_income_exploration",
        "milestone_celebrations",
        "emergency_fund_maintenance",
        "next_financial_goals",
    ],
    "relocation": _RELOCATION,
    "moving": _RELOCATION,
    "career": [
        "self_assessment_and_reflection",
        "industry_and_role_research",
        "skill_gap_analysis",
        "resume_and_portfolio_update",
        "networking_and_connections",
        "job_search_strategy",
        "interview_preparation",
        "negotiation_and_offer_evaluation",
        "transition_planning",
        "onboarding_and_integration",
        "continuous_development",
    ],
    "education": [
        "program_research_and_selection",
        "admission_requirements_review",
        "test_preparation_and_taking",
        "application_preparation",
        "financial_planning",               # scholarships, loans
        "application_submission",
        "decision_and_enrollment",
        "pre_program_preparation",
        "academic_year_planning",
        "degree_completion",
        "career_transition",
        "lifelong_learning",
    ],
    "financial": [
        "financial_goal_definition",
        "current_financial_snapshot",       # net worth, assets, liabilities
        "income_and_expense_tracking",
        "debt_prioritization",              # avalanche/snowball
        "budget_creation_and_optimization",
        "savings_automation",
        "investment_education",
        "investment_account_setup",
        "progress_monitoring",
        "goal_achievement",
        "wealth_maintenance",
    ],
}


def normalize_goal_type(goal_type) -> str:
    return (goal_type or "").strip().lower()


def known_goal_types() -> List[str]:
    return list(MILESTONE_SEQUENCES.keys())


def lookup(goal_type) -> List[str]:
    """Returns a fresh copy of the catalog sequence for goal_type."""
    return list(MILESTONE_SEQUENCES.get(normalize_goal_type(goal_type), GENERIC_SEQUENCE))


def is_generic_sequence(sequence: List[str]) -> bool:
    return GENERIC_SEQUENCE[0] in sequence
