"""
Reference assessment inputs.

Three sites spanning the risk range, used by the demo runner and the
regression tests. Each call returns a fresh object.
"""

from .models import (
    ConstraintType,
    DevelopmentType,
    Location,
    PlanningConstraint,
    ProjectDetails,
    RiskAssessmentInput,
    ViabilityMetrics,
)


CENTRAL_LONDON = Location(lat=51.5074, lng=-0.1278)


def green_input() -> RiskAssessmentInput:
    """Unconstrained two-unit scheme with healthy margins."""
    return RiskAssessmentInput(
        constraints=[],
        project=ProjectDetails(
            development_type=DevelopmentType.RESIDENTIAL,
            units=2,
            has_affordable_housing=False,
            affordable_housing_percentage=0,
        ),
        viability=ViabilityMetrics(
            profit_margin=22,
            return_on_investment=18,
            development_profit=250000,
            contingency_percentage=6,
            total_development_cost=1200000,
        ),
        location=Location(lat=CENTRAL_LONDON.lat, lng=CENTRAL_LONDON.lng),
    )


def amber_input() -> RiskAssessmentInput:
    """Conservation area and TPO, below-target returns."""
    return RiskAssessmentInput(
        constraints=[
            PlanningConstraint(
                dataset=ConstraintType.CONSERVATION_AREA,
                name="Test Conservation Area",
            ),
            PlanningConstraint(dataset=ConstraintType.TREE_PRESERVATION_ZONE),
        ],
        project=ProjectDetails(
            development_type=DevelopmentType.RESIDENTIAL,
            units=10,
            has_affordable_housing=True,
            affordable_housing_percentage=30,
        ),
        viability=ViabilityMetrics(
            profit_margin=14,
            return_on_investment=12,
            development_profit=180000,
            contingency_percentage=3.5,
            total_development_cost=2500000,
            abnormal_costs=120000,
        ),
        location=Location(lat=CENTRAL_LONDON.lat, lng=CENTRAL_LONDON.lng),
    )


def red_input() -> RiskAssessmentInput:
    """Flood zone and on-site Grade II* listed building, thin margins."""
    return RiskAssessmentInput(
        constraints=[
            PlanningConstraint(dataset=ConstraintType.FLOOD_RISK_ZONE),
            PlanningConstraint(
                dataset=ConstraintType.LISTED_BUILDING,
                grade="II*",
                distance=0,
            ),
        ],
        project=ProjectDetails(
            development_type=DevelopmentType.RESIDENTIAL,
            units=24,
            has_affordable_housing=True,
            affordable_housing_percentage=35,
        ),
        viability=ViabilityMetrics(
            profit_margin=6,
            return_on_investment=7,
            development_profit=90000,
            contingency_percentage=2,
            total_development_cost=3200000,
            interest_cover_ratio=1.05,
            abnormal_costs=280000,
            utility_upgrade_allowance=60000,
        ),
        location=Location(lat=CENTRAL_LONDON.lat, lng=CENTRAL_LONDON.lng),
    )


REFERENCE_INPUTS = {
    "green": green_input,
    "amber": amber_input,
    "red": red_input,
}
