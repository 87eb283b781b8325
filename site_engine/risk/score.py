"""
Site Risk Engine - Score Calculation.

Combines the four risk categories into a single weighted score and risk
band, ranks the most significant factors into flags, and assembles the
final RiskProfile.
"""

from datetime import datetime, timezone
from typing import Optional

from .constraints import assess_planning_constraints
from .deliverability import assess_deliverability_risk
from .financial import assess_financial_risk
from .helpers import clamp, round_half_up
from .market import assess_market_risk
from .models import (
    FlagSeverity,
    ImpactLevel,
    PlanningRouteInfo,
    RiskAssessmentInput,
    RiskCategories,
    RiskCategoryKey,
    RiskFactor,
    RiskFlag,
    RiskLevel,
    RiskProfile,
)
from .route import adjust_for_planning_route


# Risk band thresholds (inclusive lower bounds)
EXTREME_THRESHOLD = 70
HIGH_THRESHOLD = 40
MEDIUM_THRESHOLD = 20

MAX_RANKED_FLAGS = 6

IMPACT_TO_LEVEL = {
    ImpactLevel.CRITICAL: RiskLevel.EXTREME,
    ImpactLevel.HIGH: RiskLevel.HIGH,
    ImpactLevel.MEDIUM: RiskLevel.MEDIUM,
    ImpactLevel.LOW: RiskLevel.LOW,
}

IMPACT_TO_SEVERITY = {
    ImpactLevel.CRITICAL: FlagSeverity.CRITICAL,
    ImpactLevel.HIGH: FlagSeverity.CRITICAL,
    ImpactLevel.MEDIUM: FlagSeverity.WARNING,
    ImpactLevel.LOW: FlagSeverity.WARNING,
}


def calculate_weighted_score(categories: RiskCategories) -> float:
    """
    Weighted mean of the category scores, clamped to 0-100.

    Weights are normalised by their actual sum rather than assumed to
    total 1.0.
    """
    ordered = categories.in_order()
    total_weight = sum(c.weight for c in ordered)
    normaliser = total_weight if total_weight > 0 else 1

    weighted = sum(
        clamp(c.score, 0, c.max_possible_score) * c.weight
        for c in ordered
    )
    return clamp(weighted / normaliser, 0, 100)


def determine_risk_level(score: float) -> RiskLevel:
    """Map an overall score onto its risk band."""
    if score >= EXTREME_THRESHOLD:
        return RiskLevel.EXTREME
    elif score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    elif score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def rank_factors(categories: RiskCategories) -> list[RiskFactor]:
    """
    All factors, highest score first.

    Ties keep category order (planning, financial, deliverability, market)
    and then the order each evaluator produced them.
    """
    all_factors = [f for category in categories.in_order() for f in category.factors]
    return sorted(all_factors, key=lambda f: f.score, reverse=True)


def _factor_to_flag(factor: RiskFactor) -> RiskFlag:
    return RiskFlag(
        id=factor.id,
        level=IMPACT_TO_LEVEL[factor.impact],
        severity=IMPACT_TO_SEVERITY[factor.impact],
        title=factor.name,
        message=factor.description,
        category=factor.category.value,
        action_required=factor.mitigations[0] if factor.mitigations else None,
        evidence=factor.evidence,
        mitigations=list(factor.mitigations),
    )


def _no_constraints_flag() -> RiskFlag:
    return RiskFlag(
        id="no-constraints",
        level=RiskLevel.LOW,
        severity=FlagSeverity.WARNING,
        title="No mapped constraints detected",
        message=(
            "No planning constraints were found in the provided datasets. This "
            "does not guarantee consent; site-specific issues may still apply."
        ),
        category=RiskCategoryKey.PLANNING.value,
        action_required="Validate against local plan policies and consider pre-app advice.",
        evidence="No constraint records in input",
        mitigations=[
            "Validate against local plan policies",
            "Check site photos/title",
            "Consider pre-app",
        ],
    )


def generate_risk_flags(
    categories: RiskCategories,
    assessment_input: RiskAssessmentInput,
) -> list[RiskFlag]:
    """
    Turn the top-ranked factors into user-facing flags.

    When nothing was mapped and the planning category has no factors, a
    "no mapped constraints" flag is placed first. It sits outside the
    six-flag cap.
    """
    flags = [_factor_to_flag(f) for f in rank_factors(categories)[:MAX_RANKED_FLAGS]]

    if not categories.planning.factors and not assessment_input.constraints:
        flags.insert(0, _no_constraints_flag())

    return flags


def generate_risk_summary(level: RiskLevel, flags: list[RiskFlag]) -> str:
    """Template summary sentence for a risk level."""
    critical_count = sum(1 for f in flags if f.severity == FlagSeverity.CRITICAL)
    warning_count = sum(1 for f in flags if f.severity == FlagSeverity.WARNING)

    if level in (RiskLevel.EXTREME, RiskLevel.HIGH):
        return (
            f"Higher risk: {critical_count} critical issue(s) flagged. Prioritise "
            "mitigation and re-run viability with conservative assumptions."
        )
    if level == RiskLevel.MEDIUM:
        return (
            f"Moderate risk: {warning_count} material issue(s) identified. De-risk "
            "through surveys, pre-app, and procurement strategy."
        )
    return (
        "Lower risk based on current inputs. Continue with normal due diligence "
        "and keep assumptions under review."
    )


def build_categories(
    assessment_input: RiskAssessmentInput,
    planning_route: Optional[PlanningRouteInfo] = None,
) -> RiskCategories:
    """Run the four evaluators and, if a route is given, the route adjustment."""
    planning = assess_planning_constraints(assessment_input.constraints, assessment_input.project)
    financial = assess_financial_risk(assessment_input.viability)
    deliverability = assess_deliverability_risk(
        assessment_input.constraints,
        assessment_input.viability,
        assessment_input.project,
    )
    market = assess_market_risk(assessment_input.project, assessment_input.viability)

    if planning_route is not None:
        planning, deliverability = adjust_for_planning_route(
            planning, deliverability, planning_route
        )

    return RiskCategories(
        planning=planning,
        financial=financial,
        deliverability=deliverability,
        market=market,
    )


def calculate_risk_profile(
    assessment_input: RiskAssessmentInput,
    planning_route: Optional[PlanningRouteInfo] = None,
    calculated_at: Optional[datetime] = None,
) -> RiskProfile:
    """
    Generate a complete risk profile for a site.

    This is the main entry point for the risk engine. It performs no I/O
    and is deterministic apart from the timestamp.

    Args:
        assessment_input: Constraints, viability, project and location
        planning_route: Optional planning route and status
        calculated_at: Optional fixed timestamp (defaults to now, UTC)

    Returns:
        RiskProfile with score, level, categories, flags and summary
    """
    categories = build_categories(assessment_input, planning_route)

    overall = round_half_up(calculate_weighted_score(categories), 2)
    level = determine_risk_level(overall)
    flags = generate_risk_flags(categories, assessment_input)

    return RiskProfile(
        overall_risk_score=overall,
        risk_level=level,
        categories=categories,
        flags=flags,
        summary=generate_risk_summary(level, flags),
        calculated_at=calculated_at or datetime.now(timezone.utc),
    )
