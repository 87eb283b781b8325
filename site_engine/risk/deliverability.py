"""
Site Risk Engine - Deliverability Evaluator.

Scores access constraints, utilities, programme scale, abnormal costs and
margin fragility into the Deliverability category.
"""

from .helpers import clamp, fmt_gbp, fmt_pct
from .models import (
    ACCESS_CONSTRAINT_TYPES,
    ImpactLevel,
    PlanningConstraint,
    ProjectDetails,
    RiskCategory,
    RiskCategoryKey,
    RiskFactor,
    ViabilityMetrics,
)


CATEGORY_NAME = "Deliverability"
CATEGORY_WEIGHT = 0.20
MAX_SCORE = 100

ACCESS_SCORE = 18

# Utilities: one point per GBP 5k of allowance, bounded
UTILITY_GBP_PER_POINT = 5000
UTILITY_MIN_SCORE = 8
UTILITY_MAX_SCORE = 22
UTILITY_HIGH_IMPACT_SCORE = 18

LARGE_SCHEME_UNITS = 20
LARGE_SCHEME_SCORE = 15
MEDIUM_SCHEME_UNITS = 10
MEDIUM_SCHEME_SCORE = 8

# Abnormal costs as a share of total development cost
ABNORMAL_HIGH_RATIO = 0.08
ABNORMAL_HIGH_SCORE = 24
ABNORMAL_MID_RATIO = 0.04
ABNORMAL_MID_SCORE = 16
ABNORMAL_BASE_SCORE = 10
ABNORMAL_HIGH_IMPACT_SCORE = 20

THIN_MARGIN_THRESHOLD = 10
THIN_MARGIN_SCORE = 12


def assess_deliverability_risk(
    constraints: list[PlanningConstraint],
    viability: ViabilityMetrics,
    project: ProjectDetails,
) -> RiskCategory:
    """
    Build the deliverability category.

    Args:
        constraints: Constraint records (only access/highways types count here)
        viability: Appraisal outputs
        project: Scheme attributes

    Returns:
        RiskCategory with score capped at 100
    """
    factors: list[RiskFactor] = []

    _assess_access(constraints, factors)
    _assess_utilities(viability, factors)
    _assess_programme_scale(project, factors)
    _assess_abnormals(viability, factors)
    _assess_thin_margin(viability, factors)

    total = sum(f.score for f in factors)

    return RiskCategory(
        name=CATEGORY_NAME,
        score=min(total, MAX_SCORE),
        weight=CATEGORY_WEIGHT,
        factors=factors,
        max_possible_score=MAX_SCORE,
    )


def _assess_access(constraints: list[PlanningConstraint], factors: list) -> None:
    access = [c for c in constraints if c.dataset in ACCESS_CONSTRAINT_TYPES]
    if not access:
        return

    factors.append(RiskFactor(
        id="access-highways",
        category=RiskCategoryKey.DELIVERABILITY,
        name="Access or Highways Constraints",
        impact=ImpactLevel.MEDIUM,
        probability=0.7,
        score=ACCESS_SCORE,
        description=(
            "Potential access or highways constraints identified. May require "
            "visibility splays, junction upgrades, or rights negotiation, "
            "impacting programme."
        ),
        mitigations=[
            "Commission transport or highways note early",
            "Pre-app discussion with highways authority",
            "Review title or rights and third-party land",
        ],
        evidence=f"{len(access)} access or highways-related constraint(s) flagged",
    ))


def _assess_utilities(viability: ViabilityMetrics, factors: list) -> None:
    allowance = viability.utility_upgrade_allowance
    if allowance is None or allowance <= 0:
        return

    score = clamp(allowance / UTILITY_GBP_PER_POINT, UTILITY_MIN_SCORE, UTILITY_MAX_SCORE)

    factors.append(RiskFactor(
        id="utilities-upgrades",
        category=RiskCategoryKey.DELIVERABILITY,
        name="Utilities Upgrade Allowance",
        impact=ImpactLevel.HIGH if score >= UTILITY_HIGH_IMPACT_SCORE else ImpactLevel.MEDIUM,
        probability=0.75,
        score=score,
        description=(
            "Allowance for utilities upgrades suggests capacity or reinforcement "
            "risk. This can cause significant delays and abnormal costs."
        ),
        mitigations=[
            "Submit budget estimates requests early (DNO or water)",
            "Confirm connection points and lead times",
            "Consider phased connections",
            "Hold contingency for reinforcement costs",
        ],
        evidence=f"Utilities upgrade allowance GBP {fmt_gbp(allowance)}",
    ))


def _assess_programme_scale(project: ProjectDetails, factors: list) -> None:
    units = project.units or 0

    if units >= LARGE_SCHEME_UNITS:
        factors.append(RiskFactor(
            id="programme-scale",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Programme Complexity (Scale)",
            impact=ImpactLevel.MEDIUM,
            probability=0.65,
            score=LARGE_SCHEME_SCORE,
            description=(
                f"Scale of {units} units increases procurement, site management, "
                "and coordination complexity. Higher delivery risk."
            ),
            mitigations=[
                "Stage procurement",
                "Robust critical path programme",
                "Use experienced PM or QS",
                "Consider phasing",
            ],
            evidence=f"{units} units",
        ))
    elif units >= MEDIUM_SCHEME_UNITS:
        factors.append(RiskFactor(
            id="programme-scale",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Programme Complexity (Scale)",
            impact=ImpactLevel.LOW,
            probability=0.55,
            score=MEDIUM_SCHEME_SCORE,
            description=(
                f"Scale of {units} units introduces coordination complexity. "
                "Delivery risk increases if roles are not defined."
            ),
            mitigations=[
                "Clear delivery plan",
                "Fixed-price where sensible",
                "Contingency for prelims",
            ],
            evidence=f"{units} units",
        ))


def _assess_abnormals(viability: ViabilityMetrics, factors: list) -> None:
    """Abnormal costs scored by their share of total development cost."""
    abnormal = viability.abnormal_costs
    if abnormal is None or abnormal <= 0:
        return

    total_cost = viability.total_development_cost or viability.total_costs or 0
    ratio = abnormal / total_cost if total_cost > 0 else 0

    if ratio >= ABNORMAL_HIGH_RATIO:
        score = ABNORMAL_HIGH_SCORE
    elif ratio >= ABNORMAL_MID_RATIO:
        score = ABNORMAL_MID_SCORE
    else:
        score = ABNORMAL_BASE_SCORE

    factors.append(RiskFactor(
        id="abnormals",
        category=RiskCategoryKey.DELIVERABILITY,
        name="Abnormal Costs or Ground Risk",
        impact=ImpactLevel.HIGH if score >= ABNORMAL_HIGH_IMPACT_SCORE else ImpactLevel.MEDIUM,
        probability=0.75,
        score=score,
        description=(
            "Abnormal cost allowance indicates ground or remediation risk. These "
            "often drive overruns and delays."
        ),
        mitigations=[
            "Order Phase 1 plus targeted Phase 2 SI",
            "Separate abnormals package with defined scope",
            "Increase contingency if SI is limited",
        ],
        evidence=(
            f"Abnormal costs GBP {fmt_gbp(abnormal)} "
            f"(~{fmt_pct(ratio * 100)}% of total development cost)"
        ),
    ))


def _assess_thin_margin(viability: ViabilityMetrics, factors: list) -> None:
    if viability.profit_margin >= THIN_MARGIN_THRESHOLD:
        return

    factors.append(RiskFactor(
        id="thin-margin-delivery",
        category=RiskCategoryKey.DELIVERABILITY,
        name="Thin Margin Increases Delivery Fragility",
        impact=ImpactLevel.MEDIUM,
        probability=0.8,
        score=THIN_MARGIN_SCORE,
        description=(
            "Low margin reduces tolerance for programme slippage, claims, and "
            "variation. Delivery shocks can quickly render scheme unviable."
        ),
        mitigations=[
            "Increase contingency",
            "Tight scope control",
            "Fix design before tender",
            "Robust contract administration",
        ],
        evidence=f"{fmt_pct(viability.profit_margin)}% margin",
    ))
