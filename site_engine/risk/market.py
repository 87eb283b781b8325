"""
Site Risk Engine - Market Evaluator.

Scores value sensitivity, small-scheme liquidity and sales absorption
into the Market category.
"""

from .helpers import fmt_number, fmt_pct
from .models import (
    ImpactLevel,
    ProjectDetails,
    RiskCategory,
    RiskCategoryKey,
    RiskFactor,
    ViabilityMetrics,
)


CATEGORY_NAME = "Market"
CATEGORY_WEIGHT = 0.15
MAX_SCORE = 100

SENSITIVITY_MODERATE_MARGIN = 10  # margin % at -5% GDV
SMALL_SCHEME_MAX_UNITS = 3
SLOW_SALES_MONTHS = 18
MODERATE_SALES_MONTHS = 12


def assess_market_risk(project: ProjectDetails, viability: ViabilityMetrics) -> RiskCategory:
    """
    Build the market category.

    Args:
        project: Scheme attributes
        viability: Appraisal outputs (sensitivity, sales period)

    Returns:
        RiskCategory with score capped at 100
    """
    factors: list[RiskFactor] = []

    _assess_value_sensitivity(viability, factors)
    _assess_small_scheme(project, factors)
    _assess_sales_absorption(viability, factors)

    total = sum(f.score for f in factors)

    return RiskCategory(
        name=CATEGORY_NAME,
        score=min(total, MAX_SCORE),
        weight=CATEGORY_WEIGHT,
        factors=factors,
        max_possible_score=MAX_SCORE,
    )


def _assess_value_sensitivity(viability: ViabilityMetrics, factors: list) -> None:
    downside = viability.value_sensitivity_5pct
    if downside is None:
        return

    evidence = f"Margin at -5% GDV: {fmt_pct(downside)}%"

    if downside < 0:
        factors.append(RiskFactor(
            id="value-sensitivity",
            category=RiskCategoryKey.MARKET,
            name="High Value Sensitivity",
            impact=ImpactLevel.HIGH,
            probability=0.8,
            score=28,
            description=(
                "A 5% drop in values turns the scheme loss-making. Market "
                "softening would break viability."
            ),
            mitigations=[
                "Use conservative GDV",
                "Increase contingency",
                "Consider phased sales",
                "Improve specification and positioning",
            ],
            evidence=evidence,
        ))
    elif downside < SENSITIVITY_MODERATE_MARGIN:
        factors.append(RiskFactor(
            id="value-sensitivity",
            category=RiskCategoryKey.MARKET,
            name="Moderate Value Sensitivity",
            impact=ImpactLevel.MEDIUM,
            probability=0.7,
            score=18,
            description=(
                "A modest value drop materially compresses profit. Scheme may "
                "struggle in a slower market."
            ),
            mitigations=[
                "Strengthen demand evidence",
                "Adjust unit mix",
                "Phase releases",
                "Re-check comparables monthly",
            ],
            evidence=evidence,
        ))


def _assess_small_scheme(project: ProjectDetails, factors: list) -> None:
    # Zero or missing units do not count as a small scheme
    if not project.is_residential or not project.units or project.units > SMALL_SCHEME_MAX_UNITS:
        return

    factors.append(RiskFactor(
        id="small-scheme-liquidity",
        category=RiskCategoryKey.MARKET,
        name="Small Scheme Liquidity",
        impact=ImpactLevel.LOW,
        probability=0.55,
        score=8,
        description="Small schemes can be sensitive to single-sale delays and buyer fall-throughs.",
        mitigations=[
            "Plan marketing early",
            "Use realistic sales assumptions",
            "Consider exit to investor if applicable",
        ],
        evidence=f"{project.units} units",
    ))


def _assess_sales_absorption(viability: ViabilityMetrics, factors: list) -> None:
    months = viability.sales_period_months
    if months is None or months <= 0:
        return

    evidence = f"{fmt_number(months)} months sales period"

    if months > SLOW_SALES_MONTHS:
        factors.append(RiskFactor(
            id="slow-absorption",
            category=RiskCategoryKey.MARKET,
            name="Slow Sales Absorption",
            impact=ImpactLevel.MEDIUM,
            probability=0.7,
            score=18,
            description=(
                "Long sales period increases finance costs and exposure to rate "
                "or value movements."
            ),
            mitigations=[
                "Phase completions",
                "Consider incentives strategy",
                "Alternative exits (bulk sale, PRS)",
            ],
            evidence=evidence,
        ))
    elif months > MODERATE_SALES_MONTHS:
        factors.append(RiskFactor(
            id="moderate-absorption",
            category=RiskCategoryKey.MARKET,
            name="Moderate Sales Absorption",
            impact=ImpactLevel.LOW,
            probability=0.6,
            score=10,
            description="Sales rate assumption is moderate; monitor demand signals and comparables.",
            mitigations=[
                "Track listing velocity",
                "Adjust pricing strategy quickly",
            ],
            evidence=evidence,
        ))
