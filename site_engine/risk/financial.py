"""
Site Risk Engine - Financial Evaluator.

Scores viability metrics into the Financial Viability category.

Each metric fires at most one band (the most severe that applies);
contributions from different metrics add up.
"""

from typing import Optional

from .helpers import fmt_gbp, fmt_pct
from .models import (
    ImpactLevel,
    RiskCategory,
    RiskCategoryKey,
    RiskFactor,
    ViabilityMetrics,
)


CATEGORY_NAME = "Financial Viability"
CATEGORY_WEIGHT = 0.30
MAX_SCORE = 100

# Profit margin on GDV (%)
MARGIN_LOW_THRESHOLD = 10
MARGIN_TARGET_THRESHOLD = 15

# Return on investment (%)
ROI_LOW_THRESHOLD = 10
ROI_TARGET_THRESHOLD = 15

# Contingency as % of construction cost
CONTINGENCY_LOW_THRESHOLD = 3
CONTINGENCY_TARGET_THRESHOLD = 5

# Interest cover ratio
ICR_WEAK_THRESHOLD = 1.1
ICR_MODEST_THRESHOLD = 1.3


def assess_financial_risk(viability: ViabilityMetrics) -> RiskCategory:
    """
    Build the financial category from viability metrics.

    Args:
        viability: Appraisal outputs

    Returns:
        RiskCategory with score capped at 100
    """
    factors: list[RiskFactor] = []

    for assess in (_assess_profit_margin, _assess_roi, _assess_contingency, _assess_interest_cover):
        factor = assess(viability)
        if factor is not None:
            factors.append(factor)

    total = sum(f.score for f in factors)

    return RiskCategory(
        name=CATEGORY_NAME,
        score=min(total, MAX_SCORE),
        weight=CATEGORY_WEIGHT,
        factors=factors,
        max_possible_score=MAX_SCORE,
    )


def _assess_profit_margin(viability: ViabilityMetrics) -> Optional[RiskFactor]:
    margin = viability.profit_margin
    margin_text = fmt_pct(margin)

    if margin < 0:
        return RiskFactor(
            id="negative-profit",
            category=RiskCategoryKey.FINANCIAL,
            name="Negative Development Profit",
            impact=ImpactLevel.CRITICAL,
            probability=1.0,
            score=50,
            description=(
                f"Loss-making scheme with {margin_text}% margin. Not commercially "
                "viable without major changes."
            ),
            mitigations=[
                "Reduce land acquisition cost",
                "Increase density (subject to planning)",
                "Reduce build costs through VE",
                "Increase sales values through improved specification",
                "Consider alternative use or phasing",
            ],
            evidence=(
                f"GBP {fmt_gbp(viability.development_profit)} profit "
                f"({margin_text}% margin)"
            ),
        )

    if margin < MARGIN_LOW_THRESHOLD:
        return RiskFactor(
            id="low-profit",
            category=RiskCategoryKey.FINANCIAL,
            name="Low Profit Margin",
            impact=ImpactLevel.CRITICAL,
            probability=0.95,
            score=40,
            description=(
                f"Marginal {margin_text}% profit margin. Below typical 15-20% "
                "requirement. High sensitivity to cost overruns."
            ),
            mitigations=[
                "Stress test assumptions",
                "Negotiate land price reduction",
                "Lock in construction costs early",
                "Increase contingency reserves",
                "Explore grant funding",
            ],
            evidence=f"{margin_text}% profit margin on GDV",
        )

    if margin < MARGIN_TARGET_THRESHOLD:
        return RiskFactor(
            id="modest-profit",
            category=RiskCategoryKey.FINANCIAL,
            name="Below-Target Profit Margin",
            impact=ImpactLevel.HIGH,
            probability=0.8,
            score=25,
            description=(
                f"{margin_text}% profit margin below typical 15-20% target. "
                "Limited buffer for cost increases."
            ),
            mitigations=[
                "Fix key cost inputs early",
                "Maintain contingency reserve",
                "Monitor market values closely",
            ],
            evidence=f"{margin_text}% profit margin",
        )

    return None


def _assess_roi(viability: ViabilityMetrics) -> Optional[RiskFactor]:
    roi = viability.return_on_investment
    roi_text = fmt_pct(roi)

    if roi < 0:
        return RiskFactor(
            id="negative-roi",
            category=RiskCategoryKey.FINANCIAL,
            name="Negative Return on Investment",
            impact=ImpactLevel.CRITICAL,
            probability=1.0,
            score=45,
            description=f"{roi_text}% ROI means capital loss. Not financeable.",
            mitigations=[
                "Fundamental scheme review required",
                "Reconsider land price",
                "Alternative development strategy",
            ],
            evidence=f"{roi_text}% ROI on total costs",
        )

    if roi < ROI_LOW_THRESHOLD:
        return RiskFactor(
            id="low-roi",
            category=RiskCategoryKey.FINANCIAL,
            name="Low Return on Investment",
            impact=ImpactLevel.HIGH,
            probability=0.9,
            score=30,
            description=(
                f"{roi_text}% ROI is low relative to typical development risk. "
                "Lenders may require stronger buffer or contingency."
            ),
            mitigations=[
                "Re-run appraisal with conservative assumptions",
                "Improve GDV via unit mix or specification",
                "Reduce build cost and prelims",
                "Negotiate land price",
            ],
            evidence=f"{roi_text}% ROI",
        )

    if roi < ROI_TARGET_THRESHOLD:
        return RiskFactor(
            id="modest-roi",
            category=RiskCategoryKey.FINANCIAL,
            name="Modest ROI",
            impact=ImpactLevel.MEDIUM,
            probability=0.7,
            score=18,
            description=f"{roi_text}% ROI provides limited upside for risk and time-on-capital.",
            mitigations=[
                "Tighten procurement",
                "Value engineer",
                "Reduce programme length where possible",
            ],
            evidence=f"{roi_text}% ROI",
        )

    return None


def _assess_contingency(viability: ViabilityMetrics) -> Optional[RiskFactor]:
    """Contingency missing from the appraisal counts as 0%."""
    contingency = viability.contingency_percentage or 0.0
    contingency_text = fmt_pct(contingency)

    if contingency < CONTINGENCY_LOW_THRESHOLD:
        return RiskFactor(
            id="low-contingency",
            category=RiskCategoryKey.FINANCIAL,
            name="Low Contingency Allowance",
            impact=ImpactLevel.HIGH,
            probability=0.8,
            score=20,
            description=(
                f"Contingency at {contingency_text}% is likely insufficient. "
                "Cost overruns could wipe out margin."
            ),
            mitigations=[
                "Increase contingency to 5-7% (scheme dependent)",
                "Fix design and scope prior to tender",
                "Use risk-allocated allowances (groundworks, utilities, remediation)",
            ],
            evidence=f"{contingency_text}% contingency",
        )

    if contingency < CONTINGENCY_TARGET_THRESHOLD:
        return RiskFactor(
            id="modest-contingency",
            category=RiskCategoryKey.FINANCIAL,
            name="Modest Contingency Allowance",
            impact=ImpactLevel.MEDIUM,
            probability=0.6,
            score=10,
            description=(
                f"Contingency at {contingency_text}% is on the low side depending "
                "on complexity and constraints."
            ),
            mitigations=[
                "Validate abnormal costs",
                "Add risk allowances for utilities or groundworks",
                "Consider higher contingency pre-planning",
            ],
            evidence=f"{contingency_text}% contingency",
        )

    return None


def _assess_interest_cover(viability: ViabilityMetrics) -> Optional[RiskFactor]:
    icr = viability.interest_cover_ratio
    if icr is None:
        return None

    if icr < ICR_WEAK_THRESHOLD:
        return RiskFactor(
            id="weak-icr",
            category=RiskCategoryKey.FINANCIAL,
            name="Weak Interest Cover",
            impact=ImpactLevel.HIGH,
            probability=0.85,
            score=25,
            description=(
                f"Interest cover ratio {icr:.2f} is tight. Rate rises or programme "
                "slippage could breach covenants."
            ),
            mitigations=[
                "Reduce leverage",
                "Shorten programme",
                "Fix rates where possible",
                "Increase equity contribution",
            ],
            evidence=f"ICR {icr:.2f}",
        )

    if icr < ICR_MODEST_THRESHOLD:
        return RiskFactor(
            id="modest-icr",
            category=RiskCategoryKey.FINANCIAL,
            name="Moderate Interest Cover",
            impact=ImpactLevel.MEDIUM,
            probability=0.65,
            score=12,
            description=f"Interest cover ratio {icr:.2f} leaves limited headroom.",
            mitigations=[
                "Add contingency",
                "Reduce programme risk",
                "Consider staged drawdowns",
            ],
            evidence=f"ICR {icr:.2f}",
        )

    return None
