"""
Site Risk Engine - Planning Route Adjustment.

Re-weights the planning and deliverability categories once the planning
route and its status are known.

Status deltas are applied first, then route-specific overlays. Both
categories are re-clamped to [0, max_possible_score] at the end.

The categories passed in are never modified; adjusted copies are returned.
"""

from dataclasses import replace
from typing import Optional

from .helpers import clamp
from .models import (
    ImpactLevel,
    PlanningRoute,
    PlanningRouteInfo,
    PlanningStatus,
    RiskCategory,
    RiskCategoryKey,
    RiskFactor,
)


CONSENT_REDUCTION = 35
REFUSAL_SCORE = 45
APPEAL_SCORE = 40
PENDING_SCORE = 20

PIP_TDC_SCORE = 18
PIP_TWO_STAGE_SCORE = 15
PRE_APP_SCORE = 25
OUTLINE_RESERVED_MATTERS_SCORE = 15
FULL_PREPARATION_SCORE = 10


def _ref_suffix(route: PlanningRouteInfo) -> str:
    if route.application_reference:
        return f" (Ref: {route.application_reference})"
    return ""


def adjust_for_planning_route(
    planning: RiskCategory,
    deliverability: RiskCategory,
    route: PlanningRouteInfo,
) -> tuple[RiskCategory, RiskCategory]:
    """
    Apply planning route status and overlays.

    Args:
        planning: Planning category as produced by the constraint classifier
        deliverability: Deliverability category as produced by its evaluator
        route: Route and status of the planning process

    Returns:
        (planning, deliverability) adjusted copies
    """
    planning_factors = list(planning.factors)
    planning_score = planning.score
    delivery_factors = list(deliverability.factors)
    delivery_score = deliverability.score

    # Status deltas
    if route.status == PlanningStatus.CONSENTED:
        planning_score = max(0, planning_score - CONSENT_REDUCTION)
        planning_factors.append(_consent_factor(route))

    for factor in (_status_factor(route), _route_overlay_factor(route)):
        if factor is not None:
            delivery_score = min(deliverability.max_possible_score, delivery_score + factor.score)
            delivery_factors.append(factor)

    adjusted_planning = replace(
        planning,
        score=clamp(planning_score, 0, planning.max_possible_score),
        factors=planning_factors,
    )
    adjusted_delivery = replace(
        deliverability,
        score=clamp(delivery_score, 0, deliverability.max_possible_score),
        factors=delivery_factors,
    )
    return adjusted_planning, adjusted_delivery


def _consent_factor(route: PlanningRouteInfo) -> RiskFactor:
    """Documentary factor recording the consent reduction (negative score)."""
    return RiskFactor(
        id="planning-consent",
        category=RiskCategoryKey.PLANNING,
        name="Planning Consent Granted",
        impact=ImpactLevel.LOW,
        probability=1.0,
        score=-CONSENT_REDUCTION,
        description=(
            f"{route.display_name} consent granted{_ref_suffix(route)}. Major "
            "planning risk removed. Only discharge of conditions and technical "
            "compliance remain."
        ),
        mitigations=[
            "Ensure conditions are clearly understood",
            "Budget for condition discharge fees",
            "Monitor consent expiry dates",
            "Consider implementation timeline",
        ],
        evidence=route.application_reference or "Consented planning application",
    )


def _status_factor(route: PlanningRouteInfo) -> Optional[RiskFactor]:
    """Deliverability factor for refused, appealed or pending applications."""
    if route.status == PlanningStatus.REFUSED:
        return RiskFactor(
            id="planning-refusal",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Planning Application Refused",
            impact=ImpactLevel.CRITICAL,
            probability=0.95,
            score=REFUSAL_SCORE,
            description=(
                f"{route.display_name} application refused{_ref_suffix(route)}. "
                "Requires appeal (6-12 months, GBP 20k-50k+) or fundamental "
                "scheme revision."
            ),
            mitigations=[
                "Review decision notice and reasons for refusal in detail",
                "Assess grounds for planning appeal",
                "Consider revised application addressing concerns",
                "Engage planning consultant or barrister for appeal",
                "Budget GBP 20k-50k+ for appeal costs",
                "Factor 6-12 month appeal timeline",
                "Assess commercial viability of delay",
            ],
            evidence=route.application_reference or "Refused planning application",
        )

    if route.status == PlanningStatus.APPEALED:
        return RiskFactor(
            id="planning-appeal",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Planning Appeal In Progress",
            impact=ImpactLevel.CRITICAL,
            probability=0.9,
            score=APPEAL_SCORE,
            description=(
                f"Planning appeal underway{_ref_suffix(route)}. Significant cost "
                "and time uncertainty. Appeal success rate varies by case type "
                "and inspector."
            ),
            mitigations=[
                "Monitor appeal progress closely",
                "Maintain budget reserves for additional costs",
                "Prepare for either outcome",
                "Consider settlement discussions with LPA",
                "Review comparable appeal decisions",
            ],
            evidence=route.application_reference or "Planning appeal in progress",
        )

    if route.status == PlanningStatus.IN_PROGRESS and route.route != PlanningRoute.PRE_APP:
        return RiskFactor(
            id="planning-pending",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Planning Application Pending",
            impact=ImpactLevel.MEDIUM,
            probability=0.75,
            score=PENDING_SCORE,
            description=(
                f"{route.display_name} application under consideration"
                f"{_ref_suffix(route)}. Determination timeline uncertain. Risk "
                "of refusal, additional information requests, or committee "
                "deferral."
            ),
            mitigations=[
                "Monitor application progress weekly",
                "Respond promptly to any officer queries",
                "Prepare for committee presentation if required",
                "Maintain dialogue with case officer",
                "Budget for potential amendments or additional reports",
            ],
            evidence=route.application_reference or "Planning application pending",
        )

    return None


def _route_overlay_factor(route: PlanningRouteInfo) -> Optional[RiskFactor]:
    """Deliverability factor specific to the route/status combination."""
    if route.route == PlanningRoute.PIP:
        if route.status == PlanningStatus.CONSENTED:
            return RiskFactor(
                id="pip-tdc-required",
                category=RiskCategoryKey.DELIVERABILITY,
                name="Technical Details Consent Required",
                impact=ImpactLevel.MEDIUM,
                probability=0.7,
                score=PIP_TDC_SCORE,
                description=(
                    "Permission in Principle granted but Technical Details Consent "
                    "(TDC) application still required. TDC can be refused even "
                    "with PiP consent if technical details are inadequate."
                ),
                mitigations=[
                    "Commission technical drawings and reports early",
                    "Budget GBP 5k-15k for TDC application fees and consultants",
                    "Ensure compliance with PiP parameters (use, amount, layout)",
                    "Consider pre-submission meeting with planning officer",
                    "Factor 8-13 week TDC determination period",
                ],
                evidence="PiP consent granted, TDC pending",
            )
        if route.status in (PlanningStatus.NOT_STARTED, PlanningStatus.IN_PROGRESS):
            return RiskFactor(
                id="pip-two-stage",
                category=RiskCategoryKey.DELIVERABILITY,
                name="Two-Stage PiP Process",
                impact=ImpactLevel.MEDIUM,
                probability=0.65,
                score=PIP_TWO_STAGE_SCORE,
                description=(
                    "Permission in Principle is a two-stage process. Both PiP and "
                    "subsequent TDC can be refused. Total timeline typically "
                    "14-18 weeks."
                ),
                mitigations=[
                    "Ensure PiP application clearly defines use and amount",
                    "Budget for both PiP and TDC stages (GBP 3k-8k plus GBP 5k-15k)",
                    "Prepare indicative technical details early",
                    "Factor ~14-18 week combined timeline into programme",
                ],
                evidence="PiP route selected",
            )
        return None

    if route.route == PlanningRoute.PRE_APP:
        return RiskFactor(
            id="pre-app-no-consent",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Pre-Application Stage Only",
            impact=ImpactLevel.HIGH,
            probability=0.8,
            score=PRE_APP_SCORE,
            description=(
                "Pre-application advice is not binding. Formal application still "
                "required and may receive different assessment. Officer feedback "
                "is advisory only."
            ),
            mitigations=[
                "Treat pre-app feedback as guidance, not guarantee",
                "Budget for full application costs (GBP 15k-50k+ depending on scale)",
                "Factor 8-13 weeks (minor) or 13+ weeks (major) determination",
                "Consider political or committee risk for major applications",
                "Prepare for potential refusal and appeal route",
            ],
            evidence="Pre-application consultation stage",
        )

    if route.route == PlanningRoute.OUTLINE and route.status == PlanningStatus.CONSENTED:
        return RiskFactor(
            id="outline-reserved-matters",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Reserved Matters Approval Required",
            impact=ImpactLevel.MEDIUM,
            probability=0.7,
            score=OUTLINE_RESERVED_MATTERS_SCORE,
            description=(
                "Outline permission granted but reserved matters (appearance, "
                "landscaping, layout, scale, access) require separate approval. "
                "Can be refused if details do not accord with outline conditions."
            ),
            mitigations=[
                "Review outline consent conditions in detail",
                "Ensure reserved matters accord with approved parameters",
                "Budget GBP 8k-20k for reserved matters submission",
                "Factor 8 week determination period",
                "Monitor outline consent expiry (typically 3 years to submit reserved matters)",
            ],
            evidence=route.application_reference or "Outline consent granted",
        )

    if route.route == PlanningRoute.FULL and route.status == PlanningStatus.NOT_STARTED:
        return RiskFactor(
            id="full-application-commitment",
            category=RiskCategoryKey.DELIVERABILITY,
            name="Full Application Preparation",
            impact=ImpactLevel.MEDIUM,
            probability=0.6,
            score=FULL_PREPARATION_SCORE,
            description=(
                "Full planning application requires detailed design, technical "
                "reports, and higher upfront cost (GBP 20k-60k+ for major "
                "schemes). Longer determination period but single-stage consent."
            ),
            mitigations=[
                "Commission full architectural drawings and reports",
                "Budget GBP 20k-60k+ for application costs (scale dependent)",
                "Factor 8-13 weeks (householder or minor) or 13+ weeks (major)",
                "Consider pre-application consultation to de-risk",
                "Prepare detailed Design and Access Statement",
            ],
            evidence="Full planning application route selected",
        )

    return None
