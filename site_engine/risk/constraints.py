"""
Site Risk Engine - Constraint Classifier.

Converts mapped planning constraints (plus the affordable housing
requirement) into the Planning Constraints risk category.

Rules are independent and additive. Only the first listed building record
is scored; every other dataset fires at most once regardless of how many
records it has.
"""

from .helpers import fmt_number
from .models import (
    ConstraintType,
    ImpactLevel,
    PlanningConstraint,
    ProjectDetails,
    RiskCategory,
    RiskCategoryKey,
    RiskFactor,
)


CATEGORY_NAME = "Planning Constraints"
CATEGORY_WEIGHT = 0.35
MAX_SCORE = 100

# Listed building: on-site score by grade, then distance bands (metres)
LISTED_ON_SITE_SCORES = {"I": 45, "II*": 40}
LISTED_ON_SITE_DEFAULT = 35
LISTED_NEAR_DISTANCE = 50
LISTED_NEAR_SCORE = 30
LISTED_MID_DISTANCE = 100
LISTED_MID_SCORE = 20
LISTED_FAR_SCORE = 10

CONSERVATION_AREA_SCORE = 25
ARTICLE_4_SCORE = 20
TPO_SCORE = 15
FLOOD_RESIDENTIAL_SCORE = 35
FLOOD_OTHER_SCORE = 25

AFFORDABLE_THRESHOLD_PCT = 25
AFFORDABLE_SCORE = 18


def _of_type(constraints: list[PlanningConstraint], dataset: ConstraintType) -> list[PlanningConstraint]:
    return [c for c in constraints if c.dataset == dataset]


def assess_planning_constraints(
    constraints: list[PlanningConstraint],
    project: ProjectDetails,
) -> RiskCategory:
    """
    Build the planning category from mapped constraints.

    Args:
        constraints: Constraint records in input order
        project: Scheme attributes (development type, affordable housing)

    Returns:
        RiskCategory with score capped at 100
    """
    factors: list[RiskFactor] = []

    _assess_listed_building(constraints, factors)
    _assess_conservation_area(constraints, factors)
    _assess_article_4(constraints, factors)
    _assess_tpo(constraints, factors)
    _assess_flood_risk(constraints, project, factors)
    _assess_affordable_housing(project, factors)

    total = sum(f.score for f in factors)

    return RiskCategory(
        name=CATEGORY_NAME,
        score=min(total, MAX_SCORE),
        weight=CATEGORY_WEIGHT,
        factors=factors,
        max_possible_score=MAX_SCORE,
    )


def _assess_listed_building(constraints: list[PlanningConstraint], factors: list) -> None:
    """Score the first listed building record by grade and distance."""
    listed = _of_type(constraints, ConstraintType.LISTED_BUILDING)
    if not listed:
        return

    first = listed[0]
    grade = first.grade
    distance = first.distance or 0  # missing distance means on site

    if distance == 0:
        score = LISTED_ON_SITE_SCORES.get(grade, LISTED_ON_SITE_DEFAULT)
        impact = ImpactLevel.CRITICAL
        description = (
            f"Listed building (Grade {grade or 'unknown'}) on site. Requires "
            "Listed Building Consent, heritage impact assessment, and likely "
            "Historic England consultation."
        )
    elif distance < LISTED_NEAR_DISTANCE:
        score = LISTED_NEAR_SCORE
        impact = ImpactLevel.HIGH
        description = (
            f"Listed building within {fmt_number(distance)}m. Setting impact "
            "assessment required. Design severely constrained."
        )
    elif distance < LISTED_MID_DISTANCE:
        score = LISTED_MID_SCORE
        impact = ImpactLevel.HIGH
        description = (
            f"Listed building within {fmt_number(distance)}m. Heritage statement "
            "needed. Moderate design constraints."
        )
    else:
        score = LISTED_FAR_SCORE
        impact = ImpactLevel.MEDIUM
        description = (
            f"Listed building within {fmt_number(distance)}m. Heritage "
            "considerations apply."
        )

    factors.append(RiskFactor(
        id="listed-building",
        category=RiskCategoryKey.PLANNING,
        name="Listed Building Impact",
        impact=impact,
        probability=0.9,
        score=score,
        description=description,
        mitigations=[
            "Commission heritage impact assessment early",
            "Engage conservation architect",
            "Pre-application consultation with conservation officer",
            "Consider sympathetic design approach",
        ],
        evidence=f"{len(listed)} listed building(s) identified",
    ))


def _assess_conservation_area(constraints: list[PlanningConstraint], factors: list) -> None:
    areas = _of_type(constraints, ConstraintType.CONSERVATION_AREA)
    if not areas:
        return

    factors.append(RiskFactor(
        id="conservation-area",
        category=RiskCategoryKey.PLANNING,
        name="Conservation Area",
        impact=ImpactLevel.HIGH,
        probability=0.85,
        score=CONSERVATION_AREA_SCORE,
        description=(
            "Site within Conservation Area. Design must preserve or enhance "
            "character. Additional planning scrutiny applies."
        ),
        mitigations=[
            "Review Conservation Area Character Appraisal",
            "Use traditional materials and detailing",
            "Pre-app with conservation officer",
            "Heritage and Design Statement required",
        ],
        evidence=areas[0].name or "Conservation Area identified",
    ))


def _assess_article_4(constraints: list[PlanningConstraint], factors: list) -> None:
    if not _of_type(constraints, ConstraintType.ARTICLE_4):
        return

    factors.append(RiskFactor(
        id="article-4",
        category=RiskCategoryKey.PLANNING,
        name="Article 4 Direction",
        impact=ImpactLevel.MEDIUM,
        probability=0.7,
        score=ARTICLE_4_SCORE,
        description=(
            "Permitted development rights removed. All alterations require "
            "planning permission."
        ),
        mitigations=[
            "Factor in full planning application costs",
            "Review specific restrictions in Article 4 Direction",
            "Consider phasing to de-risk",
        ],
        evidence="Article 4 Direction in force",
    ))


def _assess_tpo(constraints: list[PlanningConstraint], factors: list) -> None:
    zones = _of_type(constraints, ConstraintType.TREE_PRESERVATION_ZONE)
    if not zones:
        return

    factors.append(RiskFactor(
        id="tpo",
        category=RiskCategoryKey.PLANNING,
        name="Tree Preservation Zone",
        impact=ImpactLevel.MEDIUM,
        probability=0.6,
        score=TPO_SCORE,
        description=(
            "Protected trees on or near site. Tree survey, arboricultural impact "
            "assessment, and retention/protection measures required."
        ),
        mitigations=[
            "Commission BS5837 tree survey",
            "Design layout to retain key trees",
            "Budget for tree protection measures",
            "Consider arboricultural consultant involvement",
        ],
        evidence=f"{len(zones)} TPO zone(s) identified",
    ))


def _assess_flood_risk(
    constraints: list[PlanningConstraint],
    project: ProjectDetails,
    factors: list,
) -> None:
    """Flood zones weigh heavier for residential (Exception Test applies)."""
    if not _of_type(constraints, ConstraintType.FLOOD_RISK_ZONE):
        return

    residential = project.is_residential
    tests = "Sequential Test, and Exception Test" if residential else "Sequential Test"

    factors.append(RiskFactor(
        id="flood-risk",
        category=RiskCategoryKey.PLANNING,
        name="Flood Risk Zone",
        impact=ImpactLevel.CRITICAL if residential else ImpactLevel.HIGH,
        probability=0.95,
        score=FLOOD_RESIDENTIAL_SCORE if residential else FLOOD_OTHER_SCORE,
        description=(
            f"Site in Flood Risk Zone. Requires Flood Risk Assessment, {tests}. "
            "Design must incorporate flood resilience."
        ),
        mitigations=[
            "Commission detailed Flood Risk Assessment",
            "Raise finished floor levels",
            "Incorporate SuDS and flood resilience measures",
            "Engage flood risk specialist early",
            "Factor in flood insurance costs",
        ],
        evidence="Flood Risk Zone identified",
    ))


def _assess_affordable_housing(project: ProjectDetails, factors: list) -> None:
    pct = project.affordable_housing_percentage
    if not project.has_affordable_housing or not pct or pct <= AFFORDABLE_THRESHOLD_PCT:
        return

    factors.append(RiskFactor(
        id="affordable-housing",
        category=RiskCategoryKey.PLANNING,
        name="Affordable Housing Requirement",
        impact=ImpactLevel.MEDIUM,
        probability=0.8,
        score=AFFORDABLE_SCORE,
        description=(
            f"{fmt_number(pct)}% affordable housing required. Impacts viability "
            "and may require registered provider partnership."
        ),
        mitigations=[
            "Engage registered providers early",
            "Consider viability appraisal if challenging",
            "Review grant funding opportunities",
            "Optimize unit mix for affordability",
        ],
        evidence=f"{fmt_number(pct)}% affordable housing policy requirement",
    ))
