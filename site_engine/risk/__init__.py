"""
Site Risk Engine.

Deterministic deliverability risk scoring for UK development sites.

Converts mapped planning constraints, viability metrics and project
attributes (plus optional planning route progress) into a weighted risk
score, a four-level risk band and a ranked set of explanatory flags.

The engine is pure: it performs no network or disk I/O, never calls a
generative model and never persists anything.
"""

from .models import (
    RiskLevel,
    ImpactLevel,
    FlagSeverity,
    RiskCategoryKey,
    ConstraintType,
    DevelopmentType,
    PlanningRoute,
    PlanningStatus,
    PlanningConstraint,
    ViabilityMetrics,
    ProjectDetails,
    Location,
    RiskAssessmentInput,
    PlanningRouteInfo,
    RiskFactor,
    RiskCategory,
    RiskCategories,
    RiskFlag,
    RiskProfile,
    tag_value,
)
from .constraints import assess_planning_constraints
from .financial import assess_financial_risk
from .deliverability import assess_deliverability_risk
from .market import assess_market_risk
from .route import adjust_for_planning_route
from .score import (
    build_categories,
    calculate_weighted_score,
    determine_risk_level,
    rank_factors,
    generate_risk_flags,
    generate_risk_summary,
    calculate_risk_profile,
)
from .validation import (
    ValidationError,
    ValidationResult,
    validate_assessment_input,
)

__all__ = [
    # Models
    "RiskLevel",
    "ImpactLevel",
    "FlagSeverity",
    "RiskCategoryKey",
    "ConstraintType",
    "DevelopmentType",
    "PlanningRoute",
    "PlanningStatus",
    "PlanningConstraint",
    "ViabilityMetrics",
    "ProjectDetails",
    "Location",
    "RiskAssessmentInput",
    "PlanningRouteInfo",
    "RiskFactor",
    "RiskCategory",
    "RiskCategories",
    "RiskFlag",
    "RiskProfile",
    "tag_value",
    # Evaluators
    "assess_planning_constraints",
    "assess_financial_risk",
    "assess_deliverability_risk",
    "assess_market_risk",
    # Route adjustment
    "adjust_for_planning_route",
    # Score
    "build_categories",
    "calculate_weighted_score",
    "determine_risk_level",
    "rank_factors",
    "generate_risk_flags",
    "generate_risk_summary",
    "calculate_risk_profile",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_assessment_input",
]
