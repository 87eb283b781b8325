"""
Input validation for risk assessments.

Used at the boundary (HTTP API, CLI) before handing input to the engine.
The engine itself never validates: inapplicable or unrecognised values
simply contribute no factor.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .models import (
    ConstraintType,
    DevelopmentType,
    PlanningRoute,
    PlanningRouteInfo,
    PlanningStatus,
    RiskAssessmentInput,
    tag_value,
)


class ValidationError(Exception):
    """Raised when validation fails."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "value": self.value}


@dataclass
class ValidationResult:
    """Result of validation operation."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
        }


def _is_finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def validate_assessment_input(
    data: RiskAssessmentInput,
    planning_route: Optional[PlanningRouteInfo] = None,
) -> ValidationResult:
    """
    Validate an assessment input for correctness.

    Errors are metrics that cannot be represented in a profile (NaN or
    infinite margins). Everything else the engine absorbs: warnings point
    out values it will score anyway but skip, default or clamp.

    Returns ValidationResult with any errors found.
    """
    errors: list[ValidationError] = []
    warnings: list[str] = []

    # Location is carried through, never scored
    location = data.location
    if not -90 <= location.lat <= 90:
        warnings.append(f"location.lat {location.lat} is outside -90 to 90")
    if not -180 <= location.lng <= 180:
        warnings.append(f"location.lng {location.lng} is outside -180 to 180")

    # Constraints
    listed_seen = False
    for i, constraint in enumerate(data.constraints):
        if not constraint.is_recognised:
            warnings.append(
                f"constraints[{i}]: unrecognised dataset '{constraint.dataset_tag}' will be ignored"
            )
            continue

        if constraint.distance is not None and constraint.distance < 0:
            warnings.append(
                f"constraints[{i}]: negative distance {constraint.distance}m scored as adjacent"
            )

        if constraint.dataset == ConstraintType.LISTED_BUILDING:
            if listed_seen:
                warnings.append(
                    f"constraints[{i}]: only the first listed building record is scored"
                )
            elif constraint.distance is None:
                warnings.append(
                    f"constraints[{i}]: listed building has no distance, treated as on site"
                )
            listed_seen = True

    # Viability
    viability = data.viability
    for name in ("profit_margin", "return_on_investment"):
        value = getattr(viability, name)
        if not _is_finite(value):
            errors.append(ValidationError(f"viability.{name}", "Must be a finite number", value))

    if viability.contingency_percentage is None:
        warnings.append("viability.contingency_percentage missing, treated as 0%")

    for name in ("utility_upgrade_allowance", "abnormal_costs"):
        value = getattr(viability, name)
        if value is not None and value < 0:
            warnings.append(f"viability.{name} is negative and will be ignored")

    if (
        viability.abnormal_costs
        and viability.abnormal_costs > 0
        and not (viability.total_development_cost or viability.total_costs)
    ):
        warnings.append(
            "viability.abnormal_costs given without total development cost; "
            "scored at the lowest band"
        )

    # Project
    project = data.project
    if not isinstance(project.development_type, DevelopmentType):
        warnings.append(
            f"project.development_type '{tag_value(project.development_type)}' is "
            "unrecognised; scored as non-residential"
        )

    if project.units is not None and project.units < 0:
        warnings.append(f"project.units {project.units} is negative; no unit-count rule applies")

    pct = project.affordable_housing_percentage
    if pct is not None:
        if not 0 <= pct <= 100:
            warnings.append(f"project.affordable_housing_percentage {pct} is outside 0-100")
        if pct > 0 and not project.has_affordable_housing:
            warnings.append(
                "project.affordable_housing_percentage set but has_affordable_housing "
                "is false; requirement will not be scored"
            )

    # Planning route
    if planning_route is not None:
        if not isinstance(planning_route.route, PlanningRoute):
            warnings.append(
                f"planning_route.route '{tag_value(planning_route.route)}' is "
                "unrecognised; no route overlay applies"
            )
        if not isinstance(planning_route.status, PlanningStatus):
            warnings.append(
                f"planning_route.status '{tag_value(planning_route.status)}' is "
                "unrecognised; no status adjustment applies"
            )

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )
