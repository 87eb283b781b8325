"""
Site Risk Engine - FastAPI Web Application

JSON API over the risk engine. The presentation layer renders the
returned profile; it never re-derives any scoring.
"""

from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from site_engine import __version__
from site_engine.config import get_settings
from site_engine.log import get_logger
from site_engine.risk import (
    ConstraintType,
    DevelopmentType,
    PlanningRoute,
    PlanningRouteInfo,
    PlanningStatus,
    RiskAssessmentInput,
    RiskLevel,
    RiskProfile,
    calculate_risk_profile,
    tag_value,
    validate_assessment_input,
)


logger = get_logger("web")

# Initialize FastAPI app
app = FastAPI(
    title=get_settings().app_name,
    description="Deliverability risk scoring for development sites",
    version=__version__,
)


# Pydantic models for request/response (camelCase on the wire)
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConstraintInput(CamelModel):
    dataset: str
    distance: Optional[float] = None
    name: Optional[str] = None
    grade: Optional[str] = None
    severity: Optional[str] = None


class ViabilityInput(CamelModel):
    profit_margin: float = 0.0
    return_on_investment: float = 0.0
    development_profit: float = 0.0
    total_revenue: float = 0.0
    total_costs: float = 0.0
    is_viable: bool = True
    contingency_percentage: Optional[float] = None
    interest_cover_ratio: Optional[float] = None
    utility_upgrade_allowance: Optional[float] = None
    abnormal_costs: Optional[float] = None
    total_development_cost: Optional[float] = None
    value_sensitivity_5pct: Optional[float] = Field(default=None, alias="valueSensitivity5pct")
    sales_period_months: Optional[float] = None


class ProjectInput(CamelModel):
    development_type: str = "residential"
    units: Optional[int] = None
    floor_area: Optional[float] = None
    has_affordable_housing: bool = False
    affordable_housing_percentage: Optional[float] = None


class LocationInput(CamelModel):
    lat: float = 0.0
    lng: float = 0.0


class AssessmentInput(CamelModel):
    constraints: list[ConstraintInput] = []
    viability: ViabilityInput = ViabilityInput()
    project: ProjectInput = ProjectInput()
    location: LocationInput = LocationInput()


class PlanningRouteInput(CamelModel):
    route: str = "none"
    status: str = "not-started"
    application_reference: Optional[str] = None
    submitted_date: Optional[datetime] = None
    decided_date: Optional[datetime] = None
    notes: Optional[str] = None


class RiskRequest(CamelModel):
    assessment: AssessmentInput = Field(alias="input")
    planning_route: Optional[PlanningRouteInput] = None


# Routes

@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/api/enums")
async def get_enums():
    """Get allowed tag values for input forms."""
    return {
        "constraint_datasets": [e.value for e in ConstraintType],
        "development_types": [e.value for e in DevelopmentType],
        "planning_routes": [e.value for e in PlanningRoute],
        "planning_statuses": [e.value for e in PlanningStatus],
        "risk_levels": [e.value for e in RiskLevel],
    }


@app.post("/api/risk/validate")
async def validate_risk_input(data: RiskRequest):
    """Validate an assessment without scoring it."""
    assessment, route = _parse_request(data)
    return validate_assessment_input(assessment, route).to_dict()


@app.post("/api/risk")
async def calculate_risk(data: RiskRequest):
    """Calculate the full risk profile for a site."""
    profile, warnings = _score_request(data)
    return {**profile.to_dict(), "warnings": warnings}


@app.post("/api/risk/snapshot")
async def calculate_risk_snapshot(data: RiskRequest):
    """Calculate a risk profile and return the reduced projection for storage."""
    profile, warnings = _score_request(data)
    return {**profile.to_snapshot(), "warnings": warnings}


# Helper functions

def _parse_request(data: RiskRequest) -> tuple[RiskAssessmentInput, Optional[PlanningRouteInfo]]:
    """Convert request models into engine inputs."""
    try:
        assessment = RiskAssessmentInput.from_dict(
            data.assessment.model_dump(by_alias=True, exclude_none=True)
        )
        route = None
        if data.planning_route is not None:
            route = PlanningRouteInfo.from_dict(
                data.planning_route.model_dump(by_alias=True, exclude_none=True)
            )
    except (ValueError, TypeError) as e:
        logger.warning("risk_request_rejected", reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    return assessment, route


def _score_request(data: RiskRequest) -> tuple[RiskProfile, list[str]]:
    """Validate and score a request."""
    assessment, route = _parse_request(data)

    result = validate_assessment_input(assessment, route)
    if not result:
        logger.warning("risk_request_invalid", errors=[str(e) for e in result.errors])
        raise HTTPException(
            status_code=400,
            detail={"errors": [e.to_dict() for e in result.errors]},
        )

    for warning in result.warnings:
        logger.info("risk_input_warning", warning=warning)

    profile = calculate_risk_profile(assessment, route)

    logger.info(
        "risk_profile_calculated",
        risk_level=profile.risk_level.value,
        overall_risk_score=profile.overall_risk_score,
        flags=len(profile.flags),
        planning_route=tag_value(route.route) if route else None,
    )

    return profile, result.warnings


# Run with: uvicorn web.app:app --reload
if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
