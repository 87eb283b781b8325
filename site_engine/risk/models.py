"""
Site Risk Engine - Data Models.

Defines the structured inputs (constraints, viability, project, planning
route) and outputs (factors, categories, flags, profile) of the risk engine.

Wire format for to_dict()/from_dict() uses camelCase keys, matching the
payloads produced by the constraints dataset and the viability calculator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class RiskLevel(Enum):
    """Overall risk band (also used as flag level)."""

    LOW = "LOW"  # < 20
    MEDIUM = "MEDIUM"  # 20-39.99
    HIGH = "HIGH"  # 40-69.99
    EXTREME = "EXTREME"  # >= 70


class ImpactLevel(Enum):
    """Impact of an individual risk factor."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FlagSeverity(Enum):
    """User-facing severity of a flag."""

    WARNING = "warning"
    CRITICAL = "critical"


class RiskCategoryKey(Enum):
    """The four scored categories, in ranking order."""

    PLANNING = "planning"
    FINANCIAL = "financial"
    DELIVERABILITY = "deliverability"
    MARKET = "market"


class ConstraintType(Enum):
    """Mapped planning constraint datasets."""

    CONSERVATION_AREA = "conservation-area"
    LISTED_BUILDING = "listed-building"
    ARTICLE_4 = "article-4-direction-area"
    TREE_PRESERVATION_ZONE = "tree-preservation-zone"
    FLOOD_RISK_ZONE = "flood-risk-zone"
    GREEN_BELT = "green-belt"
    SSSI = "site-of-special-scientific-interest"
    ROAD = "road"
    HIGHWAY = "highway"
    ACCESS = "access"
    PUBLIC_RIGHT_OF_WAY = "public-right-of-way"


# Datasets that indicate access or highways works
ACCESS_CONSTRAINT_TYPES = (
    ConstraintType.ROAD,
    ConstraintType.HIGHWAY,
    ConstraintType.ACCESS,
    ConstraintType.PUBLIC_RIGHT_OF_WAY,
)


class DevelopmentType(Enum):
    """Type of scheme being appraised."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED_USE = "mixed-use"
    CONVERSION = "conversion"


class PlanningRoute(Enum):
    """Planning route being pursued for the site."""

    NONE = "none"
    PIP = "pip"  # Permission in Principle
    PRE_APP = "pre-app"
    OUTLINE = "outline"
    FULL = "full"
    RESERVED_MATTERS = "reserved-matters"


class PlanningStatus(Enum):
    """Progress of the planning route."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    CONSENTED = "consented"
    REFUSED = "refused"
    APPEALED = "appealed"


def _optional_float(value) -> Optional[float]:
    """Coerce a wire value to float, keeping None as None."""
    if value is None:
        return None
    return float(value)


def _parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO timestamp (or pass a datetime through)."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_tag(enum_cls, value):
    """
    Map a wire tag onto enum_cls.

    Unrecognised tags are kept as the raw string so that they flow through
    the engine without matching any rule.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


def tag_value(value: Union[Enum, str]) -> str:
    """Wire tag for an enum member or a raw unrecognised tag."""
    return value.value if isinstance(value, Enum) else value


@dataclass
class PlanningConstraint:
    """A mapped planning constraint affecting the site."""

    dataset: Union[ConstraintType, str]
    distance: Optional[float] = None  # metres from site, 0 = on site
    name: Optional[str] = None
    grade: Optional[str] = None  # listed buildings: I, II*, II
    severity: Optional[str] = None  # low, medium, high

    @property
    def is_recognised(self) -> bool:
        """True when the dataset tag is one the engine scores."""
        return isinstance(self.dataset, ConstraintType)

    @property
    def dataset_tag(self) -> str:
        return tag_value(self.dataset)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "dataset": self.dataset_tag,
            "distance": self.distance,
            "name": self.name,
            "grade": self.grade,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlanningConstraint":
        """Create from dictionary representation."""
        return cls(
            dataset=_parse_tag(ConstraintType, data.get("dataset", "")),
            distance=_optional_float(data.get("distance")),
            name=data.get("name"),
            grade=data.get("grade"),
            severity=data.get("severity"),
        )


@dataclass
class ViabilityMetrics:
    """
    Output of the financial viability calculator.

    Percentages are expressed as numbers (15.0 means 15%).
    Optional metrics are None when the appraisal did not produce them.
    """

    profit_margin: float = 0.0  # profit on GDV, %
    return_on_investment: float = 0.0  # %
    development_profit: float = 0.0  # GBP
    total_revenue: float = 0.0  # GBP
    total_costs: float = 0.0  # GBP
    is_viable: bool = True

    contingency_percentage: Optional[float] = None
    interest_cover_ratio: Optional[float] = None
    utility_upgrade_allowance: Optional[float] = None  # GBP
    abnormal_costs: Optional[float] = None  # GBP
    total_development_cost: Optional[float] = None  # GBP
    value_sensitivity_5pct: Optional[float] = None  # margin % at -5% GDV
    sales_period_months: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "profitMargin": self.profit_margin,
            "returnOnInvestment": self.return_on_investment,
            "developmentProfit": self.development_profit,
            "totalRevenue": self.total_revenue,
            "totalCosts": self.total_costs,
            "isViable": self.is_viable,
            "contingencyPercentage": self.contingency_percentage,
            "interestCoverRatio": self.interest_cover_ratio,
            "utilityUpgradeAllowance": self.utility_upgrade_allowance,
            "abnormalCosts": self.abnormal_costs,
            "totalDevelopmentCost": self.total_development_cost,
            "valueSensitivity5pct": self.value_sensitivity_5pct,
            "salesPeriodMonths": self.sales_period_months,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ViabilityMetrics":
        """Create from dictionary representation."""
        return cls(
            profit_margin=float(data.get("profitMargin", 0.0)),
            return_on_investment=float(data.get("returnOnInvestment", 0.0)),
            development_profit=float(data.get("developmentProfit", 0.0)),
            total_revenue=float(data.get("totalRevenue", 0.0)),
            total_costs=float(data.get("totalCosts", 0.0)),
            is_viable=bool(data.get("isViable", True)),
            contingency_percentage=_optional_float(data.get("contingencyPercentage")),
            interest_cover_ratio=_optional_float(data.get("interestCoverRatio")),
            utility_upgrade_allowance=_optional_float(data.get("utilityUpgradeAllowance")),
            abnormal_costs=_optional_float(data.get("abnormalCosts")),
            total_development_cost=_optional_float(data.get("totalDevelopmentCost")),
            value_sensitivity_5pct=_optional_float(data.get("valueSensitivity5pct")),
            sales_period_months=_optional_float(data.get("salesPeriodMonths")),
        )


@dataclass
class ProjectDetails:
    """Scheme attributes relevant to risk."""

    development_type: Union[DevelopmentType, str] = DevelopmentType.RESIDENTIAL
    units: Optional[int] = None
    floor_area: Optional[float] = None  # sqm GIA
    has_affordable_housing: bool = False
    affordable_housing_percentage: Optional[float] = None

    @property
    def is_residential(self) -> bool:
        return self.development_type == DevelopmentType.RESIDENTIAL

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "developmentType": tag_value(self.development_type),
            "units": self.units,
            "floorArea": self.floor_area,
            "hasAffordableHousing": self.has_affordable_housing,
            "affordableHousingPercentage": self.affordable_housing_percentage,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectDetails":
        """Create from dictionary representation."""
        units = data.get("units")
        return cls(
            development_type=_parse_tag(
                DevelopmentType, data.get("developmentType", "residential")
            ),
            units=int(units) if units is not None else None,
            floor_area=_optional_float(data.get("floorArea")),
            has_affordable_housing=bool(data.get("hasAffordableHousing", False)),
            affordable_housing_percentage=_optional_float(
                data.get("affordableHousingPercentage")
            ),
        )


@dataclass
class Location:
    """Site coordinate. Passed through, never scored."""

    lat: float = 0.0
    lng: float = 0.0

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(lat=float(data.get("lat", 0.0)), lng=float(data.get("lng", 0.0)))


@dataclass
class RiskAssessmentInput:
    """
    Complete input to the risk engine.

    Constraint order is preserved; only the first listed building record
    is scored.
    """

    constraints: list[PlanningConstraint] = field(default_factory=list)
    viability: ViabilityMetrics = field(default_factory=ViabilityMetrics)
    project: ProjectDetails = field(default_factory=ProjectDetails)
    location: Location = field(default_factory=Location)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "constraints": [c.to_dict() for c in self.constraints],
            "viability": self.viability.to_dict(),
            "project": self.project.to_dict(),
            "location": self.location.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RiskAssessmentInput":
        """Create from dictionary representation."""
        return cls(
            constraints=[
                PlanningConstraint.from_dict(c)
                for c in data.get("constraints", [])
            ],
            viability=ViabilityMetrics.from_dict(data.get("viability", {})),
            project=ProjectDetails.from_dict(data.get("project", {})),
            location=Location.from_dict(data.get("location", {})),
        )


@dataclass
class PlanningRouteInfo:
    """Planning route and its current status."""

    route: Union[PlanningRoute, str]
    status: Union[PlanningStatus, str]
    application_reference: Optional[str] = None
    submitted_date: Optional[datetime] = None
    decided_date: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Human-readable route name used in factor descriptions."""
        return ROUTE_DISPLAY_NAMES.get(self.route, "Planning")

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "route": tag_value(self.route),
            "status": tag_value(self.status),
            "applicationReference": self.application_reference,
            "submittedDate": self.submitted_date.isoformat() if self.submitted_date else None,
            "decidedDate": self.decided_date.isoformat() if self.decided_date else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlanningRouteInfo":
        """Create from dictionary representation."""
        return cls(
            route=_parse_tag(PlanningRoute, data.get("route", "none")),
            status=_parse_tag(PlanningStatus, data.get("status", "not-started")),
            application_reference=data.get("applicationReference"),
            submitted_date=_parse_datetime(data.get("submittedDate")),
            decided_date=_parse_datetime(data.get("decidedDate")),
            notes=data.get("notes"),
        )


ROUTE_DISPLAY_NAMES = {
    PlanningRoute.PIP: "Permission in Principle",
    PlanningRoute.PRE_APP: "Pre-application",
    PlanningRoute.OUTLINE: "Outline planning",
    PlanningRoute.FULL: "Full planning",
    PlanningRoute.RESERVED_MATTERS: "Reserved Matters",
}


@dataclass
class RiskFactor:
    """A single scored risk within a category."""

    id: str
    category: RiskCategoryKey
    name: str
    impact: ImpactLevel
    probability: float  # 0-1
    score: float  # contribution to the category score
    description: str
    mitigations: list[str] = field(default_factory=list)
    evidence: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "category": self.category.value,
            "name": self.name,
            "impact": self.impact.value,
            "probability": self.probability,
            "score": self.score,
            "description": self.description,
            "mitigations": list(self.mitigations),
            "evidence": self.evidence,
        }


@dataclass
class RiskCategory:
    """
    One of the four weighted risk categories.

    Factors are kept in the order the evaluator produced them; that order
    is significant for flag ranking.
    """

    name: str
    score: float
    weight: float
    factors: list[RiskFactor] = field(default_factory=list)
    max_possible_score: float = 100

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "score": self.score,
            "weight": self.weight,
            "factors": [f.to_dict() for f in self.factors],
            "maxPossibleScore": self.max_possible_score,
        }


@dataclass
class RiskCategories:
    """The four categories of a profile."""

    planning: RiskCategory
    financial: RiskCategory
    deliverability: RiskCategory
    market: RiskCategory

    def in_order(self) -> tuple[RiskCategory, ...]:
        """Categories in fixed ranking order."""
        return (self.planning, self.financial, self.deliverability, self.market)

    def to_dict(self) -> dict:
        return {
            "planning": self.planning.to_dict(),
            "financial": self.financial.to_dict(),
            "deliverability": self.deliverability.to_dict(),
            "market": self.market.to_dict(),
        }


@dataclass
class RiskFlag:
    """A user-facing flag derived from a risk factor."""

    id: str
    level: RiskLevel
    severity: FlagSeverity
    title: str
    message: str
    category: str
    action_required: Optional[str] = None
    evidence: Optional[str] = None
    mitigations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "level": self.level.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "category": self.category,
            "actionRequired": self.action_required,
            "evidence": self.evidence,
            "mitigations": list(self.mitigations),
        }


@dataclass
class RiskProfile:
    """
    Complete risk assessment for a site.

    This is the main output of the risk engine.
    """

    overall_risk_score: float  # 0-100, 2dp
    risk_level: RiskLevel
    categories: RiskCategories
    flags: list[RiskFlag] = field(default_factory=list)
    summary: str = ""
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def critical_flags(self) -> list[RiskFlag]:
        return [f for f in self.flags if f.severity == FlagSeverity.CRITICAL]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "overallRiskScore": self.overall_risk_score,
            "riskLevel": self.risk_level.value,
            "categories": self.categories.to_dict(),
            "flags": [f.to_dict() for f in self.flags],
            "summary": self.summary,
            "calculatedAt": self.calculated_at.isoformat(),
        }

    def to_snapshot(self) -> dict:
        """
        Reduced projection stored against a site record.

        Flags keep only the fields needed to render a list; categories,
        evidence and mitigations are omitted.
        """
        return {
            "overallRiskScore": self.overall_risk_score,
            "riskLevel": self.risk_level.value,
            "summary": self.summary,
            "flags": [
                {
                    "id": f.id,
                    "level": f.level.value,
                    "title": f.title,
                    "message": f.message,
                    "severity": f.severity.value,
                    "category": f.category,
                }
                for f in self.flags
            ],
            "calculatedAt": self.calculated_at.isoformat(),
        }
